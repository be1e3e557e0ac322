"""Shared pytest fixtures: a scripted in-memory annotation engine."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
import re

import pytest

from udstream.channel import clear_error
from udstream.engine.base import EngineError
from udstream.model import Model

FAKE_MAGIC = b"FAKE-MODEL"

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")
_TOKEN = re.compile(r"\w+|[^\w\s]")


@dataclass
class FakeWord:
    id: int
    form: str
    lemma: str = ""
    upostag: str = ""
    xpostag: str = ""
    feats: str = ""
    head: int = -1
    deprel: str = ""
    deps: str = ""
    misc: str = ""
    children: list[int] = field(default_factory=list)


@dataclass
class FakeMultiword:
    id_first: int
    id_last: int
    form: str
    misc: str = ""


@dataclass
class FakeSentence:
    index: int
    words: list[FakeWord]
    multiword_tokens: list[FakeMultiword] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)


def make_native_sentence(forms: list[str], *, index: int = 0) -> FakeSentence:
    """Return a native sentence with the virtual root at position 0."""

    words = [FakeWord(id=0, form="<root>")]
    words.extend(FakeWord(id=i, form=form) for i, form in enumerate(forms, 1))
    return FakeSentence(index=index, words=words)


@dataclass
class FakeScript:
    """Failure switches consulted by the fake engine."""

    fail_tokenize_at: int | None = None
    fail_tag_at: int | None = None
    fail_parse_at: int | None = None
    fail_set_text: bool = False
    no_tokenizer: bool = False


class FakeTokenizer:
    def __init__(self, model: "FakeModel", options: str) -> None:
        self.model = model
        self.options = options
        self.released = 0
        self._sentences: list[str] = []
        self._cursor = 0

    def set_text(self, text: str) -> None:
        if self.model.script.fail_set_text:
            raise EngineError("Cannot read input text", stage="tokenize")
        self._sentences = [
            chunk for chunk in _SENTENCE_SPLIT.split(text.strip()) if chunk
        ]
        self._cursor = 0

    def next_sentence(self) -> FakeSentence | None:
        if self._cursor == self.model.script.fail_tokenize_at:
            raise EngineError("Tokenizer failed", stage="tokenize")
        if self._cursor >= len(self._sentences):
            return None
        chunk = self._sentences[self._cursor]
        native = make_native_sentence(_TOKEN.findall(chunk), index=self._cursor)
        if self._cursor == 0:
            native.comments.append("# newdoc")
        self._cursor += 1
        return native

    def release(self) -> None:
        self.released += 1
        self.model.events.append(("tokenizer-released", id(self)))


class FakeModel:
    def __init__(self, backend: "FakeBackend") -> None:
        self.backend = backend
        self.script = backend.script
        self.events = backend.events
        self.tokenizers: list[FakeTokenizer] = []
        self.released = 0
        self.tag_options: list[str] = []
        self.parse_options: list[str] = []

    def new_tokenizer(self, options: str) -> FakeTokenizer | None:
        if self.script.no_tokenizer:
            return None
        tokenizer = FakeTokenizer(self, options)
        self.tokenizers.append(tokenizer)
        return tokenizer

    def tag(self, sentence: FakeSentence, options: str) -> None:
        self.tag_options.append(options)
        if sentence.index == self.script.fail_tag_at:
            raise EngineError("Tagger failed", stage="tag")
        for word in sentence.words[1:]:
            word.lemma = word.form.lower()
            if word.form.isalnum():
                word.upostag = "NOUN"
                word.xpostag = "NN"
                word.feats = "Number=Sing"
            else:
                word.upostag = "PUNCT"
                word.xpostag = "."
                word.misc = "SpaceAfter=No"

    def parse(self, sentence: FakeSentence, options: str) -> None:
        self.parse_options.append(options)
        if sentence.index == self.script.fail_parse_at:
            raise EngineError("Parser failed", stage="parse")
        root = sentence.words[0]
        root.children = []
        for word in sentence.words[1:]:
            word.children = []
        for word in sentence.words[1:]:
            if word.id == 1:
                word.head, word.deprel = 0, "root"
            else:
                word.head = 1
                word.deprel = "punct" if word.upostag == "PUNCT" else "dep"
            sentence.words[word.head].children.append(word.id)

    def release(self) -> None:
        self.released += 1
        self.events.append(("model-released", id(self)))


class FakeBackend:
    """Backend loading any file or buffer that starts with ``FAKE-MODEL``."""

    name = "fake"

    def __init__(self, script: FakeScript | None = None) -> None:
        self.script = script or FakeScript()
        self.events: list[tuple[str, int]] = []
        self.models: list[FakeModel] = []
        self.views: list[tuple[bool, int]] = []

    def _build(self) -> FakeModel:
        model = FakeModel(self)
        self.models.append(model)
        return model

    def load_path(self, path: str) -> FakeModel | None:
        candidate = Path(path)
        if not candidate.is_file():
            return None
        if not candidate.read_bytes().startswith(FAKE_MAGIC):
            return None
        return self._build()

    def load_buffer(self, view: memoryview) -> FakeModel | None:
        self.views.append((view.readonly, view.nbytes))
        if not bytes(view).startswith(FAKE_MAGIC):
            return None
        return self._build()


@pytest.fixture(autouse=True)
def _clean_error_channel() -> Iterator[None]:
    clear_error()
    yield
    clear_error()


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def model_file(tmp_path: Path) -> Path:
    path = tmp_path / "fake.udpipe"
    path.write_bytes(FAKE_MAGIC + b"\n")
    return path


@pytest.fixture
def model(model_file: Path, fake_backend: FakeBackend) -> Iterator[Model]:
    loaded = Model.load(model_file, backend=fake_backend)
    try:
        yield loaded
    finally:
        loaded.release()


@pytest.fixture
def scripted_backend():
    """Return a factory building a :class:`FakeBackend` with failure switches."""

    def _build(**switches: object) -> FakeBackend:
        return FakeBackend(FakeScript(**switches))

    return _build


@pytest.fixture
def native_sentence():
    """Return :func:`make_native_sentence` for hand-built native trees."""

    return make_native_sentence
