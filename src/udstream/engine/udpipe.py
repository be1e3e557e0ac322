"""UDPipe adapter built on the :mod:`ufal.udpipe` binding."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import tempfile
from typing import Sequence

try:  # pragma: no cover - import guard exercised through functionality
    import ufal.udpipe as udpipe
except ImportError as exc:  # pragma: no cover - bubble missing dependency
    message = "ufal.udpipe is required for the 'udpipe' engine backend"
    raise ImportError(message) from exc

from udstream.core.logging import get_logger

from .base import EngineError

__all__ = ["UDPipeBackend"]

_LOGGER = get_logger(__name__, component="engine", backend="udpipe")


@dataclass(frozen=True, slots=True)
class _MultiwordView:
    id_first: int
    id_last: int
    form: str
    misc: str


class _SentenceView:
    """Expose a ``ufal.udpipe.Sentence`` through the native protocol."""

    __slots__ = ("raw",)

    def __init__(self, raw: "udpipe.Sentence") -> None:
        self.raw = raw

    @property
    def words(self) -> Sequence["udpipe.Word"]:
        return self.raw.words

    @property
    def multiword_tokens(self) -> tuple[_MultiwordView, ...]:
        return tuple(
            _MultiwordView(
                id_first=token.idFirst,
                id_last=token.idLast,
                form=token.form,
                misc=token.misc,
            )
            for token in self.raw.multiwordTokens
        )

    @property
    def comments(self) -> tuple[str, ...]:
        return tuple(self.raw.comments)


def _message(error: "udpipe.ProcessingError", fallback: str) -> str:
    return error.message or fallback


class _UDPipeTokenizer:
    def __init__(self, tokenizer: "udpipe.InputFormat") -> None:
        self._tokenizer: "udpipe.InputFormat | None" = tokenizer

    def set_text(self, text: str) -> None:
        # The binding copies the text into engine-owned storage.
        self._require().setText(text)

    def next_sentence(self) -> _SentenceView | None:
        sentence = udpipe.Sentence()
        error = udpipe.ProcessingError()
        if self._require().nextSentence(sentence, error):
            return _SentenceView(sentence)
        if error.occurred():
            raise EngineError(
                _message(error, "Tokenizer failed"),
                stage="tokenize",
            )
        return None

    def release(self) -> None:
        self._tokenizer = None

    def _require(self) -> "udpipe.InputFormat":
        if self._tokenizer is None:
            raise RuntimeError("tokenizer already released")
        return self._tokenizer


class _UDPipeModel:
    def __init__(self, model: "udpipe.Model") -> None:
        self._model: "udpipe.Model | None" = model

    def new_tokenizer(self, options: str) -> _UDPipeTokenizer | None:
        tokenizer = self._require().newTokenizer(
            options or udpipe.Model.DEFAULT
        )
        if tokenizer is None:
            return None
        return _UDPipeTokenizer(tokenizer)

    def tag(self, sentence: _SentenceView, options: str) -> None:
        error = udpipe.ProcessingError()
        self._require().tag(
            sentence.raw, options or udpipe.Model.DEFAULT, error
        )
        if error.occurred():
            raise EngineError(_message(error, "Tagger failed"), stage="tag")

    def parse(self, sentence: _SentenceView, options: str) -> None:
        error = udpipe.ProcessingError()
        self._require().parse(
            sentence.raw, options or udpipe.Model.DEFAULT, error
        )
        if error.occurred():
            raise EngineError(_message(error, "Parser failed"), stage="parse")

    def release(self) -> None:
        # Dropping the only reference lets SWIG delete the native model.
        self._model = None

    def _require(self) -> "udpipe.Model":
        if self._model is None:
            raise RuntimeError("model already released")
        return self._model


class UDPipeBackend:
    """Load UDPipe models from files or memory.

    The binding only reads models from a filesystem path, so
    :meth:`load_buffer` streams the caller's view straight into a transient
    file under ``spill_dir`` and removes it once the engine has loaded it.
    """

    name = "udpipe"

    def __init__(self, *, spill_dir: Path | None = None) -> None:
        self._spill_dir = spill_dir

    def load_path(self, path: str) -> _UDPipeModel | None:
        model = udpipe.Model.load(path)
        if model is None:
            return None
        return _UDPipeModel(model)

    def load_buffer(self, view: memoryview) -> _UDPipeModel | None:
        directory = None
        if self._spill_dir is not None:
            self._spill_dir.mkdir(parents=True, exist_ok=True)
            directory = str(self._spill_dir)
        handle = tempfile.NamedTemporaryFile(
            prefix="udstream-",
            suffix=".udpipe",
            dir=directory,
            delete=False,
        )
        spill_path = Path(handle.name)
        try:
            with handle:
                handle.write(view)
            _LOGGER.debug(
                "model-spilled",
                path=str(spill_path),
                size=view.nbytes,
            )
            return self.load_path(str(spill_path))
        finally:
            spill_path.unlink(missing_ok=True)
