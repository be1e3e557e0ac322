"""Boundary contract between :mod:`udstream` and a native annotation engine.

Adapters expose engine objects through these protocols. Native objects never
escape the :class:`~udstream.model.Model` and
:class:`~udstream.session.Session` wrappers; callers only ever see the owned
:class:`~udstream.sentence.Sentence` records built from them.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

__all__ = [
    "EngineBackend",
    "EngineError",
    "NativeModel",
    "NativeMultiwordToken",
    "NativeSentence",
    "NativeTokenizer",
    "NativeWord",
]


class EngineError(RuntimeError):
    """Failure reported by the engine for a single native call."""

    def __init__(self, message: str, *, stage: str) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage


class NativeWord(Protocol):
    """Word node of a native sentence; index 0 is the virtual root."""

    id: int
    form: str
    lemma: str
    upostag: str
    xpostag: str
    feats: str
    head: int
    deprel: str
    deps: str
    misc: str

    @property
    def children(self) -> Sequence[int]: ...


class NativeMultiwordToken(Protocol):
    id_first: int
    id_last: int
    form: str
    misc: str


class NativeSentence(Protocol):
    """Native annotation tree for one sentence, valid until reused."""

    @property
    def words(self) -> Sequence[NativeWord]: ...

    @property
    def multiword_tokens(self) -> Sequence[NativeMultiwordToken]: ...

    @property
    def comments(self) -> Sequence[str]: ...


class NativeTokenizer(Protocol):
    """Engine-side segmentation state bound to one model."""

    def set_text(self, text: str) -> None:
        """Hand ``text`` to the engine, which keeps its own copy."""

    def next_sentence(self) -> NativeSentence | None:
        """Return the next segmented sentence or ``None`` at end of text.

        Raises:
            EngineError: If segmentation fails.
        """

    def release(self) -> None:
        """Free the native tokenizer; must be safe to call once."""


class NativeModel(Protocol):
    """Loaded engine model."""

    def new_tokenizer(self, options: str) -> NativeTokenizer | None:
        """Build a tokenizer or return ``None`` when the model has none."""

    def tag(self, sentence: NativeSentence, options: str) -> None:
        """Tag and lemmatize ``sentence`` in place.

        Raises:
            EngineError: If the engine rejects the sentence.
        """

    def parse(self, sentence: NativeSentence, options: str) -> None:
        """Attach dependency heads and relations to ``sentence`` in place.

        Raises:
            EngineError: If the engine rejects the sentence.
        """

    def release(self) -> None:
        """Free the native model; called exactly once by the owner."""


@runtime_checkable
class EngineBackend(Protocol):
    """Factory for native models."""

    name: str

    def load_path(self, path: str) -> NativeModel | None:
        """Load a model file, returning ``None`` when it is unusable."""

    def load_buffer(self, view: memoryview) -> NativeModel | None:
        """Load a model from a read-only byte view.

        The view is only valid for the duration of the call; backends must
        not retain it.
        """
