"""Pull-based sentence stream over one input text."""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import TYPE_CHECKING

from udstream.builder import build_sentence
from udstream.channel import CHANNEL
from udstream.core.config import EngineOptions
from udstream.core.logging import get_logger
from udstream.engine.base import EngineError, NativeSentence, NativeTokenizer
from udstream.errors import (
    AnnotationFailureError,
    InvalidArgumentError,
    ParseFailureError,
    TagFailureError,
    TokenizeFailureError,
)
from udstream.sentence import Sentence

if TYPE_CHECKING:  # pragma: no cover - type checker imports only
    from udstream.model import Model

__all__ = ["Session", "SessionState"]

_LOGGER = get_logger(__name__, component="session")

TextInput = str | bytes | bytearray | memoryview


class SessionState(StrEnum):
    """Lifecycle of a :class:`Session`."""

    CREATED = "created"
    ACTIVE = "active"
    FINISHED = "finished"
    ERRORED = "errored"


_TERMINAL = frozenset({SessionState.FINISHED, SessionState.ERRORED})


def _coerce_text(text: object) -> str:
    if text is None:
        raise CHANNEL.fail(InvalidArgumentError("text is required"))
    if isinstance(text, (bytes, bytearray, memoryview)):
        try:
            decoded = str(text, "utf-8")
        except UnicodeDecodeError as exc:
            raise CHANNEL.fail(
                InvalidArgumentError(f"text is not valid UTF-8: {exc.reason}")
            ) from exc
    elif isinstance(text, str):
        decoded = text
    else:
        raise CHANNEL.fail(
            InvalidArgumentError(
                f"text must be str or UTF-8 bytes, not {type(text).__name__}"
            )
        )
    if "\x00" in decoded:
        raise CHANNEL.fail(
            InvalidArgumentError("Invalid text (contains null byte)")
        )
    return decoded


class Session:
    """Lazy, finite stream of annotated sentences for one text.

    Each pull tokenizes, tags and parses exactly one sentence, so memory is
    bounded by one sentence and callers may stop early. The session keeps
    its :class:`~udstream.model.Model` alive and owns the native tokenizer.

    ``next_sentence`` returns ``None`` both at the end of the text and on
    failure; :meth:`has_error` tells the two apart. Iterating the session
    instead raises the failure from the pull that hit it.

    Example:
        >>> with model.session("Hello world. Goodbye world.") as session:  # doctest: +SKIP
        ...     sentences = list(session)
        >>> [len(s.words) for s in sentences]  # doctest: +SKIP
        [3, 3]
    """

    def __init__(
        self,
        *,
        model: "Model",
        tokenizer: NativeTokenizer,
        text: str,
        options: EngineOptions,
    ) -> None:
        self._model = model
        self._tokenizer: NativeTokenizer | None = tokenizer
        self._text = text
        self._options = options
        self._state = SessionState.CREATED
        self._sentences_produced = 0
        self._failure: AnnotationFailureError | None = None
        self._finalizer = model._register(self, tokenizer)

    @classmethod
    def open(
        cls,
        model: "Model | None",
        text: TextInput | None,
        *,
        tokenizer_options: str | None = None,
    ) -> "Session":
        """Open a session over ``text`` against a live ``model``.

        Raises:
            InvalidArgumentError: If ``model`` or ``text`` is missing or
                unusable, or the model was released.
            SessionInitFailureError: If the engine cannot build a tokenizer.
        """

        from udstream.model import Model

        if model is None:
            raise CHANNEL.fail(InvalidArgumentError("model is required"))
        if not isinstance(model, Model):
            raise CHANNEL.fail(
                InvalidArgumentError(
                    f"model must be a Model, not {type(model).__name__}"
                )
            )
        if model.released:
            raise CHANNEL.fail(
                InvalidArgumentError(f"Model {model.source!r} was released")
            )
        owned_text = _coerce_text(text)

        options = model.settings.options
        if tokenizer_options is not None:
            options = options.model_copy(update={"tokenizer": tokenizer_options})

        tokenizer = model._open_tokenizer(owned_text, options.tokenizer)
        session = cls(
            model=model,
            tokenizer=tokenizer,
            text=owned_text,
            options=options,
        )
        CHANNEL.clear()
        _LOGGER.debug(
            "session-opened",
            source=model.source,
            characters=len(owned_text),
        )
        return session

    @property
    def model(self) -> "Model":
        return self._model

    @property
    def text(self) -> str:
        return self._text

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def finished(self) -> bool:
        return self._state in _TERMINAL

    @property
    def errored(self) -> bool:
        return self._state is SessionState.ERRORED

    @property
    def released(self) -> bool:
        return not self._finalizer.alive

    @property
    def sentences_produced(self) -> int:
        return self._sentences_produced

    @property
    def last_error(self) -> AnnotationFailureError | None:
        """Failure that moved the session to ``ERRORED``, if any."""

        return self._failure

    def has_error(self) -> bool:
        return self.errored

    def next_sentence(self) -> Sentence | None:
        """Annotate and return the next sentence.

        Returns ``None`` with a cleared error channel at the end of the text
        or on any call after the session finished. Returns ``None`` with the
        channel set, and moves to ``ERRORED``, when tokenizing, tagging or
        parsing fails.
        """

        if self._state in _TERMINAL or self._tokenizer is None:
            CHANNEL.clear()
            return None

        self._state = SessionState.ACTIVE
        try:
            native = self._pull(self._tokenizer)
        except AnnotationFailureError as failure:
            self._fail(failure)
            return None
        if native is None:
            self._finish()
            CHANNEL.clear()
            return None

        sentence = build_sentence(native, index=self._sentences_produced)
        self._sentences_produced += 1
        CHANNEL.clear()
        return sentence

    def _pull(self, tokenizer: NativeTokenizer) -> NativeSentence | None:
        index = self._sentences_produced
        with self._model._exclusive() as native_model:
            try:
                native = tokenizer.next_sentence()
            except EngineError as exc:
                raise TokenizeFailureError(
                    exc.message, sentence_index=index
                ) from exc
            if native is None:
                return None
            self._annotate(
                native_model.tag,
                native,
                self._options.tagger,
                TagFailureError,
                index,
            )
            self._annotate(
                native_model.parse,
                native,
                self._options.parser,
                ParseFailureError,
                index,
            )
            return native

    @staticmethod
    def _annotate(
        step: Callable[[NativeSentence, str], None],
        native: NativeSentence,
        options: str,
        failure: type[AnnotationFailureError],
        index: int,
    ) -> None:
        try:
            step(native, options)
        except EngineError as exc:
            raise failure(exc.message, sentence_index=index) from exc

    def _finish(self) -> None:
        self._state = SessionState.FINISHED
        self._free_tokenizer()
        _LOGGER.debug(
            "session-finished",
            source=self._model.source,
            sentences=self._sentences_produced,
        )

    def _fail(self, failure: AnnotationFailureError) -> None:
        # Engine state after a failed step is not reusable; stop here.
        self._state = SessionState.ERRORED
        self._failure = failure
        CHANNEL.fail(failure)
        self._free_tokenizer()
        _LOGGER.warning(
            "session-errored",
            source=self._model.source,
            kind=str(failure.kind),
            sentence_index=failure.sentence_index,
            error=failure.message,
        )

    def _free_tokenizer(self) -> None:
        self._tokenizer = None
        self._finalizer()

    def release(self) -> None:
        """Free the native tokenizer; the model is unaffected. Idempotent."""

        if self._state not in _TERMINAL:
            self._state = SessionState.FINISHED
            _LOGGER.debug(
                "session-abandoned",
                source=self._model.source,
                sentences=self._sentences_produced,
            )
        self._free_tokenizer()

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    def __iter__(self) -> "Session":
        return self

    def __next__(self) -> Sentence:
        was_errored = self.errored
        sentence = self.next_sentence()
        if sentence is not None:
            return sentence
        if self._failure is not None and not was_errored:
            raise self._failure
        raise StopIteration

    def __repr__(self) -> str:
        return (
            f"Session(source={self._model.source!r}, state={self._state.value}, "
            f"sentences={self._sentences_produced})"
        )
