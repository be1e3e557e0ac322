"""Ownership root for a loaded native model."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import os
import threading
from typing import Any
import weakref

from udstream.channel import CHANNEL
from udstream.core.config import UdstreamSettings, default_settings
from udstream.core.logging import get_logger
from udstream.engine import EngineBackend, EngineError, create_backend
from udstream.engine.base import NativeModel, NativeTokenizer
from udstream.errors import (
    InvalidArgumentError,
    LoadFailureError,
    ModelBusyError,
    ModelReleasedError,
    SessionInitFailureError,
)
from udstream.sentence import Sentence
from udstream.session import Session

__all__ = ["Model"]

_LOGGER = get_logger(__name__, component="model")

_MEMORY_SOURCE = "<memory>"


class _NativeOwner:
    """Hold the native model and every tokenizer opened against it.

    Finalizers of both :class:`Model` and :class:`Session` point here rather
    than at the wrappers, so whichever runs first, tokenizers are always
    freed before the model they were built from.
    """

    def __init__(self, native: NativeModel, source: str) -> None:
        self.native: NativeModel | None = native
        self.source = source
        self.tokenizers: set[NativeTokenizer] = set()
        self.lock = threading.Lock()

    def adopt(self, tokenizer: NativeTokenizer) -> None:
        self.tokenizers.add(tokenizer)

    def release_tokenizer(self, tokenizer: NativeTokenizer) -> None:
        if tokenizer in self.tokenizers:
            self.tokenizers.discard(tokenizer)
            tokenizer.release()

    def release(self) -> None:
        for tokenizer in list(self.tokenizers):
            self.release_tokenizer(tokenizer)
        native, self.native = self.native, None
        if native is not None:
            native.release()
            _LOGGER.debug("model-released", source=self.source)


def _resolve(
    settings: UdstreamSettings | None,
    backend: EngineBackend | None,
) -> tuple[UdstreamSettings, EngineBackend]:
    resolved = settings if settings is not None else default_settings()
    return resolved, backend if backend is not None else create_backend(resolved)


class Model:
    """Exclusive owner of one loaded native model.

    Build instances with :meth:`load` or :meth:`load_from_bytes`. The native
    model is freed exactly once: by :meth:`release`, on leaving a ``with``
    block, or when the wrapper is garbage collected. Sessions keep their
    model alive, and releasing a model first releases its open sessions.

    A model may be handed to another thread, but it must not be used from
    two threads at the same time; doing so raises :class:`ModelBusyError`.

    Example:
        >>> with Model.load("english-ewt-ud-2.5-191206.udpipe") as model:  # doctest: +SKIP
        ...     for sentence in model.session("Hello world. Goodbye world."):
        ...         print([word.form for word in sentence.words])
    """

    def __init__(
        self,
        native: NativeModel,
        *,
        source: str,
        backend_name: str,
        settings: UdstreamSettings,
    ) -> None:
        self._owner = _NativeOwner(native, source)
        self._backend_name = backend_name
        self._settings = settings
        self._sessions: weakref.WeakSet[Session] = weakref.WeakSet()
        self._finalizer = weakref.finalize(self, self._owner.release)

    @classmethod
    def load(
        cls,
        path: str | bytes | os.PathLike[str] | os.PathLike[bytes],
        *,
        settings: UdstreamSettings | None = None,
        backend: EngineBackend | None = None,
    ) -> "Model":
        """Load a model file.

        ``bytes`` paths are decoded with the filesystem encoding.

        Raises:
            InvalidArgumentError: If ``path`` is missing or malformed.
            LoadFailureError: If the file is missing, unreadable or invalid.
        """

        if path is None:
            raise CHANNEL.fail(InvalidArgumentError("model path is required"))
        try:
            path_str = os.fsdecode(path)
        except TypeError as exc:
            raise CHANNEL.fail(
                InvalidArgumentError(f"Invalid model path: {path!r}")
            ) from exc
        if not path_str:
            raise CHANNEL.fail(InvalidArgumentError("model path is required"))
        if "\x00" in path_str:
            raise CHANNEL.fail(
                InvalidArgumentError("Invalid path (contains null byte)")
            )

        resolved, engine = _resolve(settings, backend)
        try:
            native = engine.load_path(path_str)
        except (OSError, EngineError) as exc:
            raise cls._load_failed(path_str, engine) from exc
        if native is None:
            raise cls._load_failed(path_str, engine)

        model = cls(
            native,
            source=path_str,
            backend_name=engine.name,
            settings=resolved,
        )
        CHANNEL.clear()
        _LOGGER.info("model-loaded", source=path_str, backend=engine.name)
        return model

    @classmethod
    def load_from_bytes(
        cls,
        data: Any,
        *,
        settings: UdstreamSettings | None = None,
        backend: EngineBackend | None = None,
    ) -> "Model":
        """Load a model from an in-memory buffer.

        The backend reads through a read-only view of ``data`` that is
        released before this returns, so the caller may reuse or drop the
        buffer immediately afterwards.

        The ``udpipe`` backend can only read models from a path, so it
        writes one full copy of ``data`` to a temporary file under the
        ``spill_dir`` setting (the system temp directory by default) and
        deletes it once the model is loaded.

        Raises:
            InvalidArgumentError: If ``data`` is empty or not bytes-like.
            LoadFailureError: If the content is not a valid model.
        """

        if data is None:
            raise CHANNEL.fail(InvalidArgumentError("model data is required"))
        try:
            view = memoryview(data)
        except TypeError as exc:
            raise CHANNEL.fail(
                InvalidArgumentError("model data must be a bytes-like object")
            ) from exc

        resolved, engine = _resolve(settings, backend)
        with view:
            if view.nbytes == 0:
                raise CHANNEL.fail(InvalidArgumentError("model data is empty"))
            if not view.c_contiguous:
                raise CHANNEL.fail(
                    InvalidArgumentError("model data must be contiguous")
                )
            with view.cast("B") as flat, flat.toreadonly() as readonly:
                try:
                    native = engine.load_buffer(readonly)
                except (OSError, EngineError) as exc:
                    raise cls._load_failed(None, engine) from exc
                size = readonly.nbytes
        if native is None:
            raise cls._load_failed(None, engine)

        model = cls(
            native,
            source=_MEMORY_SOURCE,
            backend_name=engine.name,
            settings=resolved,
        )
        CHANNEL.clear()
        _LOGGER.info(
            "model-loaded",
            source=_MEMORY_SOURCE,
            size=size,
            backend=engine.name,
        )
        return model

    @staticmethod
    def _load_failed(path: str | None, engine: EngineBackend) -> LoadFailureError:
        if path is None:
            message = "Failed to load model from memory"
        else:
            message = f"Failed to load model from: {path}"
        _LOGGER.warning(
            "model-load-failed",
            source=path or _MEMORY_SOURCE,
            backend=engine.name,
        )
        return CHANNEL.fail(
            LoadFailureError(message, source=path or _MEMORY_SOURCE)
        )

    @property
    def source(self) -> str:
        """Path the model was loaded from, or ``"<memory>"``."""

        return self._owner.source

    @property
    def backend_name(self) -> str:
        return self._backend_name

    @property
    def settings(self) -> UdstreamSettings:
        return self._settings

    @property
    def released(self) -> bool:
        return not self._finalizer.alive

    def release(self) -> None:
        """Release open sessions, then the native model. Idempotent."""

        if not self._finalizer.alive:
            return
        if not self._owner.lock.acquire(blocking=False):
            raise ModelBusyError(
                f"Model {self.source!r} is in use by another thread"
            )
        try:
            for session in list(self._sessions):
                session.release()
            self._finalizer()
        finally:
            self._owner.lock.release()

    def __enter__(self) -> "Model":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if self.released else "loaded"
        return f"Model(source={self.source!r}, backend={self._backend_name!r}, {state})"

    def session(
        self,
        text: str | bytes | bytearray | memoryview,
        *,
        tokenizer_options: str | None = None,
    ) -> Session:
        """Open a :class:`Session` streaming sentences of ``text``."""

        return Session.open(self, text, tokenizer_options=tokenizer_options)

    def parse(self, text: str | bytes | bytearray | memoryview) -> list[Sentence]:
        """Annotate all of ``text`` eagerly.

        Raises:
            AnnotationFailureError: If any sentence fails to annotate.
        """

        with self.session(text) as session:
            return list(session)

    @contextmanager
    def _exclusive(self) -> Iterator[NativeModel]:
        """Hold the model for one native call sequence on this thread."""

        if not self._owner.lock.acquire(blocking=False):
            raise ModelBusyError(
                f"Model {self.source!r} is in use by another thread"
            )
        try:
            native = self._owner.native
            if native is None:
                raise ModelReleasedError(f"Model {self.source!r} was released")
            yield native
        finally:
            self._owner.lock.release()

    def _open_tokenizer(self, text: str, options: str) -> NativeTokenizer:
        with self._exclusive() as native:
            tokenizer = native.new_tokenizer(options)
            if tokenizer is None:
                raise CHANNEL.fail(
                    SessionInitFailureError("Failed to create tokenizer")
                )
            self._owner.adopt(tokenizer)
            try:
                tokenizer.set_text(text)
            except EngineError as exc:
                self._owner.release_tokenizer(tokenizer)
                raise CHANNEL.fail(SessionInitFailureError(exc.message)) from exc
            return tokenizer

    def _register(self, session: Session, tokenizer: NativeTokenizer) -> weakref.finalize:
        self._sessions.add(session)
        return weakref.finalize(session, self._owner.release_tokenizer, tokenizer)

