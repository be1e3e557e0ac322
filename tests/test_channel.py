"""Tests for :mod:`udstream.channel`."""

from __future__ import annotations

import threading

import pytest

from udstream.channel import (
    CHANNEL,
    ErrorChannel,
    clear_error,
    last_error,
    last_error_kind,
)
from udstream.errors import (
    ErrorKind,
    InvalidArgumentError,
    LoadFailureError,
    UdstreamError,
)


def test_last_error_is_empty_until_a_failure_is_recorded() -> None:
    assert last_error() == ""
    assert last_error_kind() is None


def test_fail_records_kind_and_message_and_returns_error() -> None:
    error = LoadFailureError("Failed to load model from: x.udpipe")

    returned = CHANNEL.fail(error)

    assert returned is error
    assert last_error() == "load-failure: Failed to load model from: x.udpipe"
    assert last_error_kind() is ErrorKind.LOAD_FAILURE


def test_later_failure_overwrites_and_clear_resets() -> None:
    CHANNEL.fail(LoadFailureError("first"))
    CHANNEL.fail(InvalidArgumentError("second"))

    assert last_error() == "invalid-argument: second"

    clear_error()

    assert last_error() == ""
    assert CHANNEL.current() is None


def test_fail_rejects_errors_without_kind() -> None:
    with pytest.raises(ValueError):
        CHANNEL.fail(UdstreamError("no category"))


def test_channel_slots_are_isolated_per_thread() -> None:
    channel = ErrorChannel()
    channel.record(ErrorKind.TAG_FAILURE, "main thread")
    seen: dict[str, object] = {}

    def worker() -> None:
        seen["before"] = channel.current()
        channel.record(ErrorKind.PARSE_FAILURE, "worker thread")
        seen["after"] = str(channel.current())

    thread = threading.Thread(target=worker)
    thread.start()
    thread.join()

    assert seen["before"] is None
    assert seen["after"] == "parse-failure: worker thread"
    assert str(channel.current()) == "tag-failure: main thread"
