"""Unit tests for the secure entropy source."""

from __future__ import annotations

import pytest

from hexfeed.core.errors import EntropyUnavailable
from hexfeed.feed.entropy import EVENT_SIZE, EntropySource


def test_next_returns_fixed_size_bytes() -> None:
    source = EntropySource()

    data = source.next()

    assert isinstance(data, bytes)
    assert len(data) == EVENT_SIZE == 3


def test_consecutive_draws_are_not_repeated() -> None:
    source = EntropySource(size=16)

    assert source.next() != source.next()


def test_short_read_raises_entropy_unavailable() -> None:
    source = EntropySource(reader=lambda n: b"\x01")

    with pytest.raises(EntropyUnavailable) as info:
        source.next()

    assert info.value.requested == 3
    assert info.value.read == 1


def test_os_error_raises_entropy_unavailable() -> None:
    def broken(_: int) -> bytes:
        raise OSError("getrandom failed")

    source = EntropySource(reader=broken)

    with pytest.raises(EntropyUnavailable, match="getrandom failed"):
        source.next()


def test_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        EntropySource(size=0)
