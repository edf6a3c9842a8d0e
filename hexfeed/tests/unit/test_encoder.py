"""Unit tests for fragment encoding of stream events."""

from __future__ import annotations

import pytest

from hexfeed.core.errors import EncodeFailure
from hexfeed.feed.encoder import FEED_ELEMENT_ID, Fragment, decode_hex, encode
from hexfeed.tests.helpers import HEX_RE, fragment_hexes


def test_encode_embeds_same_hex_three_times() -> None:
    fragment = encode(b"\xff\x0a\x01")

    assert fragment.hex == "ff0a01"
    assert fragment_hexes(fragment.html) == ["ff0a01", "ff0a01", "ff0a01"]
    assert fragment.html == (
        '<span id="feed" style="color:#ff0a01;border:1px solid #ff0a01;'
        'border-radius:0.25rem;padding:1rem;">ff0a01</span>'
    )


def test_encode_zero_pads_and_lowercases() -> None:
    assert encode(b"\x00\x00\x00").hex == "000000"
    assert encode(b"\xab\xcd\xef").hex == "abcdef"
    assert HEX_RE.match(encode(b"\x0f\x00\xa0").hex)


def test_encode_is_deterministic_and_targets_feed() -> None:
    first = encode(b"\x12\x34\x56")
    second = encode(bytearray(b"\x12\x34\x56"))

    assert first == second
    assert first.element_id == second.element_id == FEED_ELEMENT_ID
    assert 'id="feed"' in first.html


def test_decode_hex_recovers_original_bytes() -> None:
    for raw in (b"\x00\x00\x00", b"\x7f\x80\x81", b"\xff\xff\xfe"):
        assert decode_hex(encode(raw).hex) == raw


def test_distinct_inputs_give_distinct_fragments() -> None:
    hexes = {encode(bytes([0, 0, i])).hex for i in range(256)}

    assert len(hexes) == 256


@pytest.mark.parametrize("raw", [b"", b"\x01\x02", b"\x01\x02\x03\x04"])
def test_encode_rejects_wrong_length(raw: bytes) -> None:
    with pytest.raises(EncodeFailure):
        encode(raw)


def test_encode_rejects_non_bytes() -> None:
    with pytest.raises(EncodeFailure):
        encode("abc")  # type: ignore[arg-type]


@pytest.mark.parametrize("value", ["ABCDEF", "abcde", "zzzzzz", "abcdef00"])
def test_decode_hex_rejects_malformed_values(value: str) -> None:
    with pytest.raises(EncodeFailure):
        decode_hex(value)


def test_fragment_rejects_other_targets() -> None:
    with pytest.raises(ValueError):
        Fragment(hex="000000", element_id="other", html="<span></span>")
