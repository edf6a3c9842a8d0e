"""Feed layer: render random payloads into the `feed` element fragment."""

from __future__ import annotations

from pydantic import BaseModel, Field, ValidationError, field_validator

from hexfeed.core.errors import EncodeFailure
from hexfeed.feed.entropy import EVENT_SIZE

FEED_ELEMENT_ID = "feed"

_FRAGMENT_TEMPLATE = (
    '<span id="{element_id}" style="color:#{hex};border:1px solid #{hex};'
    'border-radius:0.25rem;padding:1rem;">{hex}</span>'
)


class StreamEvent(BaseModel):
    """One generated payload and its fixed-width lowercase hex encoding."""

    raw: bytes = Field(..., min_length=EVENT_SIZE, max_length=EVENT_SIZE)

    @property
    def hex(self) -> str:
        return self.raw.hex()


class Fragment(BaseModel):
    """Markup snippet that replaces the `feed` element in place."""

    hex: str = Field(..., pattern=r"^[0-9a-f]{6}$")
    element_id: str = FEED_ELEMENT_ID
    html: str

    @field_validator("element_id")
    @classmethod
    def _stable_target(cls, value: str) -> str:
        if value != FEED_ELEMENT_ID:
            raise ValueError(f"fragments must target #{FEED_ELEMENT_ID}")
        return value


def encode(raw: bytes) -> Fragment:
    """Encode 3 raw bytes into a fragment; the hex appears as color, border and label."""
    if not isinstance(raw, (bytes, bytearray)):
        raise EncodeFailure(f"expected bytes, got {type(raw).__name__}")
    try:
        event = StreamEvent(raw=bytes(raw))
    except ValidationError as exc:
        raise EncodeFailure(f"expected {EVENT_SIZE} bytes, got {len(raw)}") from exc
    value = event.hex
    return Fragment(
        hex=value,
        html=_FRAGMENT_TEMPLATE.format(element_id=FEED_ELEMENT_ID, hex=value),
    )


def decode_hex(value: str) -> bytes:
    """Inverse of the hex encoding used by `encode`."""
    if len(value) != EVENT_SIZE * 2 or value != value.lower():
        raise EncodeFailure(f"not a {EVENT_SIZE * 2}-char lowercase hex string: {value!r}")
    try:
        return bytes.fromhex(value)
    except ValueError as exc:
        raise EncodeFailure(f"invalid hex: {value!r}") from exc
