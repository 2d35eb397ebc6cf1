"""Envelope helpers for relay pub/sub frames.

Every frame on the wire is a JSON object of the shape::

    {"topic": "...", "type": "pub" | "sub" | "ack", "payload": "...", "silent": bool}

Frames that parse as JSON but lack a string topic or a known type are not
envelopes: decoding rejects them, so the transport neither acknowledges nor
dispatches them. Only a JSON ``true`` marks an envelope silent.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import EnvelopeDecodeError


class EnvelopeType(Enum):
    """Envelope types and their wire codes."""

    PUBLISH = "pub"
    SUBSCRIBE = "sub"
    ACKNOWLEDGE = "ack"


@dataclass(frozen=True)
class Envelope:
    """A single unit of wire traffic."""

    topic: str
    type: EnvelopeType
    payload: str = ""
    silent: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "topic": self.topic,
            "type": self.type.value,
            "payload": self.payload,
            "silent": self.silent,
        }


def build_publish(payload: str, topic: str, *, silent: bool = False) -> Envelope:
    """Build a publish envelope carrying caller content."""
    return Envelope(
        topic=topic,
        type=EnvelopeType.PUBLISH,
        payload=payload,
        silent=bool(silent),
    )


def build_subscribe(topic: str) -> Envelope:
    """Build a subscribe envelope for a topic."""
    return Envelope(topic=topic, type=EnvelopeType.SUBSCRIBE, payload="", silent=True)


def build_ack(topic: str) -> Envelope:
    """Build the acknowledgement sent back for a received envelope."""
    return Envelope(
        topic=topic, type=EnvelopeType.ACKNOWLEDGE, payload="", silent=True
    )


def encode_envelope(envelope: Envelope) -> str:
    """Serialize an envelope to its JSON wire form."""
    return json.dumps(envelope.to_dict())


def decode_envelope(data: str | bytes) -> Envelope:
    """Parse a JSON wire frame into an envelope.

    Args:
        data: Raw text frame received from the relay.

    Returns:
        The decoded envelope. Missing ``payload`` decodes as an empty string
        and missing ``silent`` as False.

    Raises:
        EnvelopeDecodeError: If the frame is not JSON, is not an object, or
            carries an unknown type or a non-string topic.
    """
    try:
        raw = json.loads(data)
    except (TypeError, ValueError) as err:
        raise EnvelopeDecodeError("Frame is not valid JSON") from err

    if not isinstance(raw, dict):
        raise EnvelopeDecodeError("Frame is not a JSON object")

    topic = raw.get("topic")
    if not isinstance(topic, str):
        raise EnvelopeDecodeError("Frame topic is missing or not a string")

    try:
        msg_type = EnvelopeType(raw.get("type"))
    except ValueError as err:
        raise EnvelopeDecodeError(
            f"Unknown envelope type: {raw.get('type')!r}"
        ) from err

    payload = raw.get("payload", "")
    if payload is None:
        payload = ""
    elif not isinstance(payload, str):
        payload = json.dumps(payload)

    return Envelope(
        topic=topic,
        type=msg_type,
        payload=payload,
        silent=raw.get("silent") is True,
    )
