"""Tests for envelope building and parsing."""

from __future__ import annotations

import json

import pytest

from relay_transport.errors import EnvelopeDecodeError
from relay_transport.protocol import (
    Envelope,
    EnvelopeType,
    build_ack,
    build_publish,
    build_subscribe,
    decode_envelope,
    encode_envelope,
)


class TestEnvelopeType:
    """Tests for EnvelopeType wire codes."""

    def test_enum_values(self):
        """Test enum has the short wire codes."""
        assert EnvelopeType.PUBLISH.value == "pub"
        assert EnvelopeType.SUBSCRIBE.value == "sub"
        assert EnvelopeType.ACKNOWLEDGE.value == "ack"


class TestBuilders:
    """Tests for envelope builders."""

    def test_build_publish(self):
        """Test publish envelopes carry payload and silent flag."""
        envelope = build_publish("hello", "topic-1", silent=True)
        assert envelope == Envelope(
            topic="topic-1", type=EnvelopeType.PUBLISH, payload="hello", silent=True
        )

    def test_build_publish_defaults_not_silent(self):
        """Test publish envelopes are not silent by default."""
        assert build_publish("hello", "topic-1").silent is False

    def test_build_subscribe(self):
        """Test subscribe envelopes are empty and silent."""
        envelope = build_subscribe("topic-1")
        assert envelope.type is EnvelopeType.SUBSCRIBE
        assert envelope.payload == ""
        assert envelope.silent is True

    def test_build_ack(self):
        """Test ack envelopes are empty and silent."""
        envelope = build_ack("topic-1")
        assert envelope.type is EnvelopeType.ACKNOWLEDGE
        assert envelope.payload == ""
        assert envelope.silent is True

    def test_envelope_is_frozen(self):
        """Test that envelopes are immutable."""
        envelope = build_ack("topic-1")
        with pytest.raises(AttributeError):
            envelope.topic = "other"  # type: ignore[misc]


class TestEncode:
    """Tests for encode_envelope()."""

    def test_wire_shape(self):
        """Test the JSON shape sent to the relay."""
        data = encode_envelope(build_publish("x", "a"))
        assert json.loads(data) == {
            "topic": "a",
            "type": "pub",
            "payload": "x",
            "silent": False,
        }


class TestDecode:
    """Tests for decode_envelope()."""

    def test_decode_valid(self):
        """Test decoding a full frame."""
        envelope = decode_envelope(
            '{"topic": "a", "type": "pub", "payload": "x", "silent": true}'
        )
        assert envelope == Envelope(
            topic="a", type=EnvelopeType.PUBLISH, payload="x", silent=True
        )

    def test_decode_defaults(self):
        """Test missing payload and silent fields get defaults."""
        envelope = decode_envelope('{"topic": "a", "type": "ack"}')
        assert envelope.payload == ""
        assert envelope.silent is False

    @pytest.mark.parametrize("silent", ["false", "true", 1, None])
    def test_decode_silent_requires_json_bool(self, silent):
        """Test only a JSON true marks an envelope silent."""
        data = json.dumps({"topic": "a", "type": "pub", "silent": silent})
        assert decode_envelope(data).silent is False

    def test_decode_structured_payload(self):
        """Test non-string payloads are kept as JSON text."""
        envelope = decode_envelope('{"topic": "a", "type": "pub", "payload": {"k": 1}}')
        assert json.loads(envelope.payload) == {"k": 1}

    @pytest.mark.parametrize(
        "data",
        [
            "not valid json {",
            "[1, 2]",
            '"string"',
            '{"type": "pub"}',
            '{"topic": 5, "type": "pub"}',
            '{"topic": "a", "type": "publish"}',
            '{"topic": "a"}',
        ],
    )
    def test_decode_invalid_raises(self, data):
        """Test malformed frames raise EnvelopeDecodeError."""
        with pytest.raises(EnvelopeDecodeError):
            decode_envelope(data)

    def test_decode_error_is_value_error(self):
        """Test decode errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            decode_envelope("{")
