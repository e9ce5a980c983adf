import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from rmq_dump.model.message import Envelope
from rmq_dump.utils.serializer import Serializer


@pytest.fixture
def serializer():
    """Fixture to create a Serializer instance for tests."""
    return Serializer()


def test_serialize_json_body(serializer):
    """Test that a JSON body is embedded as a JSON value."""
    envelope = Envelope(body=b'{"key": "value", "number": 123}', exchange="ex", routing_key="rk")

    result = json.loads(serializer.serialize(envelope))

    assert result == {
        "headers": None,
        "exchange": "ex",
        "routingKey": "rk",
        "body": {"key": "value", "number": 123},
    }


def test_serialize_string_body(serializer):
    """Test that a non-JSON body is embedded as a string."""
    envelope = Envelope(body=b"hello world")

    result = json.loads(serializer.serialize(envelope))

    assert result["body"] == "hello world"


def test_serialize_compact_is_single_line(serializer):
    """Test that compact output never contains newlines."""
    envelope = Envelope(body=b'{"nested": {"list": [1, 2, 3]}}', headers={"h": "v"})

    assert "\n" not in serializer.serialize(envelope)


def test_serialize_pretty_indents(serializer):
    """Test that pretty output is indented with two spaces."""
    envelope = Envelope(body=b'{"a": 1}')

    output = serializer.serialize(envelope, pretty=True)

    assert output.startswith('{\n  "headers"')
    assert json.loads(output)["body"] == {"a": 1}


def test_serialize_keeps_non_ascii(serializer):
    """Test that non-ASCII text is written as-is rather than escaped."""
    envelope = Envelope(body="Zürich".encode("utf-8"))

    assert "Zürich" in serializer.serialize(envelope)


def test_serialize_header_values_not_native_to_json(serializer):
    """Test that AMQP header values JSON can't represent become strings."""
    now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    envelope = Envelope(
        body=b"x",
        headers={"raw": b"bytes", "when": now, "amount": Decimal("1.50"), "count": 3},
    )

    headers = json.loads(serializer.serialize(envelope))["headers"]

    assert headers["raw"] == "bytes"
    assert headers["when"] == str(now)
    assert headers["amount"] == "1.50"
    assert headers["count"] == 3


def test_serialize_nested_headers(serializer):
    """Test that nested header tables are kept verbatim."""
    headers = {"x-death": [{"count": 1, "queue": "q", "reason": "rejected"}], "flag": True}
    envelope = Envelope(body=b"{}", headers=headers)

    assert json.loads(serializer.serialize(envelope))["headers"] == headers
