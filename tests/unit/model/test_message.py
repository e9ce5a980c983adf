import json

import pytest

from rmq_dump.model.message import Delivery, Envelope, parse_body


class TestParseBody:
    """Test cases for the JSON-or-string body rule."""

    @pytest.mark.parametrize(
        "body, expected",
        [
            (b'{"a": 1}', {"a": 1}),
            (b"[1, 2]", [1, 2]),
            (b'"quoted"', "quoted"),
            (b"12.5", 12.5),
            (b"true", True),
            (b"null", None),
            (b"  {\"a\": 1}\n", {"a": 1}),
        ],
    )
    def test_valid_json_is_parsed(self, body, expected):
        assert parse_body(body) == expected

    @pytest.mark.parametrize(
        "body, expected",
        [
            (b"plain text", "plain text"),
            (b"", ""),
            (b"{broken", "{broken"),
            (b"NaN", "NaN"),
            (b"Infinity", "Infinity"),
        ],
    )
    def test_invalid_json_is_kept_as_string(self, body, expected):
        assert parse_body(body) == expected

    def test_invalid_utf8_is_replaced(self):
        assert parse_body(b"caf\xe9") == "caf\ufffd"


class TestEnvelope:
    """Test cases for the Envelope model."""

    @pytest.fixture
    def delivery(self):
        return Delivery(
            body=b'{"id": 7}',
            exchange="orders",
            routing_key="order.created",
            headers={"x-retry": 2},
            delivery_tag=11,
            redelivered=True,
        )

    def test_from_delivery_copies_message_fields(self, delivery):
        envelope = Envelope.from_delivery(delivery)

        assert envelope.body == b'{"id": 7}'
        assert envelope.exchange == "orders"
        assert envelope.routing_key == "order.created"
        assert envelope.headers == {"x-retry": 2}

    def test_from_delivery_copies_headers(self, delivery):
        envelope = Envelope.from_delivery(delivery)

        assert envelope.headers is not delivery.headers

    def test_from_delivery_keeps_missing_headers(self):
        envelope = Envelope.from_delivery(Delivery(body=b"x"))

        assert envelope.headers is None

    def test_to_dict_shape(self, delivery):
        record = Envelope.from_delivery(delivery).to_dict()

        assert list(record.keys()) == ["headers", "exchange", "routingKey", "body"]
        assert record["body"] == {"id": 7}

    def test_to_dict_string_body(self):
        record = Envelope(body=b"hello").to_dict()

        assert record["body"] == "hello"

    def test_from_dict_json_body(self):
        envelope = Envelope.from_dict(
            {"headers": {"a": "b"}, "exchange": "ex", "routingKey": "rk", "body": {"id": 1}}
        )

        assert json.loads(envelope.body) == {"id": 1}
        assert envelope.exchange == "ex"
        assert envelope.routing_key == "rk"
        assert envelope.headers == {"a": "b"}

    def test_from_dict_string_body(self):
        envelope = Envelope.from_dict({"body": "plain"})

        assert envelope.body == b"plain"
        assert envelope.exchange == ""
        assert envelope.headers is None
