from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
import json


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def parse_json(text: str) -> Any:
    """Parse strict JSON text, rejecting NaN and Infinity literals."""
    return json.loads(text, parse_constant=_reject_constant)


def parse_body(body: bytes) -> Any:
    """
    Return the body as parsed JSON when it is valid JSON, else as a string.

    Any JSON value counts (object, array, string, number, boolean, null).
    Bytes that are not valid UTF-8 are decoded with replacement characters.
    """
    text = body.decode("utf-8", errors="replace")
    try:
        return parse_json(text)
    except ValueError:
        return text


@dataclass(frozen=True)
class Delivery:
    """
    A message as received from the broker.

    The delivery tag identifies the message on the channel it arrived on and
    is what the consumer acknowledges or rejects.
    """

    body: bytes
    exchange: str = ""
    routing_key: str = ""
    headers: Optional[Dict[str, Any]] = None
    delivery_tag: int = 0
    redelivered: bool = False


@dataclass(frozen=True)
class Envelope:
    """
    Exporter-facing projection of a delivery.

    The body is kept as raw bytes; `to_dict` embeds it as parsed JSON when it
    is valid JSON and as a plain string otherwise.
    """

    body: bytes
    exchange: str = ""
    routing_key: str = ""
    headers: Optional[Dict[str, Any]] = field(default=None)

    @classmethod
    def from_delivery(cls, delivery: Delivery) -> "Envelope":
        headers = dict(delivery.headers) if delivery.headers is not None else None
        return cls(
            body=delivery.body,
            exchange=delivery.exchange,
            routing_key=delivery.routing_key,
            headers=headers,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Envelope":
        """
        Rebuild an envelope from an exported record.

        A string body is stored as its UTF-8 bytes; any other body is stored
        as its compact JSON encoding.
        """
        body = data.get("body")
        if isinstance(body, str):
            raw = body.encode("utf-8")
        else:
            raw = json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

        return cls(
            body=raw,
            exchange=data.get("exchange") or "",
            routing_key=data.get("routingKey") or "",
            headers=data.get("headers"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "headers": self.headers,
            "exchange": self.exchange,
            "routingKey": self.routing_key,
            "body": parse_body(self.body),
        }
