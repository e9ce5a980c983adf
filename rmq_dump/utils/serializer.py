from typing import Any
import json
from rmq_dump.model.message import Envelope
from rmq_dump.utils.exceptions import SerializationError
from rmq_dump.utils.logger import logger


def _header_value(value: Any) -> Any:
    # AMQP header tables can carry byte strings, timestamps and decimals
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


class Serializer:
    """
    Serializes envelopes into the exported JSON representation.

    Each envelope becomes one JSON object shaped
    `{"headers": ..., "exchange": ..., "routingKey": ..., "body": ...}`.
    Header values that JSON cannot represent natively are converted to
    strings, byte strings are decoded as UTF-8.
    """

    def serialize(self, envelope: Envelope, pretty: bool = False) -> str:
        """
        Serialize an envelope to JSON text.

        Args:
            envelope (Envelope): The envelope to serialize.
            pretty (bool): Indent the output with two spaces.

        Returns:
            str: The JSON text, without a trailing newline.

        Raises:
            SerializationError: If the envelope cannot be represented as JSON.
        """
        try:
            return json.dumps(
                envelope.to_dict(),
                indent=2 if pretty else None,
                ensure_ascii=False,
                default=_header_value,
            )
        except (TypeError, ValueError) as e:
            logger.debug(f"Serialization exception: {e}")
            raise SerializationError(f"Failed to serialize message: {e}") from e
