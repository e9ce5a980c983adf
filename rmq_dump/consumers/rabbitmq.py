from typing import Optional
from urllib.parse import urlparse
import ssl
import threading

import pika
from pika.exceptions import AMQPError

from rmq_dump.config.loader import DumpConfig
from rmq_dump.consumers.base import Consumer, ConsumerStatus, StatusStream
from rmq_dump.filters.factory import FilterFactory
from rmq_dump.model.message import Delivery
from rmq_dump.utils.exceptions import ConfigurationError, ConnectionError, ConsumerError
from rmq_dump.utils.logger import logger


class RabbitMQConsumer(Consumer):
    """
    Consumes a RabbitMQ queue, filters every delivery and streams statuses.

    With a queue name configured the existing durable queue is consumed
    ("dump"): its depth is read before consumption starts and, with
    `stop_after_consume`, consumption ends once that many deliveries were
    seen. Without a queue name a temporary exclusive queue is declared and
    bound to each routing key ("monitor"); that stream only ends when the
    consumer is closed or the connection drops.

    Acknowledgement: with auto-ack every delivery is acknowledged as soon as
    it is received, exported or not. Otherwise deliveries stay unacknowledged
    while the dump runs and are returned to the queue, either by a requeueing
    nack when the stop condition triggers or by the broker when the channel
    closes. Broker intake is bounded by a prefetch window in both modes; without
    auto-ack the window is the starting backlog, capped at MAX_PREFETCH.

    The connection is opened and the topology declared in the constructor.
    After `consume`, the channel belongs to the receive thread until `close`
    has joined it.
    """

    DEFAULT_PREFETCH = 100
    # prefetch_count is an AMQP short
    MAX_PREFETCH = 65535

    def __init__(self, config: DumpConfig, poll_interval: float = 1.0):
        """
        Connect to the broker and declare the queue topology.

        Args:
            config: The invocation configuration.
            poll_interval: Seconds between checks for cancellation while idle.

        Raises:
            FilterCompilationError: If any filter pattern is invalid.
            ConfigurationError: If the broker URL cannot be parsed.
            ConnectionError: If connecting, declaring or binding fails.
        """
        self.config = config
        self._poll_interval = poll_interval

        self._connection: Optional[pika.BlockingConnection] = None
        self._channel = None
        self._thread: Optional[threading.Thread] = None
        self._stream: Optional[StatusStream] = None
        self._cancelled = threading.Event()
        self._closed = False

        self._queue_name = config.queue
        self._total_messages = 0
        self._prefetch = self.DEFAULT_PREFETCH
        self._consumed_messages = 0
        self._filtered_messages = 0

        self._auto_ack = config.auto_ack
        if config.uses_temporary_queue and not config.auto_ack:
            logger.info("Temporary queue in use, enabling auto-ack")
            self._auto_ack = True

        self.filter = FilterFactory.create_engine(config.filters)

        try:
            self._connect()
            self._setup_topology()
        except Exception:
            self.close()
            raise

    @property
    def queue_name(self) -> str:
        return self._queue_name

    @property
    def total_messages(self) -> int:
        return self._total_messages

    @property
    def consumed_messages(self) -> int:
        return self._consumed_messages

    @property
    def filtered_messages(self) -> int:
        return self._filtered_messages

    @property
    def auto_ack(self) -> bool:
        return self._auto_ack

    def _connection_parameters(self) -> pika.URLParameters:
        url = self.config.rabbitmq_url
        try:
            parameters = pika.URLParameters(url)
        except ValueError as e:
            raise ConfigurationError(f"invalid RabbitMQ URL: {e}") from e

        if urlparse(url).scheme == "amqps":
            context = ssl.create_default_context()
            if self.config.skip_tls_verification:
                logger.warning("TLS certificate verification is disabled")
                context.check_hostname = False
                context.verify_mode = ssl.CERT_NONE
            parameters.ssl_options = pika.SSLOptions(context, server_hostname=parameters.host)
        elif self.config.skip_tls_verification:
            logger.debug("Skipping TLS verification has no effect on a plain amqp URL")

        parameters.client_properties = {"connection_name": "rmq-dump"}
        return parameters

    def _connect(self) -> None:
        parameters = self._connection_parameters()
        try:
            self._connection = pika.BlockingConnection(parameters)
            self._channel = self._connection.channel()
        except (AMQPError, OSError) as e:
            logger.error(f"Failed to connect to RabbitMQ: {e}")
            raise ConnectionError(f"failed to connect to RabbitMQ: {e}") from e

        logger.info(f"Connected to RabbitMQ at {parameters.host}:{parameters.port}")

    def _setup_topology(self) -> None:
        try:
            if self.config.uses_temporary_queue:
                self._declare_temporary_queue()
            else:
                self._declare_named_queue()

            self._prefetch = self._prefetch_count()
            self._channel.basic_qos(prefetch_count=self._prefetch)
        except AMQPError as e:
            logger.error(f"Failed to set up queue {self._queue_name!r}: {e}")
            raise ConnectionError(f"failed to set up queue {self._queue_name!r}: {e}") from e

    def _declare_temporary_queue(self) -> None:
        result = self._channel.queue_declare(
            queue="", durable=False, exclusive=True, auto_delete=True
        )
        self._queue_name = result.method.queue
        logger.info(f"Temporary queue created: {self._queue_name}")

        if not self.config.routing_keys:
            logger.warning("No routing keys configured, the temporary queue receives nothing")

        for routing_key in self.config.routing_keys:
            key = routing_key.strip()
            self._channel.queue_bind(
                queue=self._queue_name,
                exchange=self.config.exchange,
                routing_key=key,
            )
            logger.info(f"Bound routing key {key!r} on exchange {self.config.exchange!r}")

    def _declare_named_queue(self) -> None:
        self._channel.queue_declare(queue=self._queue_name, durable=True)
        if self.config.exchange:
            self._channel.queue_bind(
                queue=self._queue_name, exchange=self.config.exchange, routing_key=""
            )
            logger.info(f"Bound queue {self._queue_name!r} to exchange {self.config.exchange!r}")

        self._total_messages = self._inspect_queue()
        logger.info(f"Queue {self._queue_name} has {self._total_messages} messages")

    def _inspect_queue(self) -> int:
        result = self._channel.queue_declare(queue=self._queue_name, passive=True)
        return result.method.message_count

    def _prefetch_count(self) -> int:
        """
        Number of unsettled deliveries the broker may push to this consumer.

        Without auto-ack nothing is settled before the stop condition, so the
        window must cover the starting backlog for the dump to reach it.
        """
        if self._auto_ack or self._total_messages <= 0:
            return self.DEFAULT_PREFETCH
        return min(self._total_messages, self.MAX_PREFETCH)

    def consume(self) -> StatusStream:
        if self._closed:
            raise ConsumerError("consumer is closed")
        if self._thread is not None:
            raise ConsumerError("consumer already started")

        self._stream = StatusStream(poll_interval=min(self._poll_interval, 0.2))
        self._thread = threading.Thread(
            target=self._receive_loop,
            name=f"rmq-dump-consumer-{self._queue_name}",
            daemon=True,
        )
        self._thread.start()
        logger.debug(f"Consuming from {self._queue_name}")
        return self._stream

    def _receive_loop(self) -> None:
        stream = self._stream
        try:
            for method, properties, body in self._channel.consume(
                self._queue_name,
                auto_ack=False,
                inactivity_timeout=self._poll_interval,
            ):
                if self._cancelled.is_set():
                    break
                if method is None:
                    continue

                if self._auto_ack:
                    self._channel.basic_ack(delivery_tag=method.delivery_tag)

                delivery = Delivery(
                    body=body,
                    exchange=method.exchange,
                    routing_key=method.routing_key,
                    headers=properties.headers,
                    delivery_tag=method.delivery_tag,
                    redelivered=method.redelivered,
                )
                if not self._handle_delivery(delivery, stream):
                    break
        except AMQPError as e:
            if not self._cancelled.is_set():
                logger.error(f"Consumer error: {e}")
        except Exception as e:
            logger.error(f"Unexpected error in receive loop, stopping consumer: {e!r}")
        finally:
            stream.close()

    def _handle_delivery(self, delivery: Delivery, stream: StatusStream) -> bool:
        """Filter one delivery and publish its status. Returns False to stop."""
        self._consumed_messages += 1
        passed: Optional[Delivery] = delivery
        if not self.filter.accepts(delivery.body):
            self._filtered_messages += 1
            passed = None
            logger.debug(f"Delivery {delivery.delivery_tag} filtered out")

        if not stream.publish(self._status(delivery=passed), self._cancelled):
            return False

        if not self._should_stop():
            if not self._auto_ack and self._consumed_messages == self._prefetch:
                logger.warning(
                    f"{self._prefetch} deliveries are unacknowledged, the broker sends no more "
                    f"until they are settled. Enable auto-ack to consume beyond this window"
                )
            return True

        logger.info(f"Consumed all {self._total_messages} messages, stopping")
        if not self._auto_ack:
            self._channel.basic_nack(
                delivery_tag=delivery.delivery_tag, multiple=True, requeue=True
            )
        self._channel.cancel()
        stream.publish(self._status(complete=True), self._cancelled)
        return False

    def _should_stop(self) -> bool:
        return (
            self.config.stop_after_consume
            and not self.config.uses_temporary_queue
            and self._total_messages > 0
            and self._consumed_messages >= self._total_messages
        )

    def _status(self, delivery: Optional[Delivery] = None, complete: bool = False) -> ConsumerStatus:
        return ConsumerStatus(
            total_messages=self._total_messages,
            consumed_messages=self._consumed_messages,
            filtered_messages=self._filtered_messages,
            complete=complete,
            delivery=delivery,
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._cancelled.set()

        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self._poll_interval * 5 + 1)
            if thread.is_alive():
                logger.warning("Receive loop did not stop in time")

        if self._stream is not None:
            self._stream.close()

        if self._channel is not None:
            try:
                if self._channel.is_open:
                    self._channel.close()
            except AMQPError as e:
                logger.warning(f"Error closing channel: {e}")
            self._channel = None

        if self._connection is not None:
            try:
                if self._connection.is_open:
                    self._connection.close()
            except AMQPError as e:
                logger.warning(f"Error closing connection: {e}")
            self._connection = None

        logger.debug("Consumer closed")
