from rmq_dump.consumers.base import Consumer, ConsumerStatus, StatusStream
from rmq_dump.consumers.rabbitmq import RabbitMQConsumer

__all__ = ["Consumer", "ConsumerStatus", "StatusStream", "RabbitMQConsumer"]
