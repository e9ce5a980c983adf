import json
from rmq_dump.config.loader import DUMP_MODE, MONITOR_MODE, DumpConfig
from rmq_dump.consumers.rabbitmq import RabbitMQConsumer
from rmq_dump.exporters.factory import ExporterFactory
from rmq_dump.processing.processor import MessageProcessor, ProcessingResult
from rmq_dump.utils.exceptions import ConfigurationError
from rmq_dump.utils.logger import logger


def create_processor(config: DumpConfig) -> MessageProcessor:
    """
    Build the consumer and exporter for a configuration and wire them up.

    The consumer is closed again if the exporter cannot be created.
    """
    logger.info("Configuration used:\n" + json.dumps(config.describe(), indent=2))

    consumer = RabbitMQConsumer(config)
    try:
        exporter = ExporterFactory.from_config(config)
    except Exception:
        consumer.close()
        raise

    return MessageProcessor(config=config, consumer=consumer, exporter=exporter)


def run(processor: MessageProcessor, mode: str) -> ProcessingResult:
    """Run a processor in `dump` or `monitor` mode, closing the consumer afterwards."""
    try:
        if mode == DUMP_MODE:
            return processor.dump()
        if mode == MONITOR_MODE:
            return processor.monitor()
        raise ConfigurationError(f"unknown mode: {mode}")
    finally:
        processor.consumer.close()


def dump(config: DumpConfig) -> ProcessingResult:
    """Dump the messages of the configured queue."""
    return run(create_processor(config), DUMP_MODE)


def monitor(config: DumpConfig) -> ProcessingResult:
    """Monitor the configured routing keys through a temporary queue."""
    return run(create_processor(config), MONITOR_MODE)
