import argparse
import signal
import sys
from typing import Any, List, Optional
from dotenv import load_dotenv

from rmq_dump import app
from rmq_dump.config.loader import DUMP_MODE, MONITOR_MODE, DumpConfig
from rmq_dump.utils.exceptions import RmqDumpError
from rmq_dump.utils.logger import Logger, logger


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="rmq-dump",
        description="Dump or monitor RabbitMQ messages to a file or the console. "
        "Connection, output and filter settings are read from the environment.",
    )
    parser.add_argument("mode", choices=[DUMP_MODE, MONITOR_MODE])
    parser.add_argument("--env-file", default=None, help="Path of a .env file to load")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for the rmq-dump application.

    This function loads the configuration, builds the consumer, exporter and
    processor for the requested mode and runs it. SIGINT and SIGTERM stop
    the processor gracefully.
    """
    args = parse_args(argv)
    load_dotenv(args.env_file)

    try:
        config = DumpConfig.load()
        Logger.update_level(config.log_level)
        if args.mode == MONITOR_MODE:
            config = config.with_overrides(queue="")
        config.validate(args.mode)

        processor = app.create_processor(config)
    except RmqDumpError as e:
        logger.error(str(e))
        sys.exit(1)

    def signal_handler(sig: Any, _frame: Any) -> None:
        logger.info("Shutdown signal received")
        processor.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        app.run(processor, args.mode)
    except RmqDumpError as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
