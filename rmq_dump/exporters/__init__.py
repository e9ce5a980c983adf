from rmq_dump.exporters.base import Exporter
from rmq_dump.exporters.factory import ExporterFactory
from rmq_dump.exporters.console import ConsoleExporter
from rmq_dump.exporters.file import FileExporter

# Register the built-in writer kinds with the factory
ExporterFactory.register_exporter("console", ConsoleExporter)
ExporterFactory.register_exporter("file", FileExporter)

__all__ = [
    "Exporter",
    "ExporterFactory",
    "ConsoleExporter",
    "FileExporter",
]
