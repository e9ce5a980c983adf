from typing import Any, Dict, ClassVar, Type
from rmq_dump.config.loader import DumpConfig, FILE_WRITER
from rmq_dump.utils.logger import logger
from rmq_dump.utils.exceptions import UnsupportedTypeError
from rmq_dump.exporters.base import Exporter


class ExporterFactory:
    """
    Factory for creating Exporter implementations.

    This class provides a registry-based factory pattern for creating instances
    of Exporter implementations based on the configured writer kind.
    """

    REGISTRY: ClassVar[Dict[str, Type[Exporter]]] = {}

    @classmethod
    def register_exporter(cls, name: str, exporter_class: Type[Exporter]) -> None:
        """
        Register an exporter implementation.

        Args:
            name (str): The writer kind to register the exporter under.
            exporter_class (Type[Exporter]): The exporter class to register.
        """
        cls.REGISTRY[name.lower()] = exporter_class

    @classmethod
    def create(cls, writer_kind: str, **kwargs: Any) -> Exporter:
        """
        Create an Exporter implementation based on requested writer kind.

        Args:
            writer_kind (str): The kind of exporter to create.
            **kwargs: Parameters passed to the exporter implementation.

        Returns:
            Exporter: An initialized Exporter implementation.

        Raises:
            UnsupportedTypeError: If the requested writer kind is not supported.
        """
        normalized_kind = writer_kind.lower()
        logger.debug(f"Creating exporter of kind: {normalized_kind}")

        if normalized_kind not in cls.REGISTRY:
            supported = list(cls.REGISTRY.keys())
            logger.error(
                f"Unknown writer kind: {writer_kind}. Supported kinds: {supported}"
            )
            raise UnsupportedTypeError(
                f"Unknown writer kind: {writer_kind}. Supported kinds: {supported}"
            )

        exporter_class = cls.REGISTRY[normalized_kind]
        return exporter_class(**kwargs)

    @classmethod
    def from_config(cls, config: DumpConfig) -> Exporter:
        """Create the exporter selected by a DumpConfig."""
        kwargs: Dict[str, Any] = {"pretty_print": config.pretty_print}
        if config.writer.lower() == FILE_WRITER:
            kwargs["output_file"] = config.output_file
            kwargs["file_mode"] = config.file_mode
        return cls.create(config.writer, **kwargs)
