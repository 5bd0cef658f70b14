"""Runtime configuration and manager wiring."""

from __future__ import annotations

import importlib
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from fieldguard.core.injection import InjectableFactory
from fieldguard.metadata.store import FieldUtil, Metadata
from fieldguard.validation.manager import (
    DEFAULT_VALIDATOR_NAMESPACE,
    FieldValidationManager,
)

logger = logging.getLogger(__name__)


def _split_list(value: str, separator: str) -> list[str]:
    return [item.strip() for item in value.split(separator) if item.strip()]


@dataclass
class FieldGuardConfig:
    """fieldguard configuration.

    Attributes:
        metadata_paths: Metadata roots, later roots override earlier ones
        validator_namespace: Prefix for convention-based validator identifiers
        plugins: Modules imported at startup so they can register validators
        log_level: Root logging level name used by the CLI
    """

    metadata_paths: list[Path] = field(default_factory=list)
    validator_namespace: str = DEFAULT_VALIDATOR_NAMESPACE
    plugins: list[str] = field(default_factory=list)
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> FieldGuardConfig:
        """Create config from environment variables.

        Resolution:
        - FIELDGUARD_METADATA_PATH: os.pathsep-separated roots
          (default: {base_path}/metadata, or ./metadata)
        - FIELDGUARD_VALIDATOR_NAMESPACE (default: fieldguard.FieldValidators)
        - FIELDGUARD_PLUGINS: comma-separated module names
        - FIELDGUARD_LOG_LEVEL (default: WARNING)
        """
        raw_paths = os.environ.get("FIELDGUARD_METADATA_PATH")
        if raw_paths:
            metadata_paths = [Path(p) for p in _split_list(raw_paths, os.pathsep)]
        elif base_path:
            metadata_paths = [base_path / "metadata"]
        else:
            metadata_paths = [Path("metadata")]

        return cls(
            metadata_paths=metadata_paths,
            validator_namespace=os.environ.get(
                "FIELDGUARD_VALIDATOR_NAMESPACE", DEFAULT_VALIDATOR_NAMESPACE
            ),
            plugins=_split_list(os.environ.get("FIELDGUARD_PLUGINS", ""), ","),
            log_level=os.environ.get("FIELDGUARD_LOG_LEVEL", "WARNING").upper(),
        )


def load_plugins(modules: list[str]) -> None:
    """Import plugin modules so their @field_validator registrations run."""
    for module in modules:
        logger.debug("Importing validator plugin %s", module)
        importlib.import_module(module)


def build_manager(
    config: FieldGuardConfig,
    metadata: Metadata | None = None,
) -> FieldValidationManager:
    """Wire metadata, field util, object factory and manager together.

    Args:
        config: Configuration to build from
        metadata: Preloaded metadata; loaded from config.metadata_paths if omitted

    Returns:
        A ready FieldValidationManager
    """
    load_plugins(config.plugins)

    if metadata is None:
        metadata = Metadata.load(*config.metadata_paths)
    field_util = FieldUtil(metadata)

    factory = InjectableFactory(
        {
            "metadata": metadata,
            "field_util": field_util,
            "config": config,
        }
    )
    manager = FieldValidationManager(
        metadata,
        field_util,
        factory,
        validator_namespace=config.validator_namespace,
    )
    factory.register_service("field_validation_manager", manager)
    return manager
