"""
Configuration management for the discard-return engine.

This module provides configuration loading with sensible defaults for
rule selection, finding limits, parallelism and logging.
"""

import logging
import os
from dataclasses import asdict, dataclass, field
from typing import List, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_NAMES = [".discard-lint.yml", ".discard-lint.yaml", "discard-lint.yml", "discard-lint.yaml"]

LOGGER_NAMES = ("discard_engine", "discard_rules")


@dataclass
class EngineConfig:
    """Configuration for the discard-return engine."""

    # Rule selection (fnmatch patterns over rule ids)
    enabled_rules: List[str] = field(default_factory=lambda: ["*"])
    # Finding caps; None means unlimited
    max_findings_per_file: Optional[int] = None
    max_total_findings: Optional[int] = None

    # Performance settings
    jobs: int = 1

    # File collection
    exclude_dirs: List[str] = field(default_factory=lambda: ["bin", "obj", "node_modules", "packages"])

    log_level: str = "WARNING"


def load_config(config_path: Optional[str] = None) -> EngineConfig:
    """
    Load configuration from file or use defaults.

    Args:
        config_path: Path to config file (YAML). If None, uses defaults.

    Returns:
        EngineConfig instance
    """
    defaults = asdict(EngineConfig())

    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to load config from %s: %s; using defaults", config_path, e)
            return EngineConfig(**defaults)

        if not isinstance(file_config, dict):
            logger.warning("Config %s is not a mapping; using defaults", config_path)
            return EngineConfig(**defaults)

        unknown = set(file_config) - set(defaults)
        for key in sorted(unknown):
            logger.warning("Ignoring unknown config key %r in %s", key, config_path)

        merged_config = defaults.copy()
        merged_config.update({key: value for key, value in file_config.items() if key in defaults})
        return EngineConfig(**merged_config)

    return EngineConfig(**defaults)


def get_default_config() -> EngineConfig:
    """Get default configuration without loading from file."""
    return load_config(None)


def save_config(config: EngineConfig, config_path: str) -> None:
    """Save configuration to a YAML file."""
    directory = os.path.dirname(config_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.dump(asdict(config), f, default_flow_style=False, indent=2)


def find_config_file(start_path: str = ".") -> Optional[str]:
    """
    Find configuration file by walking up the directory tree.

    Looks for ``.discard-lint.yml``, ``.discard-lint.yaml``,
    ``discard-lint.yml`` and ``discard-lint.yaml``, in that order.
    """
    current_path = os.path.abspath(start_path)

    while True:
        for config_name in CONFIG_NAMES:
            config_path = os.path.join(current_path, config_name)
            if os.path.exists(config_path):
                return config_path

        parent_path = os.path.dirname(current_path)
        if parent_path == current_path:
            break
        current_path = parent_path

    return None


def configure_logging(config: EngineConfig) -> None:
    """Apply the configured level to the engine loggers."""
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        logger.warning("Unknown log level %r; keeping WARNING", config.log_level)
        level = logging.WARNING
    for name in LOGGER_NAMES:
        logging.getLogger(name).setLevel(level)
