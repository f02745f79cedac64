"""Runtime configuration for override compilation.

Provides centralized settings for how compiled overrides are emitted.
Environment variables take precedence over YAML config.

Usage:
    from taskdeck.config.runtime_config import get_runtime_config

    config = get_runtime_config()
    config.builtin_output   # OutputMode.OBJECT or OutputMode.WRAPPED
    config.standard_output  # OutputMode.ARRAY unless configured otherwise

Environment overrides:
    TASKDECK_BUILTIN_OUTPUT   object | wrapped
    TASKDECK_STANDARD_OUTPUT  array | object | wrapped
    TASKDECK_LOG_LEVEL        DEBUG | INFO | WARNING | ERROR
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from ..spec.types import OutputMode

logger = logging.getLogger(__name__)

_CONFIG_PATH = Path(__file__).parent / "runtime.yaml"
_cached_config: Optional["RuntimeConfig"] = None

ENV_BUILTIN_OUTPUT = "TASKDECK_BUILTIN_OUTPUT"
ENV_STANDARD_OUTPUT = "TASKDECK_STANDARD_OUTPUT"
ENV_LOG_LEVEL = "TASKDECK_LOG_LEVEL"

# Built-in tasks need nested fields accumulated, so they never emit raw arrays
BUILTIN_OUTPUT_MODES: Tuple[OutputMode, ...] = (OutputMode.OBJECT, OutputMode.WRAPPED)
STANDARD_OUTPUT_MODES: Tuple[OutputMode, ...] = (
    OutputMode.ARRAY,
    OutputMode.OBJECT,
    OutputMode.WRAPPED,
)
LOG_LEVELS: Tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class RuntimeConfig:
    """Resolved runtime settings."""
    builtin_output: OutputMode = OutputMode.OBJECT
    standard_output: OutputMode = OutputMode.ARRAY
    log_level: str = "INFO"


def _default_config() -> Dict[str, Any]:
    """Return default configuration if runtime.yaml doesn't exist."""
    return {
        "version": "1.0",
        "override": {
            "builtin_output": "object",
            "standard_output": "array",
        },
        "logging": {
            "level": "INFO",
        },
    }


def _parse_mode(
    value: Any,
    name: str,
    allowed: Tuple[OutputMode, ...],
    default: OutputMode,
) -> OutputMode:
    """Parse an output mode, falling back to ``default`` with a warning."""
    if value is None:
        return default
    try:
        mode = OutputMode(str(value).strip().lower())
    except ValueError:
        mode = None
    if mode not in allowed:
        logger.warning(
            "Invalid value %r for '%s' (allowed: %s). Using '%s'.",
            value,
            name,
            ", ".join(m.value for m in allowed),
            default.value,
        )
        return default
    return mode


def _parse_log_level(value: Any, default: str = "INFO") -> str:
    if value is None:
        return default
    level = str(value).strip().upper()
    if level not in LOG_LEVELS:
        logger.warning("Invalid log level %r. Using '%s'.", value, default)
        return default
    return level


def load_runtime_config(path: Optional[Path] = None) -> RuntimeConfig:
    """Load runtime configuration from YAML, applying environment overrides.

    Args:
        path: Config file to read. Defaults to the bundled runtime.yaml;
            built-in defaults are used when the file is missing.
    """
    config_path = path if path is not None else _CONFIG_PATH
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    else:
        data = _default_config()

    override_data = data.get("override") or {}
    logging_data = data.get("logging") or {}

    builtin_raw = os.environ.get(ENV_BUILTIN_OUTPUT, override_data.get("builtin_output"))
    standard_raw = os.environ.get(ENV_STANDARD_OUTPUT, override_data.get("standard_output"))
    level_raw = os.environ.get(ENV_LOG_LEVEL, logging_data.get("level"))

    return RuntimeConfig(
        builtin_output=_parse_mode(
            builtin_raw, "builtin_output", BUILTIN_OUTPUT_MODES, OutputMode.OBJECT
        ),
        standard_output=_parse_mode(
            standard_raw, "standard_output", STANDARD_OUTPUT_MODES, OutputMode.ARRAY
        ),
        log_level=_parse_log_level(level_raw),
    )


def get_runtime_config() -> RuntimeConfig:
    """Return the process-wide runtime configuration, loading it once."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_runtime_config()
    return _cached_config


def reset_runtime_config() -> None:
    """Clear the cached configuration (for testing)."""
    global _cached_config
    _cached_config = None
