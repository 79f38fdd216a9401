"""Settings loader.

This module loads YAML/JSON settings files, applies environment
overrides and validates the result against IngestSettings.
"""

import json
import os
import pathlib
from typing import Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from config.schema import IngestSettings
from utils import PathValidationError, is_supported_config_format, validate_path_safe

ENV_PREFIX = "DATASHAPE_"
ENV_OVERRIDES = ("max_input_bytes", "text_encoding", "csv_delimiter", "log_level")


class ConfigError(Exception):
    """Raised when settings cannot be loaded or validated."""

    pass


def load_config_file(config_path: Union[str, pathlib.Path]) -> dict:
    """Load settings from a YAML or JSON file.

    Args:
        config_path: Path to settings file

    Returns:
        Dictionary of raw settings

    Raises:
        ConfigError: If file cannot be loaded or parsed
    """
    try:
        config_path = validate_path_safe(config_path, must_exist=True, must_be_file=True)
    except PathValidationError as e:
        raise ConfigError(f"Invalid settings path: {e}") from e
    except FileNotFoundError as e:
        raise ConfigError(f"Settings file not found: {config_path}") from e

    suffix = config_path.suffix.lower()
    if not is_supported_config_format(config_path):
        raise ConfigError(
            f"Unsupported file format: {config_path.suffix}. "
            "Supported formats: .yaml, .yml, .json"
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            if suffix == ".json":
                config = json.load(f)
            else:
                config = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read settings file {config_path}: I/O error: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {config_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON syntax in {config_path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"Failed to decode settings file {config_path}: Encoding error: {e}") from e

    if config is None:
        return {}

    if not isinstance(config, dict):
        raise ConfigError(f"Settings must be a dictionary, got {type(config).__name__}")

    return config


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> dict:
    """Collect DATASHAPE_* environment variables that override settings."""
    environ = os.environ if environ is None else environ
    overrides = {}
    for name in ENV_OVERRIDES:
        value = environ.get(ENV_PREFIX + name.upper())
        if value is not None and value != "":
            overrides[name] = value
    return overrides


def _format_validation_error(error: ValidationError) -> str:
    errors = []
    for err in error.errors():
        field_path = " -> ".join(str(loc) for loc in err.get("loc", []))
        errors.append(f"  {field_path}: {err.get('msg', 'Validation error')} ({err.get('type', 'unknown')})")
    return "\n".join(errors)


def load_settings(
    config_path: Optional[Union[str, pathlib.Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> IngestSettings:
    """Load, override and validate settings.

    This is the main entry point for configuration. Without a path the
    defaults apply, still subject to environment overrides.

    Args:
        config_path: Optional path to a YAML or JSON settings file
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated IngestSettings instance

    Raises:
        ConfigError: If loading or validation fails
    """
    config = load_config_file(config_path) if config_path is not None else {}
    config.update(env_overrides(environ))

    try:
        return IngestSettings(**config)
    except ValidationError as e:
        raise ConfigError(f"Settings validation failed:\n{_format_validation_error(e)}") from e
