"""Shared utilities for DataShape.

This module provides common utilities used across the application.
"""

from .constants import (
    APP_NAME,
    APP_VERSION,
    DEFAULT_CSV_DELIMITER,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_INPUT_BYTES,
    DEFAULT_TEXT_ENCODING,
    EXIT_INVALID_INPUT,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    SUPPORTED_CONFIG_FORMATS,
    SUPPORTED_INPUT_FORMATS,
)
from .file_helpers import (
    FileHelperError,
    PathValidationError,
    ensure_directory,
    get_file_extension,
    is_supported_config_format,
    read_input_bytes,
    safe_write_json,
    validate_path_safe,
)
from .logging import get_logger, resolve_log_level, setup_logging

__all__ = [
    "APP_NAME",
    "APP_VERSION",
    "DEFAULT_CSV_DELIMITER",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_MAX_INPUT_BYTES",
    "DEFAULT_TEXT_ENCODING",
    "EXIT_INVALID_INPUT",
    "EXIT_RUNTIME_ERROR",
    "EXIT_SUCCESS",
    "SUPPORTED_CONFIG_FORMATS",
    "SUPPORTED_INPUT_FORMATS",
    "FileHelperError",
    "PathValidationError",
    "ensure_directory",
    "get_file_extension",
    "get_logger",
    "is_supported_config_format",
    "read_input_bytes",
    "resolve_log_level",
    "safe_write_json",
    "setup_logging",
    "validate_path_safe",
]
