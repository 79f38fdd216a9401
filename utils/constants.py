"""Constants for DataShape.

This module defines shared constants used across the application.
"""

# Exit codes (matching CLI exit codes)
EXIT_SUCCESS = 0
EXIT_INVALID_INPUT = 1
EXIT_RUNTIME_ERROR = 3

# Application metadata
APP_NAME = "DataShape"
APP_VERSION = "1.0.0"

# Supported file formats
SUPPORTED_INPUT_FORMATS = ["json", "xml", "html", "htm", "csv", "xlsx", "xls", "txt"]
SUPPORTED_CONFIG_FORMATS = ["yaml", "yml", "json"]

# Default values
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_MAX_INPUT_BYTES = 10 * 1024 * 1024
DEFAULT_TEXT_ENCODING = "utf-8"
DEFAULT_CSV_DELIMITER = ","
