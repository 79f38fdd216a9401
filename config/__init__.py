"""Runtime settings for DataShape."""

from .loader import ConfigError, load_config_file, load_settings
from .schema import IngestSettings

__all__ = ["ConfigError", "IngestSettings", "load_config_file", "load_settings"]
