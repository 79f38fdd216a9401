"""Settings schema for DataShape using Pydantic."""

import codecs

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.constants import (
    DEFAULT_CSV_DELIMITER,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_INPUT_BYTES,
    DEFAULT_TEXT_ENCODING,
)


class IngestSettings(BaseModel):
    """Runtime settings for the ingestion entry points.

    The pipeline itself never reads settings; the orchestrator and CLI
    pass the relevant values down.
    """

    max_input_bytes: int = Field(
        default=DEFAULT_MAX_INPUT_BYTES, ge=1, description="Upper bound on raw input size"
    )
    text_encoding: str = Field(
        default=DEFAULT_TEXT_ENCODING, min_length=1, description="Encoding of text formats"
    )
    csv_delimiter: str = Field(
        default=DEFAULT_CSV_DELIMITER, min_length=1, max_length=1, description="CSV field separator"
    )
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, description="Logging level name")

    @field_validator("text_encoding")
    @classmethod
    def validate_text_encoding(cls, v: str) -> str:
        """Reject encodings Python does not know."""
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"unknown text encoding: {v}") from e
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level

    model_config = ConfigDict(frozen=True, extra="forbid")
