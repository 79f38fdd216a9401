"""File helper utilities for DataShape.

This module provides common file operations used by the command line
and the settings loader. The ingestion pipeline itself never touches
the filesystem; it receives a file name and raw bytes.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from .constants import SUPPORTED_CONFIG_FORMATS

logger = logging.getLogger(__name__)


class PathValidationError(Exception):
    """Raised when path validation fails due to security concerns."""

    pass


class FileHelperError(Exception):
    """Raised when reading or writing a file fails."""

    pass


def ensure_directory(path: Path) -> Path:
    """Ensure directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure

    Returns:
        Resolved Path object (for chaining)

    Raises:
        OSError: If directory creation fails
    """
    try:
        resolved_path = path.resolve()
        resolved_path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Directory ensured: {resolved_path}")
        return resolved_path
    except (OSError, RuntimeError) as e:
        logger.error(f"Failed to resolve or create directory {path}: {e}")
        raise


def get_file_extension(file_path: str | Path) -> str:
    """Get file extension from path.

    Args:
        file_path: File path

    Returns:
        File extension (without dot, lowercased), empty string if no extension
    """
    path = Path(file_path)
    return path.suffix.lstrip(".").lower()


def is_supported_config_format(file_path: str | Path) -> bool:
    """Check if file is a supported settings format."""
    extension = get_file_extension(file_path)
    return extension in SUPPORTED_CONFIG_FORMATS


def validate_path_safe(
    file_path: str | Path,
    base_dir: Optional[Path] = None,
    must_exist: bool = False,
    must_be_file: bool = False,
) -> Path:
    """Validate path to prevent directory traversal attacks.

    This function:
    - Checks for directory traversal sequences (..)
    - Resolves paths to prevent symlink attacks
    - Optionally validates paths are within a base directory
    - Validates file existence and type

    Args:
        file_path: Path to validate
        base_dir: Optional base directory to restrict paths within
        must_exist: If True, path must exist
        must_be_file: If True, path must be a file

    Returns:
        Resolved Path object

    Raises:
        PathValidationError: If path contains traversal or violates constraints
        FileNotFoundError: If must_exist=True and path doesn't exist
    """
    path = Path(file_path).expanduser()

    if ".." in path.parts:
        raise PathValidationError(
            f"Path contains directory traversal sequence: {file_path}"
        )

    try:
        resolved = path.resolve()
    except (OSError, RuntimeError) as e:
        raise PathValidationError(f"Failed to resolve path {file_path}: {e}") from e

    if base_dir is not None:
        base_resolved = Path(base_dir).expanduser().resolve()
        try:
            common = os.path.commonpath([str(resolved), str(base_resolved)])
        except ValueError:
            # Paths on different drives (Windows)
            raise PathValidationError(
                f"Path {file_path} cannot be validated against base directory {base_dir}"
            )
        if common != str(base_resolved):
            raise PathValidationError(
                f"Path {file_path} is outside allowed base directory {base_dir}"
            )

    if must_exist and not resolved.exists():
        raise FileNotFoundError(f"Path does not exist: {file_path}")

    if must_be_file and not resolved.is_file():
        if resolved.exists():
            raise PathValidationError(f"Path is not a file: {file_path}")
        raise FileNotFoundError(f"File does not exist: {file_path}")

    return resolved


def read_input_bytes(file_path: str | Path) -> bytes:
    """Read an input file as raw bytes after validating its path.

    Args:
        file_path: Path of the file to ingest

    Returns:
        The file content

    Raises:
        FileHelperError: If the path is unsafe, missing or unreadable
    """
    try:
        resolved = validate_path_safe(file_path, must_exist=True, must_be_file=True)
    except PathValidationError as e:
        raise FileHelperError(f"Invalid input path: {e}") from e
    except FileNotFoundError as e:
        raise FileHelperError(f"Input file not found: {file_path}") from e

    try:
        content = resolved.read_bytes()
    except OSError as e:
        raise FileHelperError(f"Failed to read input file {resolved}: I/O error: {e}") from e

    logger.debug(f"Read {len(content)} bytes from: {resolved}")
    return content


def safe_write_json(data: Any, file_path: Path, overwrite: bool = False) -> None:
    """Safely write JSON data to file.

    Args:
        data: Data to serialize to JSON
        file_path: Path to write file
        overwrite: If True, overwrite existing file; if False, raise error if exists

    Raises:
        FileHelperError: If write fails or file exists and overwrite=False
    """
    try:
        resolved_path = file_path.resolve()
    except (OSError, RuntimeError) as e:
        raise FileHelperError(f"Failed to resolve path {file_path}: {e}") from e

    if resolved_path.exists() and not overwrite:
        raise FileHelperError(f"File already exists: {resolved_path} (use overwrite=True to replace)")

    try:
        ensure_directory(resolved_path.parent)
        with open(resolved_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.debug(f"JSON written to: {resolved_path}")
    except OSError as e:
        raise FileHelperError(f"Failed to write JSON to {resolved_path}: I/O error: {e}") from e
    except (TypeError, ValueError) as e:
        raise FileHelperError(f"Failed to serialize data to JSON for {resolved_path}: {e}") from e
