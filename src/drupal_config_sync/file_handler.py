"""File handler module: directory validation, encoding-aware read/write.

Provides the file I/O primitives the sync engine consumes.  The engine
never touches the filesystem directly; it talks to a ``ConfigSource``
(list / read / write by filename within a directory) so tests can inject
an in-memory source.  ``LocalConfigSource`` is the filesystem-backed
default and runs blocking calls through ``run_sync()``.
"""

import os
from pathlib import Path
from typing import Protocol

from charset_normalizer import from_bytes

from drupal_config_sync.core.async_utils import run_sync
from drupal_config_sync.errors import ConfigDirectoryError

# =============================================================================
# Directory Validation
# =============================================================================


def validate_config_directory(path_str: str | os.PathLike) -> Path:
    """Validate and resolve a configuration directory path.

    Args:
        path_str: Path to an existing, readable directory.

    Returns:
        Resolved Path object.

    Raises:
        ConfigDirectoryError: If the path does not exist, is not a
            directory, or cannot be listed.
    """
    path = Path(path_str).expanduser()
    if not path.exists():
        raise ConfigDirectoryError(str(path_str), "does not exist")
    if not path.is_dir():
        raise ConfigDirectoryError(str(path_str), "is not a directory")
    if not os.access(path, os.R_OK | os.X_OK):
        raise ConfigDirectoryError(str(path_str), "is not readable")
    return path.resolve()


def list_config_files(directory: Path) -> list[str]:
    """List the ``.yml`` filenames directly inside *directory*.

    Args:
        directory: Directory to scan (not recursive).

    Returns:
        Sorted list of filenames.

    Raises:
        ConfigDirectoryError: If the directory cannot be listed.
    """
    try:
        entries = list(directory.iterdir())
    except FileNotFoundError:
        raise ConfigDirectoryError(str(directory), "does not exist") from None
    except OSError as exc:
        raise ConfigDirectoryError(
            str(directory), f"is not readable ({exc.strerror})"
        ) from exc
    return sorted(
        entry.name
        for entry in entries
        if entry.suffix == ".yml" and entry.is_file()
    )


# =============================================================================
# File Read/Write
# =============================================================================


def read_file_with_encoding(path: Path) -> tuple[str, str]:
    """Read a file with automatic encoding detection.

    Reads raw bytes first, then uses charset-normalizer to detect encoding.
    Defaults to UTF-8 for empty files or when detection fails.

    Args:
        path: Path to the file to read.

    Returns:
        Tuple of (content_string, detected_encoding).
    """
    raw = path.read_bytes()
    if not raw:
        return ("", "utf-8")

    result = from_bytes(raw).best()
    if result is None:
        encoding = "utf-8"
        content = raw.decode(encoding, errors="replace")
    else:
        encoding = result.encoding
        # ascii is a strict subset of utf-8; utf_8 is the codec alias
        if encoding in ("ascii", "utf_8"):
            encoding = "utf-8"
        content = str(result)
    return (content, encoding)


def read_text_file(path: Path) -> str:
    """Read *path* and return its decoded text."""
    content, _ = read_file_with_encoding(path)
    return content


def write_file(
    path: Path, content: str, encoding: str = "utf-8"
) -> int:
    """Write content to a file, creating parent directories as needed.

    Args:
        path: Path to the output file.
        content: String content to write.
        encoding: Encoding to use (default: utf-8).

    Returns:
        Number of bytes written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    encoded = content.encode(encoding)
    path.write_bytes(encoded)
    return len(encoded)


# =============================================================================
# Config sources
# =============================================================================


class ConfigSource(Protocol):
    """File access used by the sync engine.

    ``list_files`` doubles as the directory precondition check: it must
    raise ``ConfigDirectoryError`` when the directory is missing or
    unreadable.
    """

    async def list_files(self, directory: str) -> list[str]:
        """Return the YAML filenames in *directory*."""
        ...  # pragma: no cover

    async def read_text(self, directory: str, filename: str) -> str:
        """Return the text of *filename* in *directory*."""
        ...  # pragma: no cover

    async def write_text(
        self, directory: str, filename: str, content: str
    ) -> None:
        """Write *content* to *filename* in *directory*."""
        ...  # pragma: no cover


class LocalConfigSource:
    """``ConfigSource`` backed by the local filesystem."""

    async def list_files(self, directory: str) -> list[str]:
        resolved = await run_sync(validate_config_directory, directory)
        return await run_sync(list_config_files, resolved)

    async def read_text(self, directory: str, filename: str) -> str:
        return await run_sync(read_text_file, Path(directory) / filename)

    async def write_text(
        self, directory: str, filename: str, content: str
    ) -> None:
        await run_sync(write_file, Path(directory) / filename, content)
