"""Upload staging on the local file system.

Validates uploaded bytes, writes them into the upload directory and
guarantees the staged file is removed when ingestion fails.
"""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path, PurePath

from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)

# Constants
DEFAULT_MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10MB


class UploadRejected(Exception):
    """Raised when an uploaded file fails validation."""

    def __init__(self, message: str, too_large: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.too_large = too_large


class FileSystemError(Exception):
    """Raised when the upload directory cannot be written."""

    pass


def validate_upload(
    filename: str | None,
    content: bytes,
    max_size: int = DEFAULT_MAX_UPLOAD_SIZE,
) -> str:
    """Validate an uploaded file before it is staged.

    Args:
        filename: The client-supplied filename.
        content: Raw bytes of the file.
        max_size: Maximum accepted size in bytes.

    Returns:
        The validated filename.

    Raises:
        UploadRejected: If the filename is missing, the file is empty,
            or it exceeds the size limit.
    """
    if not filename or not PurePath(filename).name:
        raise UploadRejected("Filename is required")

    if not content:
        raise UploadRejected("Empty file provided")

    if len(content) > max_size:
        size_mb = len(content) / (1024 * 1024)
        limit_mb = max_size / (1024 * 1024)
        raise UploadRejected(
            f"File size ({size_mb:.1f}MB) exceeds maximum allowed ({limit_mb:g}MB)",
            too_large=True,
        )

    return filename


def stored_filename(filename: str, timestamp_ms: int | None = None) -> str:
    """Build the on-disk name for an upload: ``<epoch-millis>-<basename>``.

    Directory components of the client filename (either separator style)
    are dropped so the file always lands inside the upload directory.
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    basename = PurePath(filename.replace("\\", "/")).name
    return f"{timestamp_ms}-{basename}"


def _write(directory: Path, name: str, content: bytes) -> Path:
    """Create a new file in ``directory``, never replacing an existing one.

    A name already taken gets a counter before its extension
    (``<ms>-guide-1.md``) so every staged upload has its own file.
    """
    directory.mkdir(parents=True, exist_ok=True)
    stem, suffix = PurePath(name).stem, PurePath(name).suffix
    path = directory / name
    counter = 0
    while True:
        try:
            f = path.open("xb")
        except FileExistsError:
            counter += 1
            path = directory / f"{stem}-{counter}{suffix}"
            continue
        with f:
            try:
                f.write(content)
            except OSError:
                path.unlink(missing_ok=True)
                raise
        return path


def discard(path: Path) -> bool:
    """Remove a stored file, logging instead of raising on failure.

    Returns:
        True if the file is gone afterwards.
    """
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Failed to remove stored upload {path}: {e}")
        return False
    logger.info(f"Removed stored upload {path}")
    return True


@asynccontextmanager
async def staged_upload(
    directory: Path,
    filename: str,
    content: bytes,
) -> AsyncIterator[Path]:
    """Write an upload to disk for the duration of an ingest attempt.

    The file is kept when the body completes and deleted when it raises.

    Args:
        directory: Upload directory (created if missing).
        filename: Validated client filename.
        content: Raw file bytes.

    Yields:
        Path of the staged file.

    Raises:
        FileSystemError: If the file cannot be written.
    """
    try:
        path = await run_in_threadpool(_write, Path(directory), stored_filename(filename), content)
    except OSError as e:
        logger.error(f"Failed to stage upload {filename} in {directory}: {e}")
        raise FileSystemError(f"Failed to store uploaded file: {e}") from e

    logger.info(f"Staged upload {filename} at {path} ({len(content)} bytes)")
    try:
        yield path
    except BaseException:
        discard(path)
        raise
