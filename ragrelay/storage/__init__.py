"""Local storage for uploaded documents.

Responsibilities:
    - Upload validation (filename, empty files, size limit)
    - Staging uploaded bytes under ``<timestamp>-<filename>``
    - Cleanup of staged files when ingestion fails
    - Document ID to stored file mapping for cleanup after deletion

Holds no document content beyond the uploaded files themselves.
"""

from ragrelay.storage.upload_store import UploadStore
from ragrelay.storage.uploads import (
    FileSystemError,
    UploadRejected,
    discard,
    staged_upload,
    validate_upload,
)

__all__ = [
    "FileSystemError",
    "UploadRejected",
    "UploadStore",
    "discard",
    "staged_upload",
    "validate_upload",
]
