"""Document-to-file bookkeeping for locally uploaded documents.

Only documents that arrived through the upload route are tracked here.
The mapping lets the delete route find and unlink the stored file once the
backend has deleted the document.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class UploadStore:
    """In-memory mapping of document ID to stored upload path.

    Created empty by the application factory and shared by all requests.
    Entries are lost on restart while the files stay on disk.
    """

    def __init__(self) -> None:
        self._paths: dict[str, Path] = {}

    def put(self, document_id: str, path: Path) -> None:
        self._paths[document_id] = Path(path)
        logger.debug(f"Tracking upload {path} for document {document_id}")

    def get(self, document_id: str) -> Path | None:
        return self._paths.get(document_id)

    def remove(self, document_id: str) -> Path | None:
        """Stop tracking a document.

        Args:
            document_id: Backend document identifier.

        Returns:
            The path that was tracked, or None if the document was unknown.
        """
        return self._paths.pop(document_id, None)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._paths

    def __len__(self) -> int:
        return len(self._paths)
