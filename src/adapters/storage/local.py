"""
Local document storage adapter - Implements DocumentStorage protocol.

Writes uploaded documents to a directory on disk. Used for development when
no S3 bucket is configured; the reference is the path relative to the root.
"""

import logging
import re
from pathlib import Path
from uuid import uuid4

from src.domain.ports import StoredDocument

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class LocalDocumentStorage:
    """Implements DocumentStorage protocol on the local filesystem."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def upload(
        self, content: bytes, filename: str, content_type: str | None = None
    ) -> StoredDocument:
        safe_name = _UNSAFE_FILENAME_CHARS.sub("_", filename or "document") or "document"
        ref = f"{uuid4().hex}_{safe_name}"
        path = self.root / ref
        path.write_bytes(content)
        logger.info("Stored document at %s", path)
        return StoredDocument(url=path.resolve().as_uri(), ref=ref)

    def delete(self, ref: str) -> None:
        path = self.root / ref
        # Refuse references that escape the storage root
        if path.resolve().parent != self.root.resolve():
            raise ValueError(f"Invalid document reference: {ref}")
        path.unlink()
        logger.info("Deleted document %s", path)
