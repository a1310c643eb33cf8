"""Document storage adapters."""

from .local import LocalDocumentStorage
from .s3 import S3DocumentStorage

__all__ = ["LocalDocumentStorage", "S3DocumentStorage"]
