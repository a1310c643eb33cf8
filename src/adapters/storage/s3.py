"""
S3 document storage adapter - Implements DocumentStorage protocol.

Stores registration identity documents in an S3 bucket under a fixed
prefix. The object key is the deletable reference; the URL is either the
configured public base URL (e.g. CloudFront) or the bucket's virtual-hosted
S3 URL.
"""

import logging
import re
from typing import Any
from uuid import uuid4

import boto3

from src.domain.ports import StoredDocument

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class S3DocumentStorage:
    """Implements DocumentStorage protocol via boto3."""

    def __init__(
        self,
        bucket: str,
        region: str,
        prefix: str = "osoo_member_documents",
        base_url: str | None = None,
        client: Any | None = None,
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
    ) -> None:
        self.bucket = bucket
        self.region = region
        self.prefix = prefix.rstrip("/")
        self.base_url = base_url.rstrip("/") if base_url else None
        self.s3_client = client or boto3.client(
            "s3",
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
            region_name=region,
        )
        logger.info("S3DocumentStorage initialized for bucket: %s", self.bucket)

    def upload(
        self, content: bytes, filename: str, content_type: str | None = None
    ) -> StoredDocument:
        """
        Upload a document under a collision-free key.

        Returns:
            StoredDocument with the public URL and the S3 key as reference
        """
        safe_name = _UNSAFE_FILENAME_CHARS.sub("_", filename or "document") or "document"
        s3_key = f"{self.prefix}/{uuid4().hex}_{safe_name}"

        extra_args = {}
        if content_type:
            extra_args["ContentType"] = content_type

        logger.info("Uploading document to S3: %s", s3_key)
        self.s3_client.put_object(Bucket=self.bucket, Key=s3_key, Body=content, **extra_args)
        return StoredDocument(url=self.get_url(s3_key), ref=s3_key)

    def delete(self, ref: str) -> None:
        logger.info("Deleting document from S3: %s", ref)
        self.s3_client.delete_object(Bucket=self.bucket, Key=ref)

    def get_url(self, s3_key: str) -> str:
        if self.base_url:
            return f"{self.base_url}/{s3_key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{s3_key}"
