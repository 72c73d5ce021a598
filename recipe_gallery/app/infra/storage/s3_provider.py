# recipe_gallery/app/infra/storage/s3_provider.py
"""
AWS S3 storage provider implementation.
Images live under a fixed key prefix and are served through their public URL.
"""
from __future__ import annotations

import io
import logging
from typing import Any, BinaryIO, Optional, Union
from urllib.parse import quote, unquote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from recipe_gallery.app.config import settings
from recipe_gallery.app.domain.errors import (
    MetadataUnavailableError,
    StorageConfigurationError,
    StoreUnavailableError,
    UploadFailedError,
)
from recipe_gallery.app.domain.models import ObjectMetadata
from recipe_gallery.app.infra.storage.base import StorageProvider, is_eligible_image_key

logger = logging.getLogger(__name__)


class S3StorageProvider(StorageProvider):
    """
    AWS S3 storage provider using boto3.

    Settings used when arguments are omitted:
    - AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY: credentials
    - AWS_REGION: bucket region, also part of the public URL
    - AWS_S3_BUCKET: name of the bucket
    - IMAGE_PREFIX: key prefix holding the gallery (default "food/")
    """

    def __init__(
        self,
        bucket_name: Optional[str] = None,
        region: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        prefix: Optional[str] = None,
        client: Any = None,
    ):
        self.bucket_name = bucket_name or settings.AWS_S3_BUCKET
        self.region = region or settings.AWS_REGION
        self.access_key_id = access_key_id or settings.AWS_ACCESS_KEY_ID
        self.secret_access_key = (
            secret_access_key or settings.AWS_SECRET_ACCESS_KEY.get_secret_value()
        )
        self.prefix = settings.IMAGE_PREFIX if prefix is None else prefix

        missing = [
            name
            for name, value in (
                ("AWS_S3_BUCKET", self.bucket_name),
                ("AWS_REGION", self.region),
                ("AWS_ACCESS_KEY_ID", self.access_key_id),
                ("AWS_SECRET_ACCESS_KEY", self.secret_access_key),
            )
            if not value
        ]
        if missing and client is None:
            raise StorageConfigurationError(missing)

        self._client = client or boto3.client(
            "s3",
            region_name=self.region,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=Config(retries={"max_attempts": 1, "mode": "standard"}),
        )

        logger.info(
            "S3StorageProvider initialized: bucket=%s, region=%s, prefix=%s",
            self.bucket_name,
            self.region,
            self.prefix,
        )

    def _base_url(self) -> str:
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/"

    def public_url(self, object_key: str) -> str:
        return f"{self._base_url()}{quote(object_key, safe='/~')}"

    def object_key_from_url(self, url: str) -> str:
        """Inverse of public_url. Raises ValueError for URLs outside this bucket."""
        base = self._base_url()
        if not url.startswith(base):
            raise ValueError(f"Not a URL of bucket {self.bucket_name}: {url}")
        return unquote(url[len(base):])

    def list_eligible_images(self) -> list[str]:
        """List public URLs of every image object under the prefix."""
        urls: list[str] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=self.prefix):
                for item in page.get("Contents", []):
                    key = item.get("Key", "")
                    if not is_eligible_image_key(key):
                        continue
                    urls.append(self.public_url(key))
        except (ClientError, BotoCoreError) as e:
            logger.error("Error listing objects: %s", e)
            raise StoreUnavailableError(self.bucket_name, str(e)) from e

        logger.debug("Listed %d images under %s", len(urls), self.prefix)
        return urls

    def store(
        self,
        body: Union[bytes, BinaryIO],
        object_key: str,
        content_type: str,
    ) -> str:
        """Upload an object as public-read and return its public URL."""
        key = self.full_key(object_key)
        fileobj = io.BytesIO(body) if isinstance(body, (bytes, bytearray)) else body
        try:
            self._client.upload_fileobj(
                Fileobj=fileobj,
                Bucket=self.bucket_name,
                Key=key,
                ExtraArgs={
                    "ContentType": content_type,
                    "ACL": "public-read",
                },
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Error uploading to S3: key=%s, error=%s", key, e)
            raise UploadFailedError(key, str(e)) from e

        logger.info("Uploaded to S3: key=%s, content_type=%s", key, content_type)
        return self.public_url(key)

    def head_metadata(self, object_key: str) -> ObjectMetadata:
        """Get metadata for an object in S3."""
        try:
            response = self._client.head_object(
                Bucket=self.bucket_name,
                Key=object_key,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Error retrieving image metadata: key=%s, error=%s", object_key, e)
            raise MetadataUnavailableError(object_key, str(e)) from e

        return ObjectMetadata(
            content_type=response.get("ContentType"),
            content_length=response.get("ContentLength"),
            last_modified=response.get("LastModified"),
            etag=response.get("ETag"),
        )
