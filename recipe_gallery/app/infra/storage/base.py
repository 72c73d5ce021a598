# recipe_gallery/app/infra/storage/base.py
"""
Abstract base class for storage providers.
This interface allows swapping the object store backend (S3, R2, GCS, etc.)
"""
from __future__ import annotations

import re
import threading
import time
from abc import ABC, abstractmethod
from typing import BinaryIO, Union

from recipe_gallery.app.domain.models import ObjectMetadata

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp")

_key_lock = threading.Lock()
_last_key_ms = 0


def is_eligible_image_key(key: str) -> bool:
    """Folder markers and non-image objects are not part of the gallery."""
    if not key or key.endswith("/"):
        return False
    return key.lower().endswith(IMAGE_EXTENSIONS)


def _next_timestamp_ms() -> int:
    global _last_key_ms
    with _key_lock:
        now_ms = int(time.time() * 1000)
        _last_key_ms = max(now_ms, _last_key_ms + 1)
        return _last_key_ms


class StorageProvider(ABC):
    """
    Abstract interface for the gallery's object store operations.

    Every key handled here is relative to `prefix`; implementations are
    responsible for joining the two.

    Implementations:
    - S3StorageProvider: AWS S3 via boto3
    """

    prefix: str = "food/"

    @abstractmethod
    def list_eligible_images(self) -> list[str]:
        """
        List the public URLs of every image stored under the prefix.

        Folder markers (keys ending in "/") and keys without an image
        extension are skipped. Order is the order returned by the store.

        Returns:
            List of public image URLs

        Raises:
            StoreUnavailableError: If the listing call fails
        """
        pass

    @abstractmethod
    def store(
        self,
        body: Union[bytes, BinaryIO],
        object_key: str,
        content_type: str,
    ) -> str:
        """
        Upload an object under the prefix and make it publicly readable.

        Args:
            body: Raw file content
            object_key: Key relative to the prefix (see generate_object_key)
            content_type: MIME type of the content (e.g., "image/png")

        Returns:
            The public URL of the stored object

        Raises:
            UploadFailedError: If the transfer fails
        """
        pass

    @abstractmethod
    def head_metadata(self, object_key: str) -> ObjectMetadata:
        """
        Look up the metadata of a single object.

        Args:
            object_key: Full key of the object in the bucket

        Returns:
            ObjectMetadata with content type, length, last modified and etag

        Raises:
            MetadataUnavailableError: If the lookup fails
        """
        pass

    @abstractmethod
    def public_url(self, object_key: str) -> str:
        """Derive the public URL of a full object key."""
        pass

    def full_key(self, object_key: str) -> str:
        return f"{self.prefix}{object_key}"

    def generate_object_key(self, filename: str, folder: str = "uploads") -> str:
        """
        Generate a collision-resistant key for an uploaded file.

        Format: {folder}/{epoch_millis}-{filename}

        The timestamp is strictly increasing within the process, so two
        uploads of the same file never share a key.

        Args:
            filename: Original filename
            folder: Sub-folder below the prefix (default: "uploads")

        Returns:
            The generated key, relative to the prefix
        """
        safe_filename = re.sub(r"[^a-zA-Z0-9._-]", "_", filename.rsplit("/", 1)[-1])
        return f"{folder}/{_next_timestamp_ms()}-{safe_filename}"
