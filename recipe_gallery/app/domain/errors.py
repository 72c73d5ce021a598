from __future__ import annotations


class GalleryError(Exception):
    pass


class BadRequestError(GalleryError):
    def __init__(self, message: str = "No file uploaded"):
        super().__init__(message)


class UploadInProgressError(GalleryError):
    def __init__(self, message: str = "An upload is already in progress"):
        super().__init__(message)


class StorageError(GalleryError):
    pass


class StorageConfigurationError(StorageError):
    def __init__(self, missing: list[str]):
        super().__init__(f"Missing storage configuration: {', '.join(missing)}")
        self.missing = missing


class StoreUnavailableError(StorageError):
    def __init__(self, bucket: str, reason: str = "Listing failed"):
        super().__init__(f"Failed to list objects in {bucket}: {reason}")
        self.bucket = bucket
        self.reason = reason


class UploadFailedError(StorageError):
    def __init__(self, object_key: str, reason: str = "Upload failed"):
        super().__init__(f"Failed to upload {object_key}: {reason}")
        self.object_key = object_key
        self.reason = reason


class MetadataUnavailableError(StorageError):
    def __init__(self, object_key: str, reason: str = "Head request failed"):
        super().__init__(f"Failed to read metadata for {object_key}: {reason}")
        self.object_key = object_key
        self.reason = reason
