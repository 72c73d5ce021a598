from __future__ import annotations

from recipe_gallery.app.domain.errors import (
    GalleryError,
    BadRequestError,
    UploadInProgressError,
    StorageError,
    StorageConfigurationError,
    StoreUnavailableError,
    UploadFailedError,
    MetadataUnavailableError,
)


class TestGalleryError:
    def test_base_exception(self) -> None:
        error = GalleryError("Base error")
        assert str(error) == "Base error"
        assert isinstance(error, Exception)


class TestBadRequestError:
    def test_default_message(self) -> None:
        error = BadRequestError()
        assert str(error) == "No file uploaded"


class TestUploadInProgressError:
    def test_default_message(self) -> None:
        error = UploadInProgressError()
        assert "in progress" in str(error)


class TestStorageConfigurationError:
    def test_lists_missing_settings(self) -> None:
        error = StorageConfigurationError(["AWS_S3_BUCKET", "AWS_REGION"])
        assert "AWS_S3_BUCKET" in str(error)
        assert "AWS_REGION" in str(error)
        assert error.missing == ["AWS_S3_BUCKET", "AWS_REGION"]


class TestStoreUnavailableError:
    def test_includes_bucket_and_reason(self) -> None:
        error = StoreUnavailableError("my-bucket", "AccessDenied")
        assert "my-bucket" in str(error)
        assert "AccessDenied" in str(error)
        assert error.bucket == "my-bucket"
        assert error.reason == "AccessDenied"


class TestUploadFailedError:
    def test_includes_object_key_and_reason(self) -> None:
        error = UploadFailedError("food/uploads/1-cake.jpg", "Connection reset")
        assert "food/uploads/1-cake.jpg" in str(error)
        assert "Connection reset" in str(error)
        assert error.object_key == "food/uploads/1-cake.jpg"
        assert error.reason == "Connection reset"


class TestMetadataUnavailableError:
    def test_includes_object_key(self) -> None:
        error = MetadataUnavailableError("food/a.png", "Not Found")
        assert "food/a.png" in str(error)
        assert error.object_key == "food/a.png"
        assert error.reason == "Not Found"


class TestExceptionHierarchy:
    def test_all_domain_errors_inherit_from_gallery_error(self) -> None:
        assert issubclass(BadRequestError, GalleryError)
        assert issubclass(UploadInProgressError, GalleryError)
        assert issubclass(StorageError, GalleryError)
        assert issubclass(StorageConfigurationError, StorageError)
        assert issubclass(StoreUnavailableError, StorageError)
        assert issubclass(UploadFailedError, StorageError)
        assert issubclass(MetadataUnavailableError, StorageError)
