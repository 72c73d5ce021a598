from __future__ import annotations

import asyncio
import threading
import time

import pytest
from datetime import datetime, timezone

from recipe_gallery.app.domain.errors import (
    BadRequestError,
    MetadataUnavailableError,
    StoreUnavailableError,
    UploadFailedError,
)
from recipe_gallery.app.domain.models import ObjectMetadata
from recipe_gallery.app.infra.storage.base import StorageProvider, is_eligible_image_key
from recipe_gallery.app.schemas.recipe import RecipeRecord
from recipe_gallery.app.services.gallery_service import GalleryService
from recipe_gallery.services.errors import InferenceFailedError

BASE_URL = "https://bucket.s3.us-east-1.amazonaws.com"


def _recipe(title: str) -> RecipeRecord:
    return RecipeRecord(
        title=title,
        ingredients=["egg"],
        instructions=["Cook"],
        preparationTime=5,
        cookingTime=10,
        servings=1,
        cuisine="Other",
    )


class StorageProviderStub(StorageProvider):
    def __init__(self, keys: list[str] | None = None) -> None:
        self.prefix = "food/"
        self.objects: dict[str, tuple[bytes, str]] = {key: (b"", "image/png") for key in keys or []}
        self.store_calls: list[tuple[str, str]] = []
        self.fail_listing = False
        self.fail_upload = False

    def public_url(self, object_key: str) -> str:
        return f"{BASE_URL}/{object_key}"

    def list_eligible_images(self) -> list[str]:
        if self.fail_listing:
            raise StoreUnavailableError("bucket", "AccessDenied")
        return [self.public_url(k) for k in self.objects if is_eligible_image_key(k)]

    def store(self, body, object_key: str, content_type: str) -> str:
        key = self.full_key(object_key)
        self.store_calls.append((key, content_type))
        if self.fail_upload:
            raise UploadFailedError(key, "Connection reset")
        self.objects[key] = (body, content_type)
        return self.public_url(key)

    def head_metadata(self, object_key: str) -> ObjectMetadata:
        if object_key not in self.objects:
            raise MetadataUnavailableError(object_key, "Not Found")
        body, content_type = self.objects[object_key]
        return ObjectMetadata(
            content_type=content_type,
            content_length=len(body),
            last_modified=datetime(2024, 1, 15, tzinfo=timezone.utc),
            etag='"stub"',
        )


class InferenceStub:
    def __init__(self, failing: set[str] | None = None, delay: float = 0.0) -> None:
        self.failing = failing or set()
        self.delay = delay
        self.calls: list[tuple[str, bool]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def infer(self, image_url: str, bypass_cache: bool = True) -> RecipeRecord:
        with self._lock:
            self.calls.append((image_url, bypass_cache))
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            if image_url in self.failing:
                raise InferenceFailedError(image_url)
            return _recipe(image_url.rsplit("/", 1)[-1])
        finally:
            with self._lock:
                self.in_flight -= 1


class BrokenInferenceStub(InferenceStub):
    def infer(self, image_url: str, bypass_cache: bool = True) -> RecipeRecord:
        self.calls.append((image_url, bypass_cache))
        raise RuntimeError("connection reset")


def _service(storage: StorageProviderStub, inference: InferenceStub, **kwargs) -> GalleryService:
    return GalleryService(storage=storage, inference=inference, **kwargs)


class TestLoadGallery:
    def test_returns_parallel_lists(self) -> None:
        storage = StorageProviderStub(["food/a.png", "food/b.jpg"])
        inference = InferenceStub()

        payload = asyncio.run(_service(storage, inference).load_gallery())

        assert payload.image_urls == [f"{BASE_URL}/food/a.png", f"{BASE_URL}/food/b.jpg"]
        assert [r.title for r in payload.recipes] == ["a.png", "b.jpg"]

    def test_every_inference_bypasses_cache(self) -> None:
        storage = StorageProviderStub(["food/a.png", "food/b.jpg"])
        inference = InferenceStub()

        asyncio.run(_service(storage, inference).load_gallery())

        assert sorted(inference.calls) == [
            (f"{BASE_URL}/food/a.png", True),
            (f"{BASE_URL}/food/b.jpg", True),
        ]

    def test_only_eligible_images_are_described(self) -> None:
        storage = StorageProviderStub(["food/a.png", "food/b.txt", "food/sub/"])
        inference = InferenceStub()

        payload = asyncio.run(_service(storage, inference).load_gallery())

        assert payload.image_urls == [f"{BASE_URL}/food/a.png"]
        assert len(inference.calls) == 1

    def test_empty_bucket(self) -> None:
        inference = InferenceStub()
        payload = asyncio.run(_service(StorageProviderStub(), inference).load_gallery())

        assert payload.image_urls == []
        assert payload.recipes == []
        assert inference.calls == []

    def test_listing_failure_propagates(self) -> None:
        storage = StorageProviderStub(["food/a.png"])
        storage.fail_listing = True
        inference = InferenceStub()

        with pytest.raises(StoreUnavailableError):
            asyncio.run(_service(storage, inference).load_gallery())
        assert inference.calls == []

    def test_one_failed_inference_fails_everything(self) -> None:
        storage = StorageProviderStub(["food/1.png", "food/2.png", "food/3.png"])
        inference = InferenceStub(failing={f"{BASE_URL}/food/2.png"})

        with pytest.raises(InferenceFailedError) as exc_info:
            asyncio.run(_service(storage, inference, all_or_nothing=True).load_gallery())

        assert exc_info.value.image_url == f"{BASE_URL}/food/2.png"
        assert len(inference.calls) == 3

    def test_partial_policy_drops_failed_images_from_both_lists(self) -> None:
        storage = StorageProviderStub(["food/1.png", "food/2.png", "food/3.png"])
        inference = InferenceStub(failing={f"{BASE_URL}/food/2.png"})

        payload = asyncio.run(_service(storage, inference, all_or_nothing=False).load_gallery())

        assert payload.image_urls == [f"{BASE_URL}/food/1.png", f"{BASE_URL}/food/3.png"]
        assert [r.title for r in payload.recipes] == ["1.png", "3.png"]

    def test_unexpected_inference_error_becomes_inference_failed(self) -> None:
        storage = StorageProviderStub(["food/a.png"])

        with pytest.raises(InferenceFailedError) as exc_info:
            asyncio.run(_service(storage, BrokenInferenceStub()).load_gallery())

        assert exc_info.value.image_url == f"{BASE_URL}/food/a.png"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_concurrency_is_bounded(self) -> None:
        storage = StorageProviderStub([f"food/{i}.png" for i in range(6)])
        inference = InferenceStub(delay=0.05)

        asyncio.run(_service(storage, inference, concurrency=2).load_gallery())

        assert len(inference.calls) == 6
        assert inference.max_in_flight <= 2


class TestUploadImage:
    def test_stores_and_describes(self) -> None:
        storage = StorageProviderStub()
        inference = InferenceStub()

        result = asyncio.run(_service(storage, inference).upload_image("cake.jpg", "image/jpeg", b"jpeg-bytes"))

        key, content_type = storage.store_calls[0]
        assert key.startswith("food/uploads/")
        assert key.endswith("-cake.jpg")
        assert content_type == "image/jpeg"
        assert result.url == f"{BASE_URL}/{key}"
        assert result.object_key == key
        assert result.recipe.title == key.rsplit("/", 1)[-1]
        assert inference.calls == [(result.url, True)]

    def test_stored_object_keeps_declared_content_type(self) -> None:
        storage = StorageProviderStub()
        service = _service(storage, InferenceStub())

        result = asyncio.run(service.upload_image("cake.png", "image/png", b"png-bytes"))
        metadata = asyncio.run(service.image_metadata(result.object_key))

        assert metadata.content_type == "image/png"
        assert metadata.content_length == len(b"png-bytes")

    def test_missing_content_type_defaults(self) -> None:
        storage = StorageProviderStub()
        asyncio.run(_service(storage, InferenceStub()).upload_image("cake.jpg", None, b"x"))
        assert storage.store_calls[0][1] == "application/octet-stream"

    @pytest.mark.parametrize("filename,body", [(None, b"x"), ("", b"x"), ("cake.jpg", b""), ("cake.jpg", None)])
    def test_missing_file_is_rejected_before_store(self, filename, body) -> None:
        storage = StorageProviderStub()
        inference = InferenceStub()

        with pytest.raises(BadRequestError) as exc_info:
            asyncio.run(_service(storage, inference).upload_image(filename, "image/jpeg", body))

        assert str(exc_info.value) == "No file uploaded"
        assert storage.store_calls == []
        assert inference.calls == []

    def test_upload_failure_skips_inference(self) -> None:
        storage = StorageProviderStub()
        storage.fail_upload = True
        inference = InferenceStub()

        with pytest.raises(UploadFailedError):
            asyncio.run(_service(storage, inference).upload_image("cake.jpg", "image/jpeg", b"x"))
        assert inference.calls == []

    def test_failed_inference_leaves_object_stored(self) -> None:
        storage = StorageProviderStub()
        failing = InferenceStub()
        failing.failing = _AnyCakeUrl()

        with pytest.raises(InferenceFailedError):
            asyncio.run(_service(storage, failing).upload_image("cake.jpg", "image/jpeg", b"x"))

        payload = asyncio.run(_service(storage, InferenceStub()).load_gallery())
        assert len(payload.image_urls) == 1
        assert payload.image_urls[0].endswith("-cake.jpg")

    def test_unexpected_inference_error_becomes_inference_failed(self) -> None:
        storage = StorageProviderStub()

        with pytest.raises(InferenceFailedError):
            asyncio.run(_service(storage, BrokenInferenceStub()).upload_image("cake.jpg", "image/jpeg", b"x"))
        assert len(storage.store_calls) == 1


class _AnyCakeUrl(set):
    def __contains__(self, item: object) -> bool:
        return isinstance(item, str) and item.endswith("cake.jpg")


class TestImageMetadata:
    def test_missing_object(self) -> None:
        with pytest.raises(MetadataUnavailableError):
            asyncio.run(_service(StorageProviderStub(), InferenceStub()).image_metadata("food/nope.png"))
