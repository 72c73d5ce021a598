# recipe_gallery/app/deps.py (singletons exposed as FastAPI dependencies)

from __future__ import annotations

from fastapi import Depends

from recipe_gallery.app.infra.storage.base import StorageProvider
from recipe_gallery.app.infra.storage.s3_provider import S3StorageProvider
from recipe_gallery.app.services.gallery_service import GalleryService
from recipe_gallery.services.recipe_inference import RecipeInferenceClient

_storage: StorageProvider | None = None
_inference: RecipeInferenceClient | None = None


def get_storage() -> StorageProvider:
    """Raises StorageConfigurationError when the bucket is not configured."""
    global _storage
    if _storage is None:
        _storage = S3StorageProvider()
    return _storage


def get_inference_client() -> RecipeInferenceClient:
    global _inference
    if _inference is None:
        _inference = RecipeInferenceClient()
    return _inference


def get_gallery_service(
    storage: StorageProvider = Depends(get_storage),
    inference: RecipeInferenceClient = Depends(get_inference_client),
) -> GalleryService:
    return GalleryService(storage=storage, inference=inference)
