# recipe_gallery/app/services/gallery_service.py
"""
Gallery service.
Coordinates the object store and the recipe inference client for the read
path (list every image with its recipe) and the write path (upload one image
and describe it).
"""
from __future__ import annotations

import asyncio
import logging
from typing import BinaryIO, Optional, Union

from starlette.concurrency import run_in_threadpool

from recipe_gallery.app.config import settings
from recipe_gallery.app.domain.errors import BadRequestError
from recipe_gallery.app.domain.models import GalleryPayload, ObjectMetadata, UploadResult
from recipe_gallery.app.infra.storage.base import StorageProvider
from recipe_gallery.app.schemas.recipe import RecipeRecord
from recipe_gallery.services.errors import InferenceFailedError
from recipe_gallery.services.recipe_inference import RecipeInferenceClient

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class GalleryService:
    """
    Service behind the gallery endpoints.

    Responsibilities:
    - Read path: list eligible images and infer a recipe for each one
    - Write path: store an uploaded image and infer its recipe
    - Metadata lookup for a single stored object

    Nothing is retried. A stored upload whose inference fails stays in the
    bucket without a recipe; it will be described again on the next read.
    """

    def __init__(
        self,
        storage: StorageProvider,
        inference: RecipeInferenceClient,
        all_or_nothing: Optional[bool] = None,
        concurrency: Optional[int] = None,
    ):
        self._storage = storage
        self._inference = inference
        self.all_or_nothing = (
            settings.GALLERY_ALL_OR_NOTHING if all_or_nothing is None else all_or_nothing
        )
        self.concurrency = concurrency or settings.INFERENCE_CONCURRENCY

    async def load_gallery(self) -> GalleryPayload:
        """
        List every eligible image and fetch a fresh recipe for each.

        Returns:
            GalleryPayload with parallel image_urls / recipes

        Raises:
            StoreUnavailableError: If the listing fails
            InferenceFailedError: If any inference fails and all_or_nothing is set
        """
        image_urls = await run_in_threadpool(self._storage.list_eligible_images)
        if not image_urls:
            return GalleryPayload()

        semaphore = asyncio.Semaphore(self.concurrency)

        async def describe(url: str) -> RecipeRecord:
            async with semaphore:
                return await self._describe(url)

        results = await asyncio.gather(
            *(describe(url) for url in image_urls),
            return_exceptions=True,
        )

        kept_urls: list[str] = []
        recipes: list[RecipeRecord] = []
        for url, result in zip(image_urls, results):
            if isinstance(result, InferenceFailedError):
                if self.all_or_nothing:
                    raise result
                logger.warning("Dropping image without recipe: %s (%s)", url, result.reason)
                continue
            if isinstance(result, BaseException):
                raise result
            kept_urls.append(url)
            recipes.append(result)

        logger.info("Gallery loaded: images=%d, recipes=%d", len(image_urls), len(recipes))
        return GalleryPayload(image_urls=kept_urls, recipes=recipes)

    async def upload_image(
        self,
        filename: Optional[str],
        content_type: Optional[str],
        body: Union[bytes, BinaryIO, None],
    ) -> UploadResult:
        """
        Store an uploaded image and describe it.

        Args:
            filename: Original filename of the upload
            content_type: MIME type declared by the client
            body: File content

        Returns:
            UploadResult with the public URL and the recipe

        Raises:
            BadRequestError: If no file (or an empty one) was submitted
            UploadFailedError: If the store rejects the upload
            InferenceFailedError: If the stored image could not be described
        """
        if not filename or body is None or (isinstance(body, (bytes, bytearray)) and not body):
            raise BadRequestError("No file uploaded")

        object_key = self._storage.generate_object_key(filename)
        file_url = await run_in_threadpool(
            self._storage.store,
            body,
            object_key,
            content_type or DEFAULT_CONTENT_TYPE,
        )

        recipe = await self._describe(file_url)

        logger.info("Upload described: key=%s, title=%s", object_key, recipe.title)
        return UploadResult(url=file_url, recipe=recipe, object_key=self._storage.full_key(object_key))

    async def image_metadata(self, object_key: str) -> ObjectMetadata:
        return await run_in_threadpool(self._storage.head_metadata, object_key)

    async def _describe(self, image_url: str) -> RecipeRecord:
        """Fresh recipe for one image; any failure surfaces as InferenceFailedError."""
        try:
            return await run_in_threadpool(self._inference.infer, image_url, bypass_cache=True)
        except InferenceFailedError:
            raise
        except Exception as err:
            logger.exception("Unexpected inference error: url=%s", image_url)
            raise InferenceFailedError(image_url, str(err)) from err
