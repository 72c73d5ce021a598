from __future__ import annotations

import logging
import mimetypes
import threading
from enum import Enum
from typing import Optional

import httpx
from google.genai import errors as genai_errors
from pydantic import ValidationError

from recipe_gallery.app.config import settings
from recipe_gallery.app.schemas.recipe import InferenceServiceConfig, RecipeRecord
from recipe_gallery.services.errors import (
    ImageFetchError,
    InferenceFailedError,
    RateLimitedError,
)
from recipe_gallery.services.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

RECIPE_PROMPT = "Describe the recipe of the image"
_DEFAULT_MIME_TYPE = "image/jpeg"


class CachePolicy(str, Enum):
    BUST = "Bust"
    INDIVIDUAL = "Individual"


def _is_rate_limited_error(exc: Exception) -> bool:
    status_code = getattr(exc, "code", None) or getattr(exc, "status_code", None)
    if status_code == 429:
        return True
    return "RESOURCE_EXHAUSTED" in str(exc)


class RecipeInferenceClient:
    """
    Turns an image URL into a RecipeRecord.

    The image is downloaded, sent inline to Gemini together with the fixed
    prompt, and the structured answer is validated against RecipeRecord.
    Answers are kept per image URL only under CachePolicy.INDIVIDUAL.
    CachePolicy.BUST always asks the model again, keeps nothing and drops
    any answer kept earlier for that URL.
    """

    def __init__(
        self,
        gemini: Optional[GeminiClient] = None,
        http_client: Optional[httpx.Client] = None,
        service_config: Optional[InferenceServiceConfig] = None,
    ) -> None:
        self.service_config = service_config or InferenceServiceConfig(model=settings.GEMINI_MODEL)
        self._gemini = gemini or GeminiClient(
            api_key=settings.GEMINI_API_KEY.get_secret_value(),
            model_name=self.service_config.model,
        )
        self._http = http_client or httpx.Client(
            timeout=settings.IMAGE_FETCH_TIMEOUT_SECONDS,
            follow_redirects=True,
        )
        self._cache: dict[str, RecipeRecord] = {}
        self._cache_lock = threading.Lock()

    def infer(self, image_url: str, bypass_cache: bool = True) -> RecipeRecord:
        policy = CachePolicy.BUST if bypass_cache else CachePolicy(self.service_config.cache)

        if policy is CachePolicy.INDIVIDUAL:
            with self._cache_lock:
                cached = self._cache.get(image_url)
            if cached is not None:
                logger.debug("Recipe cache hit: %s", image_url)
                return cached

        recipe = self._query_model(image_url)

        with self._cache_lock:
            if policy is CachePolicy.INDIVIDUAL:
                self._cache[image_url] = recipe
            else:
                self._cache.pop(image_url, None)
        return recipe

    def _fetch_image(self, image_url: str) -> tuple[bytes, str]:
        try:
            response = self._http.get(image_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ImageFetchError(image_url, str(e)) from e

        mime_type = response.headers.get("content-type", "").split(";")[0].strip()
        if not mime_type.startswith("image/"):
            guessed, _ = mimetypes.guess_type(image_url)
            mime_type = guessed or _DEFAULT_MIME_TYPE
        return response.content, mime_type

    def _query_model(self, image_url: str) -> RecipeRecord:
        try:
            image_bytes, mime_type = self._fetch_image(image_url)
            raw = self._gemini.generate_structured(
                prompt=RECIPE_PROMPT,
                image_bytes=image_bytes,
                mime_type=mime_type,
                response_schema=RecipeRecord,
            )
            if not raw:
                raise InferenceFailedError(image_url, "Model response did not include text content")
            return RecipeRecord.model_validate_json(raw)
        except InferenceFailedError:
            raise
        except genai_errors.APIError as err:
            logger.error("Error querying Gemini: url=%s, error=%s", image_url, err)
            if _is_rate_limited_error(err):
                raise RateLimitedError(image_url, "Gemini rate limit reached") from err
            raise InferenceFailedError(image_url, str(err)) from err
        except (ImageFetchError, ValidationError, httpx.HTTPError) as err:
            logger.error("Error processing the image: url=%s, error=%s", image_url, err)
            raise InferenceFailedError(image_url, str(err)) from err
        except Exception as err:
            logger.exception("Unexpected inference error: url=%s", image_url)
            raise InferenceFailedError(image_url, str(err)) from err
