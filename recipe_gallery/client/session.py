# recipe_gallery/client/session.py
"""
Client session for the gallery HTTP API.
Performs the requests and feeds their outcome to the state reducer.
"""
from __future__ import annotations

import logging
import mimetypes
import threading
import time
from pathlib import Path
from typing import Callable, Optional

import httpx
from pydantic import ValidationError

from recipe_gallery.app.schemas.gallery import GalleryResponse, UploadResponse
from recipe_gallery.client.state import (
    Advance,
    GalleryEvent,
    GalleryLoaded,
    GalleryLoadFailed,
    GalleryState,
    RevealRecipe,
    Retreat,
    Tick,
    UploadFailed,
    UploadSubmitted,
    UploadSucceeded,
    reduce,
)

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        payload = response.json()
    except ValueError:
        return default
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return payload["error"]
    return default


class GallerySession:
    """
    One page session against the gallery API.

    The session owns the GalleryState. Requests are never retried: a failure
    is recorded in the state and left to the user.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        http_client: Optional[httpx.Client] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._http = http_client or httpx.Client(base_url=base_url, timeout=None)
        self._clock = clock
        self._lock = threading.Lock()
        self.state = GalleryState()

    def dispatch(self, event: GalleryEvent) -> GalleryState:
        with self._lock:
            self.state = reduce(self.state, event)
            return self.state

    def load(self) -> GalleryState:
        try:
            response = self._http.get("/gallery")
        except httpx.HTTPError as e:
            logger.error("Gallery request failed: %s", e)
            return self.dispatch(GalleryLoadFailed())

        if response.status_code != 200:
            return self.dispatch(GalleryLoadFailed(_error_message(response, "Failed to load data")))

        try:
            payload = GalleryResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error("Malformed gallery response: %s", e)
            return self.dispatch(GalleryLoadFailed())

        return self.dispatch(GalleryLoaded(payload.imageUrls, payload.recipeData))

    def upload(self, path: Path) -> GalleryState:
        """
        Upload one image file.

        Raises:
            UploadInProgressError: If another upload has not finished yet
        """
        self.dispatch(UploadSubmitted(filename=path.name))

        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        try:
            with path.open("rb") as fh:
                response = self._http.post(
                    "/gallery",
                    files={"file": (path.name, fh, content_type)},
                )
        except (OSError, httpx.HTTPError) as e:
            logger.error("Upload request failed: %s", e)
            return self.dispatch(UploadFailed())

        if response.status_code != 200:
            return self.dispatch(UploadFailed(_error_message(response, "Failed to upload file")))

        try:
            payload = UploadResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error("Malformed upload response: %s", e)
            return self.dispatch(UploadFailed())

        return self.dispatch(UploadSucceeded(payload.fileUrl, payload.recipeData, at=self._clock()))

    def advance(self) -> GalleryState:
        return self.dispatch(Advance())

    def retreat(self) -> GalleryState:
        return self.dispatch(Retreat())

    def reveal_recipe(self) -> GalleryState:
        return self.dispatch(RevealRecipe())

    def tick(self) -> GalleryState:
        return self.dispatch(Tick(self._clock()))

    def close(self) -> None:
        self._http.close()
