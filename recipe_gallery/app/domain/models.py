# recipe_gallery/app/domain/models.py
"""
Domain models for the image gallery.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from recipe_gallery.app.schemas.recipe import RecipeRecord


@dataclass
class ObjectMetadata:
    """Metadata of a stored object, as returned by a HEAD request."""
    content_type: Optional[str] = None
    content_length: Optional[int] = None
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None


@dataclass
class GalleryPayload:
    """
    Result of the read path.
    image_urls[i] and recipes[i] always describe the same image.
    """
    image_urls: list[str] = field(default_factory=list)
    recipes: list[RecipeRecord] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.image_urls) != len(self.recipes):
            raise ValueError(
                f"image_urls and recipes must have the same length "
                f"({len(self.image_urls)} != {len(self.recipes)})"
            )

    def __len__(self) -> int:
        return len(self.image_urls)


@dataclass
class UploadResult:
    """Result of the write path: the stored image and its recipe."""
    url: str
    recipe: RecipeRecord
    object_key: Optional[str] = None
