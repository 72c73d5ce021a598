# recipe_gallery/client/state.py
"""
Client view state for the gallery page.

The state is an immutable value; every user interaction or server answer is
an event, and `reduce(state, event)` returns the next state. Nothing here
performs I/O, so transitions are testable without any rendering layer.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence, Union

from recipe_gallery.app.domain.errors import UploadInProgressError
from recipe_gallery.app.schemas.recipe import RecipeRecord

NOTIFICATION_SECONDS = 3.0
UPLOAD_SUCCESS_MESSAGE = "File uploaded successfully!"


class ViewPhase(str, Enum):
    IDLE = "idle"
    AWAITING_UPLOAD = "awaitingUpload"
    NOTIFYING = "notifying"


@dataclass(frozen=True)
class GalleryState:
    image_urls: tuple[str, ...] = ()
    recipes: tuple[RecipeRecord, ...] = ()
    cursor: int = 0
    recipe_visible: bool = False
    phase: ViewPhase = ViewPhase.IDLE
    notification: Optional[str] = None
    notification_deadline: Optional[float] = None
    error: Optional[str] = None

    def __len__(self) -> int:
        return len(self.image_urls)

    @property
    def is_empty(self) -> bool:
        return not self.image_urls

    @property
    def current_image(self) -> Optional[str]:
        if self.is_empty:
            return None
        return self.image_urls[self.cursor]

    @property
    def current_recipe(self) -> Optional[RecipeRecord]:
        if self.is_empty:
            return None
        return self.recipes[self.cursor]

    @property
    def visible_recipe(self) -> Optional[RecipeRecord]:
        """The recipe shown in the panel, if the panel is open."""
        return self.current_recipe if self.recipe_visible else None


# Events


@dataclass(frozen=True)
class GalleryLoaded:
    image_urls: Sequence[str]
    recipes: Sequence[RecipeRecord]


@dataclass(frozen=True)
class GalleryLoadFailed:
    message: str = "Failed to load data"


@dataclass(frozen=True)
class Advance:
    pass


@dataclass(frozen=True)
class Retreat:
    pass


@dataclass(frozen=True)
class RevealRecipe:
    pass


@dataclass(frozen=True)
class UploadSubmitted:
    filename: Optional[str] = None


@dataclass(frozen=True)
class UploadSucceeded:
    url: str
    recipe: RecipeRecord
    at: float


@dataclass(frozen=True)
class UploadFailed:
    message: str = "Failed to upload file"


@dataclass(frozen=True)
class Tick:
    now: float


GalleryEvent = Union[
    GalleryLoaded,
    GalleryLoadFailed,
    Advance,
    Retreat,
    RevealRecipe,
    UploadSubmitted,
    UploadSucceeded,
    UploadFailed,
    Tick,
]


def _seed(state: GalleryState, event: GalleryLoaded) -> GalleryState:
    if len(event.image_urls) != len(event.recipes):
        raise ValueError(
            f"image_urls and recipes must have the same length "
            f"({len(event.image_urls)} != {len(event.recipes)})"
        )
    return replace(
        state,
        image_urls=tuple(event.image_urls),
        recipes=tuple(event.recipes),
        cursor=0,
        recipe_visible=False,
        error=None,
    )


def _move(state: GalleryState, step: int) -> GalleryState:
    if state.is_empty:
        return state
    length = len(state.image_urls)
    return replace(state, cursor=(state.cursor + step + length) % length, recipe_visible=False)


def _prepend(state: GalleryState, event: UploadSucceeded) -> GalleryState:
    # The cursor follows the image being viewed, which moves down by one.
    cursor = 0 if state.is_empty else state.cursor + 1
    return replace(
        state,
        image_urls=(event.url,) + state.image_urls,
        recipes=(event.recipe,) + state.recipes,
        cursor=cursor,
        phase=ViewPhase.NOTIFYING,
        notification=UPLOAD_SUCCESS_MESSAGE,
        notification_deadline=event.at + NOTIFICATION_SECONDS,
        error=None,
    )


def reduce(state: GalleryState, event: GalleryEvent) -> GalleryState:
    """
    Apply one event to the gallery state.

    Raises:
        UploadInProgressError: If an upload is submitted while another is in flight
        ValueError: If a loaded gallery has unequal image / recipe counts
        TypeError: For unknown events
    """
    if isinstance(event, GalleryLoaded):
        return _seed(state, event)
    if isinstance(event, GalleryLoadFailed):
        return replace(
            state,
            image_urls=(),
            recipes=(),
            cursor=0,
            recipe_visible=False,
            error=event.message,
        )
    if isinstance(event, Advance):
        return _move(state, 1)
    if isinstance(event, Retreat):
        return _move(state, -1)
    if isinstance(event, RevealRecipe):
        return replace(state, recipe_visible=True)
    if isinstance(event, UploadSubmitted):
        if state.phase is ViewPhase.AWAITING_UPLOAD:
            raise UploadInProgressError()
        return replace(
            state,
            phase=ViewPhase.AWAITING_UPLOAD,
            notification=None,
            notification_deadline=None,
            error=None,
        )
    if isinstance(event, UploadSucceeded):
        return _prepend(state, event)
    if isinstance(event, UploadFailed):
        return replace(
            state,
            phase=ViewPhase.IDLE,
            notification=None,
            notification_deadline=None,
            error=event.message,
        )
    if isinstance(event, Tick):
        if (
            state.phase is ViewPhase.NOTIFYING
            and state.notification_deadline is not None
            and event.now >= state.notification_deadline
        ):
            return replace(
                state,
                phase=ViewPhase.IDLE,
                notification=None,
                notification_deadline=None,
            )
        return state
    raise TypeError(f"Unknown gallery event: {event!r}")
