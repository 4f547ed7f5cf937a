"""Avatar acquisition and drawing with placeholder fallback."""

import io
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from PIL import Image
from loguru import logger

from levelcard.config import Settings, settings as default_settings
from levelcard.models.user import AvatarMode, OnlineStatus, UserData
from levelcard.services.avatar_fetcher import AvatarDownloadError, AvatarFetcher
from levelcard.workers.drawing import (
    RGBA,
    apply_mask,
    circle_mask,
    fill_circle,
    paste_layer,
    stroke_circle,
)
from levelcard.workers.status_indicator import draw_status_indicator

PLACEHOLDER_COLOR = (0x55, 0x55, 0x55, 255)
AVATAR_RING_RATIO = 0.035  # Ring stroke width relative to card height
AVATAR_RING_GAP = 2  # Ring radius beyond the avatar edge


class Fetcher(Protocol):
    def fetch(self, url: str) -> bytes: ...


class AvatarOutcome(str, Enum):
    """What ended up in the avatar slot."""
    DRAWN = "drawn"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class AvatarResult:
    outcome: AvatarOutcome
    reason: Optional[str] = None  # Why the placeholder was used

    @property
    def success(self) -> bool:
        return self.outcome == AvatarOutcome.DRAWN


def ring_width_for(card_height: int) -> float:
    """Avatar ring stroke width for a card of ``card_height``."""
    return max(1.0, card_height * AVATAR_RING_RATIO)


class AvatarResolver:
    """Resolves avatar bytes (local or downloaded) and draws them.

    Nothing here raises past ``draw``: failures become a flat placeholder
    circle and are reported through the returned AvatarResult.
    """

    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize the resolver.

        Args:
            fetcher: Download source for URL avatars; one is created when omitted
            settings: Download limits and strictness; defaults to the module settings
        """
        self.settings = settings or default_settings
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or AvatarFetcher(self.settings)

    def close(self) -> None:
        """Close the fetcher if this resolver created it."""
        if self._owns_fetcher:
            self.fetcher.close()

    def __enter__(self) -> "AvatarResolver":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def acquire(self, user: UserData) -> Optional[bytes]:
        """Return candidate avatar bytes for ``user``, or None.

        Raises:
            AvatarDownloadError: Only in strict mode, when the download fails
        """
        if user.avatar_mode == AvatarMode.LOCAL:
            return user.avatar_bytes

        try:
            return self.fetcher.fetch(user.avatar_url)
        except AvatarDownloadError as e:
            if self.settings.avatar_download_strict:
                logger.error(f"Failed to download avatar from URL: {user.avatar_url}: {e}")
                raise
            logger.warning(f"Avatar download failed, using placeholder: {e}")
            return None

    @staticmethod
    def decode(data: Optional[bytes]) -> Optional[Image.Image]:
        """Decode image bytes into RGBA, or None if unusable."""
        if not data:
            return None
        try:
            img = Image.open(io.BytesIO(data))
            img = img.convert("RGBA")
        except Exception as e:
            logger.warning(f"Could not decode avatar image: {e}")
            return None
        if img.width <= 0 or img.height <= 0:
            return None
        return img

    def draw(
        self,
        image: Image.Image,
        data: Optional[bytes],
        x: float,
        y: float,
        size: float,
        ring_color: RGBA,
        ring_width: float,
        status: Optional[OnlineStatus] = None,
        show_status: bool = False,
    ) -> AvatarResult:
        """Draw the avatar clipped to a circle at (x, y).

        Args:
            image: Card surface
            data: Encoded avatar bytes, or None
            x: Avatar top-left x
            y: Avatar top-left y
            size: Avatar diameter
            ring_color: Color of the ring around the avatar
            ring_width: Stroke width of the ring
            status: Online status for the indicator
            show_status: Whether to draw the indicator

        Returns:
            AvatarResult describing whether the real avatar was drawn
        """
        size = max(1, round(size))
        avatar = self.decode(data)
        if avatar is None:
            reason = "no avatar bytes" if not data else "avatar bytes could not be decoded"
            return self._placeholder(image, x, y, size, ring_color, ring_width, status, show_status, reason)

        try:
            avatar = avatar.resize((size, size), Image.Resampling.LANCZOS)
            # Ring first; the avatar covers its inner edge
            stroke_circle(image, x + size / 2, y + size / 2, size / 2 + AVATAR_RING_GAP, ring_width, ring_color)
            paste_layer(image, apply_mask(avatar, circle_mask(size)), x, y)
            if status is not None and show_status:
                draw_status_indicator(image, x, y, size, status)
        except Exception as e:
            logger.warning(f"Failed to draw avatar, using placeholder: {e}")
            return self._placeholder(image, x, y, size, ring_color, ring_width, status, show_status, str(e))

        return AvatarResult(AvatarOutcome.DRAWN)

    def _placeholder(
        self,
        image: Image.Image,
        x: float,
        y: float,
        size: float,
        ring_color: RGBA,
        ring_width: float,
        status: Optional[OnlineStatus],
        show_status: bool,
        reason: str,
    ) -> AvatarResult:
        cx, cy = x + size / 2, y + size / 2
        try:
            stroke_circle(image, cx, cy, size / 2 + AVATAR_RING_GAP, ring_width, ring_color)
            fill_circle(image, cx, cy, size / 2, PLACEHOLDER_COLOR)
            if status is not None and show_status:
                draw_status_indicator(image, x, y, size, status)
        except Exception as e:
            logger.error(f"Failed to draw placeholder avatar: {e}")
        return AvatarResult(AvatarOutcome.PLACEHOLDER, reason)
