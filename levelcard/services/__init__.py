"""Services for levelcard."""

from .avatar_fetcher import AvatarFetcher, AvatarDownloadError
from .card_service import LevelCardService, draw_level_card

__all__ = [
    "AvatarFetcher",
    "AvatarDownloadError",
    "LevelCardService",
    "draw_level_card",
]
