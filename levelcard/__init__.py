"""levelcard: rank card images for chat communities."""

__version__ = "1.0.0"

from .config import Settings, settings
from .models import (
    AvatarMode,
    CardConfiguration,
    ColorConfig,
    LayoutConfig,
    OnlineStatus,
    UserData,
)
from .services import AvatarDownloadError, AvatarFetcher, LevelCardService, draw_level_card
from .workers import (
    AvatarResult,
    CardRenderer,
    EncodingError,
    FontResolutionError,
    OutputFormat,
    RenderedCard,
    RichCardRenderer,
)

__all__ = [
    "Settings",
    "settings",
    "AvatarMode",
    "CardConfiguration",
    "ColorConfig",
    "LayoutConfig",
    "OnlineStatus",
    "UserData",
    "AvatarDownloadError",
    "AvatarFetcher",
    "LevelCardService",
    "draw_level_card",
    "AvatarResult",
    "CardRenderer",
    "EncodingError",
    "FontResolutionError",
    "OutputFormat",
    "RenderedCard",
    "RichCardRenderer",
]
