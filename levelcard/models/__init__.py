"""Data models for level cards."""

from .user import AvatarMode, OnlineStatus, STATUS_COLORS, UserData
from .card import CardConfiguration, ColorConfig, LayoutConfig

__all__ = [
    "AvatarMode",
    "OnlineStatus",
    "STATUS_COLORS",
    "UserData",
    "CardConfiguration",
    "ColorConfig",
    "LayoutConfig",
]
