"""User data models for level cards."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class OnlineStatus(str, Enum):
    """Presence shown by the status indicator on the avatar."""
    ONLINE = "online"
    IDLE = "idle"
    DND = "dnd"  # Do not disturb
    OFFLINE = "offline"

    @property
    def color(self) -> int:
        """Fixed ARGB color bound to this status."""
        return STATUS_COLORS[self]


STATUS_COLORS = {
    OnlineStatus.ONLINE: 0xFF3BA55C,  # Green
    OnlineStatus.IDLE: 0xFFFAA61A,  # Yellow
    OnlineStatus.DND: 0xFFED4245,  # Red
    OnlineStatus.OFFLINE: 0xFF747F8D,  # Gray
}


class AvatarMode(str, Enum):
    """Where the avatar image comes from."""
    LOCAL = "local"  # Raw bytes supplied by the caller
    DOWNLOAD = "download"  # Fetched from a URL at render time


class UserData(BaseModel):
    """Everything shown about a user on a card.

    Exactly one avatar source must be given: ``avatar_bytes``, or
    ``avatar_url`` together with ``download_avatar=True``.
    """

    model_config = ConfigDict(frozen=True)

    username: str
    rank: int = Field(default=1, gt=0)
    level: int = Field(default=1, ge=0)

    # XP window for the current level
    min_xp: int = Field(default=0, ge=0)
    max_xp: int = 100
    current_xp: int = 0

    # Avatar source
    avatar_bytes: Optional[bytes] = None
    avatar_url: Optional[str] = None
    download_avatar: bool = False

    online_status: OnlineStatus = OnlineStatus.ONLINE
    show_status_indicator: bool = True

    # Extra stats used by the rich card
    discriminator: str = ""
    messages_count: int = Field(default=0, ge=0)
    voice_time: str = ""  # Preformatted, e.g. "127h"
    streak: int = Field(default=0, ge=0)

    @field_validator("username")
    @classmethod
    def username_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Username cannot be empty")
        return v

    @model_validator(mode="after")
    def check_xp_window(self) -> "UserData":
        if self.max_xp <= self.min_xp:
            raise ValueError(
                f"max_xp ({self.max_xp}) must be greater than min_xp ({self.min_xp})"
            )
        if not self.min_xp <= self.current_xp <= self.max_xp:
            raise ValueError(
                f"current_xp ({self.current_xp}) must be within "
                f"[{self.min_xp}, {self.max_xp}]"
            )
        return self

    @model_validator(mode="after")
    def check_avatar_source(self) -> "UserData":
        has_url = bool(self.avatar_url) and self.download_avatar
        has_bytes = self.avatar_bytes is not None
        if has_url and has_bytes:
            raise ValueError("Provide either avatar_bytes or avatar_url, not both")
        if not has_url and not has_bytes:
            raise ValueError(
                "Either avatar_bytes must be provided or avatar_url with download_avatar=True"
            )
        return self

    @property
    def avatar_mode(self) -> AvatarMode:
        """Avatar source state."""
        if self.avatar_url and self.download_avatar:
            return AvatarMode.DOWNLOAD
        return AvatarMode.LOCAL

    @property
    def xp_progress(self) -> float:
        """Fraction of the current level completed, in [0, 1]."""
        span = self.max_xp - self.min_xp
        if span <= 0:
            return 0.0
        return min(1.0, max(0.0, (self.current_xp - self.min_xp) / span))
