"""Configuration settings for levelcard.

Values are read from the environment (prefix ``LEVELCARD_``) or a ``.env`` file.
"""

import json
from pathlib import Path
from typing import List, Optional, Union
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Library settings."""

    # Avatar download settings
    avatar_connect_timeout: float = 5.0  # seconds
    avatar_read_timeout: float = 5.0  # seconds
    avatar_max_bytes: int = 10 * 1024 * 1024  # 10MB hard cap, enforced while streaming
    avatar_user_agent: str = "LevelCardLib/1.0"

    # When True a failed download aborts the render instead of drawing a placeholder
    avatar_download_strict: bool = False

    # Font settings
    fonts_dir: Optional[Path] = None  # Extra directory searched before system fonts
    font_search_dirs: List[str] = [
        "/usr/share/fonts",
        "/usr/local/share/fonts",
        "~/.fonts",
        "~/.local/share/fonts",
        "/System/Library/Fonts",
        "/Library/Fonts",
        "C:/Windows/Fonts",
    ]
    allow_builtin_font: bool = True  # Fall back to Pillow's bundled scalable face

    @property
    def avatar_timeout(self) -> dict:
        """Timeout keyword arguments for httpx."""
        return {
            "connect": self.avatar_connect_timeout,
            "read": self.avatar_read_timeout,
            "write": self.avatar_read_timeout,
            "pool": self.avatar_connect_timeout,
        }

    @property
    def font_directories(self) -> List[Path]:
        """Font directories to scan, in priority order."""
        dirs = [Path(d).expanduser() for d in self.font_search_dirs]
        if self.fonts_dir:
            dirs.insert(0, Path(self.fonts_dir).expanduser())
        return dirs

    @field_validator("font_search_dirs", mode="before")
    @classmethod
    def parse_font_search_dirs(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse font directories from JSON string or list."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                # If not valid JSON, treat as comma-separated list
                return [d.strip() for d in v.split(",") if d.strip()]
        return v

    class Config:
        env_prefix = "LEVELCARD_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
