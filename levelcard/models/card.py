"""Card configuration models: dimensions, layout overrides and colors."""

from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field


class LayoutConfig(BaseModel):
    """Per-element position overrides, in absolute pixels.

    Any field left as None falls back to the CardConfiguration default.
    Text y values are baselines.
    """

    model_config = ConfigDict(frozen=True)

    avatar_x: Optional[int] = None
    avatar_y: Optional[int] = None  # None = centered vertically

    username_x: Optional[int] = None
    username_y: Optional[int] = None

    rank_level_x: Optional[int] = None
    rank_level_y: Optional[int] = None

    xp_text_x: Optional[int] = None
    xp_text_y: Optional[int] = None

    time_text_x: Optional[int] = None
    time_text_y: Optional[int] = None

    progress_bar_x: Optional[int] = None
    progress_bar_y: Optional[int] = None
    progress_bar_right_margin: Optional[int] = None

    @classmethod
    def from_offsets(
        cls,
        base: "CardConfiguration",
        avatar: Optional[Tuple[int, int]] = None,
        username: Optional[Tuple[int, int]] = None,
        rank_level: Optional[Tuple[int, int]] = None,
        xp_text: Optional[Tuple[int, int]] = None,
        time_text: Optional[Tuple[int, int]] = None,
        progress_bar: Optional[Tuple[int, int, int]] = None,
    ) -> "LayoutConfig":
        """Build a layout from deltas relative to ``base``'s default positions.

        Each delta resolves to ``default + delta`` here, so the renderer only
        ever sees absolute pixels. Elements without a delta keep the defaults.

        Args:
            base: Configuration whose defaults the deltas are applied to
            avatar: (dx, dy) for the avatar's top-left corner
            username: (dx, dy) for the username baseline
            rank_level: (dx, dy) for the rank/level line
            xp_text: (dx, dy) for the XP text
            time_text: (dx, dy) for the generation-time text
            progress_bar: (dx, dy, d_right_margin) for the progress bar

        Returns:
            LayoutConfig with absolute positions
        """
        fields = {}
        if avatar is not None:
            fields["avatar_x"] = base.avatar_margin + avatar[0]
            fields["avatar_y"] = base.centered_avatar_y + avatar[1]
        if username is not None:
            fields["username_x"] = base.text_margin + username[0]
            fields["username_y"] = base.username_y_offset + username[1]
        if rank_level is not None:
            fields["rank_level_x"] = base.text_margin + rank_level[0]
            fields["rank_level_y"] = base.rank_level_y_offset + rank_level[1]
        if xp_text is not None:
            fields["xp_text_x"] = base.text_margin + xp_text[0]
            fields["xp_text_y"] = base.xp_text_y_offset + xp_text[1]
        if time_text is not None:
            fields["time_text_x"] = base.text_margin + time_text[0]
            fields["time_text_y"] = base.time_text_y_offset + time_text[1]
        if progress_bar is not None:
            fields["progress_bar_x"] = base.text_margin + progress_bar[0]
            fields["progress_bar_y"] = base.progress_bar_y_offset + progress_bar[1]
            fields["progress_bar_right_margin"] = base.progress_bar_margin + progress_bar[2]
        return cls(**fields)


class CardConfiguration(BaseModel):
    """Appearance of the standard card.

    The defaults describe a known-good 950x300 card.
    """

    model_config = ConfigDict(frozen=True)

    width: int = Field(default=950, gt=0)
    height: int = Field(default=300, gt=0)
    accent_color: int = Field(default=0xFF00A8E8, ge=0, le=0xFFFFFFFF)  # Kryo blue
    show_generation_time: bool = False

    # Avatar
    avatar_size: int = Field(default=200, gt=0)
    avatar_margin: int = 50

    # Text positions (x shared, y is the baseline)
    text_margin: int = 270
    username_y_offset: int = 83
    rank_level_y_offset: int = 133
    xp_text_y_offset: int = 200
    time_text_y_offset: int = 267

    # Progress bar
    progress_bar_height: int = Field(default=33, gt=0)
    progress_bar_y_offset: int = 217
    progress_bar_margin: int = 50

    # Font sizes
    username_font_size: int = Field(default=47, gt=0)
    rank_level_font_size: int = Field(default=33, gt=0)
    xp_font_size: int = Field(default=27, gt=0)
    time_font_size: int = Field(default=20, gt=0)

    # Background
    shadow_blur: float = Field(default=10.0, ge=0)
    corner_radius: float = Field(default=33.0, ge=0)

    layout: Optional[LayoutConfig] = None

    @classmethod
    def default(cls) -> "CardConfiguration":
        """Default 950x300 card."""
        return cls()

    @property
    def centered_avatar_y(self) -> int:
        """Avatar top edge when centered vertically."""
        return self.height // 2 - self.avatar_size // 2

    def with_layout(self, layout: Optional[LayoutConfig]) -> "CardConfiguration":
        """Copy of this configuration carrying ``layout``."""
        return self.model_copy(update={"layout": layout})


class ColorConfig(BaseModel):
    """Color scheme for the rich card variant (all packed ARGB)."""

    model_config = ConfigDict(frozen=True)

    primary_color: int = Field(default=0xFF00A9FF, ge=0, le=0xFFFFFFFF)  # Light Kryo blue
    secondary_color: int = Field(default=0xFF80CFFF, ge=0, le=0xFFFFFFFF)  # Lighter blue
    background_color: int = Field(default=0xFF0F1729, ge=0, le=0xFFFFFFFF)  # Dark blue-gray
    text_color: int = Field(default=0xFFFFFFFF, ge=0, le=0xFFFFFFFF)  # White
    accent_color: int = Field(default=0xFF00A9FF, ge=0, le=0xFFFFFFFF)
