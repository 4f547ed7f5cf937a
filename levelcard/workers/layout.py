"""Layout resolution: configuration in, concrete pixel positions out."""

from dataclasses import dataclass
from typing import Optional

from levelcard.models.card import CardConfiguration


@dataclass(frozen=True)
class Point:
    x: int
    y: int


@dataclass(frozen=True)
class ProgressBarGeometry:
    """Resolved progress bar track."""
    x: int
    y: int
    right_margin: int
    height: int
    track_width: int  # Span between x and the right margin, never negative

    @property
    def radius(self) -> float:
        return self.height / 2


@dataclass(frozen=True)
class ResolvedLayout:
    """Every drawable element's position for one card."""
    avatar: Point  # Top-left corner
    avatar_size: int
    username: Point  # Text points are left-baseline anchors
    rank_level: Point
    xp_text: Point
    time_text: Point
    progress_bar: ProgressBarGeometry


def _pick(override: Optional[int], default: int) -> int:
    return default if override is None else override


def resolve_layout(config: CardConfiguration) -> ResolvedLayout:
    """Resolve element positions for ``config``.

    A LayoutConfig value wins when set; otherwise the CardConfiguration
    default is used. The avatar is centered vertically unless overridden.
    """
    layout = config.layout

    def get(name: str) -> Optional[int]:
        return getattr(layout, name) if layout is not None else None

    bar_x = _pick(get("progress_bar_x"), config.text_margin)
    bar_right = _pick(get("progress_bar_right_margin"), config.progress_bar_margin)

    return ResolvedLayout(
        avatar=Point(
            _pick(get("avatar_x"), config.avatar_margin),
            _pick(get("avatar_y"), config.centered_avatar_y),
        ),
        avatar_size=config.avatar_size,
        username=Point(
            _pick(get("username_x"), config.text_margin),
            _pick(get("username_y"), config.username_y_offset),
        ),
        rank_level=Point(
            _pick(get("rank_level_x"), config.text_margin),
            _pick(get("rank_level_y"), config.rank_level_y_offset),
        ),
        xp_text=Point(
            _pick(get("xp_text_x"), config.text_margin),
            _pick(get("xp_text_y"), config.xp_text_y_offset),
        ),
        time_text=Point(
            _pick(get("time_text_x"), config.text_margin),
            _pick(get("time_text_y"), config.time_text_y_offset),
        ),
        progress_bar=ProgressBarGeometry(
            x=bar_x,
            y=_pick(get("progress_bar_y"), config.progress_bar_y_offset),
            right_margin=bar_right,
            height=config.progress_bar_height,
            track_width=max(0, config.width - bar_x - bar_right),
        ),
    )
