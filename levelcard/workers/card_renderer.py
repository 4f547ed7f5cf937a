"""Standard level card renderer.

Draws the background, avatar, text and progress bar onto one RGBA surface
and encodes it as PNG.
"""

import time
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image
from loguru import logger

from levelcard.models.card import CardConfiguration
from levelcard.models.user import UserData
from levelcard.workers.avatar import AvatarResolver, AvatarResult, ring_width_for
from levelcard.workers.drawing import (
    argb_to_rgba,
    blurred_rounded_rect,
    draw_text,
    fill_rounded_rect,
)
from levelcard.workers.encoder import CardEncoder
from levelcard.workers.fonts import FontResolver, FontStyle
from levelcard.workers.layout import ProgressBarGeometry, ResolvedLayout, resolve_layout


def progress_fill_width(user: UserData, track_width: int) -> int:
    """Filled width of the progress bar, clamped to [0, track_width].

    A zero-width XP window is treated as 0% rather than dividing by zero.
    """
    track_width = max(0, track_width)
    span = user.max_xp - user.min_xp
    if span <= 0:
        return 0
    width = round(track_width * (user.current_xp - user.min_xp) / span)
    return max(0, min(track_width, width))


@dataclass(frozen=True)
class RenderedCard:
    """Encoded card plus what happened while drawing it."""
    png: bytes
    width: int
    height: int
    avatar: AvatarResult
    generation_ms: int


class CardRenderer:
    """Renderer for the standard level card."""

    # Colors (RGBA)
    SHADOW_COLOR = (0, 0, 0, 0x40)  # 25% black
    SHADOW_INSET = 7
    BG_COLOR = (0x2A, 0x2A, 0x2A, 255)
    USERNAME_COLOR = (255, 255, 255, 255)
    RANK_LEVEL_COLOR = (0xCC, 0xCC, 0xCC, 255)
    XP_TEXT_COLOR = (0xAA, 0xAA, 0xAA, 255)
    TIME_TEXT_COLOR = (0x88, 0x88, 0x88, 255)
    TRACK_COLOR = (0x44, 0x44, 0x44, 255)

    def __init__(
        self,
        avatar_resolver: Optional[AvatarResolver] = None,
        font_resolver: Optional[FontResolver] = None,
        encoder: Optional[CardEncoder] = None,
    ):
        """Initialize card renderer.

        Args:
            avatar_resolver: Avatar source; one with its own fetcher is created when omitted
            font_resolver: Font lookup, shared to reuse its cache
            encoder: PNG encoder
        """
        self._owns_resolver = avatar_resolver is None
        self.avatar_resolver = avatar_resolver or AvatarResolver()
        self.font_resolver = font_resolver or FontResolver()
        self.encoder = encoder or CardEncoder()

    def close(self) -> None:
        """Release the avatar resolver's fetcher if this renderer created it."""
        if self._owns_resolver:
            self.avatar_resolver.close()

    def __enter__(self) -> "CardRenderer":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def compose(
        self,
        user: UserData,
        config: Optional[CardConfiguration] = None,
    ) -> Tuple[Image.Image, AvatarResult, int]:
        """Draw the card without encoding it.

        Returns:
            (image, avatar result, generation time in ms)

        Raises:
            FontResolutionError: If no usable font exists
            AvatarDownloadError: Only when strict downloads are enabled
        """
        config = config or CardConfiguration.default()
        start = time.perf_counter()
        layout = resolve_layout(config)

        img = Image.new("RGBA", (config.width, config.height), (0, 0, 0, 0))
        self._draw_background(img, config)

        data = self.avatar_resolver.acquire(user)
        avatar = self.avatar_resolver.draw(
            img,
            data,
            layout.avatar.x,
            layout.avatar.y,
            layout.avatar_size,
            argb_to_rgba(config.accent_color),
            ring_width_for(config.height),
            user.online_status,
            user.show_status_indicator,
        )
        if not avatar.success:
            logger.warning(f"Avatar for {user.username} replaced by placeholder: {avatar.reason}")

        bold = self.font_resolver.resolve_face(FontStyle.BOLD, config.username_font_size)
        rank_font = self.font_resolver.resolve_face(FontStyle.REGULAR, config.rank_level_font_size)
        xp_font = self.font_resolver.resolve_face(FontStyle.REGULAR, config.xp_font_size)

        self._draw_text(img, user, layout, bold, rank_font, xp_font)
        self._draw_progress_bar(img, user, layout.progress_bar, config.accent_color)

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        if config.show_generation_time:
            time_font = self.font_resolver.resolve_face(FontStyle.REGULAR, config.time_font_size)
            draw_text(
                img,
                (layout.time_text.x, layout.time_text.y),
                f"Generated in {elapsed_ms}ms",
                time_font,
                self.TIME_TEXT_COLOR,
            )

        return img, avatar, elapsed_ms

    def render(
        self,
        user: UserData,
        config: Optional[CardConfiguration] = None,
    ) -> RenderedCard:
        """Render and encode a card.

        Raises:
            FontResolutionError: If no usable font exists
            EncodingError: If PNG encoding fails
        """
        config = config or CardConfiguration.default()
        img, avatar, elapsed_ms = self.compose(user, config)
        png = self.encoder.encode(img)
        logger.debug(
            f"Rendered card for {user.username}: {config.width}x{config.height}, "
            f"{len(png)} bytes in {elapsed_ms}ms"
        )
        return RenderedCard(
            png=png,
            width=config.width,
            height=config.height,
            avatar=avatar,
            generation_ms=elapsed_ms,
        )

    def render_png(self, user: UserData, config: Optional[CardConfiguration] = None) -> bytes:
        """Render a card and return PNG bytes."""
        return self.render(user, config).png

    def render_image(self, user: UserData, config: Optional[CardConfiguration] = None) -> Image.Image:
        """Render a card and return the decoded PNG."""
        return self.encoder.decode(self.render_png(user, config))

    def _draw_background(self, img: Image.Image, config: CardConfiguration) -> None:
        inset = self.SHADOW_INSET
        blurred_rounded_rect(
            img,
            (inset, inset, config.width - inset, config.height - inset),
            config.corner_radius,
            self.SHADOW_COLOR,
            config.shadow_blur,
        )
        fill_rounded_rect(img, (0, 0, config.width, config.height), config.corner_radius, self.BG_COLOR)

    def _draw_text(self, img, user, layout: ResolvedLayout, bold, rank_font, xp_font) -> None:
        draw_text(img, (layout.username.x, layout.username.y), user.username, bold, self.USERNAME_COLOR)
        draw_text(
            img,
            (layout.rank_level.x, layout.rank_level.y),
            f"Rank #{user.rank} | Level {user.level}",
            rank_font,
            self.RANK_LEVEL_COLOR,
        )
        draw_text(
            img,
            (layout.xp_text.x, layout.xp_text.y),
            f"{user.current_xp} / {user.max_xp} XP",
            xp_font,
            self.XP_TEXT_COLOR,
        )

    def _draw_progress_bar(
        self,
        img: Image.Image,
        user: UserData,
        bar: ProgressBarGeometry,
        accent_color: int,
    ) -> None:
        fill_rounded_rect(
            img,
            (bar.x, bar.y, bar.x + bar.track_width, bar.y + bar.height),
            bar.radius,
            self.TRACK_COLOR,
        )
        fill = progress_fill_width(user, bar.track_width)
        if fill <= 0:
            return
        fill_rounded_rect(
            img,
            (bar.x, bar.y, bar.x + fill, bar.y + bar.height),
            bar.radius,
            argb_to_rgba(accent_color),
        )
