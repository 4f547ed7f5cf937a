"""Rich level card: gradient background, level badge, milestones and stats."""

import time
from typing import Optional, Tuple

from PIL import Image, ImageDraw
from loguru import logger

from levelcard.models.card import ColorConfig
from levelcard.models.user import UserData
from levelcard.workers.avatar import AvatarResolver, AvatarResult
from levelcard.workers.card_renderer import RenderedCard
from levelcard.workers.drawing import (
    RGBA,
    apply_mask,
    argb_to_rgba,
    blurred_circle,
    blurred_rounded_rect,
    circle_mask,
    draw_text,
    fill_circle,
    linear_gradient,
    paste_layer,
    scale_color,
    stroke_circle,
    text_width,
)
from levelcard.workers.encoder import CardEncoder
from levelcard.workers.fonts import FontResolver, FontStyle

# Decorative blurred circles as (x, y, radius) fractions of the card size
MICA_SPOTS = [
    (0.15, 0.30, 0.07),
    (0.45, 0.80, 0.10),
    (0.70, 0.20, 0.06),
    (0.85, 0.65, 0.08),
    (0.30, 0.55, 0.05),
]

CRYSTAL_COUNT = 5


def _with_alpha(color: int, alpha: int) -> RGBA:
    return argb_to_rgba(color)[:3] + (alpha,)


def format_number(value: int) -> str:
    """Format an integer with thousands separators."""
    return f"{value:,}"


class RichCardRenderer:
    """Renderer for the rich card variant.

    Layout is fixed in pixels for the 500x280 design; larger cards keep the
    same header and stretch the bar and stat boxes horizontally.
    """

    DEFAULT_WIDTH = 500
    DEFAULT_HEIGHT = 280

    PADDING = 24
    AVATAR_SIZE = 90
    AVATAR_BORDER = 4
    BADGE_SIZE = 34
    PROGRESS_Y = 150
    PROGRESS_HEIGHT = 14
    STATS_Y = 190
    STAT_HEIGHT = 75
    STAT_GAP = 10

    # Colors (RGBA)
    WHITE = (255, 255, 255, 255)
    TEXT_SHADOW = (0, 0, 0, 128)
    MICA_COLOR = (255, 255, 255, 0x10)
    CORNER_GLOW = (0x00, 0x99, 0xFF, 0x0A)
    TRACK_COLOR = (255, 255, 255, 0x25)
    CRYSTAL_IDLE = (255, 255, 255, 0x33)
    CRYSTAL_GLOW = (255, 255, 255, 0x60)
    STAT_BORDER = (255, 255, 255, 0x10)

    def __init__(
        self,
        colors: Optional[ColorConfig] = None,
        avatar_resolver: Optional[AvatarResolver] = None,
        font_resolver: Optional[FontResolver] = None,
        encoder: Optional[CardEncoder] = None,
    ):
        self.colors = colors or ColorConfig()
        self._owns_resolver = avatar_resolver is None
        self.avatar_resolver = avatar_resolver or AvatarResolver()
        self.font_resolver = font_resolver or FontResolver()
        self.encoder = encoder or CardEncoder()

    def close(self) -> None:
        if self._owns_resolver:
            self.avatar_resolver.close()

    def __enter__(self) -> "RichCardRenderer":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def compose(
        self,
        user: UserData,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
    ) -> Tuple[Image.Image, AvatarResult, int]:
        """Draw the rich card without encoding it.

        Raises:
            ValueError: If the card size is not positive
            FontResolutionError: If no usable font exists
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Card size must be positive, got {width}x{height}")
        start = time.perf_counter()

        img = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        self._draw_background(img)
        avatar = self._draw_header(img, user)
        self._draw_progress_bar(img, user)
        self._draw_stats(img, user)

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        return img, avatar, elapsed_ms

    def render(
        self,
        user: UserData,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
    ) -> RenderedCard:
        """Render and encode the rich card as PNG."""
        img, avatar, elapsed_ms = self.compose(user, width, height)
        png = self.encoder.encode(img)
        logger.debug(f"Rendered rich card for {user.username}: {width}x{height} in {elapsed_ms}ms")
        return RenderedCard(png=png, width=width, height=height, avatar=avatar, generation_ms=elapsed_ms)

    def _font(self, size: int, bold: bool = False):
        style = FontStyle.BOLD if bold else FontStyle.REGULAR
        return self.font_resolver.resolve_face(style, size)

    def _draw_background(self, img: Image.Image) -> None:
        w, h = img.size
        bg = self.colors.background_color
        img.alpha_composite(
            linear_gradient(w, h, [bg, scale_color(bg, 0.8)], direction="diagonal")
        )

        for fx, fy, fr in MICA_SPOTS:
            blurred_circle(img, w * fx, h * fy, max(w, h) * fr, self.MICA_COLOR, 20)

        for cx, cy in ((-20, -20), (w + 20, -20), (-20, h + 20), (w + 20, h + 20)):
            blurred_circle(img, cx, cy, 100, self.CORNER_GLOW, 40)

    def _draw_header(self, img: Image.Image, user: UserData) -> AvatarResult:
        colors = self.colors
        x = y = self.PADDING
        size = self.AVATAR_SIZE
        cx, cy = x + size / 2, y + size / 2

        blurred_circle(img, cx, cy, size / 2 + 5, _with_alpha(colors.primary_color, 0x30), 15)
        fill_circle(img, cx, cy, size / 2, (0x2A, 0x2A, 0x2A, 255))

        data = self.avatar_resolver.acquire(user)
        avatar = self.avatar_resolver.draw(
            img, data, x, y, size, argb_to_rgba(colors.primary_color), self.AVATAR_BORDER
        )
        if not avatar.success:
            logger.warning(f"Avatar for {user.username} replaced by placeholder: {avatar.reason}")

        # Username with drop shadow, discriminator beside it
        name_x = x + size + 20
        name_y = y + 25
        name_font = self._font(24, bold=True)
        text_color = argb_to_rgba(colors.text_color)
        draw_text(img, (name_x + 1, name_y + 1), user.username, name_font, self.TEXT_SHADOW)
        draw_text(img, (name_x, name_y), user.username, name_font, text_color)
        if user.discriminator:
            disc_x = name_x + text_width(name_font, user.username) + 8
            draw_text(
                img,
                (disc_x, name_y),
                f"#{user.discriminator}",
                self._font(16),
                argb_to_rgba(scale_color(colors.text_color, 0.7)),
            )

        rank_y = name_y + 30
        rank_font = self._font(16)
        label = "Server Rank: "
        draw_text(img, (name_x, rank_y), label, rank_font, argb_to_rgba(scale_color(colors.text_color, 0.8)))
        draw_text(
            img,
            (name_x + text_width(rank_font, label), rank_y),
            f"#{user.rank}",
            self._font(16, bold=True),
            argb_to_rgba(colors.primary_color),
        )

        self._draw_level_badge(img, x + size, y + size, user.level)
        return avatar

    def _draw_level_badge(self, img: Image.Image, bx: float, by: float, level: int) -> None:
        colors = self.colors
        d = self.BADGE_SIZE
        blurred_circle(img, bx, by, d / 2 + 3, _with_alpha(colors.primary_color, 0x40), 8)

        gradient = linear_gradient(
            d, d,
            [scale_color(colors.primary_color, 1.2), colors.primary_color, colors.secondary_color],
            direction="diagonal",
        )
        paste_layer(img, apply_mask(gradient, circle_mask(d)), bx - d / 2, by - d / 2)
        stroke_circle(img, bx, by, d / 2, 2, self.WHITE)
        draw_text(img, (bx, by), str(level), self._font(16, bold=True), self.WHITE, anchor="mm")

    def _draw_progress_bar(self, img: Image.Image, user: UserData) -> None:
        colors = self.colors
        w = img.width
        pad = self.PADDING
        bar_y = self.PROGRESS_Y
        bar_h = self.PROGRESS_HEIGHT
        bar_w = max(0, w - 2 * pad)
        progress = user.xp_progress
        percent = int(progress * 100)

        # XP labels above the bar
        text_y = bar_y - 12
        xp_font = self._font(15)
        xp_color = argb_to_rgba(scale_color(colors.text_color, 0.9))
        glow = (255, 255, 255, 0x20)
        current = f"{format_number(user.current_xp)} XP"
        target = f"{format_number(user.max_xp)} XP"
        target_x = w - pad - text_width(xp_font, target)
        for text, tx in ((current, pad), (target, target_x)):
            draw_text(img, (tx + 1, text_y + 1), text, xp_font, glow)
            draw_text(img, (tx, text_y), text, xp_font, xp_color)
        draw_text(img, (pad + bar_w / 2, text_y), f"{percent}%", self._font(12), self.WHITE, anchor="ms")

        blurred_rounded_rect(img, (pad, bar_y, pad + bar_w, bar_y + bar_h), 0, self.TRACK_COLOR, 2)

        fill_w = round(bar_w * progress)
        if fill_w > 0:
            gradient = linear_gradient(
                bar_w, bar_h,
                [
                    scale_color(colors.primary_color, 1.2),
                    colors.primary_color,
                    colors.secondary_color,
                    scale_color(colors.secondary_color, 1.1),
                ],
                positions=[0.0, 0.3, 0.7, 1.0],
            )
            paste_layer(img, gradient.crop((0, 0, fill_w, bar_h)), pad, bar_y)
            blurred_rounded_rect(img, (pad, bar_y, pad + fill_w, bar_y + 2), 0, (255, 255, 255, 0x30), 3)

        # Milestone crystals every 20%
        crystal_y = bar_y + bar_h / 2
        for i in range(1, CRYSTAL_COUNT + 1):
            crystal_x = pad + bar_w * i / CRYSTAL_COUNT
            active = i * 100 // CRYSTAL_COUNT <= percent
            if active:
                blurred_circle(img, crystal_x, crystal_y, 12, self.CRYSTAL_GLOW, 6)
                gradient = linear_gradient(18, 18, [0xFFFFFFFF, 0xFFCCEEFF], direction="diagonal")
                paste_layer(img, apply_mask(gradient, circle_mask(18)), crystal_x - 9, crystal_y - 9)
            else:
                fill_circle(img, crystal_x, crystal_y, 7, self.CRYSTAL_IDLE)

    def _draw_stats(self, img: Image.Image, user: UserData) -> None:
        colors = self.colors
        pad = self.PADDING
        stat_w = max(1, (img.width - 2 * pad - 2 * self.STAT_GAP) // 3)
        stat_h = self.STAT_HEIGHT
        top = self.STATS_Y

        stats = [
            ("Messages", format_number(user.messages_count), colors.primary_color),
            ("Voice Time", user.voice_time or "0h", scale_color(colors.primary_color, 1.1)),
            ("Day Streak", str(user.streak), colors.accent_color),
        ]

        value_font = self._font(22, bold=True)
        label_font = self._font(15)
        label_color = argb_to_rgba(scale_color(colors.text_color, 0.7))

        for i, (label, value, color) in enumerate(stats):
            left = pad + i * (stat_w + self.STAT_GAP)
            box = linear_gradient(stat_w, stat_h, [0x15FFFFFF, 0x08FFFFFF], direction="vertical")
            ImageDraw.Draw(box).rectangle((0, 0, stat_w - 1, stat_h - 1), outline=self.STAT_BORDER, width=1)
            paste_layer(img, box, left, top)

            center = left + stat_w / 2
            draw_text(img, (center + 1, top + 31), value, value_font, (255, 255, 255, 0x30), anchor="ms")
            draw_text(img, (center, top + 30), value, value_font, argb_to_rgba(color), anchor="ms")
            draw_text(img, (center, top + 58), label, label_font, label_color, anchor="ms")
