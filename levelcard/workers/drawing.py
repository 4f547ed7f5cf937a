"""Anti-aliased drawing helpers on top of Pillow.

Pillow rasterises ellipses and rounded rectangles without anti-aliasing, so
every shape here is drawn into a supersampled coverage mask, reduced back to
the target resolution and alpha-composited onto the card.
"""

import math
from typing import Callable, List, Optional, Sequence, Tuple

from PIL import Image, ImageChops, ImageDraw, ImageFilter, ImageFont

SUPERSAMPLE = 4

RGBA = Tuple[int, int, int, int]
Box = Tuple[float, float, float, float]


def argb_to_rgba(color: int) -> RGBA:
    """Convert packed 0xAARRGGBB to an (r, g, b, a) tuple."""
    return (
        (color >> 16) & 0xFF,
        (color >> 8) & 0xFF,
        color & 0xFF,
        (color >> 24) & 0xFF,
    )


def scale_color(color: int, factor: float) -> int:
    """Scale the RGB channels of an ARGB color, keeping alpha."""
    r, g, b, a = argb_to_rgba(color)
    r, g, b = (min(255, max(0, int(c * factor))) for c in (r, g, b))
    return (a << 24) | (r << 16) | (g << 8) | b


def _clip_region(image: Image.Image, box: Box, pad: int = 1) -> Optional[Tuple[int, int, int, int]]:
    """Integer pixel region covering ``box``, clipped to the image."""
    x0, y0, x1, y1 = box
    left = max(0, math.floor(x0) - pad)
    top = max(0, math.floor(y0) - pad)
    right = min(image.width, math.ceil(x1) + pad)
    bottom = min(image.height, math.ceil(y1) + pad)
    if right <= left or bottom <= top:
        return None
    return left, top, right, bottom


def composite_mask(
    image: Image.Image,
    mask: Image.Image,
    origin: Tuple[int, int],
    fill: RGBA,
) -> None:
    """Paint a solid ``fill`` through an L-mode coverage ``mask``."""
    r, g, b, a = fill
    if a < 255:
        mask = mask.point(lambda v: v * a // 255)
    layer = Image.new("RGBA", mask.size, (r, g, b, 0))
    layer.putalpha(mask)
    image.alpha_composite(layer, dest=origin)


def _paint(
    image: Image.Image,
    box: Box,
    fill: RGBA,
    render: Callable[[ImageDraw.ImageDraw, Callable[[float, float], Tuple[float, float]]], None],
) -> None:
    region = _clip_region(image, box)
    if region is None:
        return
    left, top, right, bottom = region
    mask = Image.new("L", ((right - left) * SUPERSAMPLE, (bottom - top) * SUPERSAMPLE), 0)

    def to_mask(x: float, y: float) -> Tuple[float, float]:
        return (x - left) * SUPERSAMPLE, (y - top) * SUPERSAMPLE

    render(ImageDraw.Draw(mask), to_mask)
    composite_mask(image, mask.reduce(SUPERSAMPLE), (left, top), fill)


def fill_circle(image: Image.Image, cx: float, cy: float, radius: float, fill: RGBA) -> None:
    """Draw a filled anti-aliased circle."""
    if radius <= 0:
        return

    def render(draw, to_mask):
        x0, y0 = to_mask(cx - radius, cy - radius)
        x1, y1 = to_mask(cx + radius, cy + radius)
        draw.ellipse((x0, y0, max(x0, x1 - 1), max(y0, y1 - 1)), fill=255)

    _paint(image, (cx - radius, cy - radius, cx + radius, cy + radius), fill, render)


def stroke_circle(
    image: Image.Image,
    cx: float,
    cy: float,
    radius: float,
    width: float,
    fill: RGBA,
) -> None:
    """Draw a circle outline whose stroke is centered on ``radius``."""
    if radius <= 0 or width <= 0:
        return
    outer = radius + width / 2
    inner = radius - width / 2

    def render(draw, to_mask):
        x0, y0 = to_mask(cx - outer, cy - outer)
        x1, y1 = to_mask(cx + outer, cy + outer)
        draw.ellipse((x0, y0, max(x0, x1 - 1), max(y0, y1 - 1)), fill=255)
        if inner > 0:
            x0, y0 = to_mask(cx - inner, cy - inner)
            x1, y1 = to_mask(cx + inner, cy + inner)
            draw.ellipse((x0, y0, max(x0, x1 - 1), max(y0, y1 - 1)), fill=0)

    _paint(image, (cx - outer, cy - outer, cx + outer, cy + outer), fill, render)


def fill_rounded_rect(image: Image.Image, box: Box, radius: float, fill: RGBA) -> None:
    """Draw a filled anti-aliased rounded rectangle. Empty boxes draw nothing."""
    x0, y0, x1, y1 = box
    if x1 <= x0 or y1 <= y0:
        return
    radius = max(0.0, min(radius, (x1 - x0) / 2, (y1 - y0) / 2))

    def render(draw, to_mask):
        mx0, my0 = (round(v) for v in to_mask(x0, y0))
        mx1, my1 = (round(v) for v in to_mask(x1, y1))
        draw.rounded_rectangle(
            (mx0, my0, max(mx0, mx1 - 1), max(my0, my1 - 1)),
            radius=round(radius * SUPERSAMPLE),
            fill=255,
        )

    _paint(image, box, fill, render)


def blurred_rounded_rect(
    image: Image.Image,
    box: Box,
    radius: float,
    fill: RGBA,
    blur: float,
) -> None:
    """Draw a rounded rectangle softened by a gaussian blur (shadows, glows)."""
    layer = Image.new("RGBA", image.size, fill[:3] + (0,))
    fill_rounded_rect(layer, box, radius, fill)
    if blur > 0:
        layer = layer.filter(ImageFilter.GaussianBlur(blur))
    image.alpha_composite(layer)


def blurred_circle(
    image: Image.Image,
    cx: float,
    cy: float,
    radius: float,
    fill: RGBA,
    blur: float,
) -> None:
    """Draw a soft glow circle."""
    layer = Image.new("RGBA", image.size, fill[:3] + (0,))
    fill_circle(layer, cx, cy, radius, fill)
    if blur > 0:
        layer = layer.filter(ImageFilter.GaussianBlur(blur))
    image.alpha_composite(layer)


def circle_mask(size: int) -> Image.Image:
    """Anti-aliased L-mode disc mask of diameter ``size``."""
    mask = Image.new("L", (size * SUPERSAMPLE, size * SUPERSAMPLE), 0)
    ImageDraw.Draw(mask).ellipse(
        (0, 0, size * SUPERSAMPLE - 1, size * SUPERSAMPLE - 1), fill=255
    )
    return mask.reduce(SUPERSAMPLE)


def apply_mask(layer: Image.Image, mask: Image.Image) -> Image.Image:
    """Return ``layer`` with its alpha multiplied by ``mask``."""
    layer = layer.convert("RGBA")
    layer.putalpha(ImageChops.multiply(layer.getchannel("A"), mask))
    return layer


def paste_layer(image: Image.Image, layer: Image.Image, x: float, y: float) -> None:
    """Alpha-composite ``layer`` at (x, y), clipping anything off the canvas."""
    x, y = round(x), round(y)
    src_left, src_top = max(0, -x), max(0, -y)
    dst_left, dst_top = max(0, x), max(0, y)
    width = min(layer.width - src_left, image.width - dst_left)
    height = min(layer.height - src_top, image.height - dst_top)
    if width <= 0 or height <= 0:
        return
    image.alpha_composite(
        layer.convert("RGBA"),
        dest=(dst_left, dst_top),
        source=(src_left, src_top, src_left + width, src_top + height),
    )


def draw_text(
    image: Image.Image,
    xy: Tuple[float, float],
    text: str,
    font: ImageFont.FreeTypeFont,
    fill: RGBA,
    anchor: str = "ls",
) -> None:
    """Draw text blended onto the image. ``anchor`` defaults to left-baseline."""
    layer = Image.new("RGBA", image.size, fill[:3] + (0,))
    ImageDraw.Draw(layer).text(xy, text, font=font, fill=fill, anchor=anchor)
    image.alpha_composite(layer)


def text_width(font: ImageFont.FreeTypeFont, text: str) -> int:
    """Rendered width of ``text`` in pixels."""
    bbox = font.getbbox(text)
    return bbox[2] - bbox[0]


def linear_gradient(
    width: int,
    height: int,
    colors: Sequence[int],
    positions: Optional[Sequence[float]] = None,
    direction: str = "horizontal",
) -> Image.Image:
    """Build an RGBA gradient image.

    Args:
        width: Image width
        height: Image height
        colors: ARGB color stops
        positions: Stop positions in [0, 1]; evenly spaced when omitted
        direction: "horizontal", "vertical" or "diagonal" (top-left to bottom-right)

    Returns:
        Gradient image of the requested size
    """
    width, height = max(1, int(width)), max(1, int(height))
    if positions is None:
        positions = [i / max(1, len(colors) - 1) for i in range(len(colors))]
    stops = [(p, argb_to_rgba(c)) for p, c in zip(positions, colors)]
    lut = [_interpolate(stops, i / 255) for i in range(256)]

    # Position along the gradient axis as 0-255, built from one-pixel strips
    def axis(length: int) -> List[int]:
        return [round(255 * i / max(1, length - 1)) for i in range(length)]

    row = Image.new("L", (width, 1))
    row.putdata(axis(width))
    column = Image.new("L", (1, height))
    column.putdata(axis(height))
    if direction == "vertical":
        t = column.resize((width, height), Image.Resampling.NEAREST)
    elif direction == "diagonal":
        t = ImageChops.add(
            row.resize((width, height), Image.Resampling.NEAREST),
            column.resize((width, height), Image.Resampling.NEAREST),
            scale=2.0,
        )
    else:
        t = row.resize((width, height), Image.Resampling.NEAREST)

    channels = [t.point([lut[v][i] for v in range(256)]) for i in range(4)]
    return Image.merge("RGBA", channels)


def _interpolate(stops: List[Tuple[float, RGBA]], t: float) -> RGBA:
    if t <= stops[0][0]:
        return stops[0][1]
    for (p0, c0), (p1, c1) in zip(stops, stops[1:]):
        if p0 <= t <= p1:
            f = 0.0 if p1 == p0 else (t - p0) / (p1 - p0)
            return tuple(round(a + (b - a) * f) for a, b in zip(c0, c1))
    return stops[-1][1]
