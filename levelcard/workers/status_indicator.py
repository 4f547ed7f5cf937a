"""Status indicator dot drawn on the avatar's bottom-right corner."""

from typing import Tuple

from PIL import Image

from levelcard.models.user import OnlineStatus
from levelcard.workers.drawing import argb_to_rgba, fill_circle

INDICATOR_RATIO = 0.25  # Indicator diameter relative to the avatar
BORDER_WIDTH = 2  # White border around the dot, in pixels
BORDER_COLOR = (255, 255, 255, 255)


def indicator_size(avatar_size: float) -> float:
    """Recommended indicator diameter for an avatar."""
    return max(0.0, avatar_size) * INDICATOR_RATIO


def calculate_indicator_position(
    avatar_x: float,
    avatar_y: float,
    avatar_size: float,
    indicator_diameter: float,
) -> Tuple[float, float]:
    """Center of the indicator, kept inside the avatar's bounding box.

    Args:
        avatar_x: Avatar top-left x
        avatar_y: Avatar top-left y
        avatar_size: Avatar width and height
        indicator_diameter: Indicator diameter

    Returns:
        (cx, cy) of the indicator
    """
    size = max(0.0, avatar_size)
    d = max(0.0, indicator_diameter)
    cx = max(avatar_x, min(avatar_x + size - d / 2, avatar_x + size))
    cy = max(avatar_y, min(avatar_y + size - d / 2, avatar_y + size))
    return cx, cy


def draw_status_dot(
    image: Image.Image,
    cx: float,
    cy: float,
    diameter: float,
    status: OnlineStatus,
) -> None:
    """Draw a white-bordered dot in the status color centered on (cx, cy)."""
    if diameter <= 0:
        return
    fill_circle(image, cx, cy, diameter / 2 + BORDER_WIDTH, BORDER_COLOR)
    fill_circle(image, cx, cy, diameter / 2, argb_to_rgba(status.color))


def draw_status_indicator(
    image: Image.Image,
    avatar_x: float,
    avatar_y: float,
    avatar_size: float,
    status: OnlineStatus,
) -> Tuple[float, float]:
    """Place and draw the indicator for an avatar box. Returns its center."""
    d = indicator_size(avatar_size)
    cx, cy = calculate_indicator_position(avatar_x, avatar_y, avatar_size, d)
    draw_status_dot(image, cx, cy, d, status)
    return cx, cy
