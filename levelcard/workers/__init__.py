"""Drawing workers for levelcard."""

from .avatar import AvatarResolver, AvatarResult, AvatarOutcome
from .card_renderer import CardRenderer, RenderedCard, progress_fill_width
from .encoder import CardEncoder, EncodingError, OutputFormat
from .fonts import FontResolver, FontResolutionError, FontStyle
from .layout import ResolvedLayout, resolve_layout
from .rich_card import RichCardRenderer
from .status_indicator import calculate_indicator_position, draw_status_indicator

__all__ = [
    "AvatarResolver",
    "AvatarResult",
    "AvatarOutcome",
    "CardRenderer",
    "RenderedCard",
    "progress_fill_width",
    "CardEncoder",
    "EncodingError",
    "OutputFormat",
    "FontResolver",
    "FontResolutionError",
    "FontStyle",
    "ResolvedLayout",
    "resolve_layout",
    "RichCardRenderer",
    "calculate_indicator_position",
    "draw_status_indicator",
]
