"""High-level entry points for drawing level cards."""

import io
from typing import Optional, Union

from PIL import Image
from loguru import logger

from levelcard.config import Settings, settings as default_settings
from levelcard.models.card import CardConfiguration, ColorConfig, LayoutConfig
from levelcard.models.user import OnlineStatus, UserData
from levelcard.services.avatar_fetcher import AvatarFetcher
from levelcard.workers.avatar import AvatarResolver
from levelcard.workers.card_renderer import CardRenderer
from levelcard.workers.encoder import CardEncoder, OutputFormat
from levelcard.workers.fonts import FontResolver
from levelcard.workers.rich_card import RichCardRenderer

CardOutput = Union[bytes, Image.Image, io.BytesIO]


class LevelCardService:
    """Renders cards with one shared avatar fetcher and font cache.

    Safe to share across threads: renders keep no state on the service.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        fetcher: Optional[AvatarFetcher] = None,
    ):
        """Initialize the service.

        Args:
            settings: Library settings; defaults to the module settings
            fetcher: Avatar fetcher to use instead of creating one
        """
        self.settings = settings or default_settings
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or AvatarFetcher(self.settings)
        self.encoder = CardEncoder()
        self.avatar_resolver = AvatarResolver(self.fetcher, self.settings)
        self.font_resolver = FontResolver(self.settings)
        self.renderer = CardRenderer(self.avatar_resolver, self.font_resolver, self.encoder)

    def render(
        self,
        user: UserData,
        config: Optional[CardConfiguration] = None,
        fmt: OutputFormat = OutputFormat.BYTES,
    ) -> CardOutput:
        """Render the standard card in the requested output format."""
        img, avatar, elapsed_ms = self.renderer.compose(user, config)
        logger.debug(f"Card for {user.username} drawn in {elapsed_ms}ms (avatar: {avatar.outcome.value})")
        return self.encoder.export(img, fmt)

    def render_rich(
        self,
        user: UserData,
        colors: Optional[ColorConfig] = None,
        width: int = RichCardRenderer.DEFAULT_WIDTH,
        height: int = RichCardRenderer.DEFAULT_HEIGHT,
        fmt: OutputFormat = OutputFormat.BYTES,
    ) -> CardOutput:
        """Render the rich card variant in the requested output format."""
        renderer = RichCardRenderer(colors, self.avatar_resolver, self.font_resolver, self.encoder)
        img, avatar, elapsed_ms = renderer.compose(user, width, height)
        logger.debug(f"Rich card for {user.username} drawn in {elapsed_ms}ms (avatar: {avatar.outcome.value})")
        return self.encoder.export(img, fmt)

    def close(self) -> None:
        """Release the fetcher's connection pool if this service created it."""
        if self._owns_fetcher:
            self.fetcher.close()

    def __enter__(self) -> "LevelCardService":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def draw_level_card(
    *,
    username: str,
    avatar_bytes: Optional[bytes] = None,
    avatar_url: Optional[str] = None,
    download_from_url: bool = False,
    rank: int = 1,
    level: int = 1,
    min_xp: int = 0,
    max_xp: int = 100,
    current_xp: int = 0,
    accent_color: int = 0xFF00A8E8,
    width: int = 950,
    height: int = 300,
    online_status: OnlineStatus = OnlineStatus.ONLINE,
    show_status_indicator: bool = True,
    show_generation_time: bool = False,
    layout: Optional[LayoutConfig] = None,
    fmt: OutputFormat = OutputFormat.BYTES,
    settings: Optional[Settings] = None,
) -> CardOutput:
    """Draw a standard level card in one call.

    The avatar comes from ``avatar_url`` when ``download_from_url`` is set and
    a URL is given, otherwise from ``avatar_bytes``.

    Raises:
        ValueError: If no avatar source is available
        pydantic.ValidationError: If the user data or configuration is invalid
    """
    if download_from_url and avatar_url:
        source = {"avatar_url": avatar_url, "download_avatar": True}
    elif avatar_bytes is not None:
        source = {"avatar_bytes": avatar_bytes}
    else:
        raise ValueError("Either avatar_bytes or avatar_url with download_from_url=True must be provided")

    user = UserData(
        username=username,
        rank=rank,
        level=level,
        min_xp=min_xp,
        max_xp=max_xp,
        current_xp=current_xp,
        online_status=online_status,
        show_status_indicator=show_status_indicator,
        **source,
    )
    config = CardConfiguration(
        width=width,
        height=height,
        accent_color=accent_color,
        show_generation_time=show_generation_time,
        layout=layout,
    )

    with LevelCardService(settings) as service:
        return service.render(user, config, fmt)
