"""Tests for the standard card renderer."""

from unittest.mock import Mock, patch

import httpx
import pytest
from PIL import Image, ImageChops

from levelcard.config import Settings
from levelcard.models.card import CardConfiguration, LayoutConfig
from levelcard.models.user import OnlineStatus, UserData
from levelcard.services.avatar_fetcher import AvatarDownloadError, AvatarFetcher
from levelcard.workers.avatar import AvatarOutcome, AvatarResolver, PLACEHOLDER_COLOR
from levelcard.workers.card_renderer import CardRenderer, RenderedCard, progress_fill_width
from levelcard.workers.encoder import CardEncoder
from levelcard.workers.fonts import FontResolutionError, FontResolver

ACCENT_RGB = (0x00, 0xA8, 0xE8)
TRACK_RGB = (0x44, 0x44, 0x44)


def differs(a, b):
    return ImageChops.difference(a, b).getbbox(alpha_only=False) is not None


def make_user(avatar_png, **kwargs):
    fields = dict(username="Steve", avatar_bytes=avatar_png, max_xp=100, current_xp=50)
    fields.update(kwargs)
    return UserData(**fields)


class TestProgressFillWidth:
    """Tests for progress_fill_width."""

    def test_half_way(self, avatar_png):
        """Test a half-full bar."""
        assert progress_fill_width(make_user(avatar_png, current_xp=50), 630) == 315

    def test_empty_and_full(self, avatar_png):
        """Test the window boundaries."""
        assert progress_fill_width(make_user(avatar_png, current_xp=0), 630) == 0
        assert progress_fill_width(make_user(avatar_png, current_xp=100), 630) == 630

    def test_offset_window(self, avatar_png):
        """Test that progress is measured from min_xp."""
        user = make_user(avatar_png, min_xp=1000, max_xp=2000, current_xp=1250)

        assert progress_fill_width(user, 400) == 100

    def test_rounds_to_nearest_pixel(self, avatar_png):
        """Test rounding of fractional widths."""
        user = make_user(avatar_png, max_xp=3, current_xp=1)

        assert progress_fill_width(user, 100) == 33

    def test_zero_or_negative_track(self, avatar_png):
        """Test that an empty track never fills."""
        user = make_user(avatar_png, current_xp=100)

        assert progress_fill_width(user, 0) == 0
        assert progress_fill_width(user, -20) == 0

    def test_zero_width_window_is_empty(self, avatar_png):
        """Test that max_xp == min_xp fills nothing instead of dividing by zero."""
        user = UserData.model_construct(
            username="Steve", avatar_bytes=avatar_png, min_xp=10, max_xp=10, current_xp=10
        )

        assert progress_fill_width(user, 630) == 0


class TestCardRenderer:
    """Tests for CardRenderer."""

    @pytest.mark.parametrize("size", [(600, 200), (950, 300), (1000, 400)])
    def test_output_dimensions(self, renderer, user, size):
        """Test that the decoded PNG matches the configured size."""
        config = CardConfiguration(width=size[0], height=size[1])

        img = renderer.render_image(user, config)

        assert img.size == size
        assert img.mode == "RGBA"

    def test_render_returns_metadata(self, renderer, user):
        """Test the RenderedCard fields."""
        card = renderer.render(user)

        assert isinstance(card, RenderedCard)
        assert (card.width, card.height) == (950, 300)
        assert card.avatar.outcome == AvatarOutcome.DRAWN
        assert card.generation_ms >= 0
        assert CardEncoder().decode(card.png).size == (950, 300)

    def test_corners_are_transparent(self, renderer, user):
        """Test that pixels outside the rounded background stay clear."""
        img = renderer.render_image(user)

        assert img.getpixel((0, 0))[3] < 255
        assert img.getpixel((475, 10)) == (0x2A, 0x2A, 0x2A, 255)

    def test_corrupt_avatar_still_renders(self, renderer, corrupt_bytes):
        """Test that a corrupt avatar becomes a placeholder and the card completes."""
        user = make_user(corrupt_bytes)

        card = renderer.render(user)
        img = CardEncoder().decode(card.png)

        assert not card.avatar.success
        assert img.size == (950, 300)
        assert img.getpixel((150, 150)) == PLACEHOLDER_COLOR

    def test_avatar_drawn_at_center_of_slot(self, renderer, user):
        """Test that the avatar image lands in the centered avatar slot."""
        img = renderer.render_image(user)

        assert img.getpixel((150, 150)) == (0, 0, 255, 255)

    def test_full_bar_uses_accent_color(self, renderer, avatar_png):
        """Test that a complete level fills the track with the accent color."""
        img = renderer.render_image(make_user(avatar_png, current_xp=100))

        assert img.getpixel((800, 233)) == ACCENT_RGB + (255,)

    def test_empty_bar_shows_track(self, renderer, avatar_png):
        """Test that zero progress leaves only the track visible."""
        img = renderer.render_image(make_user(avatar_png, current_xp=0))

        assert img.getpixel((800, 233)) == TRACK_RGB + (255,)
        assert img.getpixel((300, 233)) == TRACK_RGB + (255,)

    def test_custom_accent_color(self, renderer, avatar_png):
        """Test that the accent color drives the fill."""
        config = CardConfiguration(accent_color=0xFFFF0000)

        img = renderer.render_image(make_user(avatar_png, current_xp=100), config)

        assert img.getpixel((800, 233)) == (255, 0, 0, 255)

    def test_status_indicator_follows_flag(self, renderer, avatar_png):
        """Test that the indicator is drawn only when enabled."""
        shown = renderer.render_image(make_user(avatar_png, online_status=OnlineStatus.DND))
        hidden = renderer.render_image(
            make_user(avatar_png, online_status=OnlineStatus.DND, show_status_indicator=False)
        )

        assert shown.getpixel((215, 215)) == (0xED, 0x42, 0x45, 255)
        assert hidden.getpixel((215, 215)) == (0, 0, 255, 255)

    def test_generation_time_text_drawn(self, renderer, user):
        """Test that enabling generation time adds text in the time row."""
        plain, _, _ = renderer.compose(user, CardConfiguration())
        timed, _, _ = renderer.compose(user, CardConfiguration(show_generation_time=True))

        band = (270, 245, 700, 275)
        assert differs(plain.crop(band), timed.crop(band))

    def test_absolute_and_offset_layouts_match(self, renderer, user):
        """Test that equivalent absolute and offset layouts render identically."""
        base = CardConfiguration()
        absolute = LayoutConfig(
            avatar_x=60,
            avatar_y=45,
            username_x=280,
            username_y=90,
            rank_level_x=270,
            rank_level_y=140,
            progress_bar_x=280,
            progress_bar_y=220,
            progress_bar_right_margin=60,
        )
        offsets = LayoutConfig.from_offsets(
            base,
            avatar=(10, -5),
            username=(10, 7),
            rank_level=(0, 7),
            progress_bar=(10, 3, 10),
        )

        img_a, _, _ = renderer.compose(user, base.with_layout(absolute))
        img_b, _, _ = renderer.compose(user, base.with_layout(offsets))

        assert offsets == absolute
        assert not differs(img_a, img_b)

    def test_layout_moves_elements(self, renderer, user):
        """Test that a layout override changes the rendered image."""
        default, _, _ = renderer.compose(user, CardConfiguration())
        moved, _, _ = renderer.compose(
            user, CardConfiguration(layout=LayoutConfig(username_x=400))
        )

        assert differs(default, moved)

    def test_font_failure_is_fatal(self, user):
        """Test that font resolution errors propagate."""
        fonts = Mock()
        fonts.resolve_face.side_effect = FontResolutionError("no fonts")
        renderer = CardRenderer(AvatarResolver(), fonts, CardEncoder())

        with pytest.raises(FontResolutionError):
            renderer.render(user)

    def test_strict_download_failure_aborts(self):
        """Test that strict mode turns a failed download into an error."""
        fetcher = Mock()
        fetcher.fetch.side_effect = AvatarDownloadError("timed out")
        strict = Settings(avatar_download_strict=True, font_search_dirs=[])
        renderer = CardRenderer(AvatarResolver(fetcher, strict))
        user = UserData(username="Steve", avatar_url="https://example.com/a.png", download_avatar=True)

        with pytest.raises(AvatarDownloadError):
            renderer.render(user)

    def test_failed_download_renders_placeholder(self, test_settings):
        """Test that a 404 avatar download degrades to a placeholder."""
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(404)))
        fetcher = AvatarFetcher(test_settings, client=client)
        renderer = CardRenderer(AvatarResolver(fetcher, test_settings), FontResolver(test_settings))
        user = UserData(username="Steve", avatar_url="https://example.com/a.png", download_avatar=True)

        card = renderer.render(user)
        client.close()

        assert card.avatar.outcome == AvatarOutcome.PLACEHOLDER
        assert (card.width, card.height) == (950, 300)

    def test_compose_returns_raw_image(self, renderer, user):
        """Test that compose hands back the unencoded surface."""
        img, avatar, elapsed_ms = renderer.compose(user)

        assert isinstance(img, Image.Image)
        assert img.size == (950, 300)
        assert avatar.success
        assert elapsed_ms >= 0

    def test_default_renderer_downloads_url_avatar(self, test_settings, avatar_png):
        """Test that a renderer built with defaults fetches URL avatars."""
        requested = []

        def handler(request):
            requested.append(str(request.url))
            return httpx.Response(200, content=avatar_png)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        fetcher = AvatarFetcher(test_settings, client=client)
        user = UserData(username="Steve", avatar_url="https://example.com/a.png", download_avatar=True)

        with patch("levelcard.workers.avatar.AvatarFetcher", return_value=fetcher):
            with CardRenderer(font_resolver=FontResolver(test_settings)) as renderer:
                card = renderer.render(user)
        client.close()

        assert requested == ["https://example.com/a.png"]
        assert card.avatar.outcome == AvatarOutcome.DRAWN
        assert CardEncoder().decode(card.png).getpixel((150, 150)) == (0, 0, 255, 255)

    def test_close_releases_own_resolver_only(self, test_settings):
        """Test that close reaches the resolver only when the renderer created it."""
        injected = Mock()
        CardRenderer(injected, FontResolver(test_settings)).close()
        injected.close.assert_not_called()

        renderer = CardRenderer(font_resolver=FontResolver(test_settings))
        renderer.close()
        assert renderer.avatar_resolver.fetcher.client.is_closed
