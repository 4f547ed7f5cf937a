"""Tests for AvatarFetcher service."""

import httpx
import pytest

from levelcard.config import Settings
from levelcard.services.avatar_fetcher import AvatarDownloadError, AvatarFetcher

URL = "https://cdn.example.com/avatars/1.png"


def make_fetcher(handler, **settings_kwargs):
    """Create a fetcher whose client is served by ``handler``."""
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return AvatarFetcher(Settings(**settings_kwargs), client=client)


class TestAvatarFetcher:
    """Tests for AvatarFetcher."""

    def test_fetch_returns_body(self, avatar_png):
        """Test a successful download."""
        fetcher = make_fetcher(lambda request: httpx.Response(200, content=avatar_png))

        assert fetcher.fetch(URL) == avatar_png

    def test_default_client_sends_user_agent(self):
        """Test that the fetcher's own client identifies the library."""
        with AvatarFetcher(Settings()) as fetcher:
            assert fetcher.client.headers["User-Agent"] == "LevelCardLib/1.0"

    def test_custom_user_agent(self):
        """Test that the User-Agent is configurable."""
        with AvatarFetcher(Settings(avatar_user_agent="MyBot/2.0")) as fetcher:
            assert fetcher.client.headers["User-Agent"] == "MyBot/2.0"

    def test_injected_client_headers_are_used(self, avatar_png):
        """Test that requests carry the injected client's own headers."""
        seen = {}

        def handler(request):
            seen["ua"] = request.headers.get("User-Agent")
            return httpx.Response(200, content=avatar_png)

        client = httpx.Client(
            transport=httpx.MockTransport(handler),
            headers={"User-Agent": "HostBot/3.1"},
        )
        AvatarFetcher(Settings(), client=client).fetch(URL)

        assert seen["ua"] == "HostBot/3.1"

    @pytest.mark.parametrize("status", [404, 403, 500])
    def test_error_status_raises(self, status):
        """Test that non-success responses raise AvatarDownloadError."""
        fetcher = make_fetcher(lambda request: httpx.Response(status))

        with pytest.raises(AvatarDownloadError, match=str(status)):
            fetcher.fetch(URL)

    def test_empty_body_raises(self):
        """Test that an empty 200 response is rejected."""
        fetcher = make_fetcher(lambda request: httpx.Response(200, content=b""))

        with pytest.raises(AvatarDownloadError, match="empty"):
            fetcher.fetch(URL)

    def test_declared_length_over_cap_raises(self):
        """Test that an oversized Content-Length is rejected."""
        fetcher = make_fetcher(
            lambda request: httpx.Response(200, content=b"x" * 100),
            avatar_max_bytes=10,
        )

        with pytest.raises(AvatarDownloadError, match="too large"):
            fetcher.fetch(URL)

    def test_streamed_body_over_cap_raises(self):
        """Test that the cap is enforced while streaming without Content-Length."""
        def handler(request):
            return httpx.Response(200, content=iter([b"x" * 8, b"y" * 8, b"z" * 8]))

        fetcher = make_fetcher(handler, avatar_max_bytes=12)

        with pytest.raises(AvatarDownloadError, match="too large"):
            fetcher.fetch(URL)

    def test_body_at_cap_is_accepted(self):
        """Test that a body exactly at the cap is allowed."""
        fetcher = make_fetcher(lambda request: httpx.Response(200, content=b"x" * 10), avatar_max_bytes=10)

        assert fetcher.fetch(URL) == b"x" * 10

    def test_timeout_raises(self):
        """Test that timeouts become AvatarDownloadError."""
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(AvatarDownloadError, match="Timed out"):
            make_fetcher(handler).fetch(URL)

    def test_transport_error_raises(self):
        """Test that connection failures become AvatarDownloadError."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(AvatarDownloadError):
            make_fetcher(handler).fetch(URL)

    def test_follows_redirects_with_default_client(self):
        """Test that the fetcher's own client follows redirects and sets timeouts."""
        fetcher = AvatarFetcher(Settings(avatar_connect_timeout=2.0, avatar_read_timeout=3.0))
        try:
            assert fetcher.client.follow_redirects is True
            assert fetcher.client.timeout.connect == 2.0
            assert fetcher.client.timeout.read == 3.0
        finally:
            fetcher.close()

    def test_injected_client_not_closed(self):
        """Test that close leaves an injected client open."""
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))

        with AvatarFetcher(Settings(), client=client):
            pass

        assert not client.is_closed
        client.close()
