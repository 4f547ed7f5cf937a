"""Bounded avatar downloads over a pooled httpx client."""

from typing import Optional

import httpx
from loguru import logger

from levelcard.config import Settings, settings as default_settings


class AvatarDownloadError(Exception):
    """Avatar could not be downloaded."""
    pass


class AvatarFetcher:
    """Downloads avatar images with timeouts and a streaming size cap.

    One instance can be shared by many renders and threads: it holds a single
    connection pool and no per-request state.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.Client] = None,
    ):
        """Initialize the fetcher.

        Args:
            settings: Download limits; defaults to the module settings
            client: Preconfigured client (tests inject one with a mock transport)
        """
        self.settings = settings or default_settings
        self.max_bytes = self.settings.avatar_max_bytes
        self._owns_client = client is None
        self.client = client or httpx.Client(
            timeout=httpx.Timeout(**self.settings.avatar_timeout),
            follow_redirects=True,
            headers={"User-Agent": self.settings.avatar_user_agent},
        )

    def fetch(self, url: str) -> bytes:
        """Download ``url`` and return the body.

        Raises:
            AvatarDownloadError: On timeout, transport failure, non-success
                status, empty body or a body larger than ``max_bytes``
        """
        try:
            with self.client.stream("GET", url) as response:
                if not response.is_success:
                    raise AvatarDownloadError(
                        f"Failed to download image from {url}: {response.status_code} {response.reason_phrase}"
                    )

                declared = response.headers.get("Content-Length")
                if declared and declared.isdigit() and int(declared) > self.max_bytes:
                    raise AvatarDownloadError(
                        f"Image too large ({declared} bytes, limit {self.max_bytes})"
                    )

                chunks = []
                total = 0
                for chunk in response.iter_bytes():
                    total += len(chunk)
                    if total > self.max_bytes:
                        raise AvatarDownloadError(
                            f"Image too large (exceeds {self.max_bytes} bytes)"
                        )
                    chunks.append(chunk)
        except AvatarDownloadError:
            raise
        except httpx.InvalidURL as e:
            raise AvatarDownloadError(f"Invalid URL: {url}") from e
        except httpx.UnsupportedProtocol as e:
            raise AvatarDownloadError(f"Invalid URL: {url}") from e
        except httpx.TimeoutException as e:
            raise AvatarDownloadError(f"Timed out downloading {url}") from e
        except httpx.HTTPError as e:
            raise AvatarDownloadError(f"Failed to download image from {url}: {e}") from e

        data = b"".join(chunks)
        if not data:
            raise AvatarDownloadError(f"Downloaded image is empty: {url}")

        logger.debug(f"Downloaded avatar: {url} ({len(data)} bytes)")
        return data

    def close(self) -> None:
        """Close the underlying client if this fetcher created it."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "AvatarFetcher":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
