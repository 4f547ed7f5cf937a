"""PNG encoding for rendered cards."""

import io
from enum import Enum
from typing import Union

from PIL import Image
from loguru import logger


class EncodingError(Exception):
    """Card image could not be encoded or decoded."""
    pass


class OutputFormat(str, Enum):
    """Representation handed back to callers."""
    BYTES = "bytes"  # Raw PNG bytes
    IMAGE = "image"  # Decoded PIL image
    BUFFER = "buffer"  # Rewound BytesIO, for upload APIs


class CardEncoder:
    """Lossless PNG encoder with a verifying decoder."""

    def encode(self, image: Image.Image) -> bytes:
        """Encode ``image`` as PNG.

        Raises:
            EncodingError: If Pillow fails or produces no data
        """
        buf = io.BytesIO()
        try:
            image.save(buf, "PNG")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to encode card as PNG: {e}")
            raise EncodingError(f"Failed to encode card as PNG: {e}") from e

        data = buf.getvalue()
        if not data:
            raise EncodingError("PNG encoder produced no data")
        return data

    def decode(self, data: bytes) -> Image.Image:
        """Decode PNG bytes into a fully loaded image.

        Raises:
            EncodingError: If ``data`` is empty or not a readable image
        """
        if not data:
            raise EncodingError("Cannot decode empty image data")
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except Exception as e:
            raise EncodingError(f"Failed to decode card image: {e}") from e
        if img.width <= 0 or img.height <= 0:
            raise EncodingError("Decoded card image is empty")
        return img

    @staticmethod
    def to_buffer(data: bytes) -> io.BytesIO:
        """Wrap PNG bytes in a buffer positioned at the start."""
        buf = io.BytesIO(data)
        buf.seek(0)
        return buf

    def export(
        self,
        image: Image.Image,
        fmt: OutputFormat = OutputFormat.BYTES,
    ) -> Union[bytes, Image.Image, io.BytesIO]:
        """Encode ``image`` and return it in the requested representation."""
        data = self.encode(image)
        if fmt == OutputFormat.IMAGE:
            return self.decode(data)
        if fmt == OutputFormat.BUFFER:
            return self.to_buffer(data)
        return data
