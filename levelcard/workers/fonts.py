"""Font resolution with a cross-platform fallback chain."""

from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from PIL import ImageFont, features
from loguru import logger

from levelcard.config import Settings, settings as default_settings

FONT_EXTENSIONS = {".ttf", ".otf", ".ttc"}
BUILTIN = "<builtin>"  # Cache marker for Pillow's bundled face


class FontResolutionError(Exception):
    """No usable font face could be found."""
    pass


class FontStyle(str, Enum):
    BOLD = "bold"
    REGULAR = "regular"


# Canonical UI faces (Windows → macOS → Linux metric clones)
CANONICAL_FACES = {
    FontStyle.BOLD: [
        "arialbd.ttf",
        "Arial Bold.ttf",
        "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
        "/Library/Fonts/Arial Bold.ttf",
        "/System/Library/Fonts/Helvetica.ttc",
    ],
    FontStyle.REGULAR: [
        "arial.ttf",
        "Arial.ttf",
        "/System/Library/Fonts/Supplemental/Arial.ttf",
        "/Library/Fonts/Arial.ttf",
        "/System/Library/Fonts/Helvetica.ttc",
    ],
}

# Generic sans-serif families
SANS_SERIF_FACES = {
    FontStyle.BOLD: [
        "DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",
        "LiberationSans-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        "FreeSansBold.ttf",
    ],
    FontStyle.REGULAR: [
        "DejaVuSans.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/TTF/DejaVuSans.ttf",
        "LiberationSans-Regular.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "FreeSans.ttf",
    ],
}


def _renders_latin(font: ImageFont.FreeTypeFont) -> bool:
    bbox = font.getbbox("A")
    return bbox[2] - bbox[0] > 0 and bbox[3] - bbox[1] > 0


class FontResolver:
    """Resolves bold and regular faces, caching the chosen source per style."""

    PROBE_SIZE = 16

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self._sources: Dict[FontStyle, str] = {}

    @staticmethod
    def _find_font(candidates: Iterable[str], size: int) -> Optional[ImageFont.FreeTypeFont]:
        """Try loading a font from a list of candidate paths or file names."""
        for path in candidates:
            try:
                return ImageFont.truetype(str(path), size)
            except OSError:
                continue
        return None

    def _scan_directories(self, style: FontStyle) -> List[Path]:
        """Font files found in the configured directories, best match first."""
        found = []
        for directory in self.settings.font_directories:
            if not directory.is_dir():
                continue
            try:
                found.extend(
                    p for p in sorted(directory.rglob("*"))
                    if p.suffix.lower() in FONT_EXTENSIONS
                )
            except OSError as e:
                logger.debug(f"Skipping font directory {directory}: {e}")

        def rank(path: Path) -> int:
            bold = "bold" in path.stem.lower()
            return 0 if bold == (style == FontStyle.BOLD) else 1

        return sorted(found, key=rank)

    def _candidates(self, style: FontStyle) -> List[str]:
        candidates = []
        if self.settings.fonts_dir:
            fonts_dir = Path(self.settings.fonts_dir)
            candidates.extend(str(fonts_dir / Path(c).name) for c in CANONICAL_FACES[style])
            candidates.extend(str(fonts_dir / Path(c).name) for c in SANS_SERIF_FACES[style])
        candidates.extend(CANONICAL_FACES[style])
        candidates.extend(SANS_SERIF_FACES[style])
        return candidates

    def _resolve_source(self, style: FontStyle) -> str:
        # Canonical UI face, then generic sans-serif
        for candidate in self._candidates(style):
            font = self._find_font([candidate], self.PROBE_SIZE)
            if font is not None:
                return candidate

        # Any installed face that can draw a Latin letter
        for path in self._scan_directories(style):
            font = self._find_font([str(path)], self.PROBE_SIZE)
            if font is not None and _renders_latin(font):
                return str(path)

        # Pillow's bundled scalable face
        if self.settings.allow_builtin_font and features.check("freetype2"):
            font = ImageFont.load_default(self.PROBE_SIZE)
            if isinstance(font, ImageFont.FreeTypeFont):
                return BUILTIN

        logger.error(f"Failed to load any usable {style.value} font")
        raise FontResolutionError(f"Failed to load any usable {style.value} font")

    def resolve_face(self, style: FontStyle, size: int) -> ImageFont.FreeTypeFont:
        """Return a face of ``style`` at ``size`` pixels.

        Raises:
            FontResolutionError: If no face in the fallback chain is usable
        """
        source = self._sources.get(style)
        if source is None:
            source = self._resolve_source(style)
            self._sources[style] = source
            logger.info(f"Fonts loaded: {style.value}={source}")

        if source == BUILTIN:
            return ImageFont.load_default(size)
        try:
            return ImageFont.truetype(source, size)
        except OSError as e:
            raise FontResolutionError(f"Font {source} could not be loaded: {e}") from e
