# font lookup behind a provider interface + 5x7 bitmap fallback

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Protocol, Sequence

from PIL import Image, ImageDraw, ImageFont

from .config import get_config

logger = logging.getLogger(__name__)

Fill = tuple[int, int, int, int]

FONT_EXTS = {".ttf", ".otf", ".ttc"}

GLYPH_WIDTH = 5
GLYPH_HEIGHT = 7
GLYPH_PITCH = 6  # columns per character, including the gap


class FontNotFound(LookupError):
    pass


class TextFont(Protocol):
    def draw(self, canvas: Image.Image, xy: tuple[int, int], text: str, fill: Fill) -> None:
        ...


class FontProvider(Protocol):
    def load(self, preferred_names: Sequence[str], size: int) -> TextFont:
        """Return a font of ``size`` px, or raise FontNotFound."""
        ...


@dataclass(frozen=True)
class TrueTypeFont:
    font: ImageFont.FreeTypeFont

    def draw(self, canvas: Image.Image, xy: tuple[int, int], text: str, fill: Fill) -> None:
        ImageDraw.Draw(canvas).text(xy, text, font=self.font, fill=fill)


def system_font_dirs() -> list[Path]:
    home = Path.home()
    dirs = [
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
        home / ".fonts",
        home / ".local" / "share" / "fonts",
        Path("/Library/Fonts"),
        Path("/System/Library/Fonts"),
        home / "Library" / "Fonts",
    ]
    windir = os.environ.get("WINDIR")
    if windir:
        dirs.append(Path(windir) / "Fonts")
    return dirs


class SystemFontProvider:
    """Finds font files by name in bundled dirs first, then system dirs.

    The directory index is built on first use and kept for the provider's
    lifetime, so reuse one instance.
    """

    def __init__(self, font_dirs: Sequence[Path] = (), *, search_system: bool = True) -> None:
        self._dirs = [Path(d) for d in font_dirs]
        if search_system:
            self._dirs.extend(system_font_dirs())
        self._index: Optional[dict[str, Path]] = None

    def _build_index(self) -> dict[str, Path]:
        index: dict[str, Path] = {}
        for d in self._dirs:
            if not d.is_dir():
                continue
            try:
                found = sorted(d.rglob("*"))
            except OSError as e:
                logger.debug("cannot scan font dir %s: %s", d, e)
                continue
            for p in found:
                if p.suffix.lower() in FONT_EXTS:
                    # earlier dirs win
                    index.setdefault(p.name.lower(), p)
        logger.debug("indexed %d font files", len(index))
        return index

    def find(self, name: str) -> Optional[Path]:
        if self._index is None:
            self._index = self._build_index()
        return self._index.get(name.lower())

    def load(self, preferred_names: Sequence[str], size: int) -> TextFont:
        for name in preferred_names:
            path = self.find(name)
            if path is None:
                continue
            try:
                return TrueTypeFont(ImageFont.truetype(str(path), size))
            except OSError as e:
                logger.debug("unusable font %s: %s", path, e)
        raise FontNotFound(f"No usable font among: {', '.join(preferred_names)}")


# 5x7 patterns, one int per row, bit 4 = leftmost column
GLYPHS: dict[str, tuple[int, ...]] = {
    " ": (0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00),
    "0": (0x0E, 0x11, 0x13, 0x15, 0x19, 0x11, 0x0E),
    "1": (0x04, 0x0C, 0x04, 0x04, 0x04, 0x04, 0x0E),
    "2": (0x0E, 0x11, 0x01, 0x02, 0x04, 0x08, 0x1F),
    "3": (0x1F, 0x02, 0x04, 0x02, 0x01, 0x11, 0x0E),
    "4": (0x02, 0x06, 0x0A, 0x12, 0x1F, 0x02, 0x02),
    "5": (0x1F, 0x10, 0x1E, 0x01, 0x01, 0x11, 0x0E),
    "6": (0x06, 0x08, 0x10, 0x1E, 0x11, 0x11, 0x0E),
    "7": (0x1F, 0x01, 0x02, 0x04, 0x08, 0x08, 0x08),
    "8": (0x0E, 0x11, 0x11, 0x0E, 0x11, 0x11, 0x0E),
    "9": (0x0E, 0x11, 0x11, 0x0F, 0x01, 0x02, 0x0C),
    "A": (0x0E, 0x11, 0x11, 0x1F, 0x11, 0x11, 0x11),
    "B": (0x1E, 0x11, 0x11, 0x1E, 0x11, 0x11, 0x1E),
    "C": (0x0E, 0x11, 0x10, 0x10, 0x10, 0x11, 0x0E),
    "D": (0x1C, 0x12, 0x11, 0x11, 0x11, 0x12, 0x1C),
    "E": (0x1F, 0x10, 0x10, 0x1E, 0x10, 0x10, 0x1F),
    "F": (0x1F, 0x10, 0x10, 0x1E, 0x10, 0x10, 0x10),
    "G": (0x0E, 0x11, 0x10, 0x17, 0x11, 0x11, 0x0F),
    "H": (0x11, 0x11, 0x11, 0x1F, 0x11, 0x11, 0x11),
    "I": (0x0E, 0x04, 0x04, 0x04, 0x04, 0x04, 0x0E),
    "J": (0x07, 0x02, 0x02, 0x02, 0x02, 0x12, 0x0C),
    "K": (0x11, 0x12, 0x14, 0x18, 0x14, 0x12, 0x11),
    "L": (0x10, 0x10, 0x10, 0x10, 0x10, 0x10, 0x1F),
    "M": (0x11, 0x1B, 0x15, 0x15, 0x11, 0x11, 0x11),
    "N": (0x11, 0x11, 0x19, 0x15, 0x13, 0x11, 0x11),
    "O": (0x0E, 0x11, 0x11, 0x11, 0x11, 0x11, 0x0E),
    "P": (0x1E, 0x11, 0x11, 0x1E, 0x10, 0x10, 0x10),
    "Q": (0x0E, 0x11, 0x11, 0x11, 0x15, 0x12, 0x0D),
    "R": (0x1E, 0x11, 0x11, 0x1E, 0x14, 0x12, 0x11),
    "S": (0x0F, 0x10, 0x10, 0x0E, 0x01, 0x01, 0x1E),
    "T": (0x1F, 0x04, 0x04, 0x04, 0x04, 0x04, 0x04),
    "U": (0x11, 0x11, 0x11, 0x11, 0x11, 0x11, 0x0E),
    "V": (0x11, 0x11, 0x11, 0x11, 0x11, 0x0A, 0x04),
    "W": (0x11, 0x11, 0x11, 0x15, 0x15, 0x15, 0x0A),
    "X": (0x11, 0x11, 0x0A, 0x04, 0x0A, 0x11, 0x11),
    "Y": (0x11, 0x11, 0x11, 0x0A, 0x04, 0x04, 0x04),
    "Z": (0x1F, 0x01, 0x02, 0x04, 0x08, 0x10, 0x1F),
    ".": (0x00, 0x00, 0x00, 0x00, 0x00, 0x0C, 0x0C),
    ",": (0x00, 0x00, 0x00, 0x00, 0x0C, 0x04, 0x08),
    "!": (0x04, 0x04, 0x04, 0x04, 0x04, 0x00, 0x04),
    "?": (0x0E, 0x11, 0x01, 0x02, 0x04, 0x00, 0x04),
    "-": (0x00, 0x00, 0x00, 0x1F, 0x00, 0x00, 0x00),
    ":": (0x00, 0x0C, 0x0C, 0x00, 0x0C, 0x0C, 0x00),
    "'": (0x04, 0x04, 0x08, 0x00, 0x00, 0x00, 0x00),
    "/": (0x01, 0x01, 0x02, 0x04, 0x08, 0x10, 0x10),
}

# CJK / kana / hangul / fullwidth forms
PLACEHOLDER_CJK = (0x1F, 0x15, 0x15, 0x1F, 0x15, 0x15, 0x1F)
# anything else the table lacks
PLACEHOLDER_OTHER = (0x1F, 0x11, 0x11, 0x11, 0x11, 0x11, 0x1F)

_CJK_RANGES = (
    (0x2E80, 0x9FFF),
    (0xAC00, 0xD7AF),
    (0xF900, 0xFAFF),
    (0xFF00, 0xFFEF),
    (0x20000, 0x2FA1F),
)


def is_cjk(ch: str) -> bool:
    cp = ord(ch)
    return any(lo <= cp <= hi for lo, hi in _CJK_RANGES)


def glyph_for(ch: str) -> tuple[int, ...]:
    if ch.isspace():
        return GLYPHS[" "]
    pattern = GLYPHS.get(ch.upper() if ch.isascii() else ch)
    if pattern is not None:
        return pattern
    return PLACEHOLDER_CJK if is_cjk(ch) else PLACEHOLDER_OTHER


@dataclass(frozen=True)
class BitmapFont:
    """Crude fixed-pitch 5x7 font scaled to roughly ``size`` px tall."""

    size: int

    @property
    def scale(self) -> int:
        return max(1, int(self.size / GLYPH_HEIGHT + 0.5))

    def draw(self, canvas: Image.Image, xy: tuple[int, int], text: str, fill: Fill) -> None:
        draw = ImageDraw.Draw(canvas)
        s = self.scale
        x0, y0 = xy
        for i, ch in enumerate(text):
            gx = x0 + i * GLYPH_PITCH * s
            for row, bits in enumerate(glyph_for(ch)):
                for col in range(GLYPH_WIDTH):
                    if bits & (0x10 >> col):
                        px = gx + col * s
                        py = y0 + row * s
                        draw.rectangle([px, py, px + s - 1, py + s - 1], fill=fill)


class BitmapFontProvider:
    def load(self, preferred_names: Sequence[str], size: int) -> TextFont:
        return BitmapFont(size)


class FallbackFontProvider:
    """Tries each provider in turn; the first that finds a font wins."""

    def __init__(self, providers: Sequence[FontProvider]) -> None:
        self._providers = list(providers)

    def load(self, preferred_names: Sequence[str], size: int) -> TextFont:
        for provider in self._providers:
            try:
                return provider.load(preferred_names, size)
            except FontNotFound as e:
                logger.debug("%s: %s", type(provider).__name__, e)
        raise FontNotFound(f"No provider could load any of: {', '.join(preferred_names)}")


@lru_cache(maxsize=1)
def default_font_provider() -> FontProvider:
    cfg = get_config()
    return FallbackFontProvider(
        [SystemFontProvider([Path(d) for d in cfg.font_dirs]), BitmapFontProvider()]
    )
