# image value + overlay descriptors

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .errors import InvalidParameters, UnsupportedFormat


class ImageFormat(str, Enum):
    PNG = "PNG"
    JPEG = "JPEG"
    GIF = "GIF"
    BMP = "BMP"
    WEBP = "WEBP"
    SVG = "SVG"
    TIFF = "TIFF"
    ICO = "ICO"
    HEIC = "HEIC"
    AVIF = "AVIF"

    def __str__(self) -> str:
        return self.value

    @property
    def pil_name(self) -> Optional[str]:
        """Pillow codec name, or None when the engine has no codec for it."""
        return _PIL_NAMES[self]

    @property
    def is_raster(self) -> bool:
        return self.pil_name is not None

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]

    @classmethod
    def parse(cls, name: str) -> "ImageFormat":
        key = name.strip().upper()
        key = _NAME_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise UnsupportedFormat(f"Unsupported target format: {name}") from None

    @classmethod
    def from_extension(cls, ext: str) -> Optional["ImageFormat"]:
        return _BY_EXTENSION.get(ext.lower().lstrip("."))

    @classmethod
    def from_pil(cls, pil_format: Optional[str]) -> Optional["ImageFormat"]:
        if not pil_format:
            return None
        return _BY_PIL_NAME.get(pil_format.upper())


# Every member must appear here; tests/test_model.py enforces it.
_PIL_NAMES: dict[ImageFormat, Optional[str]] = {
    ImageFormat.PNG: "PNG",
    ImageFormat.JPEG: "JPEG",
    ImageFormat.GIF: "GIF",
    ImageFormat.BMP: "BMP",
    ImageFormat.WEBP: "WEBP",
    ImageFormat.SVG: None,
    ImageFormat.TIFF: "TIFF",
    ImageFormat.ICO: "ICO",
    ImageFormat.HEIC: None,
    ImageFormat.AVIF: "AVIF",
}

_EXTENSIONS: dict[ImageFormat, str] = {
    ImageFormat.PNG: ".png",
    ImageFormat.JPEG: ".jpg",
    ImageFormat.GIF: ".gif",
    ImageFormat.BMP: ".bmp",
    ImageFormat.WEBP: ".webp",
    ImageFormat.SVG: ".svg",
    ImageFormat.TIFF: ".tiff",
    ImageFormat.ICO: ".ico",
    ImageFormat.HEIC: ".heic",
    ImageFormat.AVIF: ".avif",
}

_NAME_ALIASES = {"JPG": "JPEG", "TIF": "TIFF", "HEIF": "HEIC"}

_BY_EXTENSION: dict[str, ImageFormat] = {
    "png": ImageFormat.PNG,
    "jpg": ImageFormat.JPEG,
    "jpeg": ImageFormat.JPEG,
    "gif": ImageFormat.GIF,
    "bmp": ImageFormat.BMP,
    "webp": ImageFormat.WEBP,
    "svg": ImageFormat.SVG,
    "tif": ImageFormat.TIFF,
    "tiff": ImageFormat.TIFF,
    "ico": ImageFormat.ICO,
    "heic": ImageFormat.HEIC,
    "heif": ImageFormat.HEIC,
    "avif": ImageFormat.AVIF,
}

# MPO is what Pillow reports for multi-picture camera JPEGs.
_BY_PIL_NAME: dict[str, ImageFormat] = {
    "PNG": ImageFormat.PNG,
    "JPEG": ImageFormat.JPEG,
    "MPO": ImageFormat.JPEG,
    "GIF": ImageFormat.GIF,
    "BMP": ImageFormat.BMP,
    "WEBP": ImageFormat.WEBP,
    "TIFF": ImageFormat.TIFF,
    "ICO": ImageFormat.ICO,
    "AVIF": ImageFormat.AVIF,
}


@dataclass(frozen=True)
class ImageValue:
    """Encoded image plus the metadata the UI shows.

    ``data`` is the base64 transport of the encoded file bytes. Values are
    never mutated; every operation returns a new one.
    """

    path: str
    width: int
    height: int
    format: ImageFormat
    data: str
    has_alpha: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "width": self.width,
            "height": self.height,
            "format": self.format.value,
            "data": self.data,
            "hasAlpha": self.has_alpha,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "ImageValue":
        try:
            return cls(
                path=str(d["path"]),
                width=int(d["width"]),
                height=int(d["height"]),
                format=ImageFormat.parse(str(d["format"])),
                data=str(d["data"]),
                has_alpha=bool(d["hasAlpha"]),
            )
        except KeyError as e:
            raise InvalidParameters(f"Missing image field: {e.args[0]}") from e


@dataclass(frozen=True)
class RGBColor:
    r: int
    g: int
    b: int

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class ConversionOptions:
    # JPEG only; WEBP/AVIF accept it but the encoder ignores it
    quality: Optional[int] = None


@dataclass(frozen=True)
class StickerOverlay:
    data: str  # base64 encoded image
    x: float
    y: float
    width: int
    height: int
    rotation: float = 0.0  # degrees, clockwise, about the sticker centre

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "StickerOverlay":
        return cls(
            data=str(d["data"]),
            x=float(d["x"]),
            y=float(d["y"]),
            width=int(d["width"]),
            height=int(d["height"]),
            rotation=float(d.get("rotation", 0.0)),
        )


@dataclass(frozen=True)
class TextOverlay:
    text: str
    x: float
    y: float
    font_size: int
    color: str = "#000000"
    rotation: float = 0.0  # accepted, not applied

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "TextOverlay":
        return cls(
            text=str(d["text"]),
            x=float(d["x"]),
            y=float(d["y"]),
            font_size=int(d["fontSize"]),
            color=str(d.get("color", "#000000")),
            rotation=float(d.get("rotation", 0.0)),
        )
