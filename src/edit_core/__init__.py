# src/edit_core/__init__.py
"""
edit_core: headless, stateless raster image editing engine
(resize/crop/convert/rotate/background/stickers/text).

Every operation takes an ImageValue and returns a new one; nothing is mutated.
This package is designed to be called from a GUI and/or CLI.
"""

from .errors import (
    EditError,
    InvalidParameters,
    InvalidImageData,
    UnsupportedFormat,
    ImageError,
    EditIOError,
)
from .model import (
    ImageFormat,
    ImageValue,
    RGBColor,
    ConversionOptions,
    StickerOverlay,
    TextOverlay,
)
from .config import EngineConfig, get_config
from .log import setup_logging
from .alpha import has_alpha, has_alpha_array
from .naming import list_images, rewrite_extension
from .io import load_image, save_image, image_from_pil, decode_image
from .ops_geometry import resize_image, crop_image, rotate_image_90, fit_dimensions
from .ops_convert import convert_format, convert_file
from .ops_background import set_background, fill_background
from .ops_stickers import apply_stickers, composite_sticker
from .fonts import (
    FontNotFound,
    FontProvider,
    SystemFontProvider,
    BitmapFontProvider,
    FallbackFontProvider,
)
from .ops_text import apply_texts

__all__ = [
    # errors
    "EditError",
    "InvalidParameters",
    "InvalidImageData",
    "UnsupportedFormat",
    "ImageError",
    "EditIOError",
    # model
    "ImageFormat",
    "ImageValue",
    "RGBColor",
    "ConversionOptions",
    "StickerOverlay",
    "TextOverlay",
    # config / logging
    "EngineConfig",
    "get_config",
    "setup_logging",
    # alpha
    "has_alpha",
    "has_alpha_array",
    # io
    "list_images",
    "rewrite_extension",
    "load_image",
    "save_image",
    "image_from_pil",
    "decode_image",
    # geometry
    "resize_image",
    "crop_image",
    "rotate_image_90",
    "fit_dimensions",
    # convert
    "convert_format",
    "convert_file",
    # background
    "set_background",
    "fill_background",
    # stickers
    "apply_stickers",
    "composite_sticker",
    # text
    "FontNotFound",
    "FontProvider",
    "SystemFontProvider",
    "BitmapFontProvider",
    "FallbackFontProvider",
    "apply_texts",
]

__version__ = "0.1.0"
