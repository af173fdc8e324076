# format conversion

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .errors import UnsupportedFormat
from .io import (
    decode_image,
    image_from_pil,
    load_image,
    save_image,
    validate_quality,
)
from .model import ImageFormat, ImageValue
from .naming import rewrite_extension

logger = logging.getLogger(__name__)


def convert_format(
    image: ImageValue,
    target_format: str,
    quality: Optional[int] = None,
) -> ImageValue:
    """Re-encode ``image`` as ``target_format`` and rewrite the path extension.

    ``quality`` (1..100) is honoured for JPEG only; WEBP and AVIF accept it
    but always encode with their default settings.
    """
    validate_quality(quality)
    fmt = ImageFormat.parse(target_format)
    if not fmt.is_raster:
        raise UnsupportedFormat(f"Cannot convert to {fmt} format")

    img = decode_image(image, "convert")
    logger.debug("convert %s -> %s (quality=%s)", image.format, fmt, quality)
    return image_from_pil(
        img,
        path=rewrite_extension(image.path, fmt),
        fmt=fmt,
        quality=quality,
    )


def convert_file(
    in_path: Path,
    out_path: Path,
    target_format: str,
    *,
    quality: Optional[int] = None,
    overwrite: bool = False,
) -> Path:
    converted = convert_format(load_image(in_path), target_format, quality)
    save_image(converted, out_path, overwrite=overwrite)
    return out_path

