# resize / crop / rotate90

from __future__ import annotations

import logging
import math

from PIL import Image

from .errors import InvalidParameters
from .io import decode_image, image_from_pil
from .model import ImageValue

logger = logging.getLogger(__name__)


def _round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def validate_dimensions(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise InvalidParameters("Width and height must be positive integers")


def fit_dimensions(
    original_width: int,
    original_height: int,
    target_width: int,
    target_height: int,
) -> tuple[int, int]:
    """Largest size inside the target box that keeps the original aspect ratio."""
    original_ratio = original_width / original_height
    target_ratio = target_width / target_height

    if original_ratio > target_ratio:
        # width is the limiting axis
        return target_width, max(1, _round_half_up(target_width / original_ratio))
    return max(1, _round_half_up(target_height * original_ratio)), target_height


def clamp_crop_region(
    x: int,
    y: int,
    width: int,
    height: int,
    img_width: int,
    img_height: int,
) -> tuple[int, int, int, int]:
    """Clamp a crop box to the image instead of rejecting it."""
    cx = min(x, img_width - 1)
    cy = min(y, img_height - 1)
    cw = max(1, min(width, img_width - cx))
    ch = max(1, min(height, img_height - cy))
    return cx, cy, cw, ch


def resize_image(
    image: ImageValue,
    width: int,
    height: int,
    keep_aspect_ratio: bool,
) -> ImageValue:
    """Resize to ``width x height``, or to fit inside it when ``keep_aspect_ratio``.

    With ``keep_aspect_ratio`` the result may be smaller than requested on one
    axis. Resampling is Lanczos for both up- and downscaling.
    """
    validate_dimensions(width, height)
    img = decode_image(image, "resize")

    if keep_aspect_ratio:
        target = fit_dimensions(img.width, img.height, width, height)
    else:
        target = (width, height)

    logger.debug("resize %dx%d -> %dx%d", img.width, img.height, *target)
    resized = img.resize(target, resample=Image.Resampling.LANCZOS)
    return image_from_pil(resized, path=image.path, fmt=image.format)


def crop_image(image: ImageValue, x: int, y: int, width: int, height: int) -> ImageValue:
    if width <= 0 or height <= 0:
        raise InvalidParameters("Crop width and height must be positive integers")
    if x < 0 or y < 0:
        raise InvalidParameters(f"Crop offset must not be negative, got ({x}, {y})")
    img = decode_image(image, "crop")

    cx, cy, cw, ch = clamp_crop_region(x, y, width, height, img.width, img.height)
    if (cx, cy, cw, ch) != (x, y, width, height):
        logger.debug(
            "crop region %dx%d at %d,%d clamped to %dx%d at %d,%d",
            width, height, x, y, cw, ch, cx, cy,
        )
    cropped = img.crop((cx, cy, cx + cw, cy + ch))
    return image_from_pil(cropped, path=image.path, fmt=image.format)


def rotate_image_90(image: ImageValue, clockwise: bool) -> ImageValue:
    img = decode_image(image, "rotate")
    # Pillow's ROTATE_90 is counter-clockwise
    op = Image.Transpose.ROTATE_270 if clockwise else Image.Transpose.ROTATE_90
    return image_from_pil(img.transpose(op), path=image.path, fmt=image.format)
