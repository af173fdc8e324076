# flatten transparency onto a solid background

from __future__ import annotations

import logging

import numpy as np
from PIL import Image

from .alpha import full_opacity
from .errors import InvalidParameters
from .io import decode_image, ensure_rgba, image_from_pil
from .model import ImageValue

logger = logging.getLogger(__name__)


def fill_background(img: Image.Image, rgb: tuple[int, int, int]) -> Image.Image:
    """Blend every non-opaque pixel over ``rgb`` and make it fully opaque.

    Pixels that are already opaque keep their exact values.
    """
    arr = np.asarray(ensure_rgba(img))
    full = full_opacity(arr.dtype)

    alpha = arr[..., 3]
    mask = alpha < full
    if not mask.any():
        return Image.fromarray(arr.copy())

    out = arr.astype(np.float32)
    a = (alpha[mask].astype(np.float32) / full)[:, None]
    bg = np.array(rgb, dtype=np.float32).reshape((1, 3))
    out[mask, :3] = out[mask, :3] * a + bg * (1.0 - a)
    out[..., 3] = full

    out = np.clip(np.rint(out), 0, full).astype(arr.dtype)
    return Image.fromarray(out)


def set_background(image: ImageValue, r: int, g: int, b: int) -> ImageValue:
    if not image.has_alpha:
        raise InvalidParameters("Image does not have transparency")
    for name, v in (("r", r), ("g", g), ("b", b)):
        if not (0 <= v <= 255):
            raise InvalidParameters(f"Color component {name} must be between 0 and 255, got {v}")

    img = decode_image(image, "set background of")
    logger.debug("background fill (%d, %d, %d) on %dx%d", r, g, b, img.width, img.height)
    flat = fill_background(img, (r, g, b))
    # no pixel can be transparent any more
    return image_from_pil(flat, path=image.path, fmt=image.format, alpha=False)
