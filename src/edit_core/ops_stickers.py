# rotated sticker compositing (inverse mapping + bilinear + alpha-over)

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

import numpy as np
from PIL import Image

from .errors import InvalidImageData, InvalidParameters
from .io import (
    decode_bytes,
    decode_image,
    drop_opaque_alpha,
    ensure_rgba,
    image_from_pil,
    open_image,
    to_working,
)
from .model import ImageValue, StickerOverlay

logger = logging.getLogger(__name__)

FULL_ALPHA = 255.0


def sticker_bounds(
    x: float,
    y: float,
    width: int,
    height: int,
    rotation: float,
    canvas_width: int,
    canvas_height: int,
) -> Optional[tuple[int, int, int, int]]:
    """Axis-aligned box (x0, y0, x1, y1) covered by the rotated sticker.

    Clipped to the canvas; None if the sticker lands entirely outside it.
    """
    theta = math.radians(rotation)
    cos_t, sin_t = math.cos(theta), math.sin(theta)
    cx, cy = x + width / 2.0, y + height / 2.0
    hw, hh = width / 2.0, height / 2.0

    xs: list[float] = []
    ys: list[float] = []
    for sx, sy in ((-hw, -hh), (hw, -hh), (hw, hh), (-hw, hh)):
        xs.append(cx + sx * cos_t - sy * sin_t)
        ys.append(cy + sx * sin_t + sy * cos_t)

    x0 = max(0, math.floor(min(xs)))
    y0 = max(0, math.floor(min(ys)))
    x1 = min(canvas_width, math.ceil(max(xs)) + 1)
    y1 = min(canvas_height, math.ceil(max(ys)) + 1)
    if x0 >= x1 or y0 >= y1:
        return None
    return x0, y0, x1, y1


def bilinear_sample(src: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Sample ``src`` (H x W x C) at fractional coordinates, clamping at the edges."""
    h, w = src.shape[:2]
    x0 = np.floor(xs).astype(np.intp)
    y0 = np.floor(ys).astype(np.intp)
    fx = (xs - x0)[:, None]
    fy = (ys - y0)[:, None]

    x0c = np.clip(x0, 0, w - 1)
    x1c = np.clip(x0 + 1, 0, w - 1)
    y0c = np.clip(y0, 0, h - 1)
    y1c = np.clip(y0 + 1, 0, h - 1)

    top = src[y0c, x0c] * (1.0 - fx) + src[y0c, x1c] * fx
    bottom = src[y1c, x0c] * (1.0 - fx) + src[y1c, x1c] * fx
    return top * (1.0 - fy) + bottom * fy


def composite_sticker(
    canvas: np.ndarray,
    sticker: np.ndarray,
    x: float,
    y: float,
    rotation: float = 0.0,
) -> bool:
    """Alpha-over ``sticker`` onto ``canvas`` in place.

    Both arrays are float RGBA in 0..255. The sticker's top-left (unrotated)
    sits at ``(x, y)`` and it is rotated clockwise by ``rotation`` degrees
    about its own centre. Returns False when no canvas pixel was touched.
    """
    sh, sw = sticker.shape[:2]
    ch, cw = canvas.shape[:2]
    bounds = sticker_bounds(x, y, sw, sh, rotation, cw, ch)
    if bounds is None:
        return False
    x0, y0, x1, y1 = bounds

    theta = math.radians(rotation)
    cos_t, sin_t = math.cos(theta), math.sin(theta)
    cx, cy = x + sw / 2.0, y + sh / 2.0

    by, bx = np.mgrid[y0:y1, x0:x1]
    dx = bx - cx
    dy = by - cy
    # inverse rotation: canvas pixel -> unrotated sticker coordinate
    src_x = dx * cos_t + dy * sin_t + sw / 2.0
    src_y = -dx * sin_t + dy * cos_t + sh / 2.0

    inside = (src_x >= 0) & (src_x < sw) & (src_y >= 0) & (src_y < sh)
    if not inside.any():
        return False

    px = bilinear_sample(sticker, src_x[inside], src_y[inside])
    region = canvas[y0:y1, x0:x1]
    dst = region[inside]

    a = px[:, 3:4] / FULL_ALPHA
    rgb = dst[:, :3] * (1.0 - a) + px[:, :3] * a
    alpha = np.minimum(dst[:, 3:4] * (1.0 - a) + px[:, 3:4], FULL_ALPHA)
    region[inside] = np.concatenate([rgb, alpha], axis=1)
    return True


def _load_sticker(index: int, overlay: StickerOverlay) -> np.ndarray:
    try:
        img = to_working(open_image(decode_bytes(overlay.data)))
    except InvalidImageData as e:
        raise InvalidImageData(f"Sticker {index}: {e.detail}") from e
    rgba = ensure_rgba(img)
    if rgba.size != (overlay.width, overlay.height):
        rgba = rgba.resize((overlay.width, overlay.height), resample=Image.Resampling.LANCZOS)
    return np.asarray(rgba, dtype=np.float32)


def apply_stickers(image: ImageValue, overlays: Sequence[StickerOverlay]) -> ImageValue:
    """Composite ``overlays`` onto ``image`` in order; later ones end up on top."""
    if not overlays:
        raise InvalidParameters("No stickers to apply")
    for i, ov in enumerate(overlays):
        if ov.width <= 0 or ov.height <= 0:
            raise InvalidParameters(f"Sticker {i} has invalid size {ov.width}x{ov.height}")

    base = decode_image(image, "apply stickers to")
    canvas = np.asarray(ensure_rgba(base), dtype=np.float32).copy()

    for i, ov in enumerate(overlays):
        sticker = _load_sticker(i, ov)
        touched = composite_sticker(canvas, sticker, ov.x, ov.y, ov.rotation)
        if not touched:
            logger.debug("sticker %d at (%s, %s) is outside the image", i, ov.x, ov.y)

    out = Image.fromarray(np.clip(np.rint(canvas), 0, 255).astype(np.uint8))
    return image_from_pil(drop_opaque_alpha(out, base), path=image.path, fmt=image.format)
