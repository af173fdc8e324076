# transparency detection

from __future__ import annotations

from typing import Optional

import numpy as np
from PIL import Image


def full_opacity(dtype) -> float:
    """Alpha value meaning fully opaque for a channel dtype."""
    dt = np.dtype(dtype)
    if dt == np.uint8:
        return 255
    if dt == np.uint16:
        return 65535
    if np.issubdtype(dt, np.floating):
        return 1.0
    raise ValueError(f"Unsupported channel type: {dt}")


def has_alpha_array(arr: np.ndarray) -> bool:
    """True if any pixel of an H x W x C array (alpha last) is not fully opaque.

    Only 2-channel (luma + alpha) and 4-channel (RGBA) layouts carry alpha;
    anything else is opaque by definition and is not scanned.
    """
    if arr.ndim != 3 or arr.shape[2] not in (2, 4):
        return False
    alpha = arr[..., -1]
    # whole plane; a single anti-aliased edge pixel counts
    return bool((alpha < full_opacity(arr.dtype)).any())


def alpha_plane(img: Image.Image) -> Optional[np.ndarray]:
    if img.mode == "PA" or (img.mode == "P" and "transparency" in img.info):
        img = img.convert("RGBA")
    bands = img.getbands()
    name = "A" if "A" in bands else ("a" if "a" in bands else None)
    if name is None:
        return None
    return np.asarray(img.getchannel(name))


def has_alpha(img: Image.Image) -> bool:
    a = alpha_plane(img)
    if a is None:
        return False
    return bool((a < full_opacity(a.dtype)).any())
