import base64
import io

import numpy as np
import pytest
from PIL import Image

from edit_core import ImageFormat, ImageValue
from edit_core.io import image_from_pil


@pytest.fixture
def make_image():
    """Build an ImageValue from a Pillow image or an H x W x C uint8 array."""

    def _make(src, fmt=ImageFormat.PNG, path=None) -> ImageValue:
        img = Image.fromarray(src) if isinstance(src, np.ndarray) else src
        return image_from_pil(img, path=path or f"test{fmt.extension}", fmt=fmt)

    return _make


@pytest.fixture
def decode_rgba():
    """Decode an ImageValue's payload to an RGBA uint8 array."""

    def _decode(value: ImageValue) -> np.ndarray:
        img = Image.open(io.BytesIO(base64.b64decode(value.data)))
        return np.asarray(img.convert("RGBA"))

    return _decode


@pytest.fixture
def gradient():
    def _gradient(width: int, height: int) -> np.ndarray:
        arr = np.zeros((height, width, 4), dtype=np.uint8)
        arr[..., 0] = (np.arange(width) * 255 // max(1, width - 1))[None, :]
        arr[..., 1] = (np.arange(height) * 255 // max(1, height - 1))[:, None]
        arr[..., 2] = 128
        arr[..., 3] = 255
        return arr

    return _gradient


@pytest.fixture
def gray16():
    """16-bit grayscale PNG value filled with ``level`` (0..65535)."""

    def _gray16(width: int, height: int, level: int) -> ImageValue:
        img = Image.fromarray(np.full((height, width), level, dtype=np.int32))
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        data = base64.b64encode(buf.getvalue()).decode("ascii")
        return ImageValue("deep.png", width, height, ImageFormat.PNG, data, False)

    return _gray16
