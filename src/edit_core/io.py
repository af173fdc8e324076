# codec bridge: base64 transport, decode/encode, file load/save
# src/edit_core/io.py

from __future__ import annotations

import base64
import binascii
import logging
from io import BytesIO
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from .alpha import has_alpha
from .config import get_config
from .errors import (
    EditIOError,
    ImageError,
    InvalidImageData,
    InvalidParameters,
    UnsupportedFormat,
)
from .model import ImageFormat, ImageValue

logger = logging.getLogger(__name__)

# Modes the transforms operate on directly; everything else is normalised.
WORKING_MODES = {"L", "LA", "RGB", "RGBA", "I", "F"}

# Modes each encoder accepts without conversion.
ENCODER_MODES: dict[ImageFormat, set[str]] = {
    ImageFormat.PNG: {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"},
    ImageFormat.JPEG: {"L", "RGB", "CMYK"},
    ImageFormat.GIF: {"1", "L", "P", "RGB", "RGBA"},
    ImageFormat.BMP: {"1", "L", "P", "RGB", "RGBA"},
    ImageFormat.WEBP: {"RGB", "RGBA"},
    ImageFormat.TIFF: {"1", "L", "LA", "I", "I;16", "F", "P", "RGB", "RGBA", "CMYK"},
    ImageFormat.ICO: {"RGBA"},
    ImageFormat.AVIF: {"RGB", "RGBA"},
}

# Pillow writes a zero-entry icon for anything larger
ICO_MAX_SIDE = 256


def encode_b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def decode_bytes(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageData(f"Failed to decode Base64: {e}") from e


def open_image(raw: bytes) -> Image.Image:
    try:
        img = Image.open(BytesIO(raw))
    except UnidentifiedImageError as e:
        raise InvalidImageData(f"Unrecognized image data ({e})") from e
    except (OSError, ValueError, SyntaxError) as e:
        raise ImageError(str(e)) from e
    try:
        img.load()
    except (OSError, ValueError, SyntaxError) as e:
        raise ImageError(f"Failed to decode image ({e})") from e
    return img


def to_working(img: Image.Image) -> Image.Image:
    """Normalise palette/bilevel/CMYK/16-bit images to a mode transforms accept."""
    if img.mode in WORKING_MODES:
        return img
    if img.mode in ("PA", "La", "RGBa") or (img.mode == "P" and "transparency" in img.info):
        return img.convert("RGBA")
    if img.mode.startswith("I;16"):
        return img.convert("I")
    return img.convert("RGB")


def is_wide(mode: str) -> bool:
    return mode in ("I", "F") or mode.startswith("I;16")


def narrow_to_l(img: Image.Image) -> Image.Image:
    """8-bit grayscale copy of an I/I;16/F image.

    Integer samples are taken as 16-bit and rescaled (Pillow's own I -> L
    conversion clips everything above 255 to white). Float samples keep
    Pillow's clipping.
    """
    if img.mode == "F":
        return img.convert("L")
    arr = np.asarray(img, dtype=np.float64)
    out = np.clip(np.rint(arr / 257.0), 0, 255).astype(np.uint8)
    return Image.fromarray(out)


def ensure_rgba(img: Image.Image) -> Image.Image:
    if img.mode == "RGBA":
        return img
    if is_wide(img.mode):
        img = narrow_to_l(img)
    return img.convert("RGBA")


def ensure_rgb(img: Image.Image) -> Image.Image:
    if img.mode == "RGB":
        return img
    if is_wide(img.mode):
        img = narrow_to_l(img)
    return img.convert("RGB")


def drop_opaque_alpha(img: Image.Image, source: Image.Image) -> Image.Image:
    """Return to RGB when the source had no alpha band and nothing became transparent."""
    if "A" in source.getbands() or has_alpha(img):
        return img
    return ensure_rgb(img)


def require_raster(image: ImageValue, action: str) -> None:
    if not image.format.is_raster:
        raise UnsupportedFormat(f"Cannot {action} {image.format} format")


def validate_quality(quality: Optional[int]) -> None:
    if quality is None:
        return
    if not (1 <= quality <= 100):
        raise InvalidParameters(f"Quality parameter must be between 1 and 100, got {quality}")


def decode_image(image: ImageValue, action: str = "decode") -> Image.Image:
    """Decode an image value into a fresh, fully loaded Pillow image."""
    require_raster(image, action)
    return to_working(open_image(decode_bytes(image.data)))


def prepare_for_encoder(img: Image.Image, fmt: ImageFormat) -> Image.Image:
    allowed = ENCODER_MODES.get(fmt)
    if allowed is None:
        raise UnsupportedFormat(f"Cannot encode {fmt} format")
    if img.mode in allowed:
        return img
    keep_alpha = "RGBA" in allowed and "A" in img.getbands()
    if keep_alpha or allowed == {"RGBA"}:
        return ensure_rgba(img)
    wide = is_wide(img.mode)
    if "RGB" in allowed and not wide:
        return ensure_rgb(img)
    if "L" in allowed:
        return narrow_to_l(img) if wide else img.convert("L")
    return ensure_rgb(img)


def encode_image(img: Image.Image, fmt: ImageFormat, quality: Optional[int] = None) -> bytes:
    name = fmt.pil_name
    if name is None:
        raise UnsupportedFormat(f"Cannot encode {fmt} format")
    validate_quality(quality)

    out = prepare_for_encoder(img, fmt)
    params: dict = {}
    if fmt is ImageFormat.JPEG:
        params["quality"] = quality if quality is not None else get_config().jpeg_quality
    elif fmt is ImageFormat.ICO:
        if out.width > ICO_MAX_SIDE or out.height > ICO_MAX_SIDE:
            raise InvalidParameters(
                f"ICO images cannot exceed {ICO_MAX_SIDE}x{ICO_MAX_SIDE}, got {out.width}x{out.height}"
            )
        params["sizes"] = [out.size]
    elif quality is not None:
        # WEBP/AVIF always use encoder defaults
        logger.debug("%s encoder ignores quality=%s", fmt, quality)

    buf = BytesIO()
    try:
        out.save(buf, format=name, **params)
    except (OSError, ValueError, KeyError) as e:
        raise ImageError(f"Failed to encode {fmt}: {e}") from e
    return buf.getvalue()


def image_from_pil(
    img: Image.Image,
    *,
    path: str,
    fmt: ImageFormat,
    quality: Optional[int] = None,
    alpha: Optional[bool] = None,
) -> ImageValue:
    """Encode ``img`` and wrap it in a new image value.

    ``has_alpha`` is re-derived from what the encoder actually receives unless
    ``alpha`` is given explicitly. GIF keeps only fully transparent palette
    entries, so its flag is read back from the encoded bytes.
    """
    out = prepare_for_encoder(img, fmt)
    raw = encode_image(out, fmt, quality)
    if alpha is None:
        alpha = has_alpha(open_image(raw)) if fmt is ImageFormat.GIF else has_alpha(out)
    return ImageValue(
        path=path,
        width=out.width,
        height=out.height,
        format=fmt,
        data=encode_b64(raw),
        has_alpha=alpha,
    )


def load_image(path: Path) -> ImageValue:
    p = Path(path)
    if not p.is_file():
        raise EditIOError(f"File not found: {p}")
    try:
        raw = p.read_bytes()
    except OSError as e:
        raise EditIOError(f"Failed to read {p} ({e})") from e

    ext = p.suffix.lower()
    fmt = ImageFormat.from_extension(ext) if ext else None

    if fmt is ImageFormat.SVG:
        # dimensions are left to the renderer
        return ImageValue(
            path=str(path), width=0, height=0, format=fmt, data=encode_b64(raw), has_alpha=True
        )
    if fmt is ImageFormat.HEIC:
        raise UnsupportedFormat("HEIC format is not yet supported")

    img = open_image(raw)
    if fmt is None:
        fmt = ImageFormat.from_pil(img.format)
        if fmt is None:
            raise UnsupportedFormat(f"Unknown format: {ext or img.format}")

    logger.debug("loaded %s (%dx%d %s, mode=%s)", p, img.width, img.height, fmt, img.mode)
    return ImageValue(
        path=str(path),
        width=img.width,
        height=img.height,
        format=fmt,
        data=encode_b64(raw),
        has_alpha=has_alpha(img),
    )


def save_image(image: ImageValue, path: Path, *, overwrite: bool = True) -> None:
    raw = decode_bytes(image.data)
    p = Path(path)
    if not p.parent.is_dir():
        raise EditIOError(f"Directory does not exist: {p.parent}")
    if p.exists() and not overwrite:
        raise EditIOError(f"Refusing to overwrite existing file: {p}")
    try:
        p.write_bytes(raw)
    except PermissionError as e:
        raise EditIOError(f"Permission denied: cannot write to {p}") from e
    except OSError as e:
        raise EditIOError(f"Failed to save image: {p} ({e})") from e
