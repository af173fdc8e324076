# path handle / extension rules

from __future__ import annotations

import os
from pathlib import Path

from .errors import EditIOError, InvalidParameters
from .model import ImageFormat


SUPPORTED_IMAGE_EXTS = {
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".bmp",
    ".webp",
    ".svg",
    ".tif",
    ".tiff",
    ".ico",
    ".heic",
    ".heif",
    ".avif",
}


def is_image_file(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() in SUPPORTED_IMAGE_EXTS


def rewrite_extension(path: str, fmt: ImageFormat) -> str:
    """Swap the extension of an opaque path handle for ``fmt``'s canonical one.

    The handle is treated as a plain string (it may come from another OS),
    so only the trailing extension is touched.
    """
    stem, ext = os.path.splitext(path)
    if not ext:
        return path + fmt.extension
    return stem + fmt.extension


def list_images(dir_path: Path) -> list[Path]:
    """Supported image files directly inside ``dir_path``, sorted by name."""
    p = Path(dir_path)
    if not p.exists():
        raise EditIOError(f"File not found: {p}")
    if not p.is_dir():
        raise InvalidParameters("Path is not a directory")
    return sorted((child for child in p.iterdir() if is_image_file(child)), key=lambda c: str(c))
