# text overlays

from __future__ import annotations

import logging
import re
from typing import Optional, Sequence

from .config import get_config
from .errors import InvalidParameters
from .fonts import FontProvider, default_font_provider, is_cjk
from .io import decode_image, drop_opaque_alpha, ensure_rgba, image_from_pil
from .model import ImageValue, TextOverlay

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")


def parse_hex_color(color: str) -> tuple[int, int, int]:
    m = _HEX_COLOR.match(color.strip())
    if m is None:
        raise ValueError(f"not a #RRGGBB color: {color!r}")
    return tuple(int(c, 16) for c in m.groups())  # type: ignore[return-value]


def preferred_fonts(text: str) -> tuple[str, ...]:
    cfg = get_config()
    if any(is_cjk(ch) for ch in text):
        return cfg.cjk_fonts + cfg.latin_fonts
    return cfg.latin_fonts + cfg.cjk_fonts


def _validate(texts: Sequence[TextOverlay]) -> list[tuple[TextOverlay, tuple[int, int, int]]]:
    if not texts:
        raise InvalidParameters("No text to apply")
    todo = []
    for i, t in enumerate(texts):
        if not t.text:
            continue
        if t.font_size <= 0:
            raise InvalidParameters(f"Text {i} has invalid font size {t.font_size}")
        try:
            rgb = parse_hex_color(t.color)
        except ValueError:
            raise InvalidParameters(f"Invalid color at index {i}: {t.color}") from None
        todo.append((t, rgb))
    return todo


def apply_texts(
    image: ImageValue,
    texts: Sequence[TextOverlay],
    font_provider: Optional[FontProvider] = None,
) -> ImageValue:
    """Draw each text overlay onto ``image`` at its integer position.

    Rotation is accepted but not applied; text is always drawn upright.
    Empty strings are skipped.
    """
    todo = _validate(texts)
    provider = font_provider or default_font_provider()

    base = decode_image(image, "draw text on")
    canvas = ensure_rgba(base).copy()

    for t, (r, g, b) in todo:
        if t.rotation:
            logger.debug("text rotation %.1f ignored", t.rotation)
        font = provider.load(preferred_fonts(t.text), t.font_size)
        font.draw(canvas, (int(round(t.x)), int(round(t.y))), t.text, (r, g, b, 255))

    return image_from_pil(drop_opaque_alpha(canvas, base), path=image.path, fmt=image.format)
