# engine settings (env overridable)

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Mapping, Optional

from .errors import InvalidParameters


DEFAULT_JPEG_QUALITY = 90

LATIN_FONTS = (
    "DejaVuSans.ttf",
    "LiberationSans-Regular.ttf",
    "Arial.ttf",
    "arial.ttf",
    "Helvetica.ttc",
    "NotoSans-Regular.ttf",
)

CJK_FONTS = (
    "NotoSansCJK-Regular.ttc",
    "NotoSansSC-Regular.otf",
    "wqy-microhei.ttc",
    "msyh.ttc",
    "simhei.ttf",
    "PingFang.ttc",
    "Hiragino Sans GB.ttc",
)


@dataclass(frozen=True)
class EngineConfig:
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    # searched before the system font directories
    font_dirs: tuple[str, ...] = ()
    latin_fonts: tuple[str, ...] = LATIN_FONTS
    cjk_fonts: tuple[str, ...] = CJK_FONTS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        env = os.environ if environ is None else environ
        cfg = cls()

        q = env.get("EDIT_CORE_JPEG_QUALITY")
        if q:
            try:
                quality = int(q)
            except ValueError:
                raise InvalidParameters(f"EDIT_CORE_JPEG_QUALITY is not an integer: {q!r}") from None
            if not (1 <= quality <= 100):
                raise InvalidParameters(
                    f"EDIT_CORE_JPEG_QUALITY must be between 1 and 100, got {quality}"
                )
            cfg = replace(cfg, jpeg_quality=quality)

        dirs = env.get("EDIT_CORE_FONT_DIRS")
        if dirs:
            cfg = replace(cfg, font_dirs=tuple(d for d in dirs.split(os.pathsep) if d))

        return cfg


@lru_cache(maxsize=1)
def get_config() -> EngineConfig:
    """Process-wide config, read from the environment once."""
    return EngineConfig.from_env()
