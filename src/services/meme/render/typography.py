from functools import lru_cache
from pathlib import Path
from typing import Optional

from loguru import logger as log
from PIL import ImageFont

from common import global_config

# Canvas text alignment -> Pillow anchor on the alphabetic baseline
ALIGN_ANCHORS = {
    "left": "ls",
    "center": "ms",
    "right": "rs",
}


def anchor_for(text_align: Optional[str]) -> str:
    return ALIGN_ANCHORS.get(text_align or "center", "ms")


def _font_candidates(font_family: Optional[str]) -> list[str]:
    candidates: list[str] = []
    if font_family and font_family != global_config.compositor.font_family:
        # A zone-specific family may be a path or a name Pillow can resolve
        candidates.append(font_family)
        candidates.append(f"{font_family}.ttf")
    candidates.extend(global_config.compositor.font_paths)
    return candidates


@lru_cache(maxsize=64)
def load_font(size: int, font_family: Optional[str] = None) -> ImageFont.ImageFont:
    """Bold face at the requested pixel size, falling back to Pillow's default."""
    for candidate in _font_candidates(font_family):
        if "/" in candidate or "\\" in candidate:
            if not Path(candidate).exists():
                continue
        try:
            return ImageFont.truetype(candidate, size=size)
        except OSError:
            continue

    log.debug(f"No TrueType font found for {font_family or 'default'}, using Pillow default")
    return ImageFont.load_default(size=size)
