from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Sequence, Tuple

from PIL import ImageFont

from logging_utils import get_logger

logger = get_logger(__name__)

# Tried in order when no font path is configured.
FALLBACK_FONT_NAMES: Tuple[str, ...] = (
    "Comic Sans MS.ttf",
    "comic.ttf",
    "DejaVuSans.ttf",
    "Arial.ttf",
)


def parse_rgb(value: object, fallback: Tuple[int, int, int]) -> Tuple[int, int, int]:
    """Read a config colour given as ``"#rgb"``/``"#rrggbb"`` or an ``[r, g, b]`` list."""
    if isinstance(value, str):
        digits = value.strip().lstrip("#")
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        if len(digits) != 6:
            logger.warning("Ignoring colour %r; expected #rgb or #rrggbb", value)
            return fallback
        try:
            packed = int(digits, 16)
        except ValueError:
            logger.warning("Ignoring colour %r; not a hex value", value)
            return fallback
        return ((packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF)
    if isinstance(value, (list, tuple)) and len(value) == 3:
        channels = tuple(int(channel) for channel in value)
        if all(0 <= channel <= 255 for channel in channels):
            return channels  # type: ignore[return-value]
        logger.warning("Ignoring colour %r; channels must be 0-255", value)
    return fallback


@lru_cache(maxsize=32)
def load_font(
    path: str | None,
    size: int,
    fallbacks: Sequence[str] = FALLBACK_FONT_NAMES,
) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    if path:
        font_path = Path(path).expanduser()
        if font_path.exists():
            try:
                return ImageFont.truetype(str(font_path), size=size)
            except OSError:
                logger.warning("Failed to load font %s; trying fallbacks", font_path)
        else:
            logger.warning("Font file not found: %s; trying fallbacks", font_path)
    for name in fallbacks:
        try:
            return ImageFont.truetype(name, size=size)
        except OSError:
            continue
    logger.debug("No TrueType font found; using Pillow default font at size %s", size)
    return ImageFont.load_default(size=size)
