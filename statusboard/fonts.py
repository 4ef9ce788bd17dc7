"""
Font handling for Apex Status Board.

This module loads the configured dashboard font and provides
the text measurement used for layout.
"""

from pathlib import Path
from typing import Tuple

from PIL import ImageFont

from .constants import logger
from .errors import FontError


def load_font(font_path: Path, font_height: float) -> ImageFont.FreeTypeFont:
    """
    Load a TrueType/OpenType font at the given pixel height.

    Raises FontError if the file is missing, unreadable or not a font.
    """
    font_path = Path(font_path)
    if not font_path.is_file():
        raise FontError(f"Font not found: {font_path}")
    if font_height <= 0:
        raise FontError(f"Font height must be positive, got {font_height}")

    try:
        font = ImageFont.truetype(str(font_path), size=font_height)
    except OSError as e:
        raise FontError(f"Couldn't decode font {font_path}: {e}") from e

    family, style = font.getname()
    logger.info(f"FONT_LOADED: {family} {style} ({font_height:g}px) from {font_path}")
    return font


def text_size(font: ImageFont.ImageFont, text: str) -> Tuple[int, int]:
    """Pixel width and height of ``text`` rendered in ``font``."""
    if not text:
        return 0, 0
    left, top, right, bottom = font.getbbox(text)
    return right - left, bottom - top
