"""
Dashboard Compositor - Apex Status Board

Owns the output canvas for a single render and places text rows and thumbnail
rows on it from top to bottom. The canvas is created per Compositor instance
and is never shared between renders.

Layout:
  - Label/value blocks: values line up in one column placed after the widest
    label of the block.
  - Headings: a single text line at the cursor.
  - Thumbnail rows: left to right from the left margin with a fixed stride of
    thumbnail width + gutter. What happens at the right edge is set by the
    overflow policy (wrap, clip or grow).
"""

import os
import uuid
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from .constants import (
    logger,
    BACKGROUND_COLOR,
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    DEFAULT_OVERFLOW,
    LAYOUT_ORIGIN,
    OVERFLOW_POLICIES,
    TEXT_COLOR,
    THUMBNAIL_GUTTER,
    VALUE_COLUMN_GAP,
)
from .errors import ConfigError, RenderError
from .fonts import text_size

Color = Tuple[int, int, int]


class Compositor:
    """Draws one dashboard onto a fixed-size RGBA canvas."""

    def __init__(
        self,
        font: ImageFont.ImageFont,
        width: int = CANVAS_WIDTH,
        height: int = CANVAS_HEIGHT,
        background: Color = BACKGROUND_COLOR,
        text_color: Color = TEXT_COLOR,
        line_height: Optional[int] = None,
        origin: Tuple[int, int] = LAYOUT_ORIGIN,
        gutter: int = THUMBNAIL_GUTTER,
        overflow: str = DEFAULT_OVERFLOW,
    ):
        if overflow not in OVERFLOW_POLICIES:
            raise ConfigError(
                f"Unknown overflow policy '{overflow}'. Expected one of: {', '.join(OVERFLOW_POLICIES)}"
            )
        if width <= 0 or height <= 0:
            raise ConfigError(f"Canvas size must be positive, got {width}x{height}")

        self.font = font
        self.background = background
        self.text_color = text_color
        self.line_height = line_height or _font_line_height(font)
        self.margin_x, top = origin
        self.gutter = gutter
        self.overflow = overflow

        self.canvas = Image.new('RGBA', (width, height), background + (255,))
        self._draw = ImageDraw.Draw(self.canvas)
        self.cursor: List[int] = [self.margin_x, top]

    @property
    def size(self) -> Tuple[int, int]:
        return self.canvas.size

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def draw_text(self, position: Tuple[int, int], text: str) -> None:
        """Draw one line of text with its top-left corner at ``position``."""
        try:
            self._draw.text(position, text, fill=self.text_color, font=self.font)
        except (OSError, ValueError, TypeError) as e:
            raise RenderError(f"Failed to draw text {text!r}: {e}") from e

    def draw_text_block(self, rows: Sequence[Tuple[str, str]]) -> int:
        """
        Draw label/value rows starting at the cursor.

        The value column is placed once for the whole block, after the widest
        label, so every value starts at the same x. Returns that x.
        """
        x, y = self.cursor
        label_width = max((text_size(self.font, label)[0] for label, _ in rows), default=0)
        value_x = x + label_width + VALUE_COLUMN_GAP

        for label, value in rows:
            self.draw_text((x, y), label)
            self.draw_text((value_x, y), value)
            y += self.line_height

        self.cursor = [self.margin_x, y]
        return value_x

    def draw_heading(self, text: str) -> None:
        x, y = self.cursor
        self.draw_text((x, y), text)
        self.cursor = [self.margin_x, y + self.line_height]

    def skip_line(self, count: int = 1) -> None:
        self.cursor[1] += self.line_height * count

    # ------------------------------------------------------------------
    # Thumbnails
    # ------------------------------------------------------------------

    def draw_thumbnail_row(self, images: Sequence[Image.Image]) -> int:
        """
        Place thumbnails left to right starting at the cursor.

        Leaves the cursor one line below the last row drawn. Returns the number
        of thumbnails placed (fewer than given only under the clip policy).
        """
        x, y = self.margin_x, self.cursor[1]
        row_height = 0
        placed = 0

        for index, img in enumerate(images):
            fits = x + img.width <= self.canvas.width
            if not fits and x > self.margin_x:
                if self.overflow == 'clip':
                    logger.warning(
                        f"ROW_CLIPPED: dropped {len(images) - index} of {len(images)} thumbnails"
                    )
                    break
                x = self.margin_x
                y += row_height + self.gutter
                row_height = 0

            if y + img.height > self.canvas.height:
                if self.overflow == 'grow':
                    self._grow(y + img.height + self.gutter)
                else:
                    logger.warning(f"ROW_OVERFLOW: thumbnail {index} extends past the canvas bottom")

            self._paste(img, (x, y))
            placed += 1
            row_height = max(row_height, img.height)
            x += img.width + self.gutter

        self.cursor = [self.margin_x, y + row_height + self.line_height]
        return placed

    def _paste(self, img: Image.Image, position: Tuple[int, int]) -> None:
        try:
            if img.mode == 'RGBA':
                self.canvas.alpha_composite(img, dest=position)
            else:
                self.canvas.paste(img, position)
        except (OSError, ValueError) as e:
            raise RenderError(f"Failed to overlay thumbnail at {position}: {e}") from e

    def _grow(self, new_height: int) -> None:
        """Extend the canvas downwards, keeping what has been drawn."""
        width, height = self.canvas.size
        if new_height <= height:
            return
        grown = Image.new('RGBA', (width, new_height), self.background + (255,))
        grown.paste(self.canvas, (0, 0))
        logger.info(f"CANVAS_GROWN: {width}x{height} -> {width}x{new_height}")
        self.canvas = grown
        self._draw = ImageDraw.Draw(self.canvas)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def save(self, output_path: Path) -> Path:
        """
        Write the canvas to ``output_path``.

        The image is written to a temporary sibling and renamed into place, so
        the output path never holds a partial file.
        """
        output_path = Path(output_path)
        image_format = Image.registered_extensions().get(output_path.suffix.lower())
        if image_format is None:
            raise RenderError(f"Unsupported output image type: {output_path.name}")

        tmp_path = output_path.with_name(f".{output_path.name}.tmp.{uuid.uuid4().hex}")
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            canvas = self.canvas
            if image_format == 'JPEG':
                canvas = canvas.convert('RGB')
            canvas.save(tmp_path, format=image_format)
            os.replace(tmp_path, output_path)
        except (OSError, ValueError) as e:
            tmp_path.unlink(missing_ok=True)
            raise RenderError(f"Failed to save {output_path}: {e}") from e

        logger.info(f"Saved dashboard: {output_path} ({self.canvas.width}x{self.canvas.height})")
        return output_path


def _font_line_height(font: ImageFont.ImageFont) -> int:
    """Line advance for a font: its pixel size, or the measured height of sample glyphs."""
    size = getattr(font, 'size', None)
    if size:
        return int(size)
    return max(text_size(font, 'Ag')[1], 1)
