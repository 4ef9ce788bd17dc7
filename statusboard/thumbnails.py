"""
Thumbnail resizing for Apex Status Board.

Each image is resized on its own, so the batch is spread across a thread pool.
Pillow releases the GIL while resampling.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from PIL import Image

from .constants import DEFAULT_RESAMPLE, MAX_RESIZE_WORKERS, RESAMPLE_FILTERS, THUMBNAIL_SIZE
from .errors import ConfigError, RenderError


def resample_filter(name: str) -> Image.Resampling:
    """Map a filter name from configuration to a Pillow resampling filter."""
    key = str(name).lower()
    if key not in RESAMPLE_FILTERS:
        raise ConfigError(
            f"Unknown resample filter '{name}'. Expected one of: {', '.join(RESAMPLE_FILTERS)}"
        )
    return Image.Resampling[key.upper()]


def make_thumbnail(img: Image.Image, size: int = THUMBNAIL_SIZE,
                   resample: Image.Resampling = Image.Resampling.NEAREST) -> Image.Image:
    """Resize one image to a size x size square, ignoring aspect ratio."""
    try:
        return img.resize((size, size), resample)
    except (OSError, ValueError) as e:
        raise RenderError(f"Failed to resize {img.width}x{img.height} {img.mode} image: {e}") from e


def resize_thumbnails(
    images: Sequence[Image.Image],
    size: int = THUMBNAIL_SIZE,
    resample: str = DEFAULT_RESAMPLE,
    max_workers: Optional[int] = MAX_RESIZE_WORKERS,
) -> List[Image.Image]:
    """
    Resize a batch of images to square thumbnails.

    The output has the same length and order as ``images`` regardless of the
    order in which the workers finish.
    """
    if size <= 0:
        raise ConfigError(f"Thumbnail size must be positive, got {size}")
    resample_mode = resample_filter(resample)
    if not images:
        return []

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(
            lambda img: make_thumbnail(img, size, resample_mode),
            images,
        ))
