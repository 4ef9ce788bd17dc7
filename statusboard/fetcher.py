"""
Batch image fetching for Apex Status Board.

Resolves every reference through the disk cache and decodes the bytes with
Pillow. The batch is all-or-nothing: the first failing asset aborts it.
"""

from io import BytesIO
from typing import List, Sequence

from PIL import Image, UnidentifiedImageError

from .caching import DiskCache
from .constants import logger
from .errors import AssetFetchError
from .models import RemoteAssetRef


def decode_image(data: bytes, source: str = '<bytes>') -> Image.Image:
    """Decode raw bytes into an RGBA image. Raises AssetFetchError if undecodable."""
    try:
        img = Image.open(BytesIO(data))
        img.load()
        return img.convert('RGBA')
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, EOFError,
            SyntaxError, ValueError) as e:
        raise AssetFetchError(f"Failed to decode image {source}: {e}") from e


def fetch_images(refs: Sequence[RemoteAssetRef], cache: DiskCache) -> List[Image.Image]:
    """
    Fetch and decode a batch of assets, in order.

    Returns one image per reference. Any cache, network or decode failure
    propagates and no partial result is returned.
    """
    logger.info(f"FETCH_BATCH: {len(refs)} assets")
    images: List[Image.Image] = []
    for ref in refs:
        data = cache.get_or_fetch(ref)
        images.append(decode_image(data, source=ref.url))
    return images
