#!/usr/bin/env python3
"""
Unit tests for batch fetching and thumbnail resizing.

Run with:
    python3 -m pytest statusboard/test_fetcher.py -v
"""

import tempfile
import unittest
from io import BytesIO
from pathlib import Path
from unittest import mock

from PIL import Image

from statusboard.caching import DiskCache
from statusboard.errors import AssetFetchError, ConfigError, RenderError
from statusboard.fetcher import decode_image, fetch_images
from statusboard.models import RemoteAssetRef
from statusboard.thumbnails import resample_filter, resize_thumbnails


def png_bytes(color, size=(40, 20)):
    buf = BytesIO()
    Image.new('RGB', size, color).save(buf, format='PNG')
    return buf.getvalue()


class FakeRemote:
    """Serves fixed payloads by URL and records the request order."""

    def __init__(self, payloads):
        self.payloads = payloads
        self.calls = []

    def __call__(self, url):
        self.calls.append(url)
        return self.payloads[url]


class TestFetchImages(unittest.TestCase):
    """Tests for fetch_images"""

    URLS = [
        'https://cdn.example.com/red.png',
        'https://cdn.example.com/green.png',
        'https://cdn.example.com/blue.png',
    ]

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.cache_root = Path(self._tmp.name) / 'cache'

    def tearDown(self):
        self._tmp.cleanup()

    def test_order_and_decoding(self):
        remote = FakeRemote({
            self.URLS[0]: png_bytes((255, 0, 0)),
            self.URLS[1]: png_bytes((0, 255, 0)),
            self.URLS[2]: png_bytes((0, 0, 255)),
        })
        refs = [RemoteAssetRef.from_url(u) for u in self.URLS]

        images = fetch_images(refs, DiskCache(self.cache_root, fetch=remote))

        self.assertEqual(remote.calls, self.URLS)
        self.assertEqual([img.mode for img in images], ['RGBA'] * 3)
        self.assertEqual(
            [img.getpixel((0, 0)) for img in images],
            [(255, 0, 0, 255), (0, 255, 0, 255), (0, 0, 255, 255)],
        )

    def test_bad_asset_aborts_batch(self):
        """A decode failure on asset 2 of 3 fails the whole batch"""
        remote = FakeRemote({
            self.URLS[0]: png_bytes((255, 0, 0)),
            self.URLS[1]: b'definitely not an image',
            self.URLS[2]: png_bytes((0, 0, 255)),
        })
        refs = [RemoteAssetRef.from_url(u) for u in self.URLS]

        with self.assertRaises(AssetFetchError) as ctx:
            fetch_images(refs, DiskCache(self.cache_root, fetch=remote))

        self.assertIn('green.png', str(ctx.exception))
        self.assertEqual(remote.calls, self.URLS[:2])

    def test_oversized_image_is_a_fetch_error(self):
        """Images over the decompression limit fail like any undecodable asset"""
        with mock.patch.object(Image, 'MAX_IMAGE_PIXELS', 100):
            with self.assertRaises(AssetFetchError):
                decode_image(png_bytes((1, 2, 3)), source='huge.png')

    def test_empty_batch(self):
        self.assertEqual(fetch_images([], DiskCache(self.cache_root, fetch=FakeRemote({}))), [])

    def test_decode_truncated_png(self):
        with self.assertRaises(AssetFetchError):
            decode_image(png_bytes((1, 2, 3))[:30], source='truncated.png')


class TestResizeThumbnails(unittest.TestCase):
    """Tests for resize_thumbnails"""

    def test_preserves_order_and_length(self):
        colors = [(i * 20, 255 - i * 20, 7, 255) for i in range(12)]
        images = [Image.new('RGBA', (30 + i * 13, 50 + i * 7), c) for i, c in enumerate(colors)]

        thumbs = resize_thumbnails(images, size=100, resample='nearest', max_workers=4)

        self.assertEqual(len(thumbs), len(images))
        self.assertTrue(all(t.size == (100, 100) for t in thumbs))
        self.assertEqual([t.getpixel((50, 50)) for t in thumbs], colors)

    def test_configured_filter_and_size(self):
        thumbs = resize_thumbnails([Image.new('RGBA', (300, 120))], size=64, resample='lanczos')
        self.assertEqual(thumbs[0].size, (64, 64))

    def test_empty_batch(self):
        self.assertEqual(resize_thumbnails([]), [])

    def test_resize_failure_is_a_render_error(self):
        images = [Image.new('RGBA', (10, 10)) for _ in range(3)]
        with mock.patch.object(Image.Image, 'resize', side_effect=ValueError('bad mode')):
            with self.assertRaises(RenderError):
                resize_thumbnails(images, max_workers=2)

    def test_unknown_filter(self):
        with self.assertRaises(ConfigError):
            resample_filter('sharpest')

    def test_filter_names(self):
        self.assertEqual(resample_filter('NEAREST'), Image.Resampling.NEAREST)
        self.assertEqual(resample_filter('bicubic'), Image.Resampling.BICUBIC)

    def test_invalid_size(self):
        with self.assertRaises(ConfigError):
            resize_thumbnails([Image.new('RGBA', (10, 10))], size=0)


if __name__ == '__main__':
    unittest.main(verbosity=2)
