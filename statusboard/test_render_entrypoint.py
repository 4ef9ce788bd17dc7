#!/usr/bin/env python3
"""
End-to-end tests for the dashboard pipeline.

The provider and the remote asset host are replaced with in-memory fakes;
everything else (cache, decode, resize, compositing, save) runs for real.

Run with:
    python3 -m pytest statusboard/test_render_entrypoint.py -v
"""

import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from io import BytesIO
from pathlib import Path
from unittest import mock

from PIL import Image, ImageFont

from statusboard.caching import DiskCache
from statusboard.config import DashboardConfig
from statusboard.errors import AssetFetchError, ProviderError
from statusboard.models import Bundle, Item, ItemType, MapRotation, Rotation
from statusboard.render_entrypoint import (
    build_crafter_sections,
    build_status_rows,
    main,
    render_dashboard,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def ts(delta):
    return int((NOW + delta).timestamp())


def png_bytes(color):
    buf = BytesIO()
    Image.new('RGB', (64, 48), color).save(buf, format='PNG')
    return buf.getvalue()


def make_bundle(category, bundle_type, urls, end=0):
    return Bundle(
        bundle=category,
        bundle_type=bundle_type,
        start=0,
        end=end,
        items=tuple(Item(item=u, cost=0, item_type=ItemType(name=u, asset=u)) for u in urls),
    )


class FakeProvider:
    def __init__(self, rotation, bundles):
        self.rotation = rotation
        self.bundles = bundles

    def get_map_rotation(self):
        return self.rotation

    def get_crafter_rotation(self):
        return self.bundles


ROTATION = MapRotation(
    current=Rotation(map_name="World's Edge", code='we', start=0, end=ts(timedelta(seconds=1830))),
    next=Rotation(map_name='Olympus', code='ol', start=0, end=ts(timedelta(hours=2))),
)

DAILY = 'https://cdn.example.com/items/daily.png'
WEEKLY = 'https://cdn.example.com/items/weekly.png'
AMMO = 'https://cdn.example.com/items/ammo.png'
SKIN = 'https://cdn.example.com/items/skin.png'

BUNDLES = [
    make_bundle('daily', 'daily', [DAILY], end=ts(timedelta(hours=25))),
    make_bundle('weekly', 'weekly', [WEEKLY], end=ts(timedelta(hours=25))),
    make_bundle('ammo', 'permanent', [AMMO]),
    make_bundle('skin', 'permanent', [SKIN, SKIN]),
]


class TestStatusRows(unittest.TestCase):
    """Tests for the map rotation text block"""

    def test_known_rotation(self):
        rows = build_status_rows(ROTATION, NOW)
        self.assertEqual(rows, [
            ('Current Map:', "World's Edge"),
            ('Time left:', '00:30'),
            ('Next Map:', 'Olympus'),
        ])

    def test_unknown_rotation(self):
        rows = build_status_rows(MapRotation(), NOW)
        self.assertEqual(rows, [
            ('Current Map:', 'unknown'),
            ('Time left:', '00:00'),
            ('Next Map:', 'unknown'),
        ])


class TestCrafterSections(unittest.TestCase):
    """Tests for crafter headings and asset selection"""

    def test_sections(self):
        sections = build_crafter_sections(BUNDLES, NOW)
        headings = [heading for heading, _ in sections]
        self.assertEqual(headings, [
            'Daily Crafter (25:00):',
            'Weekly Crafter (01:01:00):',
            'Permanent Crafter:',
        ])
        self.assertEqual([r.url for r in sections[2][1]], [SKIN, SKIN])

    def test_no_bundles(self):
        sections = build_crafter_sections([], NOW)
        self.assertEqual(sections[0][0], 'Daily Crafter (00:00):')
        self.assertEqual(sections[1][0], 'Weekly Crafter (00:00:00):')
        self.assertTrue(all(refs == [] for _, refs in sections))


class TestRenderDashboard(unittest.TestCase):
    """Tests for the full render"""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.output = self.root / 'out.png'
        self.config = DashboardConfig(
            auth_token='token',
            font_path=self.root / 'unused.ttf',
            output_image_name=self.output,
            cache_dir=self.root / 'cache',
        )
        self.font = ImageFont.load_default()
        self.fetched = []

    def tearDown(self):
        self._tmp.cleanup()

    def _cache(self, payloads):
        def fetch(url):
            self.fetched.append(url)
            return payloads[url]
        return DiskCache(self.config.cache_dir, fetch=fetch)

    def test_renders_and_caches(self):
        payloads = {
            DAILY: png_bytes((255, 0, 0)),
            WEEKLY: png_bytes((0, 255, 0)),
            SKIN: png_bytes((0, 0, 255)),
        }
        provider = FakeProvider(ROTATION, BUNDLES)

        output = render_dashboard(self.config, provider, self._cache(payloads), self.font, NOW)

        self.assertEqual(output, self.output)
        with Image.open(output) as img:
            self.assertEqual(img.size, (1000, 630))
            rgb = img.convert('RGB')
            colors = {color for _, color in rgb.getcolors(maxcolors=1_000_000)}
        self.assertTrue({(255, 0, 0), (0, 255, 0), (0, 0, 255), (10, 10, 10)} <= colors)
        # Ammo is excluded, and the repeated skin is downloaded once
        self.assertEqual(sorted(self.fetched), sorted([DAILY, WEEKLY, SKIN]))
        self.assertEqual(
            sorted(p.name for p in self.config.cache_dir.iterdir()),
            ['daily.png', 'skin.png', 'weekly.png'],
        )

    def test_bad_asset_writes_nothing(self):
        payloads = {
            DAILY: png_bytes((255, 0, 0)),
            WEEKLY: b'not an image',
            SKIN: png_bytes((0, 0, 255)),
        }
        provider = FakeProvider(ROTATION, BUNDLES)

        with self.assertRaises(AssetFetchError):
            render_dashboard(self.config, provider, self._cache(payloads), self.font, NOW)

        self.assertFalse(self.output.exists())
        self.assertNotIn(SKIN, self.fetched)


class TestMain(unittest.TestCase):
    """Tests for the command-line driver"""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_config_exits_nonzero(self):
        self.assertEqual(main(['--config', str(self.root / 'missing.yml')]), 1)

    def test_missing_font_exits_nonzero(self):
        config_path = self.root / 'config.yml'
        config_path.write_text('auth_token: abc\nfont_path: nofont.ttf\n')
        with mock.patch.dict('os.environ', {}, clear=True):
            self.assertEqual(main(['--config', str(config_path)]), 1)
        self.assertFalse((self.root / 'out.png').exists())

    def test_provider_failure_exits_nonzero(self):
        config_path = self.root / 'config.yml'
        config_path.write_text('auth_token: abc\nfont_path: font.ttf\n')
        with mock.patch.dict('os.environ', {}, clear=True), \
                mock.patch('statusboard.render_entrypoint.render_dashboard',
                           side_effect=ProviderError('HTTP 500')) as render:
            self.assertEqual(main(['--config', str(config_path), '--output', str(self.root / 'x.png')]), 1)
        self.assertEqual(render.call_args.args[0].output_image_name, self.root / 'x.png')

    def test_success_exits_zero(self):
        config_path = self.root / 'config.yml'
        config_path.write_text('auth_token: abc\nfont_path: font.ttf\n')
        with mock.patch.dict('os.environ', {}, clear=True), \
                mock.patch('statusboard.render_entrypoint.render_dashboard',
                           return_value=self.root / 'out.png'):
            self.assertEqual(main(['--config', str(config_path)]), 0)


if __name__ == '__main__':
    unittest.main(verbosity=2)
