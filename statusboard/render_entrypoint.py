#!/usr/bin/env python3
"""
Apex Status Board - Render Entry Point

Fetches the current map rotation and crafter bundles, resolves and caches the
item artwork, and composites everything onto a single dashboard image.

The render is all-or-nothing: any failing stage stops the run and nothing is
written to the output path.
"""

import argparse
import dataclasses
import functools
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageFont

from .assets import bundle_time_left, bundles_of_type, exclude_categories, resolve_asset_refs
from .caching import DiskCache, download_bytes
from .compositor import Compositor
from .config import DashboardConfig, load_dashboard_config, redact_token
from .constants import (
    logger,
    BUNDLE_DAILY,
    BUNDLE_PERMANENT,
    BUNDLE_WEEKLY,
    DEFAULT_CONFIG_NAME,
    EXCLUDED_PERMANENT_CATEGORIES,
    UNKNOWN_MAP,
)
from .durations import format_long, format_short, time_until
from .errors import StatusBoardError
from .fetcher import fetch_images
from .fonts import load_font
from .models import Bundle, MapRotation, RemoteAssetRef
from .provider import ApexProvider
from .thumbnails import resize_thumbnails

Section = Tuple[str, List[RemoteAssetRef]]


def build_status_rows(rotation: MapRotation, now: datetime) -> List[Tuple[str, str]]:
    """Label/value rows for the map rotation block."""
    current = rotation.current
    time_left = time_until(current.end_as_date() if current else None, now)
    return [
        ('Current Map:', current.map_name if current else UNKNOWN_MAP),
        ('Time left:', format_short(time_left)),
        ('Next Map:', rotation.next.map_name if rotation.next else UNKNOWN_MAP),
    ]


def build_crafter_sections(bundles: Sequence[Bundle], now: datetime) -> List[Section]:
    """Heading and asset references for the daily, weekly and permanent crafter rows."""
    daily = bundles_of_type(bundles, BUNDLE_DAILY)
    weekly = bundles_of_type(bundles, BUNDLE_WEEKLY)
    permanent = bundles_of_type(bundles, BUNDLE_PERMANENT)

    return [
        (
            f"Daily Crafter ({format_short(bundle_time_left(daily, now))}):",
            resolve_asset_refs(daily),
        ),
        (
            f"Weekly Crafter ({format_long(bundle_time_left(weekly, now))}):",
            resolve_asset_refs(weekly),
        ),
        (
            "Permanent Crafter:",
            resolve_asset_refs(permanent, exclude_categories(*EXCLUDED_PERMANENT_CATEGORIES)),
        ),
    ]


def load_thumbnails(refs: Sequence[RemoteAssetRef], cache: DiskCache,
                    config: DashboardConfig) -> List[Image.Image]:
    """Fetch a batch in full, then resize it."""
    images = fetch_images(refs, cache)
    return resize_thumbnails(images, size=config.thumbnail_size, resample=config.resample)


def compose_dashboard(
    font: ImageFont.ImageFont,
    config: DashboardConfig,
    status_rows: Sequence[Tuple[str, str]],
    sections: Sequence[Tuple[str, Sequence[Image.Image]]],
) -> Compositor:
    """Draw the status block followed by one heading and thumbnail row per section."""
    compositor = Compositor(
        font,
        line_height=int(config.font_height),
        overflow=config.overflow,
    )
    compositor.draw_text_block(status_rows)
    compositor.skip_line()
    for heading, thumbnails in sections:
        compositor.draw_heading(heading)
        compositor.draw_thumbnail_row(thumbnails)
    return compositor


def render_dashboard(
    config: DashboardConfig,
    provider: Optional[ApexProvider] = None,
    cache: Optional[DiskCache] = None,
    font: Optional[ImageFont.ImageFont] = None,
    now: Optional[datetime] = None,
) -> Path:
    """Run the whole pipeline and write the dashboard image. Returns the output path."""
    if font is None:
        font = load_font(config.font_path, config.font_height)
    if provider is None:
        provider = ApexProvider(config.auth_token, config.provider_url, config.fetch_timeout)
    if cache is None:
        cache = DiskCache(
            config.cache_dir,
            fetch=functools.partial(download_bytes, timeout=config.fetch_timeout),
        )

    rotation = provider.get_map_rotation()
    bundles = provider.get_crafter_rotation()
    now = now or datetime.now(timezone.utc)

    status_rows = build_status_rows(rotation, now)
    sections = []
    for heading, refs in build_crafter_sections(bundles, now):
        logger.info(f"{heading} {len(refs)} items")
        sections.append((heading, load_thumbnails(refs, cache, config)))

    compositor = compose_dashboard(font, config, status_rows, sections)
    output_path = compositor.save(config.output_image_name)
    stats = cache.stats()
    logger.info(f"Cache: {stats['entries']} entries, {stats['total_size_mb']:.2f} MB in {stats['cache_dir']}")
    return output_path


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Apex Status Board - Render the map rotation and crafter dashboard image'
    )
    parser.add_argument(
        '--config',
        type=Path,
        default=Path(DEFAULT_CONFIG_NAME),
        help='Path to the YAML configuration file.',
    )
    parser.add_argument(
        '--output',
        type=Path,
        default=None,
        help='Override the output image path from the configuration.',
    )
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging.')
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the dashboard renderer"""
    args = parse_args(argv)
    if args.verbose:
        logger.setLevel(logging.DEBUG)

    logger.info("=" * 60)
    logger.info("Apex Status Board")
    logger.info("=" * 60)

    try:
        config = load_dashboard_config(args.config)
        if args.output is not None:
            config = dataclasses.replace(config, output_image_name=args.output)
        logger.info(f"  Token: {redact_token(config.auth_token)}")
        output_path = render_dashboard(config)
    except StatusBoardError as e:
        logger.error(f"STAGE_FAILED stage={e.stage} error={e}")
        logger.error("Dashboard not written")
        return 1

    logger.info(f"Dashboard complete: {output_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
