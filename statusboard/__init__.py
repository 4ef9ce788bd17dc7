"""
Apex Status Board - Dashboard Renderer Package

This package renders a status dashboard image for Apex Legends rotations,
including:
- Map rotation and crafter bundle records from the data provider
- Asset resolution and on-disk caching of item artwork
- Parallel thumbnail resizing
- Canvas compositing of text and thumbnail rows
"""

from .constants import (
    logger,
    CANVAS_WIDTH,
    CANVAS_HEIGHT,
    BACKGROUND_COLOR,
    THUMBNAIL_SIZE,
)

from .errors import (
    StatusBoardError,
    ConfigError,
    ProviderError,
    AssetFetchError,
    CacheIOError,
    FontError,
    RenderError,
)

from .durations import (
    format_short,
    format_long,
    time_until,
)

from .models import (
    RemoteAssetRef,
    Item,
    Bundle,
    Rotation,
    MapRotation,
)

from .assets import (
    resolve_asset_refs,
    exclude_categories,
)

from .caching import DiskCache, download_bytes
from .fetcher import fetch_images
from .thumbnails import resize_thumbnails
from .fonts import load_font
from .compositor import Compositor
from .config import DashboardConfig, load_dashboard_config
from .provider import ApexProvider
from .render_entrypoint import render_dashboard

__all__ = [
    # Constants
    'logger',
    'CANVAS_WIDTH',
    'CANVAS_HEIGHT',
    'BACKGROUND_COLOR',
    'THUMBNAIL_SIZE',
    # Errors
    'StatusBoardError',
    'ConfigError',
    'ProviderError',
    'AssetFetchError',
    'CacheIOError',
    'FontError',
    'RenderError',
    # Durations
    'format_short',
    'format_long',
    'time_until',
    # Models
    'RemoteAssetRef',
    'Item',
    'Bundle',
    'Rotation',
    'MapRotation',
    # Assets
    'resolve_asset_refs',
    'exclude_categories',
    # Pipeline stages
    'DiskCache',
    'download_bytes',
    'fetch_images',
    'resize_thumbnails',
    'load_font',
    'Compositor',
    # Config
    'DashboardConfig',
    'load_dashboard_config',
    # Provider
    'ApexProvider',
    # Driver
    'render_dashboard',
]
