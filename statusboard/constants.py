"""
Constants and configuration for Apex Status Board.

This module contains the logger, layout constants, and environment-based
defaults used throughout the dashboard rendering pipeline.
"""

import logging
import os
import sys

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='| %(levelname)-8s | %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger('StatusBoard')

# ============================================================================
# Provider Configuration
# ============================================================================
PROVIDER_BASE_URL = os.environ.get('STATUSBOARD_PROVIDER_URL', 'https://api.mozambiquehe.re')
USER_AGENT = 'ApexStatusBoard/1.0'

# Seconds before a single remote request is abandoned
DEFAULT_FETCH_TIMEOUT = float(os.environ.get('STATUSBOARD_FETCH_TIMEOUT', '10'))

# ============================================================================
# Configuration Defaults
# ============================================================================
DEFAULT_CONFIG_NAME = 'config.yml'
DEFAULT_FONT_HEIGHT = 14.0
DEFAULT_IMAGE_NAME = 'out.png'
DEFAULT_CACHE_DIR = os.environ.get('STATUSBOARD_CACHE_DIR', 'cache')

# ============================================================================
# Canvas & Layout
# ============================================================================
CANVAS_WIDTH = 1000
CANVAS_HEIGHT = 630
BACKGROUND_COLOR = (10, 10, 10)
TEXT_COLOR = (255, 255, 255)

# Left margin and top margin of the first text block
LAYOUT_ORIGIN = (30, 30)

# Horizontal gap between the widest label and the value column
VALUE_COLUMN_GAP = 12

THUMBNAIL_SIZE = 100
THUMBNAIL_GUTTER = 30

# Resize workers; None lets the executor pick from the CPU count
MAX_RESIZE_WORKERS = int(os.environ['STATUSBOARD_RESIZE_WORKERS']) \
    if os.environ.get('STATUSBOARD_RESIZE_WORKERS') else None

# Resampling filters accepted by the thumbnail resizer
RESAMPLE_FILTERS = ('nearest', 'box', 'bilinear', 'hamming', 'bicubic', 'lanczos')
DEFAULT_RESAMPLE = 'nearest'

# What to do when a thumbnail row reaches the right edge of the canvas
OVERFLOW_POLICIES = ('wrap', 'clip', 'grow')
DEFAULT_OVERFLOW = 'wrap'

# ============================================================================
# Crafter Bundles
# ============================================================================
BUNDLE_DAILY = 'daily'
BUNDLE_WEEKLY = 'weekly'
BUNDLE_PERMANENT = 'permanent'

# Permanent bundles that never change and are left off the board
EXCLUDED_PERMANENT_CATEGORIES = (
    'ammo',
    'evo',
    'health_pickup',
    'shield_pickup',
)

UNKNOWN_MAP = 'unknown'
