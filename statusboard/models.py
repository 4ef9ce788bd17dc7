"""
Domain records for Apex Status Board.

Map rotations and crafter bundles are parsed from the provider's JSON payloads
into frozen dataclasses. The pipeline only reads them.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from .constants import logger


@dataclass(frozen=True)
class RemoteAssetRef:
    """A remote image location and the cache key derived from it."""

    url: str
    cache_key: Optional[str] = None

    @classmethod
    def from_url(cls, url: Optional[str]) -> Optional['RemoteAssetRef']:
        """
        Resolve a location string into a reference.

        Returns None for blank or malformed locations (no http(s) scheme or no
        host). A location whose path has no final segment is still returned,
        but without a cache key.
        """
        if not isinstance(url, str) or not url.strip():
            return None
        url = url.strip()
        try:
            parsed = urlparse(url)
        except ValueError:
            return None
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            return None
        return cls(url=url, cache_key=derive_cache_key(parsed.path))

    @property
    def cacheable(self) -> bool:
        return self.cache_key is not None


def derive_cache_key(path: str) -> Optional[str]:
    """Final path segment of a URL path, or None when there isn't a usable one."""
    segment = path.rsplit('/', 1)[-1]
    if not segment or segment in ('.', '..') or '\\' in segment:
        return None
    return segment


@dataclass(frozen=True)
class ItemType:
    name: str
    rarity: str = ''
    asset: Optional[str] = None

    def asset_ref(self) -> Optional[RemoteAssetRef]:
        return RemoteAssetRef.from_url(self.asset)


@dataclass(frozen=True)
class Item:
    item: str
    cost: int
    item_type: ItemType

    def asset_ref(self) -> Optional[RemoteAssetRef]:
        return self.item_type.asset_ref()

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Item':
        item_type = data.get('itemType') or {}
        return cls(
            item=str(data.get('item', '')),
            cost=int(data.get('cost') or 0),
            item_type=ItemType(
                name=str(item_type.get('name', '')),
                rarity=str(item_type.get('rarity', '')),
                asset=item_type.get('asset'),
            ),
        )


@dataclass(frozen=True)
class Bundle:
    """A time-bounded group of crafter items."""

    bundle: str
    bundle_type: str
    start: int
    end: int
    items: Tuple[Item, ...] = field(default_factory=tuple)

    @property
    def category(self) -> str:
        return self.bundle

    def end_as_date(self) -> datetime:
        return datetime.fromtimestamp(self.end, tz=timezone.utc)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Bundle':
        return cls(
            bundle=str(data.get('bundle', '')),
            bundle_type=str(data.get('bundleType', '')),
            start=int(data.get('start') or 0),
            end=int(data.get('end') or 0),
            items=tuple(
                Item.from_json(entry)
                for entry in data.get('bundleContent') or []
                if isinstance(entry, dict)
            ),
        )


@dataclass(frozen=True)
class Rotation:
    """One slot of a map rotation."""

    map_name: str
    code: str
    start: int
    end: int
    asset: Optional[str] = None

    def end_as_date(self) -> datetime:
        return datetime.fromtimestamp(self.end, tz=timezone.utc)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Rotation':
        return cls(
            map_name=str(data.get('map', '')),
            code=str(data.get('code', '')),
            start=int(data.get('start') or 0),
            end=int(data.get('end') or 0),
            asset=data.get('asset'),
        )


@dataclass(frozen=True)
class MapRotation:
    """Current and next battle royale maps. Either may be unknown."""

    current: Optional[Rotation] = None
    next: Optional[Rotation] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'MapRotation':
        # version=2 nests the battle royale rotation under its own key
        battle_royale = data.get('battle_royale', data)
        if not isinstance(battle_royale, dict):
            logger.warning("MAP_ROTATION_MISSING: no battle royale rotation in payload")
            return cls()
        return cls(
            current=_optional_rotation(battle_royale.get('current')),
            next=_optional_rotation(battle_royale.get('next')),
        )


def _optional_rotation(data: Any) -> Optional[Rotation]:
    if not isinstance(data, dict) or not data.get('map'):
        return None
    return Rotation.from_json(data)


def parse_bundles(payload: Any) -> List[Bundle]:
    """Parse the crafter rotation payload (a list of bundle objects)."""
    if not isinstance(payload, list):
        return []
    return [Bundle.from_json(entry) for entry in payload if isinstance(entry, dict)]
