"""
Asset resolution for Apex Status Board.

Turns crafter bundles into the ordered list of remote image references that
become thumbnail slots on the board.
"""

from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from .constants import logger
from .durations import time_until
from .models import Bundle, RemoteAssetRef

CategoryPredicate = Callable[[str], bool]


def resolve_asset_refs(
    bundles: Iterable[Bundle],
    predicate: Optional[CategoryPredicate] = None,
) -> List[RemoteAssetRef]:
    """
    Flatten bundles into asset references.

    Bundle order is kept, then item order within each bundle. Bundles whose
    category fails ``predicate`` are skipped with all their items. Items
    without a resolvable location are dropped. Repeated locations are kept as
    separate entries; each one gets its own thumbnail slot.
    """
    refs: List[RemoteAssetRef] = []
    for bundle in bundles:
        if predicate is not None and not predicate(bundle.category):
            logger.debug(f"BUNDLE_SKIPPED: {bundle.category}")
            continue
        for item in bundle.items:
            ref = item.asset_ref()
            if ref is None:
                logger.debug(f"ASSET_UNRESOLVED: item={item.item!r} bundle={bundle.category}")
                continue
            refs.append(ref)
    return refs


def exclude_categories(*categories: str) -> CategoryPredicate:
    """Predicate that rejects the named bundle categories."""
    excluded = frozenset(categories)

    def _predicate(category: str) -> bool:
        return category not in excluded

    return _predicate


def bundles_of_type(bundles: Iterable[Bundle], bundle_type: str) -> List[Bundle]:
    """Bundles of one rotation type (daily, weekly or permanent)."""
    return [bundle for bundle in bundles if bundle.bundle_type == bundle_type]


def bundle_time_left(bundles: List[Bundle], now: Optional[datetime] = None) -> timedelta:
    """Time left on the first bundle of a group, zero when the group is empty."""
    if not bundles:
        return timedelta(0)
    return time_until(bundles[0].end_as_date(), now)
