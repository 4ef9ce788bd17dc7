"""
On-disk asset caching for Apex Status Board.

Remote images are stored under a single cache directory, one file per asset,
named by the asset's cache key. An entry that exists is trusted as-is: there
is no TTL, no checksum and no manifest. Entries are never removed here.
"""

import os
import threading
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from .constants import logger, DEFAULT_CACHE_DIR, DEFAULT_FETCH_TIMEOUT, USER_AGENT
from .errors import AssetFetchError, CacheIOError
from .models import RemoteAssetRef

FetchFn = Callable[[str], bytes]


def download_bytes(url: str, timeout: float = DEFAULT_FETCH_TIMEOUT) -> bytes:
    """
    Download a remote asset.

    Raises AssetFetchError on HTTP errors, network errors and timeouts.
    """
    req = Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urlopen(req, timeout=timeout) as response:
            return response.read()
    except HTTPError as e:
        raise AssetFetchError(f"Failed to download {url}: HTTP {e.code}") from e
    except URLError as e:
        raise AssetFetchError(f"Failed to download {url}: {e.reason}") from e
    except OSError as e:
        raise AssetFetchError(f"Failed to download {url}: {e}") from e


class DiskCache:
    """
    Read-through cache of remote assets.

    At most one fetch is in flight per cache key: callers for the same key
    wait on that key's lock and then find the entry on disk. Entries are
    written to a temporary sibling and renamed into place, so a partially
    written file is never visible under the final name.
    """

    def __init__(self, cache_root: Path = Path(DEFAULT_CACHE_DIR), fetch: Optional[FetchFn] = None):
        self.cache_root = Path(cache_root)
        self._fetch = fetch or download_bytes
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def path_for(self, ref: RemoteAssetRef) -> Optional[Path]:
        """Local path of the entry for ``ref``, or None if it can't be cached."""
        if ref.cache_key is None:
            return None
        return self.cache_root / ref.cache_key

    def get_or_fetch(self, ref: RemoteAssetRef) -> bytes:
        """Return the bytes for ``ref``, downloading and storing them on a miss."""
        cache_path = self.path_for(ref)
        if cache_path is None:
            logger.debug(f"CACHE_BYPASS: {ref.url}")
            return self._fetch(ref.url)

        with self._lock_for(ref.cache_key):
            if cache_path.is_file():
                logger.debug(f"CACHE_HIT: {ref.cache_key}")
                return self._read(cache_path)

            logger.info(f"CACHE_MISS: {ref.cache_key} <- {ref.url}")
            data = self._fetch(ref.url)
            self._write(cache_path, data)
            return data

    def stats(self) -> Dict[str, Any]:
        """Entry count and total size of the cache directory."""
        if not self.cache_root.is_dir():
            return {"entries": 0, "total_size_mb": 0.0, "cache_dir": str(self.cache_root)}
        entries = 0
        total_size = 0
        try:
            for path in self.cache_root.iterdir():
                if path.name.startswith('.'):
                    continue
                try:
                    if path.is_file():
                        total_size += path.stat().st_size
                        entries += 1
                except FileNotFoundError:
                    # Removed between listing and stat
                    continue
        except OSError as e:
            logger.warning(f"CACHE_STATS_FAILED: {e}")
        return {
            "entries": entries,
            "total_size_mb": total_size / (1024 * 1024),
            "cache_dir": str(self.cache_root),
        }

    def _lock_for(self, cache_key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(cache_key)
            if lock is None:
                lock = self._locks[cache_key] = threading.Lock()
            return lock

    @staticmethod
    def _read(cache_path: Path) -> bytes:
        try:
            return cache_path.read_bytes()
        except OSError as e:
            raise CacheIOError(f"Failed to read cache entry {cache_path}: {e}") from e

    def _write(self, cache_path: Path, data: bytes) -> None:
        try:
            self.cache_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheIOError(f"Failed to create cache directory {self.cache_root}: {e}") from e

        # Atomic write: temp file -> rename
        tmp_path = cache_path.with_name(f".{cache_path.name}.tmp.{uuid.uuid4().hex}")
        try:
            tmp_path.write_bytes(data)
            os.replace(tmp_path, cache_path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise CacheIOError(f"Failed to write cache entry {cache_path}: {e}") from e
        logger.debug(f"CACHE_STORED: {cache_path.name} ({len(data)} bytes)")
