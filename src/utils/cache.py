"""
On-disk cache for slow or large upstream responses (Sleeper player directory)
"""
import gzip
import hashlib
import json
import logging
import os
import pickle
import tempfile
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from config import CACHE_DIR, MAX_CACHE_AGE_DAYS


logger = logging.getLogger(__name__)


class CacheStats:
    """Hit/miss counters shared by every cache namespace"""

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def reset(self):
        self.hits = 0
        self.misses = 0
        self.writes = 0
        self.errors = 0
        self.bytes_written = 0

    def _bump(self, name: str, amount: int = 1):
        with self._lock:
            setattr(self, name, getattr(self, name) + amount)

    def record_hit(self):
        self._bump('hits')

    def record_miss(self):
        self._bump('misses')

    def record_write(self, size: int):
        self._bump('writes')
        self._bump('bytes_written', size)

    def record_error(self):
        self._bump('errors')

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    def as_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'hits': self.hits,
                'misses': self.misses,
                'writes': self.writes,
                'errors': self.errors,
                'hit_rate': self.hit_rate,
                'written_mb': self.bytes_written / (1024 * 1024),
            }


class OptimizedCache:
    """Gzipped pickle files with a JSON sidecar holding the expiry time.

    Each namespace gets its own directory under CACHE_DIR. Writes go to a
    temporary file first and are moved into place, so a reader never sees
    a half-written entry.
    """

    stats = CacheStats()

    _key_locks: Dict[str, threading.Lock] = {}
    _registry_lock = threading.Lock()

    def __init__(self, namespace: str, cache_hours: float = 24, root: Optional[Path] = None):
        self.namespace = namespace
        self.cache_hours = cache_hours
        self.cache_dir = Path(root or CACHE_DIR) / namespace
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.cleanup()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._registry_lock:
            return self._key_locks.setdefault(f"{self.namespace}:{key}", threading.Lock())

    def _paths(self, key: str):
        digest = hashlib.md5(key.encode()).hexdigest()
        data_path = self.cache_dir / f"{digest}.pkl.gz"
        return data_path, self.cache_dir / f"{digest}.meta"

    def set(self, key: str, value: Any, cache_hours: Optional[float] = None) -> bool:
        data_path, meta_path = self._paths(key)
        hours = cache_hours if cache_hours is not None else self.cache_hours

        with self._lock_for(key):
            try:
                payload = gzip.compress(pickle.dumps(value), compresslevel=6)
                fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir)
                with os.fdopen(fd, 'wb') as tmp_file:
                    tmp_file.write(payload)
                os.replace(tmp_name, data_path)

                now = datetime.now()
                with open(meta_path, 'w') as f:
                    json.dump({
                        'key': key,
                        'created': now.isoformat(),
                        'expires': (now + timedelta(hours=hours)).isoformat(),
                        'size': len(payload),
                    }, f)

                self.stats.record_write(len(payload))
                logger.debug(f"Cached {self.namespace}/{key} ({len(payload)} bytes)")
                return True
            except (OSError, pickle.PicklingError) as e:
                logger.error(f"Error caching {self.namespace}/{key}: {e}")
                self.stats.record_error()
                return False

    def get(self, key: str) -> Optional[Any]:
        """Cached value, or None when missing, expired or unreadable"""
        data_path, meta_path = self._paths(key)

        with self._lock_for(key):
            if not data_path.exists() or not meta_path.exists():
                self.stats.record_miss()
                return None
            try:
                with open(meta_path) as f:
                    expires = datetime.fromisoformat(json.load(f)['expires'])
                if datetime.now() > expires:
                    logger.debug(f"Cache expired for {self.namespace}/{key}")
                    data_path.unlink(missing_ok=True)
                    meta_path.unlink(missing_ok=True)
                    self.stats.record_miss()
                    return None

                with gzip.open(data_path, 'rb') as f:
                    value = pickle.load(f)
            except (OSError, ValueError, KeyError, pickle.UnpicklingError, EOFError) as e:
                logger.error(f"Error reading cache for {self.namespace}/{key}: {e}")
                self.stats.record_error()
                return None

            self.stats.record_hit()
            return value

    def get_or_fetch(self, key: str, fetch: Callable[[], Any], force_refresh: bool = False,
                     cache_hours: Optional[float] = None) -> Any:
        """Return the cached value, calling ``fetch`` and storing its result on a miss"""
        if not force_refresh:
            cached = self.get(key)
            if cached is not None:
                logger.info(f"Loaded {key} from cache")
                return cached

        value = fetch()
        if value:
            self.set(key, value, cache_hours)
        return value

    def invalidate(self, key: str) -> None:
        data_path, meta_path = self._paths(key)
        with self._lock_for(key):
            data_path.unlink(missing_ok=True)
            meta_path.unlink(missing_ok=True)

    def clear(self) -> int:
        """Delete every entry in this namespace, returning the number of entries removed"""
        removed = 0
        for path in self.cache_dir.glob('*.pkl.gz'):
            path.unlink(missing_ok=True)
            path.with_name(path.name.replace('.pkl.gz', '.meta')).unlink(missing_ok=True)
            removed += 1
        logger.info(f"Cleared {removed} entries from cache {self.namespace}")
        return removed

    def cleanup(self, max_age_days: float = MAX_CACHE_AGE_DAYS) -> int:
        """Remove files untouched for longer than ``max_age_days``"""
        cutoff = datetime.now() - timedelta(days=max_age_days)
        removed = 0
        for path in self.cache_dir.iterdir():
            if path.is_file() and datetime.fromtimestamp(path.stat().st_mtime) < cutoff:
                path.unlink(missing_ok=True)
                removed += 1
        if removed:
            logger.info(f"Removed {removed} stale files from cache {self.namespace}")
        return removed

    def info(self) -> Dict[str, Any]:
        entries = list(self.cache_dir.glob('*.pkl.gz'))
        newest = max((p.stat().st_mtime for p in entries), default=None)
        return {
            'namespace': self.namespace,
            'entries': len(entries),
            'size_mb': sum(p.stat().st_size for p in entries) / (1024 * 1024),
            'newest': datetime.fromtimestamp(newest).isoformat() if newest else None,
        }


def list_namespaces(root: Optional[Path] = None) -> List[str]:
    root = Path(root or CACHE_DIR)
    if not root.exists():
        return []
    return sorted(p.name for p in root.iterdir() if p.is_dir())
