from __future__ import annotations

import hashlib
import json
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


# ------------------------------------------------------------
# Cache policy
# ------------------------------------------------------------

@dataclass(frozen=True)
class CacheDecision:
    enabled: bool
    ttl_seconds: int = 0
    stale_if_error: bool = False


# ------------------------------------------------------------
# Deterministic cache key
# ------------------------------------------------------------

def _normalize_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Canonicalize params to stable JSON:
      - sort keys
      - keep list order
      - normalize non-JSON scalars to strings
    """
    if not params:
        return {}

    def norm(v: Any) -> Any:
        if v is None:
            return None
        if isinstance(v, (str, int, float, bool)):
            return v
        if isinstance(v, (list, tuple)):
            return [norm(x) for x in v]
        if isinstance(v, dict):
            return {k: norm(v[k]) for k in sorted(v.keys())}
        return str(v)

    return {k: norm(params[k]) for k in sorted(params.keys())}


def make_cache_key(
    *,
    version_salt: str,
    method: str,
    path: str,
    params: Optional[Dict[str, Any]] = None,
) -> str:
    payload = {
        "v": version_salt,
        "method": method.upper(),
        "path": path,
        "params": _normalize_params(params),
    }
    blob = json.dumps(payload, separators=(",", ":"), ensure_ascii=True).encode("utf-8")
    return hashlib.sha256(blob).hexdigest()


# ------------------------------------------------------------
# Memory backend
# ------------------------------------------------------------

class MemoryCache:
    """
    Deterministic in-process cache with FIFO eviction.

    Entries never outlive the process.
    """
    def __init__(self, limit: int = 64):
        self._limit = max(1, limit)
        self._store: Dict[str, Tuple[float, Any]] = {}  # key -> (expires_at, data)

    def get(self, key: str, *, allow_expired: bool = False) -> Optional[Any]:
        item = self._store.get(key)
        if not item:
            return None
        expires_at, data = item
        # Expired entries stay until evicted so stale-if-error can still serve them.
        if expires_at and time.time() > expires_at and not allow_expired:
            return None
        return data

    def set(self, key: str, data: Any, ttl_seconds: int) -> None:
        if key not in self._store and len(self._store) >= self._limit:
            oldest = next(iter(self._store))
            self._store.pop(oldest, None)
        expires_at = time.time() + ttl_seconds if ttl_seconds > 0 else 0.0
        self._store[key] = (expires_at, data)

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
