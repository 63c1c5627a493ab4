"""
Synchronous API client contract.

Used for endpoints outside the feed engine proper (the profile selector).
Feed pages go through the async sources in storyfeed.core.sources.

Contract goals:
- Returns plain dict/list payloads (DTO creation belongs to managers)
- Every transport or parse failure surfaces as FetchError / ParseError
"""

from __future__ import annotations

from typing import Any, Dict, Optional
import logging

import requests

from storyfeed.core.cache import CacheDecision, MemoryCache, make_cache_key
from storyfeed.core.http_client import HttpClientConfig


class FetchError(RuntimeError):
    """Raised for transport failures, non-2xx responses and timeouts."""


class ParseError(FetchError):
    """Raised when a response is not valid JSON or has the wrong shape."""


logger = logging.getLogger(__name__)


class BaseAPIClient:
    """
    Base for blocking JSON API clients.

    Subclasses set BASE_URL and decide caching per path via _cache_policy.
    """

    BASE_URL: str = ""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        base_url: Optional[str] = None,
        timeout: float = 30,
        http_config: Optional[HttpClientConfig] = None,
    ):
        self.session = session or requests.Session()
        self.http_config = http_config
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self._cache = MemoryCache(limit=32)

    # ------------------------------------------------------------------
    # Request helpers
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        logger.info(f"API Request: {method} {url}")
        if params:
            logger.debug(f"Request params: {params}")

        decision = self._cache_policy(method, path)

        cache_key = None
        if decision.enabled and method.upper() == "GET":
            cache_key = make_cache_key(
                version_salt="api-v1",
                method=method,
                path=path,
                params=params,
            )
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.info("  └─ [CACHE HIT]")
                return cached

        if self.http_config is not None:
            self.http_config.apply_request_delay()

        try:
            resp = self.session.request(
                method=method,
                url=url,
                params=params,
                timeout=self.timeout,
            )
            if not resp.ok:
                raise FetchError(f"API error {resp.status_code} for {path}: {resp.text[:200]}")
            try:
                data = resp.json()
            except ValueError as e:
                raise ParseError(f"Malformed JSON from {path}: {e}") from e
        except Exception as e:
            # Deterministic "stale-if-error"
            if cache_key and decision.stale_if_error:
                cached = self._cache.get(cache_key, allow_expired=True)
                if cached is not None:
                    logger.warning(f"Serving stale {path} after error: {e}")
                    return cached
            if isinstance(e, FetchError):
                raise
            raise FetchError(f"Request to {path} failed: {e}") from e

        if cache_key:
            self._cache.set(cache_key, data, ttl_seconds=decision.ttl_seconds)

        return data

    def _cache_policy(self, method: str, path: str) -> CacheDecision:
        """Default: uncached."""
        return CacheDecision(enabled=False)

    def clear_cache(self) -> None:
        self._cache.clear()
