from __future__ import annotations

from typing import List, Optional
import logging

import requests

from .base import BaseAPIClient, ParseError
from storyfeed.core.cache import CacheDecision
from storyfeed.core.http_client import HttpClientConfig


class ProfilesClient(BaseAPIClient):
    """Client for the profile listing that feeds the profile selector."""

    BASE_URL = "https://gaiadev.com.br"
    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        base_url: Optional[str] = None,
        timeout: float = 30,
        cache_ttl_seconds: int = 300,
        http_config: Optional[HttpClientConfig] = None,
    ):
        super().__init__(session, base_url=base_url, timeout=timeout, http_config=http_config)
        self.cache_ttl_seconds = cache_ttl_seconds

    def get_profiles(self) -> List[dict]:
        data = self._request("GET", "/api/profiles")
        if not isinstance(data, list):
            raise ParseError("profiles response not a list")
        profiles = [self.normalize_profile(p) for p in data if isinstance(p, dict)]
        skipped = len(data) - len(profiles)
        if skipped:
            self._logger.warning(f"Skipped {skipped} malformed profile entries")
        return profiles

    @staticmethod
    def normalize_profile(raw: dict) -> dict:
        return {
            "id": raw.get("id"),
            "user_id": raw.get("user_id"),
            "instagram_id": str(raw.get("instagram_id") or ""),
            "id_profile": raw.get("id_profile"),
        }

    def _cache_policy(self, method: str, path: str) -> CacheDecision:
        if method.upper() == "GET" and path == "/api/profiles":
            return CacheDecision(enabled=True, ttl_seconds=self.cache_ttl_seconds, stale_if_error=True)
        return CacheDecision(enabled=False)
