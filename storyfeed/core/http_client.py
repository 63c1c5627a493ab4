"""
Centralized HTTP client configuration.

Provides unified session management for both sync (requests) and async (aiohttp)
HTTP clients:
- JSON API headers shared by both session kinds
- Connection pool limits and timeouts read from settings
- Optional politeness delay between requests
"""

from __future__ import annotations

import asyncio
import logging
import socket
import time
from typing import Dict, Optional

import aiohttp
import requests
from aiohttp import ClientTimeout, TCPConnector

logger = logging.getLogger(__name__)


USER_AGENT = "storyfeed/1.0 (+https://pypi.org/project/storyfeed/)"

# Headers for JSON API and static JSON listing requests
API_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "application/json",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
}


class HttpClientConfig:
    """Central HTTP client configuration."""

    def __init__(
        self,
        request_delay_ms: int = 0,
        max_connections_per_host: int = 10,
        max_total_connections: int = 100,
        connect_timeout: int = 30,
        read_timeout: int = 60,
    ):
        self.request_delay_ms = request_delay_ms
        self.max_connections_per_host = max_connections_per_host
        self.max_total_connections = max_total_connections
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout

        self._last_request_time: float = 0

    def apply_request_delay(self):
        """Apply configured delay between requests."""
        if self.request_delay_ms > 0:
            elapsed = (time.time() - self._last_request_time) * 1000
            if elapsed < self.request_delay_ms:
                time.sleep((self.request_delay_ms - elapsed) / 1000)
        self._last_request_time = time.time()

    async def apply_request_delay_async(self):
        """Apply configured delay between requests (async version)."""
        if self.request_delay_ms > 0:
            elapsed = (time.time() - self._last_request_time) * 1000
            if elapsed < self.request_delay_ms:
                await asyncio.sleep((self.request_delay_ms - elapsed) / 1000)
        self._last_request_time = time.time()


class HttpClient:
    """
    Owns the process-wide HTTP sessions.

    The sync session serves the profile listing; the async session serves
    every feed source fetch.
    """

    def __init__(self, config: Optional[HttpClientConfig] = None):
        self.config = config or HttpClientConfig()
        self._sync_session: Optional[requests.Session] = None
        self._async_session: Optional[aiohttp.ClientSession] = None

    def create_sync_session(self, headers: Optional[Dict[str, str]] = None) -> requests.Session:
        """
        Create a configured requests.Session for synchronous HTTP.

        Args:
            headers: Optional headers to use (defaults to API_HEADERS)
        """
        session = requests.Session()
        session.headers.update(headers or API_HEADERS)
        self._sync_session = session
        return session

    def get_sync_session(self) -> requests.Session:
        """Get existing session or create new one."""
        if self._sync_session is None:
            return self.create_sync_session()
        return self._sync_session

    async def create_async_session(
        self,
        headers: Optional[Dict[str, str]] = None,
        total_timeout: Optional[int] = None,
    ) -> aiohttp.ClientSession:
        """
        Create a configured aiohttp.ClientSession for async HTTP.

        Must be awaited inside a running event loop.

        Args:
            headers: Optional headers to use (defaults to API_HEADERS)
            total_timeout: Total request timeout (None for no limit)
        """
        connector = TCPConnector(
            limit=self.config.max_total_connections,
            limit_per_host=self.config.max_connections_per_host,
            ttl_dns_cache=300,
            family=socket.AF_INET,
            force_close=False,
        )
        timeout = ClientTimeout(
            total=total_timeout,
            connect=self.config.connect_timeout,
            sock_read=self.config.read_timeout,
        )
        session = aiohttp.ClientSession(
            connector=connector,
            timeout=timeout,
            headers=headers or API_HEADERS,
            raise_for_status=False,
        )
        self._async_session = session
        return session

    async def get_async_session(self) -> aiohttp.ClientSession:
        if self._async_session is None or self._async_session.closed:
            return await self.create_async_session()
        return self._async_session

    async def close_async_session(self):
        if self._async_session is not None and not self._async_session.closed:
            await self._async_session.close()
        self._async_session = None

    def close(self):
        if self._sync_session is not None:
            self._sync_session.close()
            self._sync_session = None


def create_http_client_from_settings(db_manager) -> HttpClient:
    """
    Create HttpClient configured from database settings.

    Args:
        db_manager: DatabaseManager instance to read settings from
    """
    def _int(key: str, default: int) -> int:
        try:
            return int(db_manager.get_config(key, str(default)))
        except (TypeError, ValueError):
            logger.warning(f"Invalid integer for config '{key}', using {default}")
            return default

    config = HttpClientConfig(
        request_delay_ms=_int("request_delay_ms", 0),
        max_connections_per_host=_int("max_connections_per_host", 10),
        max_total_connections=_int("max_total_connections", 100),
        connect_timeout=_int("connect_timeout_seconds", 30),
        read_timeout=_int("read_timeout_seconds", 60),
    )
    return HttpClient(config)
