"""
Content fetcher with proxy fallback.

A URL is tried through every enabled proxy template in order, then once
directly. The first 2xx response wins; when every attempt fails the caller
gets FetchExhausted and treats the resource as unavailable.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Union
from urllib.parse import quote

import aiohttp

from leakprobe.core.errors import FetchExhausted
from leakprobe.core.logger import logger
from leakprobe.core.normalizer import URLNormalizer
from leakprobe.models import ProxyTemplate


ProxyLike = Union[ProxyTemplate, str]

# Characters encodeURIComponent leaves alone on top of quote()'s defaults.
URI_COMPONENT_SAFE = "!*'()"

NO_CACHE_HEADERS = {
    'Cache-Control': 'no-cache',
    'Pragma': 'no-cache',
}

TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ValueError, LookupError)


def is_success(status: int) -> bool:
    return 200 <= status < 300


class Fetcher(ABC):
    """Anything that can turn a URL into text, or raise FetchExhausted."""

    @abstractmethod
    async def fetch_text(self, url: str, proxies: Optional[Sequence[ProxyLike]] = None) -> str:
        raise NotImplementedError


class ContentFetcher(Fetcher):

    def __init__(
        self,
        session: aiohttp.ClientSession,
        normalizer: Optional[URLNormalizer] = None,
        silent_mode: bool = False
    ):
        self.session = session
        self.normalizer = normalizer or URLNormalizer()
        self.silent_mode = silent_mode

    @staticmethod
    def _prefix_of(proxy: ProxyLike) -> str:
        if isinstance(proxy, ProxyTemplate):
            return proxy.url_prefix.strip() if proxy.is_usable else ''
        return (proxy or '').strip()

    def build_attempts(self, url: str, proxies: Optional[Sequence[ProxyLike]] = None) -> List[str]:
        """Request URLs in the order they are tried; the direct URL is always last."""
        attempts = []

        if proxies and not self.normalizer.is_local(url):
            encoded = quote(url, safe=URI_COMPONENT_SAFE)
            for proxy in proxies:
                prefix = self._prefix_of(proxy)
                if prefix:
                    attempts.append(prefix + encoded)

        attempts.append(url)
        return attempts

    async def fetch_text(self, url: str, proxies: Optional[Sequence[ProxyLike]] = None) -> str:
        attempts = self.build_attempts(url, proxies)

        for attempt_url in attempts:
            try:
                async with self.session.get(attempt_url, headers=NO_CACHE_HEADERS) as response:
                    if is_success(response.status):
                        return await response.text(errors='replace')
                    logger.debug(f"HTTP {response.status} for {attempt_url}")
            except TRANSPORT_ERRORS as e:
                logger.debug(f"Fetch failed for {attempt_url}: {str(e)[:100]}")

        raise FetchExhausted(url, attempts)
