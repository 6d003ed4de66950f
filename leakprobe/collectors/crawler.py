"""
Discovery crawler.
Seeds targets from the start page and the path probe, reads sitemap.xml and
sitemap_index.xml, then walks same-origin pages breadth-first collecting
scripts, config files and other scannable resources.
"""

import re
from typing import Callable, Iterable, List, Optional, Sequence
from urllib.parse import urlparse
from xml.etree import ElementTree as ET

from leakprobe.collectors.fetcher import Fetcher, ProxyLike
from leakprobe.collectors.path_probe import PathProbe
from leakprobe.core.config import CrawlConfig, ProbeConfig
from leakprobe.core.errors import FetchExhausted, MalformedUrl, ParseFailure
from leakprobe.core.logger import logger
from leakprobe.core.normalizer import URLNormalizer
from leakprobe.models import DiscoveryResult


SCANNABLE_EXT = (
    '.js', '.mjs', '.ts', '.tsx', '.jsx',
    '.json', '.jsonc',
    '.env', '.env.local', '.env.prod', '.env.staging', '.env.development',
    '.yaml', '.yml',
    '.xml',
    '.bak', '.backup', '.old', '.orig', '.tmp',
    '.php', '.py', '.rb', '.config', '.conf',
    '.toml', '.ini',
    '.graphql', '.gql',
    '.tf',
)

SITEMAP_PATHS = ('/sitemap.xml', '/sitemap_index.xml')


class Crawler:

    SCRIPT_PATTERN = re.compile(r'<script[^>]+src=["\']([^"\']+)["\']', re.IGNORECASE)
    LINK_PATTERN = re.compile(r'<link[^>]+href=["\']([^"\']+)["\']', re.IGNORECASE)
    ANCHOR_PATTERN = re.compile(r'<a[^>]+href=["\']([^"\'#?]+)["\']', re.IGNORECASE)
    LOC_PATTERN = re.compile(r'<loc>(.*?)</loc>', re.IGNORECASE)
    BINARY_EXT = re.compile(
        r'\.(png|jpg|jpeg|gif|svg|ico|css|woff|woff2|ttf|eot|pdf|zip|mp4|mp3)$',
        re.IGNORECASE
    )

    def __init__(
        self,
        fetcher: Fetcher,
        path_probe: Optional[PathProbe] = None,
        crawl_config: Optional[CrawlConfig] = None,
        probe_config: Optional[ProbeConfig] = None,
        progress: Optional[Callable[[str], None]] = None,
        normalizer: Optional[URLNormalizer] = None,
        silent_mode: bool = False
    ):
        self.fetcher = fetcher
        self.path_probe = path_probe
        self.crawl_config = crawl_config or CrawlConfig()
        self.probe_config = probe_config or ProbeConfig()
        self.normalizer = normalizer or URLNormalizer()
        self.silent_mode = silent_mode
        self.progress = progress or self._log_progress

    def _log_progress(self, message: str):
        if not self.silent_mode:
            logger.info(message)

    @property
    def max_pages(self) -> int:
        return self.crawl_config.max_pages

    def _same_origin(self, href: str, base: str, origin: str) -> Optional[str]:
        try:
            absolute = self.normalizer.resolve(href, base)
        except MalformedUrl:
            return None

        if not self.normalizer.is_same_origin(absolute, origin):
            return None
        return absolute

    def is_scannable_url(self, url: str) -> bool:
        try:
            path = urlparse(url).path.lower()
        except ValueError:
            return False
        return path.endswith(SCANNABLE_EXT) or '.' not in path

    def extract_script_urls(self, html: str, base: str, origin: str) -> List[str]:
        urls = []
        for src in self.SCRIPT_PATTERN.findall(html):
            absolute = self._same_origin(src, base, origin)
            if absolute and absolute not in urls:
                urls.append(absolute)
        return urls

    def extract_scan_urls(self, html: str, base: str, origin: str) -> List[str]:
        """Scripts plus scannable <link href> and <a href> targets on the same origin."""
        urls = self.extract_script_urls(html, base, origin)

        for pattern in (self.LINK_PATTERN, self.ANCHOR_PATTERN):
            for href in pattern.findall(html):
                absolute = self._same_origin(href, base, origin)
                if absolute and absolute not in urls and self.is_scannable_url(absolute):
                    urls.append(absolute)

        return urls

    def extract_page_links(self, html: str, base: str, origin: str) -> List[str]:
        links = []
        for href in self.ANCHOR_PATTERN.findall(html):
            absolute = self._same_origin(href, base, origin)
            if not absolute or self.BINARY_EXT.search(absolute):
                continue
            if absolute not in links:
                links.append(absolute)
        return links

    def _parse_sitemap(self, xml: str) -> List[str]:
        try:
            root = ET.fromstring(xml)
        except ET.ParseError as e:
            raise ParseFailure("sitemap", str(e))

        locs = []
        for elem in root.iter():
            tag = elem.tag.rsplit('}', 1)[-1] if isinstance(elem.tag, str) else ''
            if tag.lower() == 'loc' and elem.text:
                locs.append(elem.text)
        return locs

    def extract_sitemap_urls(self, xml: str, origin: str) -> List[str]:
        try:
            locs = self._parse_sitemap(xml)
        except ParseFailure as e:
            logger.debug(f"{e}; falling back to <loc> matching")
            locs = self.LOC_PATTERN.findall(xml)

        urls = []
        for loc in locs:
            loc = loc.strip()
            parsed = urlparse(loc)
            if not parsed.scheme or not parsed.netloc:
                continue

            absolute = self._same_origin(loc, loc, origin)
            if absolute and absolute not in urls:
                urls.append(absolute)
        return urls

    async def _fetch(self, url: str, proxies: Sequence[ProxyLike]) -> Optional[str]:
        try:
            return await self.fetcher.fetch_text(url, proxies)
        except FetchExhausted as e:
            logger.debug(str(e))
            return None

    async def _sitemap_seeds(self, origin: str, proxies: Sequence[ProxyLike]) -> List[str]:
        seeds = []
        for path in SITEMAP_PATHS:
            xml = await self._fetch(origin + path, proxies)
            if xml is None:
                continue
            for url in self.extract_sitemap_urls(xml, origin):
                if url not in seeds:
                    seeds.append(url)
        return seeds

    async def discover(
        self,
        origin: str,
        start_url: str,
        proxies: Optional[Sequence[ProxyLike]] = None,
        start_html: Optional[str] = None
    ) -> DiscoveryResult:
        proxies = list(proxies or [])
        origin = origin.rstrip('/')
        targets = {}

        def add_targets(urls: Iterable[str]):
            for url in urls:
                targets.setdefault(url, None)

        self.progress("Phase 0: Probing common config paths...")

        if start_html is None:
            start_html = await self._fetch(start_url, proxies)
        prefetched = {start_url: start_html}

        if start_html:
            add_targets(self.extract_script_urls(start_html, start_url, origin))
        add_targets([start_url])

        if self.path_probe is not None and self.probe_config.enabled:
            add_targets(await self.path_probe.probe(origin))

        self.progress("Phase 1: Discovering pages...")

        if not self.crawl_config.enabled:
            return DiscoveryResult(target_urls=list(targets), pages_visited=0)

        frontier = [start_url]
        if self.crawl_config.sitemaps:
            for url in await self._sitemap_seeds(origin, proxies):
                if url not in frontier:
                    frontier.append(url)

        queued = set(frontier)
        visited = set()
        position = 0

        while position < len(frontier) and len(visited) < self.max_pages:
            page_url = frontier[position]
            position += 1
            if page_url in visited:
                continue
            visited.add(page_url)

            self.progress(f"Phase 1: Crawling page {len(visited)}/{self.max_pages}...")

            if page_url in prefetched:
                html = prefetched.pop(page_url)
            else:
                html = await self._fetch(page_url, proxies)
            if html is None:
                continue

            add_targets(self.extract_scan_urls(html, page_url, origin))

            if len(visited) < self.max_pages:
                for link in self.extract_page_links(html, page_url, origin):
                    if link not in visited and link not in queued:
                        queued.add(link)
                        frontier.append(link)

        if not self.silent_mode:
            logger.info(f"Discovered {len(targets)} target(s) from {len(visited)} page(s)")

        return DiscoveryResult(target_urls=list(targets), pages_visited=len(visited))
