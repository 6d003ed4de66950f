"""
Scan Runner - entry point of the scan pipeline.
Probes and crawls one origin for scannable files, extracts endpoints and
secrets from each of them and persists the ordered results with a run summary.
"""

import asyncio
from typing import Callable, List, Optional, Sequence

import aiohttp

from leakprobe.analyzers.extractor import Extractor
from leakprobe.analyzers.patterns import DEFAULT_CATALOG, PatternCatalog
from leakprobe.collectors.crawler import Crawler
from leakprobe.collectors.fetcher import ContentFetcher, ProxyLike
from leakprobe.collectors.path_probe import PathProbe
from leakprobe.core.config import Config, get_default_config
from leakprobe.core.errors import MalformedUrl
from leakprobe.core.logger import logger
from leakprobe.core.normalizer import URLNormalizer
from leakprobe.models import ScanReport, ScanResult, ScanRunSummary
from leakprobe.pipelines.scan.aggregator import ResultAggregator
from leakprobe.services.datastore import DataStore


class ScanRunner:

    def __init__(
        self,
        config: Optional[Config] = None,
        silent_mode: bool = False,
        output_dir: Optional[str] = None,
        progress: Optional[Callable[[str], None]] = None,
        catalog: PatternCatalog = DEFAULT_CATALOG,
        save: bool = True
    ):
        self.config = config or get_default_config()
        self.silent_mode = silent_mode
        self.output_dir = output_dir or self.config.output_dir
        self.progress = progress or self._log_progress
        self.catalog = catalog
        self.normalizer = URLNormalizer()
        self.datastore = DataStore(self.output_dir) if save else None

    def _log_progress(self, message: str):
        if not self.silent_mode:
            logger.info(message)

    def _default_headers(self) -> dict:
        return {
            'User-Agent': self.config.http.user_agent,
            'Accept': '*/*',
            'Accept-Language': 'en-US,en;q=0.9',
        }

    def _build_session(self) -> aiohttp.ClientSession:
        timeout = aiohttp.ClientTimeout(total=self.config.http.timeout)
        connector = aiohttp.TCPConnector(ssl=self.config.http.verify_ssl)
        return aiohttp.ClientSession(
            connector=connector,
            timeout=timeout,
            headers=self._default_headers()
        )

    async def _scan(
        self,
        session: aiohttp.ClientSession,
        origin: str,
        start_url: str,
        proxies: Sequence[ProxyLike],
        start_html: Optional[str]
    ):
        fetcher = ContentFetcher(session, self.normalizer, silent_mode=self.silent_mode)
        probe = PathProbe(session, paths=self.config.probe.paths, silent_mode=self.silent_mode)

        crawler = Crawler(
            fetcher,
            path_probe=probe,
            crawl_config=self.config.crawl,
            probe_config=self.config.probe,
            progress=self.progress,
            normalizer=self.normalizer,
            silent_mode=self.silent_mode
        )
        discovery = await crawler.discover(origin, start_url, proxies, start_html=start_html)

        aggregator = ResultAggregator(
            fetcher,
            Extractor(self.catalog, silent_mode=self.silent_mode),
            progress=self.progress,
            silent_mode=self.silent_mode
        )
        results = await aggregator.aggregate(discovery.target_urls, proxies)

        return discovery, results

    async def run_async(
        self,
        origin: str,
        start_url: Optional[str] = None,
        proxies: Optional[Sequence[ProxyLike]] = None,
        session: Optional[aiohttp.ClientSession] = None,
        start_html: Optional[str] = None
    ) -> ScanReport:
        scan_id = self.datastore.generate_scan_id() if self.datastore else None

        try:
            origin = self.normalizer.normalize_origin(origin)
        except MalformedUrl as e:
            logger.error(f"Cannot scan: {e}")
            return ScanReport(summary=ScanRunSummary(domain=str(origin or '')), scan_id=scan_id)

        start_url = start_url or f"{origin}/"
        if proxies is None:
            proxies = self.config.active_proxies()

        if not self.silent_mode:
            logger.info(f"Starting scan for: {origin}")
            logger.info(f"Scan ID: {scan_id}")
            if proxies:
                logger.info(f"Using {len(proxies)} proxy template(s)")

        if session is None:
            async with self._build_session() as own_session:
                discovery, results = await self._scan(own_session, origin, start_url, proxies, start_html)
        else:
            discovery, results = await self._scan(session, origin, start_url, proxies, start_html)

        summary = ScanRunSummary(
            domain=origin,
            pages_crawled=discovery.pages_visited,
            files_scanned=len(discovery.target_urls),
            files_with_findings=len(results)
        )
        report = ScanReport(summary=summary, results=results, scan_id=scan_id)

        if self.datastore:
            filepath = self.datastore.save_report(report)
            if not self.silent_mode:
                logger.info(f"Scan results saved to: {filepath}")

        if not self.silent_mode:
            with_secrets = sum(1 for r in results if r.has_secrets)
            logger.info(f"Pages crawled: {summary.pages_crawled}")
            logger.info(f"Files scanned: {summary.files_scanned}")
            logger.info(f"Files with findings: {summary.files_with_findings} ({with_secrets} with secrets)")

        return report

    def run(
        self,
        origin: str,
        start_url: Optional[str] = None,
        proxies: Optional[Sequence[ProxyLike]] = None,
        start_html: Optional[str] = None
    ) -> ScanReport:
        return asyncio.run(self.run_async(origin, start_url, proxies, start_html=start_html))

    def run_many(self, origins: List[str], proxies: Optional[Sequence[ProxyLike]] = None) -> List[ScanReport]:
        return [self.run(origin, proxies=proxies) for origin in origins]
