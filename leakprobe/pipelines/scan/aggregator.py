"""
Result aggregation for the scan phase.
Fetches every discovered target, runs the extractor over it, drops empty
results and puts the remaining ones in reporting order.
"""

import re
from typing import Callable, List, Optional, Sequence, Tuple

from leakprobe.analyzers.extractor import Extractor
from leakprobe.collectors.fetcher import Fetcher, ProxyLike
from leakprobe.core.errors import FetchExhausted
from leakprobe.core.logger import logger
from leakprobe.models import ScanResult


TAG_MANAGER_PATTERN = re.compile(r'googletagmanager\.com', re.IGNORECASE)
ANALYTICS_PATTERN = re.compile(r'google\.', re.IGNORECASE)


def sort_key(result: ScanResult) -> Tuple[bool, bool, bool]:
    """(is_tag_manager, is_analytics_domain, has_no_secrets); ascending puts the best first."""
    return (
        bool(TAG_MANAGER_PATTERN.search(result.source_url)),
        bool(ANALYTICS_PATTERN.search(result.source_url)),
        not result.has_secrets,
    )


def order_results(results: Sequence[ScanResult]) -> List[ScanResult]:
    return sorted(results, key=sort_key)


class ResultAggregator:

    def __init__(
        self,
        fetcher: Fetcher,
        extractor: Optional[Extractor] = None,
        progress: Optional[Callable[[str], None]] = None,
        silent_mode: bool = False
    ):
        self.fetcher = fetcher
        self.extractor = extractor or Extractor(silent_mode=silent_mode)
        self.silent_mode = silent_mode
        self.progress = progress or self._log_progress
        self.files_scanned = 0

    def _log_progress(self, message: str):
        if not self.silent_mode:
            logger.info(message)

    def scan_text(self, url: str, text: str) -> ScanResult:
        endpoints, secrets = self.extractor.extract(text)
        return ScanResult(source_url=url, endpoints=tuple(endpoints), secrets=tuple(secrets))

    async def aggregate(self, urls: Sequence[str], proxies: Optional[Sequence[ProxyLike]] = None) -> List[ScanResult]:
        urls = list(dict.fromkeys(urls))
        proxies = list(proxies or [])
        total = len(urls)
        results = []
        self.files_scanned = 0

        self.progress(f"Phase 2: Scanning {total} file(s)...")

        for index, url in enumerate(urls, 1):
            self.progress(f"Phase 2: Scanning file {index}/{total}...")
            self.files_scanned += 1

            try:
                text = await self.fetcher.fetch_text(url, proxies)
            except FetchExhausted as e:
                logger.debug(str(e))
                continue

            result = self.scan_text(url, text)
            if result.is_empty:
                continue

            if result.has_secrets:
                logger.debug(f"{len(result.secrets)} secret type(s) in {url}")
            results.append(result)

        return order_results(results)
