"""
Configuration for the scan pipeline.
Holds HTTP, probing and crawling settings plus the user-maintained proxy list.
"""

import json
import os
from dataclasses import dataclass, field
from typing import List, Optional

from leakprobe.core.logger import logger
from leakprobe.models import ProxyTemplate


# Known CORS relay services and the prefix each one expects in front of
# the percent-encoded target URL.
KNOWN_PROXIES = {
    'api.codetabs.com': 'https://api.codetabs.com/v1/proxy?quest=',
    'corsproxy.io': 'https://corsproxy.io/?',
    'api.allorigins.win': 'https://api.allorigins.win/raw?url=',
    'cors-anywhere.herokuapp.com': 'https://cors-anywhere.herokuapp.com/',
    'thingproxy.freeboard.io': 'https://thingproxy.freeboard.io/fetch/',
    'crossorigin.me': 'https://crossorigin.me/',
}

DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)


def clean_proxy_domain(domain: str) -> str:
    clean = domain.strip().lower()
    for scheme in ('https://', 'http://'):
        if clean.startswith(scheme):
            clean = clean[len(scheme):]
            break
    return clean.rstrip('/')


def build_proxy_url(domain: str) -> str:
    """Prefix for a proxy domain; unknown services get the /proxy?url= guess."""
    clean = clean_proxy_domain(domain)
    if clean in KNOWN_PROXIES:
        return KNOWN_PROXIES[clean]
    return f"https://{clean}/proxy?url="


@dataclass
class HttpConfig:
    timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    verify_ssl: bool = True


@dataclass
class ProbeConfig:
    enabled: bool = True
    paths: Optional[List[str]] = None


@dataclass
class CrawlConfig:
    enabled: bool = True
    max_pages: int = 30
    sitemaps: bool = True


@dataclass
class Config:
    output_dir: str = "scan_output"
    proxies: List[ProxyTemplate] = field(default_factory=list)
    http: HttpConfig = field(default_factory=HttpConfig)
    probe: ProbeConfig = field(default_factory=ProbeConfig)
    crawl: CrawlConfig = field(default_factory=CrawlConfig)

    def active_proxies(self) -> List[ProxyTemplate]:
        return [p for p in self.proxies if p.enabled]

    def add_proxy(self, domain: str, enabled: bool = True) -> bool:
        clean = clean_proxy_domain(domain)
        if not clean:
            return False

        if any(p.domain == clean for p in self.proxies):
            return False

        self.proxies.append(ProxyTemplate(domain=clean, url_prefix=build_proxy_url(clean), enabled=enabled))
        return True

    def set_proxy_enabled(self, domain: str, enabled: bool) -> bool:
        clean = clean_proxy_domain(domain)
        for proxy in self.proxies:
            if proxy.domain == clean:
                proxy.enabled = enabled
                return True
        return False

    def remove_proxy(self, domain: str) -> bool:
        clean = clean_proxy_domain(domain)
        before = len(self.proxies)
        self.proxies = [p for p in self.proxies if p.domain != clean]
        return len(self.proxies) != before


def get_default_config() -> Config:
    return Config()


def load_proxy_list(path: str) -> List[ProxyTemplate]:
    if not os.path.exists(path):
        return []

    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Ignoring unreadable proxy list {path}: {e}")
        return []

    if not isinstance(data, list):
        logger.warning(f"Ignoring proxy list {path}: expected a JSON array")
        return []

    proxies = []
    for entry in data:
        if not isinstance(entry, dict) or not entry.get('domain'):
            continue
        proxy = ProxyTemplate.from_dict(entry)
        if not proxy.url_prefix:
            proxy.url_prefix = build_proxy_url(proxy.domain)
        proxies.append(proxy)
    return proxies


def save_proxy_list(path: str, proxies: List[ProxyTemplate]) -> str:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(path, 'w') as f:
        json.dump([p.to_dict() for p in proxies], f, indent=2)

    return path
