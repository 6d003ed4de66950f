"""
URL normalization helpers.
Resolves discovered links, compares origins and recognises local targets.
"""

import ipaddress
from urllib.parse import urljoin, urlparse, urldefrag

from leakprobe.core.errors import MalformedUrl


class URLNormalizer:

    ALLOWED_SCHEMES = ('http', 'https')
    SKIPPED_PREFIXES = ('javascript:', 'mailto:', 'tel:', 'data:')

    def normalize_origin(self, target: str) -> str:
        """Reduce a target (bare host or full URL) to scheme://host[:port]."""
        if not target or not target.strip():
            raise MalformedUrl(target or "")

        target = target.strip()
        if '://' not in target:
            target = f"https://{target}"

        parsed = urlparse(target)
        if parsed.scheme.lower() not in self.ALLOWED_SCHEMES or not parsed.netloc:
            raise MalformedUrl(target)

        return f"{parsed.scheme.lower()}://{parsed.netloc.lower()}"

    def resolve(self, href: str, base: str) -> str:
        """Absolute form of href relative to base, without fragment."""
        if href is None:
            raise MalformedUrl("")

        href = href.strip()
        if not href or href.lower().startswith(self.SKIPPED_PREFIXES):
            raise MalformedUrl(href)

        try:
            absolute = urljoin(base, href)
            parsed = urlparse(absolute)
            # raises ValueError on an out-of-range port
            parsed.port
        except ValueError:
            raise MalformedUrl(href)

        if parsed.scheme.lower() not in self.ALLOWED_SCHEMES or not parsed.netloc:
            raise MalformedUrl(href)

        return urldefrag(absolute)[0]

    def is_same_origin(self, url: str, origin: str) -> bool:
        try:
            left = urlparse(url)
            right = urlparse(origin)
        except ValueError:
            return False

        return (
            left.scheme.lower() == right.scheme.lower()
            and left.netloc.lower() == right.netloc.lower()
        )

    def is_local(self, url: str) -> bool:
        """True for localhost names and loopback/unspecified IP literals."""
        try:
            host = urlparse(url).hostname
        except ValueError:
            return False

        if not host:
            return False

        host = host.lower()
        if host == 'localhost' or host.endswith('.localhost'):
            return True

        try:
            address = ipaddress.ip_address(host)
        except ValueError:
            return False

        # ::ffff:127.0.0.1 is not loopback to ipaddress itself
        mapped = getattr(address, 'ipv4_mapped', None)
        if mapped:
            address = mapped

        return address.is_loopback or address.is_unspecified

    def path_of(self, url: str) -> str:
        return urlparse(url).path
