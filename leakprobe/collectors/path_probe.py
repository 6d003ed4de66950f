"""
Probe for commonly exposed files.

Requests a fixed list of well-known paths directly against the origin and
keeps the ones that really serve the requested file, rejecting redirects to
a generic page and HTML catch-all pages answered with 200.
"""

import re
from typing import List, Optional, Sequence
from urllib.parse import urlparse

import aiohttp

from leakprobe.collectors.fetcher import NO_CACHE_HEADERS, TRANSPORT_ERRORS, is_success
from leakprobe.core.logger import logger


COMMON_PROBE_PATHS = [
    # Environment files
    '/.env', '/.env.local', '/.env.development', '/.env.production', '/.env.staging',
    # JSON configs
    '/config.json', '/settings.json', '/appsettings.json', '/app.config.json',
    '/firebase.json', '/.firebaserc',
    '/package.json', '/composer.json', '/Pipfile.lock',
    '/webpack.config.js', '/next.config.js', '/nuxt.config.js',
    # API docs
    '/swagger.json', '/swagger.yaml', '/openapi.json', '/openapi.yaml',
    '/api-docs', '/api-docs.json', '/v1/api-docs', '/v2/api-docs', '/v3/api-docs',
    '/_api/swagger.json',
    # CI, containers, Java
    '/.travis.yml', '/circle.yml', '/.circleci/config.yml',
    '/docker-compose.yml', '/docker-compose.yaml',
    '/kubernetes.yaml', '/k8s.yaml',
    '/WEB-INF/web.xml', '/config/database.xml',
    # Backups and dumps
    '/config.bak', '/config.php.bak', '/wp-config.php.bak',
    '/database.yml', '/database.yaml', '/database.json',
    '/credentials.json', '/credentials.yml', '/secrets.json', '/secrets.yaml',
    # Cloud
    '/cloudformation.json', '/cloudformation.yaml', '/serverless.yml',
    '/terraform.tfvars', '/variables.tf',
    # Well-known
    '/.well-known/openid-configuration',
    '/robots.txt',
    '/graphql',
]


class PathProbe:

    STRUCTURED_EXT = re.compile(r'\.(env|json|yaml|yml|bak|config|conf|xml)$', re.IGNORECASE)

    def __init__(
        self,
        session: aiohttp.ClientSession,
        paths: Optional[Sequence[str]] = None,
        silent_mode: bool = False
    ):
        self.session = session
        self.paths = list(paths) if paths is not None else list(COMMON_PROBE_PATHS)
        self.silent_mode = silent_mode

    @classmethod
    def is_accepted(cls, path: str, status: int, final_url: str, content_type: str = '') -> bool:
        if not is_success(status):
            return False

        if urlparse(final_url).path != path:
            return False

        if cls.STRUCTURED_EXT.search(path) and 'text/html' in (content_type or '').lower():
            return False

        return True

    async def probe(self, origin: str) -> List[str]:
        origin = origin.rstrip('/')
        found = []

        for path in self.paths:
            url = origin + path
            try:
                async with self.session.get(url, headers=NO_CACHE_HEADERS, allow_redirects=True) as response:
                    final_url = str(response.url)
                    content_type = response.headers.get('Content-Type', '')
                    if not self.is_accepted(path, response.status, final_url, content_type):
                        logger.debug(f"Probe rejected {url} (HTTP {response.status}, {final_url})")
                        continue
            except TRANSPORT_ERRORS as e:
                logger.debug(f"Probe failed for {url}: {str(e)[:100]}")
                continue

            if url not in found:
                found.append(url)

        if not self.silent_mode and found:
            logger.info(f"Probe found {len(found)} exposed path(s) on {origin}")

        return found
