"""
JSON export functionality.
Writes the secrets, endpoints, full and summary views of a scan report.
"""

import json
import os
import re
from typing import Dict, List, Sequence

from leakprobe.core.logger import logger
from leakprobe.models import ScanReport, ScanResult
from leakprobe.services.datastore import DataStore


FILE_TYPE_LABELS = {
    '.js': 'JS',
    '.mjs': 'MJS',
    '.ts': 'TS',
    '.tsx': 'TSX',
    '.jsx': 'JSX',
    '.json': 'JSON',
    '.jsonc': 'JSONC',
    '.env': 'ENV',
    '.yaml': 'YAML',
    '.yml': 'YML',
    '.xml': 'XML',
    '.bak': 'BAK',
    '.backup': 'BAK',
    '.old': 'OLD',
    '.orig': 'ORIG',
    '.tmp': 'TMP',
    '.php': 'PHP',
    '.py': 'PY',
    '.rb': 'RB',
    '.toml': 'TOML',
    '.ini': 'INI',
    '.tf': 'TF',
    '.graphql': 'GQL',
    '.gql': 'GQL',
}

_EXTENSION = re.compile(r'\.([a-z0-9]+)$')
_API_PATH = re.compile(r'/api/', re.IGNORECASE)
_ABSOLUTE_HTTP = re.compile(r'^https?://', re.IGNORECASE)


def file_type(url: str) -> str:
    path = url.split('?')[0].lower()

    if '/.env' in path:
        return 'ENV'

    match = _EXTENSION.search(path)
    if not match:
        return 'FILE'

    ext = '.' + match.group(1)
    return FILE_TYPE_LABELS.get(ext, match.group(1).upper())


def summarize(results: Sequence[ScanResult]) -> Dict[str, int]:
    return {
        'files_with_findings': len(results),
        'files_with_secrets': sum(1 for r in results if r.secrets),
        'files_with_endpoints': sum(1 for r in results if r.endpoints),
        'secret_types_found': sum(len(r.secrets) for r in results),
        'unique_endpoints': sum(len(r.endpoints) for r in results),
    }


def group_endpoints(results: Sequence[ScanResult]) -> Dict[str, Dict[str, List[str]]]:
    """Bucket every distinct endpoint into api / full_urls / paths with its source files."""
    sources: Dict[str, List[str]] = {}
    for result in results:
        for endpoint in result.endpoints:
            files = sources.setdefault(endpoint, [])
            if result.source_url not in files:
                files.append(result.source_url)

    groups = {'api': {}, 'full_urls': {}, 'paths': {}}
    for endpoint, files in sources.items():
        is_absolute = bool(_ABSOLUTE_HTTP.match(endpoint))
        if _API_PATH.search(endpoint):
            groups['api'][endpoint] = files
        elif is_absolute:
            groups['full_urls'][endpoint] = files

        if not is_absolute:
            groups['paths'][endpoint] = files

    return groups


class JSONExporter:

    SECRETS_FILE = 'secrets.json'
    ENDPOINTS_FILE = 'endpoints.json'
    FULL_FILE = 'full.json'
    SUMMARY_FILE = 'summary.json'

    def __init__(self, output_dir: str = "scan_output"):
        self.output_dir = output_dir

    def _create_target_dir(self, domain: str) -> str:
        target_dir = os.path.join(self.output_dir, DataStore.safe_name(domain), 'exports')
        os.makedirs(target_dir, exist_ok=True)
        return target_dir

    def _write(self, target_dir: str, filename: str, data) -> str:
        path = os.path.join(target_dir, filename)
        with open(path, 'w') as f:
            json.dump(data, f, indent=2)
        return path

    def export(self, report: ScanReport) -> str:
        target_dir = self._create_target_dir(report.summary.domain)
        results = report.results

        self._write(target_dir, self.SECRETS_FILE, [
            {'file': r.source_url, 'secrets': [s.to_dict() for s in r.secrets]}
            for r in results if r.secrets
        ])
        self._write(target_dir, self.ENDPOINTS_FILE, [
            {'file': r.source_url, 'endpoints': list(r.endpoints)}
            for r in results if r.endpoints
        ])
        self._write(target_dir, self.FULL_FILE, report.to_dict())

        summary = dict(report.summary.to_dict())
        summary.update(summarize(results))
        summary['endpoint_groups'] = {
            name: len(entries) for name, entries in group_endpoints(results).items()
        }
        self._write(target_dir, self.SUMMARY_FILE, summary)

        logger.info(f"Report exported to {target_dir}")
        return target_dir
