"""
Content extractor.

Turns the text of one fetched resource into the endpoints it references and
the secrets it leaks. Secrets come from two passes: the regex catalog run over
the raw text, and a structured walk over the document when it parses as JSON.
"""

import json
import re
from typing import Any, Dict, List, Tuple

from leakprobe.analyzers.patterns import DEFAULT_CATALOG, PatternCatalog
from leakprobe.core.errors import ParseFailure
from leakprobe.models import JSON_KEY_PREFIX, Finding


class Extractor:

    ENDPOINT_PATTERN = re.compile(
        r'(?:"|\'|`)'
        r'((?:[a-zA-Z]{1,10}://|//)[^"\'`]*?'
        r'|(?:/|\./|\.\./)[^"\'`\s<>]+'
        r'|[a-zA-Z0-9_/\-]+\.[^"\'`\s?]+(?:\?.*)?)'
        r'(?:"|\'|`)'
    )

    STATIC_EXTENSIONS = (
        '.png', '.jpg', '.gif', '.svg', '.woff', '.woff2',
        '.ttf', '.eot', '.ico', '.css', '.map',
    )

    MAX_DEPTH = 10
    MIN_VALUE_LENGTH = 8

    def __init__(self, catalog: PatternCatalog = DEFAULT_CATALOG, silent_mode: bool = False):
        self.catalog = catalog
        self.silent_mode = silent_mode

    def extract(self, text: str) -> Tuple[List[str], List[Finding]]:
        return self.extract_endpoints(text), self.extract_secrets(text)

    def extract_endpoints(self, text: str) -> List[str]:
        endpoints = []
        seen = set()

        for match in self.ENDPOINT_PATTERN.finditer(text):
            candidate = match.group(1)
            if not candidate or len(candidate) <= 2:
                continue
            if candidate.endswith(self.STATIC_EXTENSIONS):
                continue
            if candidate in seen:
                continue
            seen.add(candidate)
            endpoints.append(candidate)

        return endpoints

    def extract_secrets(self, text: str) -> List[Finding]:
        findings = self.find_secrets(text)

        try:
            document = self._load_json(text)
        except ParseFailure:
            return findings

        return self.merge_findings(findings, self.deep_scan(document))

    def find_secrets(self, text: str) -> List[Finding]:
        """Regex pass: one Finding per rule name, values deduplicated in match order."""
        grouped: Dict[str, List[str]] = {}

        for rule in self.catalog.rules:
            matches = rule.find_all(text)
            if not matches:
                continue

            values = grouped.setdefault(rule.name, [])
            for value in matches:
                if value not in values:
                    values.append(value)

        return [Finding(type=name, values=tuple(values)) for name, values in grouped.items()]

    def deep_scan(self, obj: Any, parent_key: str = '', depth: int = 0) -> List[Finding]:
        """Structured pass over a parsed JSON value, bounded at MAX_DEPTH levels."""
        if depth > self.MAX_DEPTH:
            return []

        found = []

        if isinstance(obj, list):
            for index, item in enumerate(obj):
                found.extend(self.deep_scan(item, f"{parent_key}[{index}]", depth + 1))

        elif isinstance(obj, dict):
            for key, value in obj.items():
                key = str(key)
                full_key = f"{parent_key}.{key}" if parent_key else key

                if isinstance(value, str) and len(value) >= self.MIN_VALUE_LENGTH:
                    if self.catalog.is_sensitive_key(key):
                        found.append(Finding(type=f"{JSON_KEY_PREFIX}{full_key}", values=(value,)))

                if isinstance(value, (dict, list)):
                    found.extend(self.deep_scan(value, full_key, depth + 1))

        return found

    def merge_findings(self, regex_findings: List[Finding], structured: List[Finding]) -> List[Finding]:
        """
        Two-stage merge. First map every literal value to the finding types
        claiming it, starting with the regex pass; then keep a structured
        finding only if none of its values has been claimed yet.
        """
        claimed: Dict[str, List[str]] = {}
        for finding in regex_findings:
            for value in finding.values:
                claimed.setdefault(value, []).append(finding.type)

        merged = list(regex_findings)
        for finding in structured:
            if any(value in claimed for value in finding.values):
                continue
            for value in finding.values:
                claimed.setdefault(value, []).append(finding.type)
            merged.append(finding)

        return merged

    def _load_json(self, text: str) -> Any:
        try:
            return json.loads(text)
        except (ValueError, RecursionError) as e:
            raise ParseFailure("json", str(e)[:100])
