"""
Data models for the scan pipeline.
Defines the findings, per-file results and run summary handed to persistence.
"""

from dataclasses import dataclass, field
import re
from typing import List, Optional, Tuple
from datetime import datetime, timezone


JSON_KEY_PREFIX = "JSON Key: "


@dataclass(frozen=True)
class PatternRule:
    name: str
    pattern: re.Pattern

    def find_all(self, text: str) -> List[str]:
        return [m.group(0) for m in self.pattern.finditer(text) if m.group(0)]


@dataclass(frozen=True)
class Finding:
    type: str
    values: Tuple[str, ...] = ()

    @property
    def is_structured(self) -> bool:
        return self.type.startswith(JSON_KEY_PREFIX)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "values": list(self.values)
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Finding":
        return cls(type=data["type"], values=tuple(data.get("values", [])))


@dataclass(frozen=True)
class ScanResult:
    source_url: str
    endpoints: Tuple[str, ...] = ()
    secrets: Tuple[Finding, ...] = ()

    @property
    def has_secrets(self) -> bool:
        return len(self.secrets) > 0

    @property
    def is_empty(self) -> bool:
        return not self.endpoints and not self.secrets

    def to_dict(self) -> dict:
        return {
            "source_url": self.source_url,
            "endpoints": list(self.endpoints),
            "secrets": [s.to_dict() for s in self.secrets]
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScanResult":
        return cls(
            source_url=data["source_url"],
            endpoints=tuple(data.get("endpoints", [])),
            secrets=tuple(Finding.from_dict(s) for s in data.get("secrets", []))
        )


@dataclass
class ScanRunSummary:
    domain: str
    scanned_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    pages_crawled: int = 0
    files_scanned: int = 0
    files_with_findings: int = 0

    def to_dict(self) -> dict:
        return {
            "scanned_at": self.scanned_at,
            "domain": self.domain,
            "pages_crawled": self.pages_crawled,
            "files_scanned": self.files_scanned,
            "files_with_findings": self.files_with_findings
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScanRunSummary":
        return cls(**data)


@dataclass
class ProxyTemplate:
    domain: str
    url_prefix: str
    enabled: bool = True

    @property
    def is_usable(self) -> bool:
        return self.enabled and bool(self.url_prefix and self.url_prefix.strip())

    def to_dict(self) -> dict:
        return {
            "domain": self.domain,
            "url": self.url_prefix,
            "enabled": self.enabled
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProxyTemplate":
        return cls(
            domain=data["domain"],
            url_prefix=data.get("url", data.get("url_prefix", "")),
            enabled=bool(data.get("enabled", True))
        )


@dataclass
class DiscoveryResult:
    target_urls: List[str] = field(default_factory=list)
    pages_visited: int = 0


@dataclass
class ScanReport:
    summary: ScanRunSummary
    results: List[ScanResult] = field(default_factory=list)
    scan_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "scan_id": self.scan_id,
            "meta": self.summary.to_dict(),
            "results": [r.to_dict() for r in self.results]
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScanReport":
        return cls(
            summary=ScanRunSummary.from_dict(data["meta"]),
            results=[ScanResult.from_dict(r) for r in data.get("results", [])],
            scan_id=data.get("scan_id")
        )


__all__ = [
    "JSON_KEY_PREFIX", "PatternRule", "Finding", "ScanResult", "ScanRunSummary",
    "ProxyTemplate", "DiscoveryResult", "ScanReport",
]
