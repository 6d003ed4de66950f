"""
Error taxonomy for the scan pipeline.
Every error here is recovered where it is raised; none of them aborts a run.
"""

from typing import List, Optional


class LeakProbeError(Exception):
    pass


class FetchExhausted(LeakProbeError):
    """Every proxy attempt and the direct attempt failed for a URL."""

    def __init__(self, url: str, attempts: Optional[List[str]] = None):
        self.url = url
        self.attempts = list(attempts or [])
        super().__init__(f"All {len(self.attempts)} fetch attempt(s) failed for {url}")


class ParseFailure(LeakProbeError):
    """A document could not be parsed as the structured format it was tried as."""

    def __init__(self, kind: str, reason: str = ""):
        self.kind = kind
        self.reason = reason
        message = f"Could not parse {kind}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MalformedUrl(LeakProbeError):
    """A discovered link does not resolve to an absolute http(s) URL."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Malformed URL: {value[:200]}")
