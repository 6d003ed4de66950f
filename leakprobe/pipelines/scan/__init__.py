"""
Scan pipeline.
Discovery, content extraction and result ordering for one origin.
"""

from .aggregator import ResultAggregator, order_results, sort_key
from .runner import ScanRunner

__all__ = ["ScanRunner", "ResultAggregator", "order_results", "sort_key"]
