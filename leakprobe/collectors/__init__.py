"""Fetching, probing and crawling collectors."""

from .crawler import Crawler
from .fetcher import ContentFetcher, Fetcher
from .path_probe import PathProbe

__all__ = ["Crawler", "ContentFetcher", "Fetcher", "PathProbe"]
