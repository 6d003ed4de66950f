"""Secret pattern catalog and content extraction."""

from .extractor import Extractor
from .patterns import DEFAULT_CATALOG, PatternCatalog

__all__ = ["Extractor", "PatternCatalog", "DEFAULT_CATALOG"]
