__version__ = "1.0.0"

from .core import get_metadata, lens
from .fetcher import fetch_content
from .extractor import extract_metadata
from .urls import normalize_url
from .models import PageMetadata, LensResult

__all__ = [
    "get_metadata", "lens", "fetch_content", "extract_metadata",
    "normalize_url", "PageMetadata", "LensResult",
]
