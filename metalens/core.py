import logging
from typing import Optional

from .config import ExtractorOptions
from .errors import MetalensError, classify_error
from .extractor import extract_metadata
from .fetcher import fetch_content
from .models import LensResult, PageMetadata
from .urls import normalize_url

logger = logging.getLogger(__name__)


async def get_metadata(raw_url: str, options: Optional[ExtractorOptions] = None) -> PageMetadata:
    """
    Normalize, fetch and extract. Raises exactly one MetalensError on failure;
    errors already typed by a stage pass through unchanged.
    """
    url = raw_url
    try:
        url = normalize_url(raw_url)
        html, status_code, final_url = await fetch_content(url)
        logger.debug("Fetched %s -> %s (%d, %d chars)", url, final_url, status_code, len(html))
        return extract_metadata(html, url=url, options=options)
    except MetalensError:
        raise
    except Exception as exc:
        raise classify_error(exc, url) from exc


async def lens(raw_url: str, options: Optional[ExtractorOptions] = None) -> LensResult:
    """
    Top-level entry point for callers that prefer a result object.
    Never raises; the typed error is captured in result.error.
    """
    try:
        metadata = await get_metadata(raw_url, options=options)
    except MetalensError as exc:
        logger.error("Metadata lookup failed for %s: %s", raw_url, exc.message)
        return LensResult(url=raw_url, error=exc)
    return LensResult(url=raw_url, metadata=metadata)
