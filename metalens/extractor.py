import logging
from typing import Optional

from .config import ExtractorOptions
from .errors import ContentParsingError, MetadataExtractionError, MetalensError
from .models import (
    NO_TITLE,
    OPEN_GRAPH_PREFIXES,
    MetaTagType,
    OpenGraphType,
    PageMetadata,
    TwitterType,
)
from .parser import ParsedDocument, parse_html

logger = logging.getLogger(__name__)


def _first(pairs: list[tuple[str, str]], key: str) -> Optional[str]:
    for name, value in pairs:
        if name == key:
            return value
    return None


def _resolve_title(doc: ParsedDocument) -> str:
    """<title> -> og:title -> twitter:title -> NO_TITLE, first non-blank wins."""
    candidates = (
        doc.title,
        _first(doc.properties, OpenGraphType.TITLE.value),
        _first(doc.names, TwitterType.TITLE.value),
    )
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    return NO_TITLE


def _collect_meta(doc: ParsedDocument) -> dict[str, str]:
    meta = {}
    for name, value in doc.names:
        tag = MetaTagType.lookup(name)
        # canonical only ever comes from <link rel="canonical">
        if tag is not None and tag is not MetaTagType.CANONICAL and value:
            meta[tag.value] = value
    if doc.canonical:
        meta[MetaTagType.CANONICAL.value] = doc.canonical
    return meta


def _collect_vocabulary(pairs, prefixes: tuple[str, ...], vocabulary, keep_unknown: bool) -> dict[str, str]:
    collected = {}
    for key, value in pairs:
        if not value or not key.startswith(prefixes):
            continue
        tag = vocabulary.lookup(key)
        if tag is not None:
            collected[tag.value] = value
        elif keep_unknown:
            collected[key] = value
        else:
            logger.debug("Dropping unrecognized tag %s", key)
    return collected


def _run_step(step: str, func, *args):
    try:
        return func(*args)
    except MetalensError:
        raise
    except Exception as exc:
        raise MetadataExtractionError(f"Failed to extract {step}: {exc}") from exc


def extract_metadata(
    content: str,
    url: Optional[str] = None,
    options: Optional[ExtractorOptions] = None,
) -> PageMetadata:
    """
    Build a PageMetadata record from raw HTML.

    `url` is the normalized URL the page was fetched from; when given, it is
    used as og:url if the page declares neither og:url nor a canonical link.
    Raises ContentParsingError when the document cannot be parsed at all and
    MetadataExtractionError when a single extraction step fails.
    """
    options = options or ExtractorOptions()

    try:
        doc = parse_html(content, strategy=options.strategy)
    except Exception as exc:
        where = f" from {url}" if url else ""
        raise ContentParsingError(f"Failed to parse HTML content{where}: {exc}") from exc

    title = _run_step("title", _resolve_title, doc)
    meta = _run_step("standard meta tags", _collect_meta, doc)
    open_graph = _run_step(
        "OpenGraph meta tags", _collect_vocabulary,
        doc.properties, OPEN_GRAPH_PREFIXES, OpenGraphType, options.keep_unknown,
    )
    twitter = _run_step(
        "Twitter Card meta tags", _collect_vocabulary,
        doc.names, ("twitter:",), TwitterType, options.keep_unknown,
    )

    # every result carries a resolvable URL
    if url and OpenGraphType.URL.value not in open_graph and MetaTagType.CANONICAL.value not in meta:
        open_graph[OpenGraphType.URL.value] = url

    return PageMetadata(title=title, meta=meta, open_graph=open_graph, twitter=twitter)
