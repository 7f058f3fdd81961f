import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Union
from urllib.parse import urlparse

from .errors import InvalidUrlError
from .models import PageMetadata
from .urls import normalize_url

logger = logging.getLogger(__name__)

_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")
_UNSAFE_FILENAME_RE = re.compile(r"[^a-zA-Z0-9._-]")
_REPEATED_UNDERSCORE_RE = re.compile(r"__+")


@dataclass(frozen=True)
class ParsedUrl:
    hostname: str
    path: str
    filename: str


def parse_url_for_filename(raw_url: str) -> ParsedUrl:
    """
    Derive a default save filename from a URL: host followed by path, query
    and fragment with every non-alphanumeric character replaced by "_".

    >>> parse_url_for_filename("https://example.com/a/b?q=1").filename
    'example.com_a_b_q_1.json'
    """
    normalized = normalize_url(raw_url)
    try:
        parsed = urlparse(normalized)
        parsed.port  # raises ValueError for out-of-range ports
    except ValueError as exc:
        raise InvalidUrlError(normalized) from exc
    if not parsed.hostname:
        raise InvalidUrlError(normalized)

    path = parsed.path.rstrip("/")
    if parsed.query:
        path += "?" + parsed.query
    if parsed.fragment:
        path += "#" + parsed.fragment
    if not path:
        path = "/_root"

    suffix = _REPEATED_UNDERSCORE_RE.sub("_", _NON_ALNUM_RE.sub("_", path)).rstrip("_")
    return ParsedUrl(
        hostname=parsed.hostname,
        path=path,
        filename=f"{parsed.hostname}{suffix}.json",
    )


def parse_file_name(filename: str) -> str:
    """Sanitize a user-supplied filename and force a .json extension."""
    sanitized = _UNSAFE_FILENAME_RE.sub("_", filename)
    if not sanitized.lower().endswith(".json"):
        sanitized += "json" if sanitized.endswith(".") else ".json"
    return _REPEATED_UNDERSCORE_RE.sub("_", sanitized)


def save_metadata(metadata: PageMetadata, filename: Union[str, Path]) -> Path:
    path = Path(filename)
    path.write_text(json.dumps(metadata.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Saved metadata to %s", path)
    return path


def load_metadata(filename: Union[str, Path]) -> PageMetadata:
    return PageMetadata.from_dict(json.loads(Path(filename).read_text(encoding="utf-8")))
