import logging
import re

from .errors import InvalidUrlError

logger = logging.getLogger(__name__)

# (typo prefix, replacement) — checked in order, first match wins
_SCHEME_TYPOS = (
    ("htp://", "http://"),
    ("htps://", "https://"),
    ("http//", "http://"),
    ("https//", "https://"),
    ("http:/", "http://"),
    ("https:/", "https://"),
)

_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*)://")
_HTTP_SCHEME_RE = re.compile(r"^(https?)://", re.IGNORECASE)
# "mailto:x", "javascript:x" — a scheme without slashes; "host:8080" is a port, not a scheme
_OPAQUE_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*):(?!\d)")
_LOCALHOST_RE = re.compile(r"^localhost(?:[:/]|$)", re.IGNORECASE)


def _repair_scheme_typo(url: str) -> str:
    lower = url.lower()
    for typo, fixed in _SCHEME_TYPOS:
        if not lower.startswith(typo):
            continue
        # single-slash forms only apply when the double slash is missing
        if typo.endswith(":/") and lower.startswith(typo + "/"):
            continue
        return fixed + url[len(typo):]
    return url


def normalize_url(raw_url: str) -> str:
    """
    Turn user input into an absolute http(s) URL.

    Repairs common scheme typos (htp://, http//, https:/...), rejects any
    non-HTTP scheme with InvalidUrlError and defaults a missing scheme to
    https://, or http:// for localhost.
    """
    url = _repair_scheme_typo(raw_url)

    if _SCHEME_RE.match(url) or _OPAQUE_SCHEME_RE.match(url):
        match = _HTTP_SCHEME_RE.match(url)
        if not match:
            raise InvalidUrlError(url)
        return match.group(1).lower() + url[len(match.group(1)):]

    scheme = "http" if _LOCALHOST_RE.match(url) else "https"
    normalized = f"{scheme}://{url}"
    if normalized != raw_url:
        logger.debug("Normalized %r -> %s", raw_url, normalized)
    return normalized
