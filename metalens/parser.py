import html
import re
from dataclasses import dataclass, field
from typing import Optional

from bs4 import BeautifulSoup


@dataclass
class ParsedDocument:
    """Raw head signals, in document order, with entities already decoded."""

    title: Optional[str] = None
    names: list[tuple[str, str]] = field(default_factory=list)        # <meta name=... content=...>
    properties: list[tuple[str, str]] = field(default_factory=list)   # <meta property=... content=...>
    canonical: Optional[str] = None                                   # <link rel="canonical" href=...>


# --- DOM strategy ---

def _rel_values(tag) -> list[str]:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return [r.lower() for r in rel]


def parse_dom(content: str) -> ParsedDocument:
    """
    Parse with BeautifulSoup/lxml. The parser decodes character references in
    text and attribute values, so nothing here unescapes a second time.
    """
    soup = BeautifulSoup(content, "lxml")
    doc = ParsedDocument()

    title_tag = soup.find("title")
    if title_tag is not None:
        doc.title = title_tag.get_text()

    for tag in soup.find_all("meta"):
        content_attr = tag.get("content")
        if content_attr is None:
            continue
        if tag.get("name"):
            doc.names.append((tag["name"], content_attr))
        if tag.get("property"):
            doc.properties.append((tag["property"], content_attr))

    for tag in soup.find_all("link", href=True):
        if "canonical" in _rel_values(tag):
            doc.canonical = tag["href"]
            break

    return doc


# --- regex strategy ---

_TITLE_RE = re.compile(r"<title\b[^>]*>(.*?)</title\s*>", re.IGNORECASE | re.DOTALL)
# a quoted attribute value may contain ">"
_META_RE = re.compile(r"""<meta\b((?:[^>"']|"[^"]*"|'[^']*')*)>""", re.IGNORECASE)
_LINK_RE = re.compile(r"""<link\b((?:[^>"']|"[^"]*"|'[^']*')*)>""", re.IGNORECASE)
_ATTR_RE = re.compile(
    r"""([a-zA-Z_:][-a-zA-Z0-9_:.]*)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'=<>`]+))""",
)
# comments and raw-text blocks can hold tag-like strings that are not tags
_SKIP_RE = re.compile(r"<!--.*?-->|<script\b.*?</script\s*>|<style\b.*?</style\s*>", re.IGNORECASE | re.DOTALL)


def _attributes(raw: str) -> dict[str, str]:
    attrs = {}
    for match in _ATTR_RE.finditer(raw):
        name = match.group(1).lower()
        value = next(v for v in match.group(2, 3, 4) if v is not None)
        attrs.setdefault(name, value)
    return attrs


def parse_regex(content: str) -> ParsedDocument:
    """
    Tag-scanning fallback for markup the DOM strategy should not be trusted
    with. Attribute names match case-insensitively, values may use single,
    double or no quotes, and every value is entity-decoded exactly once.
    """
    content = _SKIP_RE.sub(" ", content)
    doc = ParsedDocument()

    title_match = _TITLE_RE.search(content)
    if title_match:
        doc.title = html.unescape(title_match.group(1))

    for match in _META_RE.finditer(content):
        attrs = _attributes(match.group(1))
        if "content" not in attrs:
            continue
        value = html.unescape(attrs["content"])
        if attrs.get("name"):
            doc.names.append((attrs["name"], value))
        if attrs.get("property"):
            doc.properties.append((attrs["property"], value))

    for match in _LINK_RE.finditer(content):
        attrs = _attributes(match.group(1))
        if "canonical" in attrs.get("rel", "").lower().split() and "href" in attrs:
            doc.canonical = html.unescape(attrs["href"])
            break

    return doc


_STRATEGIES = {
    "dom": parse_dom,
    "regex": parse_regex,
}


def parse_html(content: str, strategy: str = "dom") -> ParsedDocument:
    try:
        parse = _STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"Unknown parser strategy: {strategy!r}") from None
    return parse(content)
