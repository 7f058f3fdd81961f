import os
from dataclasses import dataclass
from pathlib import Path


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


FETCH_TIMEOUT = float(os.getenv("METALENS_FETCH_TIMEOUT", "15"))  # seconds
USER_AGENT = os.getenv(
    "METALENS_USER_AGENT",
    "MetalensBot/1.0 (+https://github.com/rudrodip/metalens)",
)

PARSER_STRATEGY = os.getenv("METALENS_PARSER", "dom")            # dom | regex
KEEP_UNKNOWN_TAGS = _env_flag("METALENS_KEEP_UNKNOWN_TAGS")

LOG_LEVEL = os.getenv("METALENS_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

PREVIEW_PORT = int(os.getenv("METALENS_PREVIEW_PORT", "3141"))
DEV_MODE = _env_flag("METALENS_DEV")
PREVIEW_HTML_URL = os.getenv("METALENS_PREVIEW_HTML_URL", "")  # e.g. a raw.githubusercontent.com copy

# page bundled with the package; used unless a remote source is configured
BUNDLED_PREVIEW_HTML = Path(__file__).resolve().parent.parent / "api" / "static" / "index.html"
# dev mode serves the working-tree copy so edits show up without reinstalling
DEV_PREVIEW_HTML = Path.cwd() / "api" / "static" / "index.html"

STRATEGIES = ("dom", "regex")
HTML_SOURCES = ("local-file", "remote-fetch")


@dataclass(frozen=True)
class ExtractorOptions:
    strategy: str = PARSER_STRATEGY
    keep_unknown: bool = KEEP_UNKNOWN_TAGS  # retain unrecognized og:/twitter: keys verbatim

    def __post_init__(self):
        if self.strategy not in STRATEGIES:
            raise ValueError(f"strategy must be one of {STRATEGIES}, got {self.strategy!r}")


@dataclass(frozen=True)
class PreviewSource:
    html_source: str = "local-file"
    location: str = str(BUNDLED_PREVIEW_HTML)   # file path or URL, depending on html_source

    def __post_init__(self):
        if self.html_source not in HTML_SOURCES:
            raise ValueError(f"html_source must be one of {HTML_SOURCES}, got {self.html_source!r}")


def default_preview_source() -> PreviewSource:
    """
    Working-tree page in dev mode (METALENS_DEV=true), the hosted copy when
    METALENS_PREVIEW_HTML_URL is set, otherwise the page shipped in the package.
    """
    if DEV_MODE:
        return PreviewSource("local-file", str(DEV_PREVIEW_HTML))
    if PREVIEW_HTML_URL:
        return PreviewSource("remote-fetch", PREVIEW_HTML_URL)
    return PreviewSource("local-file", str(BUNDLED_PREVIEW_HTML))
