from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from .errors import MetalensError


class _Vocabulary(str, Enum):
    """A closed set of tag names. `lookup` returns the member or None."""

    @classmethod
    def lookup(cls, value: Optional[str]):
        return cls._value2member_map_.get(value) if value else None


class MetaTagType(_Vocabulary):
    DESCRIPTION = "description"
    KEYWORDS = "keywords"
    AUTHOR = "author"
    CANONICAL = "canonical"
    ROBOTS = "robots"


class OpenGraphType(_Vocabulary):
    TITLE = "og:title"
    DESCRIPTION = "og:description"
    TYPE = "og:type"
    URL = "og:url"
    SITE_NAME = "og:site_name"
    LOCALE = "og:locale"
    LOCALE_ALTERNATE = "og:locale:alternate"

    IMAGE = "og:image"
    IMAGE_SECURE_URL = "og:image:secure_url"
    IMAGE_TYPE = "og:image:type"
    IMAGE_WIDTH = "og:image:width"
    IMAGE_HEIGHT = "og:image:height"
    IMAGE_ALT = "og:image:alt"

    AUDIO = "og:audio"
    AUDIO_SECURE_URL = "og:audio:secure_url"
    AUDIO_TYPE = "og:audio:type"

    VIDEO = "og:video"
    VIDEO_SECURE_URL = "og:video:secure_url"
    VIDEO_TYPE = "og:video:type"
    VIDEO_WIDTH = "og:video:width"
    VIDEO_HEIGHT = "og:video:height"

    ARTICLE_PUBLISHED_TIME = "article:published_time"
    ARTICLE_MODIFIED_TIME = "article:modified_time"
    ARTICLE_EXPIRATION_TIME = "article:expiration_time"
    ARTICLE_AUTHOR = "article:author"
    ARTICLE_SECTION = "article:section"
    ARTICLE_TAG = "article:tag"

    PROFILE_FIRST_NAME = "profile:first_name"
    PROFILE_LAST_NAME = "profile:last_name"
    PROFILE_USERNAME = "profile:username"
    PROFILE_GENDER = "profile:gender"

    BOOK_AUTHOR = "book:author"
    BOOK_ISBN = "book:isbn"
    BOOK_RELEASE_DATE = "book:release_date"
    BOOK_TAG = "book:tag"


# property prefixes that mark a <meta property> as Open Graph
OPEN_GRAPH_PREFIXES = ("og:", "article:", "profile:", "book:")


class TwitterType(_Vocabulary):
    CARD = "twitter:card"
    SITE = "twitter:site"
    SITE_ID = "twitter:site:id"
    CREATOR = "twitter:creator"
    CREATOR_ID = "twitter:creator:id"
    TITLE = "twitter:title"
    DESCRIPTION = "twitter:description"

    IMAGE = "twitter:image"
    IMAGE_ALT = "twitter:image:alt"

    PLAYER = "twitter:player"
    PLAYER_WIDTH = "twitter:player:width"
    PLAYER_HEIGHT = "twitter:player:height"
    PLAYER_STREAM = "twitter:player:stream"

    APP_NAME_IPHONE = "twitter:app:name:iphone"
    APP_ID_IPHONE = "twitter:app:id:iphone"
    APP_URL_IPHONE = "twitter:app:url:iphone"
    APP_NAME_IPAD = "twitter:app:name:ipad"
    APP_ID_IPAD = "twitter:app:id:ipad"
    APP_URL_IPAD = "twitter:app:url:ipad"
    APP_NAME_GOOGLEPLAY = "twitter:app:name:googleplay"
    APP_ID_GOOGLEPLAY = "twitter:app:id:googleplay"
    APP_URL_GOOGLEPLAY = "twitter:app:url:googleplay"


NO_TITLE = "No title found"


@dataclass(frozen=True)
class PageMetadata:
    title: str

    # standard <meta name> tags, plus canonical from <link rel="canonical">
    meta: Mapping[str, str] = field(default_factory=dict)

    # og:* / article:* / profile:* / book:*
    open_graph: Mapping[str, str] = field(default_factory=dict)

    # twitter card
    twitter: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # read-only copies, so neither the caller's dicts nor the record can change it
        for name in ("meta", "open_graph", "twitter"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "meta": dict(self.meta),
            "openGraph": dict(self.open_graph),
            "twitter": dict(self.twitter),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PageMetadata":
        return cls(
            title=data["title"],
            meta=dict(data.get("meta") or {}),
            open_graph=dict(data.get("openGraph") or {}),
            twitter=dict(data.get("twitter") or {}),
        )


@dataclass
class LensResult:
    url: str
    metadata: Optional[PageMetadata] = None

    # populated only on failure
    error: Optional[MetalensError] = None

    @property
    def ok(self) -> bool:
        return self.error is None
