from typing import Callable, Optional


class MetalensError(Exception):
    """Base class for every failure the metadata pipeline reports."""

    status_code: Optional[int] = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def error_type(self) -> str:
        return type(self).__name__


class NetworkError(MetalensError):
    def __init__(self, message: str = "Network error occurred while fetching the URL"):
        super().__init__(message)


class DomainNotFoundError(MetalensError):
    def __init__(self, url: str):
        super().__init__(f'Domain not found: "{url}"')
        self.url = url


class HttpError(MetalensError):
    def __init__(self, status_code: int, status_text: str):
        super().__init__(f"HTTP error: {status_code} {status_text}")
        self.status_code = status_code
        self.status_text = status_text


class NotFoundError(HttpError):
    def __init__(self, url: str):
        super().__init__(404, "Not Found")
        self.url = url
        self.message = f'The URL "{url}" could not be found (404)'
        self.args = (self.message,)


class InvalidUrlError(MetalensError):
    def __init__(self, url: str):
        super().__init__(f'Invalid URL format: "{url}"')
        self.url = url


class ContentParsingError(MetalensError):
    def __init__(self, message: str = "Failed to parse website content"):
        super().__init__(message)


class MetadataExtractionError(MetalensError):
    def __init__(self, message: str = "Failed to extract metadata from content"):
        super().__init__(message)


# --- classification ---

# (needles, factory) pairs checked in order; factory receives (message, url)
Rule = tuple[tuple[str, ...], Callable[[str, str], MetalensError]]

DEFAULT_RULES: tuple[Rule, ...] = (
    (
        (
            "ENOTFOUND", "getaddrinfo",
            # socket / urllib3 wording for DNS failures
            "Name or service not known", "nodename nor servname",
            "Temporary failure in name resolution", "NameResolutionError",
        ),
        lambda message, url: DomainNotFoundError(url),
    ),
    (
        (
            "ETIMEDOUT", "ECONNREFUSED", "ECONNRESET", "ECONNABORTED",
            "network error", "Failed to fetch",
            "timed out", "Connection refused", "Connection reset", "Connection aborted",
            # body cut short mid-transfer
            "Connection broken", "IncompleteRead",
        ),
        lambda message, url: NetworkError(f"Network error: Unable to connect to {url or 'the server'}"),
    ),
    (
        ("Invalid URL", "invalid URL", "URL constructor"),
        lambda message, url: InvalidUrlError(url),
    ),
    (
        ("Failed to extract text content", "parse", "SyntaxError"),
        lambda message, url: ContentParsingError(message),
    ),
)

# status codes the API is allowed to pass through from an upstream HttpError
_PASSTHROUGH_STATUS = (400, 404, 500, 503)


class ErrorClassifier:
    """
    Map opaque exceptions onto the MetalensError taxonomy.

    Classification is a best-effort substring match on the exception text, so
    the rule table is injectable: swap it when the HTTP client in use words
    its failures differently.
    """

    def __init__(self, rules: tuple[Rule, ...] = DEFAULT_RULES):
        self.rules = rules

    def classify(self, error: BaseException, url: str = "") -> MetalensError:
        if isinstance(error, MetalensError):
            return error

        message = str(error)
        for needles, factory in self.rules:
            if any(needle in message for needle in needles):
                return factory(message, url)
        return MetalensError(message)


_default_classifier = ErrorClassifier()


def classify_error(error: BaseException, url: str = "") -> MetalensError:
    return _default_classifier.classify(error, url)


def status_code_for(error: BaseException) -> int:
    """HTTP status the API answers with for a given pipeline failure."""
    if isinstance(error, NetworkError):
        return 503
    if isinstance(error, DomainNotFoundError):
        return 404
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, HttpError):
        return error.status_code if error.status_code in _PASSTHROUGH_STATUS else 500
    if isinstance(error, InvalidUrlError):
        return 400
    if isinstance(error, ContentParsingError):
        return 422
    return 500
