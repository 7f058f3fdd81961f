import asyncio
import logging
import re
import threading
import time
from typing import Optional

import requests
from bs4 import UnicodeDammit

from . import config
from .errors import (
    ContentParsingError,
    HttpError,
    InvalidUrlError,
    MetalensError,
    NetworkError,
    NotFoundError,
    classify_error,
)

logger = logging.getLogger(__name__)

ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
CHUNK_SIZE = 16 * 1024

_CHARSET_RE = re.compile(r"charset\s*=\s*[\"']?([^\s;\"']+)", re.IGNORECASE)


def _timed_out(url: str, timeout: float) -> NetworkError:
    logger.warning("Timed out after %ss fetching %s", timeout, url)
    return NetworkError(f"Network error: Request to {url} timed out after {timeout:g}s")


def _decode(body: bytes, content_type: str) -> str:
    """
    Header charset first, then the document's own <meta charset> / BOM, then
    detection. requests alone would assume ISO-8859-1 for a bare text/html.
    """
    match = _CHARSET_RE.search(content_type)
    known = [match.group(1)] if match else []
    dammit = UnicodeDammit(body, known_definite_encodings=known, is_html=True)
    if dammit.unicode_markup is None:
        return body.decode("utf-8", errors="replace")
    return dammit.unicode_markup


def _read_body(response, url: str, timeout: float, deadline: float) -> bytes:
    """
    Read the streamed body, giving up once `deadline` passes. A watchdog
    closes the response at the deadline so a blocked read is abandoned too.
    """
    expired = threading.Event()

    def expire():
        expired.set()
        response.close()

    watchdog = threading.Timer(max(deadline - time.monotonic(), 0), expire)
    watchdog.daemon = True
    watchdog.start()

    chunks = []
    try:
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            chunks.append(chunk)
            if expired.is_set() or time.monotonic() > deadline:
                raise _timed_out(url, timeout)
    except MetalensError:
        raise
    except Exception as exc:
        if expired.is_set():
            raise _timed_out(url, timeout) from exc
        raise
    finally:
        watchdog.cancel()

    if expired.is_set():
        raise _timed_out(url, timeout)
    return b"".join(chunks)


def _sync_fetch(url: str, timeout: float) -> tuple[str, int, str]:
    """Synchronous fetch using requests — runs inside a thread executor."""
    deadline = time.monotonic() + timeout
    headers = {
        "User-Agent": config.USER_AGENT,
        "Accept": ACCEPT,
    }
    # stream so a non-HTML body is never downloaded
    with requests.get(url, headers=headers, timeout=timeout, allow_redirects=True, stream=True) as response:
        if not response.ok:
            if response.status_code == 404:
                raise NotFoundError(url)
            raise HttpError(response.status_code, response.reason or f"Failed to fetch content from {url}")

        content_type = response.headers.get("content-type")
        if not content_type or "text/html" not in content_type:
            raise ContentParsingError(
                f"Invalid content type. Expected text/html, but received {content_type} from {url}"
            )

        body = _read_body(response, url, timeout, deadline)
        return _decode(body, content_type), response.status_code, response.url


def fetch_sync(url: str, timeout: Optional[float] = None) -> tuple[str, int, str]:
    """
    Fetch an HTML page, raising only MetalensError subclasses.
    `timeout` bounds the whole fetch, headers and body together.
    Returns (html_content, status_code, final_url).
    """
    timeout = config.FETCH_TIMEOUT if timeout is None else timeout
    try:
        return _sync_fetch(url, timeout)
    except MetalensError:
        raise
    except requests.Timeout as exc:
        raise _timed_out(url, timeout) from exc
    except (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema, requests.exceptions.InvalidSchema) as exc:
        raise InvalidUrlError(url) from exc
    except Exception as exc:
        error = classify_error(exc, url)
        logger.warning("Fetch failed for %s: %s (%s)", url, exc, error.error_type)
        raise error from exc


async def fetch_content(url: str, timeout: Optional[float] = None) -> tuple[str, int, str]:
    """
    Fetch the HTML content of a URL asynchronously.

    Uses requests in a thread executor to stay non-blocking inside the async
    event loop. The caller gets NetworkError as soon as `timeout` elapses;
    the worker thread's own deadline closes the abandoned request.
    """
    timeout = config.FETCH_TIMEOUT if timeout is None else timeout
    loop = asyncio.get_running_loop()
    try:
        return await asyncio.wait_for(loop.run_in_executor(None, fetch_sync, url, timeout), timeout)
    except asyncio.TimeoutError as exc:
        raise _timed_out(url, timeout) from exc
