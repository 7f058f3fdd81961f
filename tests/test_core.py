import pytest
from unittest.mock import AsyncMock, patch

from metalens.core import get_metadata, lens
from metalens.errors import (
    ContentParsingError,
    DomainNotFoundError,
    InvalidUrlError,
    MetalensError,
    NotFoundError,
)


MOCK_HTML = """
<html lang="en">
<head>
    <title>Edward Snowden Profile | CNN Politics</title>
    <meta name="description" content="Edward Snowden leaked NSA surveillance secrets.">
    <meta property="og:type" content="article">
    <meta name="author" content="CNN Staff">
    <meta name="twitter:card" content="summary">
</head>
<body><h1>Man behind NSA leaks</h1></body>
</html>
"""


@pytest.mark.asyncio
async def test_get_metadata_success():
    with patch("metalens.core.fetch_content", new_callable=AsyncMock) as mock_fetch:
        mock_fetch.return_value = (MOCK_HTML, 200, "https://cnn.com/story")
        result = await get_metadata("cnn.com/story")

    mock_fetch.assert_called_once_with("https://cnn.com/story")
    assert result.title == "Edward Snowden Profile | CNN Politics"
    assert result.meta == {
        "description": "Edward Snowden leaked NSA surveillance secrets.",
        "author": "CNN Staff",
    }
    assert result.open_graph == {"og:type": "article", "og:url": "https://cnn.com/story"}
    assert result.twitter == {"twitter:card": "summary"}


@pytest.mark.asyncio
async def test_invalid_scheme_never_fetches():
    with patch("metalens.core.fetch_content", new_callable=AsyncMock) as mock_fetch:
        with pytest.raises(InvalidUrlError):
            await get_metadata("ftp://example.com")
    mock_fetch.assert_not_called()


@pytest.mark.asyncio
async def test_typed_fetch_errors_pass_through_unchanged():
    error = NotFoundError("https://example.com/missing")
    with patch("metalens.core.fetch_content", new_callable=AsyncMock, side_effect=error):
        with pytest.raises(NotFoundError) as exc_info:
            await get_metadata("example.com/missing")
    assert exc_info.value is error


@pytest.mark.asyncio
async def test_raw_errors_are_classified_with_normalized_url():
    with patch("metalens.core.fetch_content", new_callable=AsyncMock, side_effect=OSError("getaddrinfo failed")):
        with pytest.raises(DomainNotFoundError) as exc_info:
            await get_metadata("nope.invalid")
    assert exc_info.value.url == "https://nope.invalid"


@pytest.mark.asyncio
async def test_extraction_errors_propagate():
    with patch("metalens.core.fetch_content", new_callable=AsyncMock, return_value=("<html>", 200, "https://x.com")), \
         patch("metalens.core.extract_metadata", side_effect=ContentParsingError("bad html")):
        with pytest.raises(ContentParsingError):
            await get_metadata("x.com")


@pytest.mark.asyncio
async def test_lens_success():
    with patch("metalens.core.fetch_content", new_callable=AsyncMock) as mock_fetch:
        mock_fetch.return_value = (MOCK_HTML, 200, "https://cnn.com/story")
        result = await lens("http://cnn.com/story")

    assert result.ok
    assert result.url == "http://cnn.com/story"
    assert result.metadata.title.startswith("Edward Snowden")


@pytest.mark.asyncio
async def test_lens_captures_error():
    with patch("metalens.core.fetch_content", new_callable=AsyncMock, side_effect=Exception("Connection refused")):
        result = await lens("http://unreachable.example.com/")

    assert not result.ok
    assert result.metadata is None
    assert isinstance(result.error, MetalensError)
    assert result.error.error_type == "NetworkError"
