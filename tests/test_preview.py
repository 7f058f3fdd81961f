import socket

import pytest
import requests
from unittest.mock import MagicMock, patch

from api import preview
from metalens.config import BUNDLED_PREVIEW_HTML, PreviewSource, default_preview_source


def test_find_available_port_skips_busy_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
        busy.bind(("127.0.0.1", 0))
        busy.listen()
        taken = busy.getsockname()[1]
        assert not preview.is_port_available(taken)
        assert preview.find_available_port(taken) > taken


def test_find_available_port_returns_base_when_free():
    with patch("api.preview.is_port_available", return_value=True):
        assert preview.find_available_port(3141) == 3141


def test_find_available_port_walks_upwards():
    with patch("api.preview.is_port_available", side_effect=[False, False, True]):
        assert preview.find_available_port(3141) == 3143


def test_load_local_file(tmp_path):
    page = tmp_path / "index.html"
    page.write_text("<html>local</html>", encoding="utf-8")
    assert preview.load_preview_html(PreviewSource("local-file", str(page))) == "<html>local</html>"


def test_load_bundled_page():
    html = preview.load_preview_html(PreviewSource("local-file", str(BUNDLED_PREVIEW_HTML)))
    assert "/api/metadata" in html


def test_load_missing_local_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        preview.load_preview_html(PreviewSource("local-file", str(tmp_path / "missing.html")))


def test_load_remote_page_injects_command_snippet():
    response = MagicMock(text=f"<body>{preview.COMMAND_SNIPPET_MARKER}</body>")
    with patch("api.preview.requests.get", return_value=response) as mock_get:
        html = preview.load_preview_html(PreviewSource("remote-fetch", "https://example.com/index.html"))

    mock_get.assert_called_once()
    response.raise_for_status.assert_called_once()
    assert "metalens-command" in html
    assert preview.COMMAND_SNIPPET_MARKER not in html


def test_preview_source_validates_kind():
    with pytest.raises(ValueError):
        PreviewSource("ftp", "somewhere")


def test_default_source_is_bundled_page():
    with patch("metalens.config.DEV_MODE", False), patch("metalens.config.PREVIEW_HTML_URL", ""):
        source = default_preview_source()
    assert source == PreviewSource("local-file", str(BUNDLED_PREVIEW_HTML))


def test_default_source_remote_when_url_configured():
    with patch("metalens.config.DEV_MODE", False), \
         patch("metalens.config.PREVIEW_HTML_URL", "https://example.com/index.html"):
        assert default_preview_source().html_source == "remote-fetch"


def test_start_server_serves_preview_and_api():
    server = preview.start_server(
        port=38141,
        source=PreviewSource("local-file", str(BUNDLED_PREVIEW_HTML)),
    )
    try:
        base = f"http://127.0.0.1:{server.port}"
        page = requests.get(base, timeout=5)
        assert page.status_code == 200
        assert "Metalens" in page.text
        missing = requests.get(f"{base}/api/metadata", timeout=5)
        assert missing.status_code == 400
    finally:
        server.stop()
    assert not server.thread.is_alive()
