"""
Local preview server: serves the preview page and the metadata API on
localhost so a fetched page's card can be viewed in a browser.
"""

import logging
import socket
import threading
import time
from pathlib import Path
from typing import Optional

import requests
import uvicorn

from metalens import config
from metalens.config import PreviewSource, default_preview_source
from .main import create_app

logger = logging.getLogger(__name__)

STARTUP_TIMEOUT = 10  # seconds
MAX_PORT = 65535

# marker in the hosted page where the install snippet is injected
COMMAND_SNIPPET_MARKER = "<!-- METALENS_COMMAND_SNIPPET -->"
COMMAND_SNIPPET = """
<div class="command-container">
  <span class="command-text" id="metalens-command">pip install metalens</span>
  <button class="command-copy">Copy</button>
</div>
"""


def is_port_available(port: int, host: str = "127.0.0.1") -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def find_available_port(base_port: int) -> int:
    """First free port at or above base_port."""
    for port in range(base_port, MAX_PORT + 1):
        if is_port_available(port):
            return port
    raise OSError(f"No free port found at or above {base_port}")


def inject_command_snippet(page: str) -> str:
    return page.replace(COMMAND_SNIPPET_MARKER, COMMAND_SNIPPET)


def load_preview_html(source: PreviewSource) -> str:
    """Read the preview page from disk or download it, per source.html_source."""
    if source.html_source == "local-file":
        logger.info("Loading preview HTML from %s", source.location)
        return Path(source.location).read_text(encoding="utf-8")

    logger.info("Fetching preview HTML from %s", source.location)
    response = requests.get(source.location, timeout=config.FETCH_TIMEOUT)
    response.raise_for_status()
    return inject_command_snippet(response.text)


class PreviewServer:
    """A uvicorn server running the API in a background thread."""

    def __init__(self, server: uvicorn.Server, thread: threading.Thread, port: int):
        self.server = server
        self.thread = thread
        self.port = port

    @property
    def url(self) -> str:
        return f"http://localhost:{self.port}"

    def wait(self) -> None:
        """Block until the server stops (Ctrl+C in the calling thread stops it)."""
        try:
            while self.thread.is_alive():
                self.thread.join(timeout=0.5)
        except KeyboardInterrupt:
            self.stop()

    def stop(self) -> None:
        self.server.should_exit = True
        self.thread.join(timeout=STARTUP_TIMEOUT)


def start_server(port: int = config.PREVIEW_PORT, initial_url: Optional[str] = None,
                 source: Optional[PreviewSource] = None) -> PreviewServer:
    """
    Start the preview server on the first free port at or above `port`.
    Raises if the page cannot be loaded or the server does not come up.
    """
    content = load_preview_html(source or default_preview_source())
    app = create_app(content)

    port = find_available_port(port)
    server = uvicorn.Server(uvicorn.Config(app, host="127.0.0.1", port=port, log_level="warning"))
    thread = threading.Thread(target=server.run, name="metalens-preview", daemon=True)
    thread.start()

    deadline = time.monotonic() + STARTUP_TIMEOUT
    while not server.started:
        if not thread.is_alive() or time.monotonic() > deadline:
            server.should_exit = True
            raise RuntimeError(f"Preview server failed to start on port {port}")
        time.sleep(0.05)

    logger.info("Preview server started at http://localhost:%d", port)
    if initial_url:
        logger.info("Initial URL for preview: %s", initial_url)
    return PreviewServer(server, thread, port)
