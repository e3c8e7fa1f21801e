"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from previewserver import PreviewServer


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """
    A small generated site:

        site/
          index.html          "Hello"
          about.html          "About"
          notes               no extension
          report.PDF          upper-case extension
          docs/guide.html     "Guide"
          docs/index.html     "Docs index"
          assets/style.css
          img/logo.png
          empty/              directory without index.html
    """
    root = tmp_path / "site"
    (root / "docs").mkdir(parents=True)
    (root / "assets").mkdir()
    (root / "img").mkdir()
    (root / "empty").mkdir()

    (root / "index.html").write_text("Hello")
    (root / "about.html").write_text("About")
    (root / "notes").write_text("plain notes")
    (root / "report.PDF").write_bytes(b"%PDF-1.4 fake")
    (root / "docs" / "guide.html").write_text("Guide")
    (root / "docs" / "index.html").write_text("Docs index")
    (root / "assets" / "style.css").write_text("body { color: red; }")
    (root / "img" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x01\x02")
    return root


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@dataclass
class RawResponse:
    """A response read off the wire by send_request()."""
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""


def send_request(port: int, target: str, method: str = "GET", timeout: float = 10.0) -> RawResponse:
    """
    Send one raw HTTP request and read the response until the server closes.

    The target goes on the wire exactly as given (no normalization), so
    paths like "/docs/../../etc/passwd" reach the server untouched.
    """
    request = (
        f"{method} {target} HTTP/1.1\r\n"
        f"Host: 127.0.0.1:{port}\r\n"
        f"Connection: close\r\n"
        f"\r\n"
    ).encode("latin-1")

    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as s:
        s.sendall(request)
        chunks = []
        while True:
            chunk = s.recv(65536)
            if not chunk:
                break
            chunks.append(chunk)

    return parse_raw_response(b"".join(chunks))


def parse_raw_response(data: bytes) -> RawResponse:
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    status = int(lines[0].split(" ")[1])

    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip().lower()] = value.strip()

    return RawResponse(status=status, headers=headers, body=body)


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # not a test class

    def __init__(self, server: PreviewServer, port: int):
        self.server = server
        self.port = port
        self._thread: threading.Thread = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        # Wait for server to be ready
        for _ in range(50):  # 5 seconds max
            try:
                with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                    s.connect(('127.0.0.1', self.port))
                    return
            except ConnectionRefusedError:
                time.sleep(0.1)

        raise RuntimeError("Server failed to start")

    def get(self, target: str, method: str = "GET") -> RawResponse:
        return send_request(self.port, target, method=method)

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def test_server(site_dir: Path, free_port: int) -> Generator[TestServer, None, None]:
    """A running preview server serving site_dir."""
    server = PreviewServer(
        f"127.0.0.1:{free_port}",
        site_dir,
        color_output=False,
        log_level="WARNING",
    )

    test_srv = TestServer(server, free_port)
    test_srv.start()

    yield test_srv

    test_srv.stop()
