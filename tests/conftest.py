"""
pytest configuration and fixtures.
"""

import os
import socket
import threading
from dataclasses import dataclass, field
from typing import Callable, Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from staticserver import HTTPServer, ServerConfig, serve_connection
from staticserver.core import Connection


# Sun, 06 Nov 1994 08:49:37 GMT
FILE_MTIME = 784111777


@dataclass
class RawResponse:
    """One response as seen on the wire."""

    status_line: str
    headers: list = field(default_factory=list)
    body: bytes = b""

    @property
    def status(self) -> int:
        return int(self.status_line.split()[1])

    @property
    def header_names(self) -> list:
        return [name for name, _ in self.headers]

    def header(self, name: str) -> Optional[str]:
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None


def parse_responses(data: bytes) -> list:
    """Split a byte stream into responses using Content-Length framing."""
    responses = []
    while data:
        head, sep, rest = data.partition(b"\r\n\r\n")
        assert sep, f"Incomplete response: {data!r}"

        lines = head.decode("iso-8859-1").split("\r\n")
        headers = [tuple(line.split(": ", 1)) for line in lines[1:]]
        response = RawResponse(status_line=lines[0], headers=headers)

        length = int(response.header("Content-Length"))
        response.body, data = rest[:length], rest[length:]
        responses.append(response)
    return responses


@pytest.fixture
def parse_wire() -> Callable[[bytes], list]:
    """The Content-Length response splitter, for tests that own their sockets."""
    return parse_responses


@pytest.fixture
def file_mtime() -> int:
    """Modification time given to every file in site_root."""
    return FILE_MTIME


@pytest.fixture
def site_root(tmp_path: Path) -> str:
    """
    Document root with a few files, all with a fixed mtime:

        a.html           "hi"
        sub/index.html   "<h1>sub</h1>"
        empty/           (directory without index.html)
    """
    (tmp_path / "a.html").write_bytes(b"hi")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "index.html").write_bytes(b"<h1>sub</h1>")
    (tmp_path / "empty").mkdir()

    for path in (tmp_path / "a.html", tmp_path / "sub" / "index.html"):
        os.utime(path, (FILE_MTIME, FILE_MTIME))

    return str(tmp_path)


@pytest.fixture
def config(site_root: str) -> ServerConfig:
    """Test server configuration with a short idle timeout."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        document_root=site_root,
        keep_alive_timeout=0.5,
        log_level="WARNING",
    )


@pytest.fixture
def exchange(config: ServerConfig) -> Callable[..., list]:
    """
    Run serve_connection() over a socketpair.

    Usage:
        responses = exchange(b"GET /a.html HTTP/1.1\\r\\n\\r\\n")

    With close_write=True (default) the client half-closes after sending,
    so the server sees end of stream once it has answered everything.
    With close_write=False the client just waits for the server to hang up
    (501, bad header, or idle timeout).
    """
    sockets = []

    def run(raw: bytes, close_write: bool = True) -> list:
        server_sock, client_sock = socket.socketpair()
        sockets.append(client_sock)
        conn = Connection(
            socket=server_sock,
            address=("127.0.0.1", 50000),
            timeout=config.keep_alive_timeout,
        )
        worker = threading.Thread(target=serve_connection, args=(conn, config), daemon=True)
        worker.start()

        client_sock.settimeout(5.0)
        if raw:
            client_sock.sendall(raw)
        if close_write:
            client_sock.shutdown(socket.SHUT_WR)

        received = b""
        while True:
            chunk = client_sock.recv(65536)
            if not chunk:
                break
            received += chunk

        worker.join(timeout=5.0)
        assert not worker.is_alive()
        assert conn.is_closed
        return parse_responses(received)

    yield run

    for sock in sockets:
        sock.close()


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # not a test class

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.port

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def connect(self) -> socket.socket:
        sock = socket.create_connection(("127.0.0.1", self.port), timeout=5.0)
        return sock

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running server on an OS-assigned port."""
    test_srv = TestServer(HTTPServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()
