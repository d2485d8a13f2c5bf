"""
Integration tests for the HTTP server.

These tests start a real server on an OS-assigned port and talk to it
over TCP.
"""

import socket

import pytest

from staticserver import HTTPServer, ServerConfig
from staticserver.__main__ import build_parser, main


def read_all(sock: socket.socket) -> bytes:
    """Read until the server closes the connection."""
    data = b""
    while True:
        chunk = sock.recv(65536)
        if not chunk:
            return data
        data += chunk


def read_response(sock: socket.socket) -> bytes:
    """Read exactly one response using Content-Length framing."""
    data = b""
    while b"\r\n\r\n" not in data:
        chunk = sock.recv(4096)
        assert chunk, "Connection closed before headers were complete"
        data += chunk

    head, _, body = data.partition(b"\r\n\r\n")
    length = 0
    for line in head.split(b"\r\n")[1:]:
        name, _, value = line.partition(b": ")
        if name.lower() == b"content-length":
            length = int(value)

    while len(body) < length:
        chunk = sock.recv(4096)
        assert chunk, "Connection closed before body was complete"
        body += chunk
    return head + b"\r\n\r\n" + body


class TestServerLifecycle:
    """Tests for starting and stopping the server."""

    def test_binds_os_assigned_port(self, test_server):
        assert test_server.port > 0
        assert test_server.server.is_running

    def test_shutdown_stops_accepting(self, test_server):
        port = test_server.port
        test_server.stop()

        assert not test_server.server.is_running
        with pytest.raises(OSError):
            socket.create_connection(("127.0.0.1", port), timeout=1.0)

    def test_invalid_config_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            HTTPServer(ServerConfig(document_root=str(tmp_path / "missing")))


class TestRequests:
    """Tests for requests over real TCP connections."""

    def test_get(self, test_server, parse_wire):
        with test_server.connect() as sock:
            sock.sendall(b"GET /a.html HTTP/1.1\r\nHost: localhost\r\n\r\n")
            [response] = parse_wire(read_response(sock))

        assert response.status == 200
        assert response.body == b"hi"
        assert response.header("Server") == "StaticServer/1.0"

    def test_keep_alive(self, test_server, parse_wire):
        """Test two requests sent one after another on the same connection."""
        with test_server.connect() as sock:
            sock.sendall(b"GET /a.html HTTP/1.1\r\n\r\n")
            first = parse_wire(read_response(sock))[0]

            sock.sendall(b"GET /sub/ HTTP/1.1\r\n\r\n")
            second = parse_wire(read_response(sock))[0]

        assert first.body == b"hi"
        assert second.body == b"<h1>sub</h1>"

    def test_not_implemented_closes(self, test_server, parse_wire):
        with test_server.connect() as sock:
            sock.sendall(b"DELETE /a.html HTTP/1.1\r\n\r\nGET /a.html HTTP/1.1\r\n\r\n")
            responses = parse_wire(read_all(sock))

        assert [r.status for r in responses] == [501]

    def test_idle_connection_closed(self, test_server):
        """Test that the server hangs up on a silent client."""
        with test_server.connect() as sock:
            assert read_all(sock) == b""

    def test_concurrent_connections(self, test_server, parse_wire):
        """Test that an idle connection does not block another one."""
        with test_server.connect() as idle, test_server.connect() as active:
            active.sendall(b"HEAD /a.html HTTP/1.1\r\n\r\n")
            [response] = parse_wire(read_response(active))
            assert response.status == 200
            idle.sendall(b"GET /a.html HTTP/1.1\r\n\r\n")
            assert parse_wire(read_response(idle))[0].body == b"hi"


class TestCLI:
    """Tests for the command line entry point."""

    def test_parser(self):
        args = build_parser().parse_args(["8080", "~/site", "--timeout", "5"])

        assert args.port == 8080
        assert args.root == "~/site"
        assert args.timeout == 5.0
        assert args.host == "0.0.0.0"

    def test_missing_arguments(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["8080"])

    def test_non_numeric_port(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["http", "/tmp"])

    def test_bad_root_exits_nonzero(self, tmp_path, capsys):
        assert main(["0", str(tmp_path / "missing")]) == 1
        assert "not a directory" in capsys.readouterr().err

    def test_bad_port_exits_nonzero(self, tmp_path, capsys):
        assert main(["70000", str(tmp_path)]) == 1
        assert "Invalid port" in capsys.readouterr().err
