"""
Unit tests for access logging.
"""

import json
import logging
import socket

import pytest

from staticserver.access_log import AccessLogger, RequestLog
from staticserver.core import Connection
from staticserver.http.request import HTTPRequest
from staticserver.http.response import HTTPResponse
from staticserver.http.status_codes import HTTPStatus


@pytest.fixture
def conn():
    server_sock, client_sock = socket.socketpair()
    connection = Connection(socket=server_sock, address=("10.0.0.7", 40000), id="abcd1234")
    yield connection
    server_sock.close()
    client_sock.close()


def make_entry(**overrides) -> RequestLog:
    values = dict(
        connection_id="abcd1234",
        client_ip="10.0.0.7",
        method="GET",
        target="/a.html",
        status_code=200,
        content_length=2,
        duration_ms=0.4567,
        timestamp="19/Oct/2026:10:00:00 +0000",
    )
    values.update(overrides)
    return RequestLog(**values)


class TestRequestLog:
    """Tests for RequestLog formatting."""

    def test_to_text(self):
        assert make_entry().to_text() == (
            '10.0.0.7 - - [19/Oct/2026:10:00:00 +0000] "GET /a.html" 200 2 0.46ms'
        )

    def test_to_text_without_ip(self):
        assert make_entry(client_ip="").to_text().startswith("- - - [")

    def test_to_dict_rounds_duration(self):
        entry = make_entry().to_dict()
        assert entry["duration_ms"] == 0.46
        assert entry["status_code"] == 200
        assert entry["connection_id"] == "abcd1234"


class TestAccessLogger:
    """Tests for AccessLogger.record()."""

    def test_text_record(self, conn, caplog):
        request = HTTPRequest(method="GET", target="/a.html")
        response = HTTPResponse(status=HTTPStatus.OK, body=b"hi")

        with caplog.at_level(logging.INFO, logger="staticserver.access"):
            entry = AccessLogger().record(conn, request, response, started=0.0)

        assert entry.status_code == 200
        assert entry.content_length == 2
        assert entry.client_ip == "10.0.0.7"
        assert '"GET /a.html" 200 2' in caplog.text

    def test_json_record(self, conn, caplog):
        request = HTTPRequest(method="HEAD", target="/missing")
        response = HTTPResponse(status=HTTPStatus.NOT_FOUND)

        with caplog.at_level(logging.INFO, logger="staticserver.access"):
            AccessLogger("json").record(conn, request, response, started=0.0)

        record = json.loads(caplog.records[-1].getMessage())
        assert record["method"] == "HEAD"
        assert record["status_code"] == 404
        assert record["content_length"] == 0

    def test_failed_parse_logged_with_dashes(self, conn, caplog):
        """Test that a request with no method or target still logs."""
        response = HTTPResponse(status=HTTPStatus.BAD_REQUEST)

        with caplog.at_level(logging.INFO, logger="staticserver.access"):
            entry = AccessLogger().record(conn, HTTPRequest(), response, started=0.0)

        assert entry.method == "-"
        assert entry.target == "-"

    def test_custom_level(self, conn, caplog):
        response = HTTPResponse(status=HTTPStatus.OK)

        with caplog.at_level(logging.DEBUG, logger="staticserver.access"):
            AccessLogger(log_level=logging.DEBUG).record(conn, HTTPRequest(), response, started=0.0)

        assert caplog.records[-1].levelno == logging.DEBUG
