"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps an accepted client socket with a line-oriented reading API.

=============================================================================
TCP IS A BYTE STREAM, NOT A LINE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. A client that sends

    GET /a.html HTTP/1.1\r\n
    \r\n

might show up on our side as ANY split of those bytes:

    recv() → "GET /a.h"
    recv() → "tml HTTP/1.1\r\n\r\nGET /b.html"     (and the next request!)

So Connection keeps a buffer and hands out one line at a time. Bytes
after the current line stay in the buffer for the next call; that is
what lets back-to-back requests on a keep-alive connection be read
strictly in order.

=============================================================================
LINE ENDINGS
=============================================================================

HTTP says lines end in CRLF, but plenty of hand-typed requests (telnet,
nc) use bare LF. read_line() splits on LF and drops a trailing CR, so
both work. Lines are decoded as ISO-8859-1, which maps every byte to a
character and therefore never fails.

=============================================================================
IDLE TIMEOUT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────┐
    │                                                                  │
    │   TCP Connect                                                    │
    │       │                                                          │
    │       ├── Request 1: read lines → respond                        │
    │       ├── Request 2: read lines → respond                        │
    │       │                                                          │
    │       ├── ...nothing for `timeout` seconds...                    │
    │       │                                                          │
    │   read_line() raises TimeoutError → connection closed            │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

The same timeout applies to every recv(), so a client that stalls in
the middle of its headers is cut off too.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► PROCESSING ──────► WRITING ────────┐
     │             │                                    │           │
     │             │                                    │           ▼
     │             │                                    │      KEEP_ALIVE
     │             ▼                                    │           │
     └──────────► CLOSING ◄─────────────────────────────┴───────────┘
                    │
                    ▼
                  CLOSED

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, mostly for logging and debugging."""
    NEW = "new"              # Just accepted, haven't read anything yet
    READING = "reading"      # Waiting for / reading request lines
    PROCESSING = "processing"  # Request parsed, building the response
    WRITING = "writing"      # Sending response data
    KEEP_ALIVE = "keep_alive"  # Response sent, waiting for next request
    CLOSING = "closing"      # About to close (shutdown sequence)
    CLOSED = "closed"        # Connection closed, socket released


class LineTooLongError(ValueError):
    """Raised when a request or header line exceeds max_line_size."""


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
        last_activity: Timestamp of last successful read or write.
        requests_handled: Number of responses sent on this connection.
    """

    # Required parameters
    socket: socket.socket
    address: tuple

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    last_activity: float = field(default_factory=time.time)
    requests_handled: int = 0

    # Configuration (passed from ServerConfig)
    buffer_size: int = 8192       # How much to read at once
    timeout: float = 3.0          # Idle timeout for every read
    max_line_size: int = 8192     # Longest line we will buffer

    # Internal state (not shown in repr for cleaner logs)
    _buffer: bytes = field(default=b"", repr=False)
    _eof: bool = field(default=False, repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        """Get the client IP address (empty for non-IP sockets)."""
        return self.address[0] if self.address else ""

    @property
    def is_closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    # =========================================================================
    # READING
    # =========================================================================

    def read_line(self) -> Optional[str]:
        """
        Read the next line from the socket.

        Returns:
            The line without its LF / CRLF terminator. At end of stream, a
            final unterminated line is returned as-is; after that, None.

        Raises:
            TimeoutError: If no data arrives within `timeout` seconds.
            LineTooLongError: If a line exceeds max_line_size bytes.
            OSError: On other socket failures.
        """
        self.state = ConnectionState.READING

        while True:
            newline = self._buffer.find(b"\n")
            if newline >= 0:
                if newline > self.max_line_size:
                    raise LineTooLongError(f"Line exceeds {self.max_line_size} bytes")
                raw = self._buffer[:newline]
                self._buffer = self._buffer[newline + 1:]
                return self._decode(raw)

            if len(self._buffer) > self.max_line_size:
                raise LineTooLongError(f"Line exceeds {self.max_line_size} bytes")

            if self._eof:
                if not self._buffer:
                    return None
                raw, self._buffer = self._buffer, b""
                return self._decode(raw)

            chunk = self._recv()
            if not chunk:
                self._eof = True  # Connection closed by client
                continue
            self._buffer += chunk

    @staticmethod
    def _decode(raw: bytes) -> str:
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        return raw.decode("iso-8859-1")

    def _recv(self) -> bytes:
        """
        Receive data from socket with error handling.

        Returns:
            Received bytes, or empty bytes if the client disconnected.
        """
        try:
            data = self.socket.recv(self.buffer_size)
        except socket.timeout:
            raise TimeoutError(f"No data for {self.timeout}s")
        except (ConnectionResetError, BrokenPipeError):
            # Client disconnected abruptly
            return b""
        self.last_activity = time.time()
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response data to the client.

        Uses sendall() so a large file body is written completely before
        the next request is read.

        Returns:
            True if send succeeded, False if connection lost.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            self.last_activity = time.time()
            return True
        except OSError as e:
            # Client disconnected (reset, broken pipe, timeout)
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def finish_request(self):
        """Count a completed request and wait for the next one."""
        self.requests_handled += 1
        self.state = ConnectionState.KEEP_ALIVE

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully. Safe to call more than once.

        1. shutdown(SHUT_WR): send FIN so the client sees end of stream
        2. Drain anything the client already sent
        3. close(): release the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return  # Already closed

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.settimeout(0.5)  # Quick timeout
            while self.socket.recv(1024):
                pass  # Discard any remaining data
        except OSError:
            pass  # Includes socket.timeout, we're closing anyway

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.requests_handled} requests")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        """
        Allows using Connection with 'with' for guaranteed cleanup:

            with conn:
                line = conn.read_line()
                conn.send_response(response)
            # Connection closed here, whatever happened inside
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
