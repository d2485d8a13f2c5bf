"""
=============================================================================
STATIC FILE SERVER
=============================================================================

Ties the components together: the accept loop, one worker thread per
connection, and the request/response loop each worker runs.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   HTTPServer    │                          │
    │                        │  (Orchestrator) │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │                  ┌──────────────┴──────────────┐                    │
    │                  ▼                             ▼                    │
    │          ┌──────────────┐             ┌──────────────────┐          │
    │          │ SocketServer │  accept()   │ worker thread    │          │
    │          │ (Networking) │ ──────────► │ serve_connection │          │
    │          └──────────────┘  per conn   └────────┬─────────┘          │
    │                                                │                    │
    │               RequestParser → resolver → ResponseBuilder            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THE CONNECTION LOOP
=============================================================================

serve_connection() is a three-state machine over one stream:

                 ┌──────────────────────────────────────┐
                 │                                      │
                 ▼                                      │ keep-alive
        ┌────────────────┐   request line   ┌──────────┴─────┐
   ───► │   AWAIT_LINE   │ ───────────────► │    PROCESS     │
        └───────┬────────┘                  └──────────┬─────┘
          │     │  ▲ blank line                        │ 501, bad header,
          │     └──┘                                   │ I/O error
          │ timeout / EOF / I/O error                  ▼
          │                                  ┌────────────────┐
          └────────────────────────────────► │   TERMINATED   │
                                             └────────────────┘

Requests on one connection are handled strictly one after another:
response N is completely written before line N+1 is read. Nothing
raised inside the loop escapes the worker thread, so one broken client
cannot take down the server or another connection.

=============================================================================
"""

import logging
import threading
import time
from typing import Optional

from .access_log import AccessLogger
from .config import ServerConfig
from .core import Connection, ConnectionState, LineTooLongError, SocketServer
from .handlers.static import inspect_path
from .http import HTTPRequest, HTTPStatus, RequestParser, ResponseBuilder


logger = logging.getLogger(__name__)


def serve_connection(conn: Connection, config: ServerConfig) -> None:
    """
    Run request/response cycles on one connection until it ends.

    Args:
        conn: Accepted client connection. Closed on return, always.
        config: Shared read-only server configuration.
    """
    parser = RequestParser(config.document_root, config.index_file)
    builder = ResponseBuilder(config.server_name)
    access_log = AccessLogger(config.log_format)

    with conn:  # Context manager ensures connection is closed
        while True:
            # ─────────────────────────────────────────────────────────────
            # AWAIT_LINE
            # ─────────────────────────────────────────────────────────────
            try:
                line = conn.read_line()
            except TimeoutError:
                # Idle keep-alive expiry, not an error
                logger.debug(f"[{conn.id}] Idle timeout")
                break
            except LineTooLongError as e:
                logger.warning(f"[{conn.id}] {e}, closing")
                rejected = HTTPRequest(status=HTTPStatus.BAD_REQUEST, close_connection=True)
                conn.send_response(builder.build(rejected, None).to_bytes())
                break
            except OSError as e:
                logger.warning(f"[{conn.id}] Read failed: {e}")
                break

            if line is None:
                break  # Client closed the connection
            if not line.strip():
                continue  # Stray blank line between requests

            # ─────────────────────────────────────────────────────────────
            # PROCESS
            # ─────────────────────────────────────────────────────────────
            started = time.time()
            request = parser.parse(line, conn.read_line)
            conn.state = ConnectionState.PROCESSING

            resource = None
            if request.file_path and not request.failed:
                resource = inspect_path(request.file_path)
            try:
                response = builder.build(request, resource)
            except OSError as e:
                # File went away between stat() and read
                logger.error(f"[{conn.id}] Failed to read {resource.path}: {e}")
                break

            if not conn.send_response(response.to_bytes()):
                break  # Send failed, close connection

            access_log.record(conn, request, response, started)

            if request.close_connection:
                logger.debug(f"[{conn.id}] Closing after {response.status}")
                break

            conn.finish_request()


class HTTPServer:
    """
    Static file HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        config = ServerConfig(port=8080).with_root("/srv/site")
        server = HTTPServer(config)
        server.run()          # Blocks until Ctrl+C / SIGTERM / shutdown()

    =========================================================================
    THREADING
    =========================================================================

    Every accepted connection gets its own daemon thread running
    serve_connection(). Threads share only the frozen ServerConfig and
    the filesystem, so no locking is needed. The thread count is not
    capped: an idle connection costs one thread for at most
    keep_alive_timeout seconds.

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Validated immediately.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)
        self._running = False

    @property
    def port(self) -> int:
        """Listening port (the OS-assigned one when configured with 0)."""
        return self._socket_server.bound_port

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """Start the server (blocking)."""
        self._setup_logging()
        self._running = True

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port} "
            f"serving from: {self.config.document_root or '/'}"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._running = False
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. Open connections finish on their own."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is listening."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("staticserver").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Start a worker thread for a freshly accepted connection."""
        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        worker.start()

    def _process_connection(self, conn: Connection):
        """Worker thread body."""
        try:
            serve_connection(conn, self.config)
        except Exception as e:
            logger.exception(f"[{conn.id}] Connection error: {e}")
            conn.close()


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. serve_connection(): AWAIT_LINE → PROCESS → AWAIT_LINE | TERMINATED
# 2. HTTPServer: accept loop + one daemon thread per connection
# 3. Failures end a single connection, never the process
# =============================================================================
