"""
=============================================================================
PREVIEW SERVER
=============================================================================

The connection dispatcher: ties the socket server, the thread pool and the
static site handler together.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   PreviewServer(bind_address, root_directory, color_output)         │
    │       │   └─ ServerConfig (frozen) ── BindConfigurationError        │
    │       │                                                              │
    │   run()                                                              │
    │       ├──► SocketServer.bind()        ── ServerStartError (fatal)    │
    │       ├──► print "Server running on http://HOST:PORT/"               │
    │       └──► SocketServer.serve()       (main thread, forever)         │
    │                 │                                                    │
    │                 └─ per connection:                                   │
    │                      ThreadPool.submit(handle_connection, ...)       │
    │                      (blocks while all 16 workers are busy)          │
    │                                                                      │
    │   handle_connection(conn, handler)    (worker thread)                │
    │       ├──► read request head                                         │
    │       ├──► parse ─── malformed ──► 400                               │
    │       ├──► StaticSiteHandler.handle ──► 200 file / 404               │
    │       └──► send, close                                               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PER-REQUEST FAILURES
=============================================================================

    ┌─────────────────────────┬──────────────────────────────────────────┐
    │ resolution fails        │ 404, empty body, nothing logged          │
    │ peer hung up (EPIPE)    │ dropped silently                         │
    │ any other OSError       │ logged at ERROR, request abandoned       │
    │ anything else           │ logged by the worker pool                │
    └─────────────────────────┴──────────────────────────────────────────┘

None of these reach the accept loop. Only a failed bind stops the server.

=============================================================================
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO, Union

from .config import ServerConfig
from .core import SocketServer, Connection, ThreadPool, DEFAULT_WORKERS, is_broken_pipe
from .handlers import StaticSiteHandler
from .http import RequestParser, HTTPParseError, bad_request


logger = logging.getLogger(__name__)


BOLD = "\033[1m"
RESET = "\033[0m"


def format_startup_line(url: str, color: bool) -> str:
    """
    The line announcing the server's URL.

    Args:
        url: e.g. "http://127.0.0.1:8080/"
        color: Render the URL bold with ANSI escapes.
    """
    if color:
        url = f"{BOLD}{url}{RESET}"
    return f"Server running on {url}"


def _format_url(host: str, port: int) -> str:
    if ":" in host:
        host = f"[{host}]"
    return f"http://{host}:{port}/"


def handle_connection(conn: Connection, handler: StaticSiteHandler, parser: Optional[RequestParser] = None):
    """
    Serve one request on one connection (runs on a worker thread).

    Writes at most one response, then closes the connection.

    Args:
        conn: The accepted client connection.
        handler: Shared, read-only site handler.
        parser: Request parser; a default one is created if omitted.
    """
    parser = parser or RequestParser()

    with conn:
        try:
            raw_request = conn.read_request()
            if raw_request is None:
                return  # client left without asking for anything

            try:
                request = parser.parse(raw_request)
            except HTTPParseError as e:
                logger.debug(f"[{conn.id}] Bad request: {e}")
                conn.send_response(bad_request().to_bytes())
                return

            response = handler.handle(request)
            conn.send_response(response.to_bytes())

        except OSError as e:
            if is_broken_pipe(e):
                return
            logger.error(f"HTTP server threw error: {e}")


class PreviewServer:
    """
    Serves a directory of static files for local preview.

    Usage:
        server = PreviewServer("127.0.0.1:8080", "./_build", color_output=True)
        server.run()   # blocks until the process exits

    Raises:
        BindConfigurationError: From the constructor, if bind_address is
                                not a valid host:port.
    """

    def __init__(
        self,
        bind_address: str,
        root_directory: Union[str, Path],
        color_output: bool = True,
        log_level: str = "INFO",
    ):
        self.config = ServerConfig(
            bind_address=bind_address,
            root_directory=Path(root_directory),
            color_output=color_output,
            log_level=log_level,
        )

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(num_workers=DEFAULT_WORKERS)
        self._handler = StaticSiteHandler(self.config.root_directory)
        self._parser = RequestParser()

    @classmethod
    def from_config(cls, config: ServerConfig) -> "PreviewServer":
        """Create a server from an existing ServerConfig."""
        return cls(
            bind_address=config.bind_address,
            root_directory=config.root_directory,
            color_output=config.color_output,
            log_level=config.log_level,
        )

    @property
    def url(self) -> str:
        """The server's URL, using the bound port once run() has bound it."""
        host, port = self._socket_server.bound_address
        return _format_url(host, port)

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, stdout: Optional[TextIO] = None):
        """
        Bind, announce, and serve forever.

        Args:
            stdout: Stream for the startup line (default: sys.stdout).

        Raises:
            ServerStartError: If the listening socket cannot be bound.
        """
        self._setup_logging()

        if not self.config.root_directory.is_dir():
            logger.warning(f"Root directory does not exist: {self.config.root_directory}")

        self._socket_server.bind()
        self._print_startup_line(stdout or sys.stdout)

        self._thread_pool.start()

        try:
            self._socket_server.serve(self._handle_connection)
        finally:
            self._thread_pool.shutdown()

    def shutdown(self):
        """
        Stop accepting connections and stop the workers.

        In-flight requests are not waited for.
        """
        self._socket_server.shutdown()

    def _print_startup_line(self, stream: TextIO):
        # Color only on a terminal, never into pipes or log files
        color = self.config.color_output and stream.isatty()
        print(format_startup_line(self.url, color), file=stream, flush=True)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("previewserver").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Hand a connection to the thread pool (runs on the accept thread)."""
        self._thread_pool.submit(
            handle_connection,
            args=(conn, self._handler, self._parser),
        )
