"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

The preview server's whole configuration: where to listen, what to serve,
and whether the startup line may use color.

=============================================================================
ONE VALUE, SHARED BY EVERYONE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   CLI / caller ──► ServerConfig (frozen) ──► accept loop            │
    │                           │                                          │
    │                           └──────────────► worker 1..16 (read-only)  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The dataclass is frozen: built once at startup, never mutated, safe to
read from every worker thread without locks.

=============================================================================
BIND ADDRESS FORMAT
=============================================================================

    127.0.0.1:8080      IPv4 literal and port
    0.0.0.0:3000        all IPv4 interfaces
    [::1]:8080          IPv6 literal, bracketed
    127.0.0.1:0         let the OS pick a port

Host names ("localhost") are NOT accepted; the host must be an IP literal.
Anything that does not parse raises BindConfigurationError before a socket
is ever created.

=============================================================================
"""

import ipaddress
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union


class BindConfigurationError(ValueError):
    """Raised when a bind address cannot be parsed as host:port."""


def parse_bind_address(bind_address: str) -> tuple[str, int]:
    """
    Split a "host:port" string into a validated (host, port) pair.

    Args:
        bind_address: "127.0.0.1:8080" or "[::1]:8080".

    Returns:
        (host, port) with IPv6 brackets removed.

    Raises:
        BindConfigurationError: If the host is not an IP literal or the
                                port is not an integer in 0..65535.
    """
    host, separator, port_text = bind_address.rpartition(":")
    if not separator or not host or not port_text:
        raise BindConfigurationError(f"invalid address for preview server: {bind_address!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
        expected_version = 6
    else:
        expected_version = 4

    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        raise BindConfigurationError(
            f"invalid address for preview server: {bind_address!r}"
        ) from None

    # An unbracketed IPv6 literal is ambiguous with the port separator
    if address.version != expected_version:
        raise BindConfigurationError(f"invalid address for preview server: {bind_address!r}")

    if not (port_text.isascii() and port_text.isdigit()) or not 0 <= int(port_text) <= 65535:
        raise BindConfigurationError(f"invalid port in {bind_address!r}: must be 0-65535")

    return host, int(port_text)


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the preview server.

    Validated eagerly in __post_init__ (fail fast), so a ServerConfig that
    exists is always usable.

    Usage:
        config = ServerConfig("127.0.0.1:8080", "./_build", color_output=True)
        config.host, config.port   # ("127.0.0.1", 8080)
    """

    bind_address: str
    """Listening address as "host:port"."""

    root_directory: Path
    """Directory being served. Stored as an absolute path."""

    color_output: bool = True
    """Allow a bold URL in the startup line (only on a terminal)."""

    log_level: str = "INFO"
    """Logging level for the server's loggers (DEBUG, INFO, WARNING, ERROR)."""

    host: str = field(init=False)
    port: int = field(init=False)

    def __post_init__(self):
        host, port = parse_bind_address(self.bind_address)

        # frozen=True blocks normal assignment, even in __post_init__
        object.__setattr__(self, "host", host)
        object.__setattr__(self, "port", port)
        object.__setattr__(self, "root_directory", Path(self.root_directory).resolve())

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @classmethod
    def from_address(
        cls,
        bind_address: str,
        root_directory: Union[str, Path],
        color_output: bool,
    ) -> "ServerConfig":
        """Build a config from the three values the caller supplies."""
        return cls(
            bind_address=bind_address,
            root_directory=Path(root_directory),
            color_output=color_output,
        )
