"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every knob the service has, in one dataclass.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  Priority (highest first)                                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │  1. CLI flags            --port 9000                                │
    │  2. Environment          SHORTURL_PORT=9000                         │
    │  3. Dataclass defaults   port: int = 8080                           │
    └─────────────────────────────────────────────────────────────────────┘

The Basic Auth secret only ever comes from the environment
(SHORTURL_AUTH), so it never shows up in a process listing.

=============================================================================
INTERVIEW QUESTIONS ABOUT CONFIGURATION
=============================================================================

Q: "What happens if the auth secret is missing?"
A: "The server still starts and logs a warning, but every valid POST is
   answered with 500. It fails closed: nothing gets shortened without a
   credential check unless auth is switched off explicitly."

Q: "How do you validate configuration?"
A: "Eagerly, at startup. validate() raises ValueError with a clear
   message before any socket is opened."

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional

from .http.request import DEFAULT_MAX_BODY_SIZE, DEFAULT_MAX_HEADER_SIZE
from .shortener.shortener import DEFAULT_MAX_ATTEMPTS


ENV_PREFIX = "SHORTURL_"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default

    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _env_optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return float(raw)


@dataclass
class ServerConfig:
    """
    Configuration for the shortener server.

    NETWORK
    - host, port, backlog, timeout

    PARSER LIMITS
    - max_header_size, max_body_size

    SHORTENER
    - max_attempts, require_auth, auth_credentials

    CONCURRENCY
    - workers (0 = handle connections inline), queue_size

    LOGGING
    - log_level, access_log
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"

    port: int = 8080
    """0 lets the OS pick a free port (handy in tests)."""

    backlog: int = 128

    timeout: Optional[float] = None
    """
    Read timeout for client sockets in seconds.
    None = block until the client sends or hangs up.
    """

    # ─────────────────────────────────────────────────────────────────────
    # PARSER LIMITS
    # ─────────────────────────────────────────────────────────────────────

    max_header_size: int = DEFAULT_MAX_HEADER_SIZE
    """Bytes allowed for the request line and all header lines together."""

    max_body_size: int = DEFAULT_MAX_BODY_SIZE
    """Largest Content-Length accepted. Bigger requests get 400 unread."""

    # ─────────────────────────────────────────────────────────────────────
    # SHORTENER
    # ─────────────────────────────────────────────────────────────────────

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    """Salted retries after the first collision."""

    require_auth: bool = True

    auth_credentials: str = ""
    """Expected "user:password" for POSTs."""

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY
    # ─────────────────────────────────────────────────────────────────────

    workers: int = 0
    queue_size: int = 64

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    access_log: bool = True

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "ShortURL/1.0"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

            SHORTURL_HOST            bind address    (127.0.0.1)
            SHORTURL_PORT            bind port       (8080)
            SHORTURL_TIMEOUT         read timeout    (none)
            SHORTURL_MAX_BODY_SIZE   body cap        (102400)
            SHORTURL_WORKERS         pool size       (0)
            SHORTURL_REQUIRE_AUTH    gate POSTs      (true)
            SHORTURL_AUTH            user:password   (empty)
            SHORTURL_LOG_LEVEL       log level       (INFO)

        Raises:
            ValueError: If a numeric or boolean variable does not parse.
        """
        defaults = cls()
        return cls(
            host=os.getenv(f"{ENV_PREFIX}HOST", defaults.host),
            port=int(os.getenv(f"{ENV_PREFIX}PORT", str(defaults.port))),
            timeout=_env_optional_float(f"{ENV_PREFIX}TIMEOUT"),
            max_body_size=int(os.getenv(f"{ENV_PREFIX}MAX_BODY_SIZE", str(defaults.max_body_size))),
            workers=int(os.getenv(f"{ENV_PREFIX}WORKERS", str(defaults.workers))),
            require_auth=_env_bool(f"{ENV_PREFIX}REQUIRE_AUTH", defaults.require_auth),
            auth_credentials=os.getenv(f"{ENV_PREFIX}AUTH", defaults.auth_credentials),
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level).upper(),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid value.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_header_size < 1:
            raise ValueError("max_header_size must be >= 1")

        if self.max_body_size < 0:
            raise ValueError("max_body_size must be >= 0")

        if self.max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")

        if self.workers < 0:
            raise ValueError("workers must be >= 0")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")

        if self.auth_credentials and ":" not in self.auth_credentials:
            raise ValueError('auth_credentials must look like "user:password"')
