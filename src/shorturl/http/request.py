"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads one HTTP/1.1 request from a blocking byte stream and turns it into
an HTTPRequest. Only what the shortener needs is supported: GET and POST,
a single request line, simple "Name: value" header lines and a body sized
by Content-Length.

=============================================================================
PULL-BASED PARSING
=============================================================================

The parser does not receive a buffer of bytes; it PULLS from a stream:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     REQUEST READING                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   stream.readline(budget)   "POST / HTTP/1.1\r\n"   ─┐               │
    │   stream.readline(budget)   "Host: sho.rt\r\n"       │ header region │
    │   stream.readline(budget)   "Content-Length: 31\r\n" │ ≤ 8192 bytes  │
    │   stream.readline(budget)   "\r\n"                  ─┘               │
    │                                                                      │
    │   stream.read(31)           '{"url": "https://example.com"}'        │
    │                                         body ≤ max_body_size         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Anything that offers readline(limit) and read(n) works: a socket file
from socket.makefile("rb") in production, io.BytesIO in tests.

The header-region cap is enforced by shrinking the `limit` passed to
readline(). When the budget runs out the line comes back without its
terminator, which is indistinguishable from the peer hanging up, and is
reported the same way (CONNECTION_CLOSED).

=============================================================================
ERROR KINDS
=============================================================================

    CONNECTION_CLOSED     stream ended before a line terminator   → 400
    INVALID_REQUEST_LINE  fewer than two tokens                   → 400
    INVALID_METHOD        not GET or POST                         → 400
    INTEGER_PARSE_ERROR   Content-Length is not a number          → 400
    OVERSIZED_BODY        Content-Length above the body cap       → 400
    UTF8_ERROR            body (or header bytes) not UTF-8        → 400
    IO_ERROR              read failed or body cut short           → 500

=============================================================================
INTERVIEW QUESTIONS ABOUT HTTP PARSING
=============================================================================

Q: "Why check Content-Length before reading the body?"
A: "So an attacker cannot make us allocate or wait for a huge body. We
   reject it from the header alone and never touch the payload."

Q: "Why cap the header region?"
A: "Without a cap a client can stream header lines forever and grow our
   memory without bound. 8 KB is what most servers allow."

=============================================================================
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from io import BytesIO
from typing import BinaryIO, Dict, List, Optional, Tuple

from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


DEFAULT_MAX_HEADER_SIZE = 8192
DEFAULT_MAX_BODY_SIZE = 100 * 1024  # 100 KiB

_DECIMAL = re.compile(r"[0-9]+")


class Method(str, Enum):
    """The HTTP methods the service understands."""
    GET = "GET"
    POST = "POST"


class ParseErrorKind(Enum):
    """Closed set of reasons a request can fail to parse."""
    CONNECTION_CLOSED = "connection_closed"
    INVALID_METHOD = "invalid_method"
    INVALID_REQUEST_LINE = "invalid_request_line"
    OVERSIZED_BODY = "oversized_body"
    IO_ERROR = "io_error"
    INTEGER_PARSE_ERROR = "integer_parse_error"
    UTF8_ERROR = "utf8_error"


class HTTPParseError(Exception):
    """
    Raised when a request cannot be read or parsed.

    Carries the error kind; the status code follows from it. Transport
    failures are the server's problem (500), everything else is the
    client's (400).
    """

    def __init__(self, kind: ParseErrorKind, message: str):
        super().__init__(message)
        self.kind = kind

    @property
    def status_code(self) -> HTTPStatus:
        if self.kind is ParseErrorKind.IO_ERROR:
            return HTTPStatus.INTERNAL_SERVER_ERROR
        return HTTPStatus.BAD_REQUEST


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    Frozen: once the parser hands it over nobody changes it. The router
    attaches path parameters by making a copy with dataclasses.replace().

    Attributes:
        method:         GET or POST.
        path:           Request target exactly as sent ("/abc?x=1" stays
                        as-is; no decoding, no query splitting).
        headers:        (name, value) pairs in arrival order. Duplicates
                        are kept. Use get_header() for lookups.
        body:           Body decoded as UTF-8 ("" when absent).
        client_address: Peer (ip, port), for logging only.
        path_params:    Values captured by the router (":code" → "abc").
    """

    method: Method
    path: str
    headers: Tuple[Tuple[str, str], ...] = ()
    body: str = ""
    client_address: Tuple[str, int] = ("", 0)
    path_params: Dict[str, str] = field(default_factory=dict, compare=False)

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        First value of a header, compared case-insensitively.

        Example:
            request.get_header("content-length")  # matches "Content-Length"
        """
        wanted = name.lower()
        for header_name, value in self.headers:
            if header_name.lower() == wanted:
                return value
        return default

    def get_all_headers(self, name: str) -> List[str]:
        """Every value of a repeated header, in arrival order."""
        wanted = name.lower()
        return [value for header_name, value in self.headers if header_name.lower() == wanted]

    @property
    def content_length(self) -> int:
        """Declared body length (0 when the header is absent)."""
        return int(self.get_header("Content-Length", "0"))

    @property
    def user_agent(self) -> str:
        return self.get_header("User-Agent", "")


class RequestParser:
    """
    Reads one request from a binary stream.

    ==========================================================================
    PARSER STEPS
    ==========================================================================

        1. Request line   METHOD SP PATH [SP VERSION]
                          fewer than 2 tokens → INVALID_REQUEST_LINE
                          method not GET/POST → INVALID_METHOD

        2. Header lines   until a bare "\\r\\n"
                          "Name: value" split on the first ":"
                          lines without ":" are skipped

        3. Content-Length default "0", digits only, ≤ max_body_size

        4. Body           exactly Content-Length bytes, UTF-8

    ==========================================================================
    """

    def __init__(
        self,
        max_header_size: int = DEFAULT_MAX_HEADER_SIZE,
        max_body_size: int = DEFAULT_MAX_BODY_SIZE,
    ):
        """
        Args:
            max_header_size: Byte budget shared by the request line and all
                             header lines.
            max_body_size: Largest Content-Length accepted.
        """
        self.max_header_size = max_header_size
        self.max_body_size = max_body_size

    def parse(
        self,
        stream: BinaryIO,
        client_address: Tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Read and parse a single request.

        Args:
            stream: Blocking binary stream positioned at the request start.
            client_address: Peer (ip, port) recorded on the request.

        Returns:
            The parsed request.

        Raises:
            HTTPParseError: On any read or syntax failure.
        """
        # Mutable budget shared by every line in the header region
        budget = [self.max_header_size]

        # =====================================================================
        # STEP 1: Request line
        # =====================================================================
        request_line = self._read_line(stream, budget)
        method, path = self._parse_request_line(request_line)

        # =====================================================================
        # STEP 2: Headers
        # =====================================================================
        headers = []
        while True:
            raw = self._read_raw_line(stream, budget)
            if raw == b"\r\n":
                break
            header = self._parse_header_line(self._decode_line(raw))
            if header is not None:
                headers.append(header)

        # =====================================================================
        # STEP 3: Content-Length
        # =====================================================================
        content_length = self._content_length(headers)

        # =====================================================================
        # STEP 4: Body
        # =====================================================================
        body = self._read_body(stream, content_length)

        return HTTPRequest(
            method=method,
            path=path,
            headers=tuple(headers),
            body=body,
            client_address=client_address,
        )

    # =========================================================================
    # LINE READING
    # =========================================================================

    def _read_raw_line(self, stream: BinaryIO, budget: List[int]) -> bytes:
        """
        Read one terminated line within the remaining header budget.

        A zero-byte read, EOF mid-line and an exhausted budget all mean we
        never saw the terminator: CONNECTION_CLOSED.
        """
        if budget[0] <= 0:
            raise HTTPParseError(
                ParseErrorKind.CONNECTION_CLOSED,
                "Connection closed before headers were complete",
            )

        try:
            line = stream.readline(budget[0])
        except OSError as e:
            raise HTTPParseError(ParseErrorKind.IO_ERROR, f"I/O error: {e}") from e

        budget[0] -= len(line)

        if not line.endswith(b"\n"):
            raise HTTPParseError(
                ParseErrorKind.CONNECTION_CLOSED,
                "Connection closed before headers were complete",
            )
        return line

    def _decode_line(self, raw: bytes) -> str:
        try:
            return raw.decode("utf-8").rstrip("\r\n")
        except UnicodeDecodeError as e:
            raise HTTPParseError(ParseErrorKind.UTF8_ERROR, f"Invalid UTF-8 in request head: {e}") from e

    def _read_line(self, stream: BinaryIO, budget: List[int]) -> str:
        return self._decode_line(self._read_raw_line(stream, budget))

    # =========================================================================
    # REQUEST LINE AND HEADERS
    # =========================================================================

    def _parse_request_line(self, line: str) -> Tuple[Method, str]:
        """
        Split "METHOD PATH [VERSION]" and validate the method.

        The version token is optional and ignored; the path is kept
        verbatim.
        """
        tokens = line.split()
        if len(tokens) < 2:
            raise HTTPParseError(
                ParseErrorKind.INVALID_REQUEST_LINE,
                f"Invalid request line: {line!r}",
            )

        method_name = tokens[0].upper()
        try:
            method = Method(method_name)
        except ValueError:
            raise HTTPParseError(
                ParseErrorKind.INVALID_METHOD,
                f"Invalid method: {tokens[0]}",
            ) from None

        return method, tokens[1]

    @staticmethod
    def _parse_header_line(line: str) -> Optional[Tuple[str, str]]:
        """
        Parse "Name: value" into a stripped pair.

        Lines without a colon are not an error; they are skipped (None).
        """
        name, sep, value = line.partition(":")
        if not sep:
            return None
        return name.strip(), value.strip()

    def _content_length(self, headers: List[Tuple[str, str]]) -> int:
        raw = "0"
        for name, value in headers:
            if name.lower() == "content-length":
                raw = value
                break

        if not _DECIMAL.fullmatch(raw):
            raise HTTPParseError(
                ParseErrorKind.INTEGER_PARSE_ERROR,
                f"Invalid Content-Length: {raw!r}",
            )

        length = int(raw)
        if length > self.max_body_size:
            # Rejected from the header alone; the body is never read
            raise HTTPParseError(
                ParseErrorKind.OVERSIZED_BODY,
                f"Request body too large: {length} bytes (max {self.max_body_size})",
            )
        return length

    # =========================================================================
    # BODY
    # =========================================================================

    def _read_body(self, stream: BinaryIO, length: int) -> str:
        """Read exactly `length` bytes and decode them as UTF-8."""
        chunks = []
        remaining = length
        try:
            while remaining > 0:
                chunk = stream.read(remaining)
                if not chunk:
                    raise HTTPParseError(
                        ParseErrorKind.IO_ERROR,
                        f"I/O error: body ended after {length - remaining} of {length} bytes",
                    )
                chunks.append(chunk)
                remaining -= len(chunk)
        except OSError as e:
            raise HTTPParseError(ParseErrorKind.IO_ERROR, f"I/O error: {e}") from e

        try:
            return b"".join(chunks).decode("utf-8")
        except UnicodeDecodeError as e:
            raise HTTPParseError(ParseErrorKind.UTF8_ERROR, f"Request body is not valid UTF-8: {e}") from e


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
    max_body_size: int = DEFAULT_MAX_BODY_SIZE,
) -> HTTPRequest:
    """
    Parse a request held entirely in memory.

    Wraps the bytes in a BytesIO and runs a default RequestParser over it.
    Handy in tests and in tools that already have the raw request.
    """
    parser = RequestParser(max_body_size=max_body_size)
    return parser.parse(BytesIO(data), client_address)
