"""
Responses for requests that never made it past the parser.
"""

from ..http.request import HTTPParseError
from ..http.response import HTTPResponse, ResponseBuilder


def response_for_parse_error(error: HTTPParseError) -> HTTPResponse:
    """
    Map a parse error to its response.

    IO_ERROR → 500, every other kind → 400. The body is the error's own
    message.
    """
    return (ResponseBuilder()
        .status(error.status_code)
        .text(str(error))
        .close_connection()
        .build())
