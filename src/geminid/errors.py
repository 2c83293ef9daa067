"""
Request failures.

Every way a request can fail is one of the frozen dataclasses below. They are
plain values; to abort request handling one is raised wrapped in a
``GeminiError`` and the connection handler turns it back into a response with
``failure_status()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from typing_extensions import TypeAlias, assert_never

from .status import StatusCode


INTERNAL_ERROR_MESSAGE = "An internal error occurred"


def _escape_line_breaks(text: str) -> str:
    return text.replace("\r", "\\r").replace("\n", "\\n")


@dataclass(frozen=True, slots=True)
class LineEnding:
    """Unexpected line ending (e.g. CRLF required but only LF received)."""
    terminator: str


@dataclass(frozen=True, slots=True)
class NotFound:
    path: str


@dataclass(frozen=True, slots=True)
class Forbidden:
    """Insufficient permissions. Reported to the client as NOT_FOUND."""
    path: str


@dataclass(frozen=True, slots=True)
class ProxyRefused:
    """Request names another host or scheme; proxying is unsupported."""
    request: str


@dataclass(frozen=True, slots=True)
class Gone:
    path: str


@dataclass(frozen=True, slots=True)
class Redirect:
    destination: str
    permanent: bool = False


@dataclass(frozen=True, slots=True)
class Internal:
    """Catch-all. The cause is for the logs only and never reaches the client."""
    cause: BaseException


Failure: TypeAlias = Union[LineEnding, NotFound, Forbidden, ProxyRefused, Gone, Redirect, Internal]


class GeminiError(Exception):
    """Carries a ``Failure`` out of the request pipeline."""

    def __init__(self, failure: Failure):
        super().__init__(failure)
        self.failure = failure

    def __str__(self) -> str:
        _code, message = failure_status(self.failure)
        return message


def failure_status(failure: Failure) -> tuple[StatusCode, str]:
    """
    Map a failure to the status code and meta line sent to the client.

    Messages may echo client input, so line breaks are escaped to keep the
    header a single line.
    """
    code, message = _describe(failure)
    return code, _escape_line_breaks(message)


def _describe(failure: Failure) -> tuple[StatusCode, str]:
    match failure:
        case LineEnding(terminator):
            return StatusCode.BAD_REQUEST, f"Server expects {terminator} line endings"
        case NotFound(path):
            return StatusCode.NOT_FOUND, f"{path} does not exist"
        case Forbidden(path):
            return StatusCode.NOT_FOUND, f"you do not have permissions to access {path}"
        case ProxyRefused(request):
            return StatusCode.PROXY_REQUEST_REFUSED, f"this server does not support proxying {request}"
        case Gone(path):
            return StatusCode.GONE, f"{path} is Gone."
        case Redirect(destination, permanent):
            code = StatusCode.REDIRECT_PERMANENT if permanent else StatusCode.REDIRECT_TEMPORARY
            return code, destination
        case Internal():
            return StatusCode.PERMANENT_FAILURE, INTERNAL_ERROR_MESSAGE
        case _:
            assert_never(failure)
