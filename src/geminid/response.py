"""Gemini responses and their wire encoding."""

from __future__ import annotations

import mimetypes
import posixpath
from dataclasses import dataclass

from .errors import Failure, failure_status
from .status import StatusCode


GEMTEXT_MEDIA_TYPE = "text/gemini"
DEFAULT_MEDIA_TYPE = "text/plain; charset=utf-8"
GEMTEXT_EXTENSIONS = frozenset({".gmi", ".gemini"})


def media_type_for(path: str) -> str:
    """Guess the media type of a file from its extension."""
    if posixpath.splitext(path)[1].lower() in GEMTEXT_EXTENSIONS:
        return GEMTEXT_MEDIA_TYPE
    media_type, _encoding = mimetypes.guess_type(path, strict=False)
    return media_type or DEFAULT_MEDIA_TYPE


@dataclass(frozen=True, slots=True)
class ResponseHeader:
    """Status code plus the "meta" string: a media type, redirect target or error message."""
    code: StatusCode
    meta: str

    def __post_init__(self):
        if "\r" in self.meta or "\n" in self.meta:
            raise ValueError(f"response meta must be a single line: {self.meta!r}")

    def encode(self) -> bytes:
        return f"{int(self.code)} {self.meta}\r\n".encode("utf-8")


@dataclass(frozen=True, slots=True)
class GeminiResponse:
    """A header and, for SUCCESS only, a body."""
    header: ResponseHeader
    body: bytes | None = None

    def __post_init__(self):
        if self.body is not None and self.header.code != StatusCode.SUCCESS:
            raise ValueError(f"status {int(self.header.code)} responses cannot carry a body")

    @property
    def code(self) -> StatusCode:
        return self.header.code

    @property
    def meta(self) -> str:
        return self.header.meta

    def encode(self) -> bytes:
        """Header line followed by the raw body. Framing is the connection close."""
        header = self.header.encode()
        if self.body is None:
            return header
        return header + self.body

    @staticmethod
    def ok(media_type: str, body: bytes) -> "GeminiResponse":
        return GeminiResponse(ResponseHeader(StatusCode.SUCCESS, media_type), body)

    @staticmethod
    def gemtext(text: str) -> "GeminiResponse":
        return GeminiResponse.ok(GEMTEXT_MEDIA_TYPE, text.encode("utf-8"))

    @staticmethod
    def from_failure(failure: Failure) -> "GeminiResponse":
        code, message = failure_status(failure)
        return GeminiResponse(ResponseHeader(code, message))
