"""Gemini request parsing."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import parse_qs, unquote, urlsplit

from .paths import remove_dot_segments


GEMINI_SCHEME = "gemini"


@dataclass(frozen=True, slots=True)
class GeminiRequest:
    """
    The parts of a request line the server cares about.

    Attributes:
        scheme: URL scheme without the trailing colon ("gemini", "https", ...)
        hostname: Requested host, lowercased. May be empty.
        path: Percent-decoded absolute path with dot segments removed.
        query: Raw query string after "?", or None. Currently unused.
    """
    scheme: str
    hostname: str
    path: str = "/"
    query: str | None = None

    @property
    def params(self) -> dict[str, list[str]]:
        if not self.query:
            return {}
        return parse_qs(self.query, keep_blank_values=True)

    @staticmethod
    def parse(line: str | bytes) -> "GeminiRequest":
        """
        Parse a request line into a ``GeminiRequest``.

        This is best-effort: malformed URLs are not rejected, missing parts get
        defaults (scheme "gemini", path "/"). Bytes are decoded as UTF-8 with
        invalid sequences replaced.
        """
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")

        url = line.rstrip("\r\n").strip()
        if "://" not in url and not url.startswith("//"):
            # A scheme-less request like "example.org/page" still names a host.
            url = "//" + url

        try:
            parts = urlsplit(url)
        except ValueError:
            # e.g. an unbalanced IPv6 bracket; an empty host is refused later on.
            return GeminiRequest(scheme=GEMINI_SCHEME, hostname="")

        path = remove_dot_segments(unquote(parts.path) or "/")
        return GeminiRequest(
            scheme=(parts.scheme or GEMINI_SCHEME).lower(),
            hostname=parts.hostname or "",
            path=path,
            query=parts.query or None,
        )
