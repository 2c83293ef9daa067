"""
One request/response exchange per connection.

    read request line -> check line ending -> parse -> check host/scheme
        -> resolve -> encode -> write -> close

Any failure between reading and writing becomes an error response; the
client always gets a header unless it sent nothing at all.
"""

from __future__ import annotations

import logging

import anyio
from anyio.abc import ByteStream

from .config import VirtualHostConfig
from .errors import Failure, GeminiError, Internal, LineEnding, ProxyRefused
from .request import GEMINI_SCHEME, GeminiRequest
from .resolver import resolve
from .response import GeminiResponse


# 1024 bytes of URL plus CRLF. With require_crlf off this lets a 1025 byte
# URL through, but such a server is already noncompliant.
MAX_REQUEST_BYTES = 1026


def _escape(text: str) -> str:
    return text.replace("\r", "\\r").replace("\n", "\\n")


class ConnectionHandler:
    """Serves connections for one virtual host. Holds no per-connection state."""

    def __init__(self, host: VirtualHostConfig, logger: logging.Logger):
        self.host = host
        self.logger = logger

    async def __call__(self, stream: ByteStream) -> None:
        await self.handle(stream)

    async def handle(self, stream: ByteStream) -> None:
        async with stream:
            with anyio.move_on_after(self.host.request_timeout) as scope:
                raw = await self.read_request(stream)
            if scope.cancelled_caught:
                self.logger.debug(f"Timed out waiting for a request after {self.host.request_timeout}s")
                return

            # Nothing received. Don't reply.
            if not raw:
                return

            response = await self.respond(raw)
            self.logger.debug(f"Sending response header: {int(response.code)} {response.meta}")
            try:
                await stream.send(response.encode())
            except (anyio.BrokenResourceError, anyio.ClosedResourceError, OSError) as e:
                self.logger.debug(f"Client went away before the response was written: {e!r}")

    async def read_request(self, stream: ByteStream) -> bytes:
        """Read until a line feed, MAX_REQUEST_BYTES, or end of stream."""
        buffer = bytearray()
        while len(buffer) < MAX_REQUEST_BYTES and b"\n" not in buffer:
            try:
                chunk = await stream.receive(MAX_REQUEST_BYTES - len(buffer))
            except anyio.EndOfStream:
                break
            except (anyio.BrokenResourceError, OSError) as e:
                self.logger.debug(f"Connection broken while reading request: {e!r}")
                break
            buffer.extend(chunk)
        return bytes(buffer)

    async def respond(self, raw: bytes) -> GeminiResponse:
        """Build the response for a raw request line, including error responses."""
        failure: Failure
        try:
            request = self.parse_request(raw)
            return await resolve(self.host, request.path)
        except GeminiError as e:
            failure = e.failure
        except Exception as e:
            failure = Internal(e)

        if isinstance(failure, Internal):
            self.logger.critical(f"Internal error: {failure.cause!r}", exc_info=failure.cause)
        return GeminiResponse.from_failure(failure)

    def parse_request(self, raw: bytes) -> GeminiRequest:
        """Validate the line ending and host identity, then parse."""
        text = raw.decode("utf-8", errors="replace")
        self.logger.debug(f"Received request: {_escape(text)}")

        terminator = self.host.line_terminator
        if not text.endswith(terminator):
            raise GeminiError(LineEnding(terminator))

        request = GeminiRequest.parse(text)
        if not self.host.serves(request.hostname) or request.scheme != GEMINI_SCHEME:
            raise GeminiError(ProxyRefused(text.rstrip("\r\n")))
        return request
