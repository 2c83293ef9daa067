"""Shared fixtures for geminid tests."""

from __future__ import annotations

import logging

import anyio
import pytest
from anyio.abc import ByteStream

from geminid import VirtualHostConfig


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeStream(ByteStream):
    """In-memory byte stream: replays the given chunks, records what is sent."""

    def __init__(self, *chunks: bytes, fail_send: bool = False):
        self._chunks = list(chunks)
        self._fail_send = fail_send
        self.sent = bytearray()
        self.closed = False
        self.receive_sizes: list[int] = []

    async def receive(self, max_bytes: int = 65536) -> bytes:
        if self.closed:
            raise anyio.ClosedResourceError
        self.receive_sizes.append(max_bytes)
        if not self._chunks:
            raise anyio.EndOfStream
        chunk = self._chunks.pop(0)
        if len(chunk) > max_bytes:
            self._chunks.insert(0, chunk[max_bytes:])
            chunk = chunk[:max_bytes]
        return chunk

    async def send(self, item: bytes) -> None:
        if self._fail_send:
            raise anyio.BrokenResourceError
        self.sent.extend(item)

    async def send_eof(self) -> None:
        pass

    async def aclose(self) -> None:
        self.closed = True


class SilentStream(FakeStream):
    """A client that connects and never sends anything."""

    async def receive(self, max_bytes: int = 65536) -> bytes:
        await anyio.sleep_forever()


@pytest.fixture
def capsule(tmp_path):
    """
    A small document root:

        a.gmi           "hi\\n"
        notes.txt
        old             (exists on disk but is a goner)
        docs/index.gmi
        docs/index.gemini
        gallery/        (no index)
          b.png
          sub/
    """
    root = tmp_path / "srv" / "example"
    root.mkdir(parents=True)
    (root / "a.gmi").write_bytes(b"hi\n")
    (root / "notes.txt").write_text("plain notes\n")
    (root / "old").write_text("stale\n")
    (root / "docs").mkdir()
    (root / "docs" / "index.gmi").write_text("# Docs\n")
    (root / "docs" / "index.gemini").write_text("# Other docs\n")
    (root / "gallery").mkdir()
    (root / "gallery" / "b.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    (root / "gallery" / "sub").mkdir()
    return root


@pytest.fixture
def make_host(capsule, tmp_path):
    def _make(**overrides) -> VirtualHostConfig:
        fields = {
            "hostname": "example",
            "certFile": "cert.pem",
            "keyFile": "key.pem",
            "documentRoot": str(capsule),
            "logFile": str(tmp_path / "example.log"),
        }
        fields.update(overrides)
        return VirtualHostConfig.model_validate(fields)

    return _make


@pytest.fixture
def host(make_host):
    return make_host(
        goners=["/old"],
        redirects={"/x": {"permanent": False, "destination": "/y"}},
    )


@pytest.fixture
def logger():
    return logging.getLogger("geminid.test")
