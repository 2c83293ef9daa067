"""
Listeners for geminid virtual hosts.

Each virtual host gets its own TLS listener and accept loop. Every accepted
connection is handled in its own task in the host's TaskGroup, so a slow
client never blocks acceptance of the next one. All hosts run side by side
in one TaskGroup started by ``serve()``.
"""

from __future__ import annotations

import logging
import ssl
from typing import Any

import anyio
from anyio.abc import ByteStream, SocketListener, SocketStream, TaskGroup, TaskStatus
from anyio.streams.tls import TLSStream

from .config import ServerConfig, VirtualHostConfig
from .handler import ConnectionHandler
from .log import get_host_logger


# Pause after an unexpected accept() failure (e.g. out of file descriptors)
# so the loop does not spin.
ACCEPT_RETRY_DELAY = 0.1


def create_ssl_context(host: VirtualHostConfig) -> ssl.SSLContext:
    context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    context.load_cert_chain(certfile=host.cert_file, keyfile=host.key_file)
    return context


class VirtualHostServer:
    """
    Accept loop for one virtual host.

    - listen() binds hostname:port
    - serve() accepts connections until cancelled; with an ssl_context every
      connection is wrapped in TLS before it reaches the handler
    """

    def __init__(
        self,
        host: VirtualHostConfig,
        logger: logging.Logger,
        *,
        ssl_context: ssl.SSLContext | None = None,
    ):
        self.host = host
        self.logger = logger
        self.ssl_context = ssl_context
        self.handler = ConnectionHandler(host, logger)

    @classmethod
    def from_config(cls, host: VirtualHostConfig) -> "VirtualHostServer":
        return cls(host, get_host_logger(host), ssl_context=create_ssl_context(host))

    async def listen(self) -> Any:
        # anyio.create_tcp_listener() returns a MultiListener (one per resolved address).
        return await anyio.create_tcp_listener(local_host=self.host.hostname, local_port=self.host.port)

    async def run(self, *, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED) -> None:
        listener = await self.listen()
        self.logger.info(f"♊ Listening on {self.host.hostname}:{self.host.port}")
        await self.serve(listener, task_status=task_status)

    async def serve(self, listener: Any, *, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED) -> None:
        """Run an accept loop on every socket of ``listener`` until cancelled."""
        sockets: list[SocketListener] = list(getattr(listener, "listeners", [listener]))
        async with listener:
            async with anyio.create_task_group() as tg:
                for sock in sockets:
                    tg.start_soon(self._accept_loop, sock, tg)
                task_status.started()

    async def _accept_loop(self, listener: SocketListener, tg: TaskGroup) -> None:
        while True:
            try:
                stream = await listener.accept()
            except anyio.ClosedResourceError:
                # The listener itself was closed; nothing left to accept.
                return
            except (anyio.BrokenResourceError, ConnectionError) as e:
                # Ugly but expected when a client disconnects mid-accept.
                self.logger.debug(f"Connection dropped during accept: {e!r}")
                continue
            except Exception as e:
                # No connection to answer, so all we can do is log it.
                self.logger.critical(f"Unexpected error accepting connection: {e!r}", exc_info=True)
                await anyio.sleep(ACCEPT_RETRY_DELAY)
                continue
            tg.start_soon(self._serve_connection, stream)

    async def _serve_connection(self, stream: SocketStream) -> None:
        conn: ByteStream = stream
        if self.ssl_context is not None:
            try:
                conn = await TLSStream.wrap(stream, server_side=True, ssl_context=self.ssl_context)
            except Exception as e:
                self.logger.debug(f"TLS handshake failed: {e!r}")
                await anyio.aclose_forcefully(stream)
                return

        try:
            await self.handler(conn)
        except (anyio.BrokenResourceError, anyio.ClosedResourceError, ssl.SSLError) as e:
            self.logger.debug(f"Connection closed uncleanly: {e!r}")
        except Exception as e:
            self.logger.critical(f"Unexpected error handling connection: {e!r}", exc_info=True)


async def serve(config: ServerConfig) -> None:
    """Run every configured virtual host until cancelled."""
    async with anyio.create_task_group() as tg:
        for host in config.servers:
            await tg.start(VirtualHostServer.from_config(host).run)
