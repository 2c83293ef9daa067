"""
Embedded server example.

Serves ./capsule as gemini://localhost/ on port 1965 from inside your own
AnyIO program instead of through the `geminid` command.

Run:
  openssl req -x509 -newkey rsa:2048 -nodes -days 365 -subj /CN=localhost \\
      -keyout key.pem -out cert.pem
  mkdir -p capsule && echo "# Hello, Gemini" > capsule/index.gmi
  python examples/serve_capsule.py

Then try any Gemini client against gemini://localhost/, or:
  printf 'gemini://localhost/\\r\\n' | openssl s_client -quiet -connect localhost:1965
"""

from __future__ import annotations

import anyio

from geminid import VirtualHostConfig, VirtualHostServer
from geminid.log import setup_logging


async def main() -> None:
    host = VirtualHostConfig(
        hostname="localhost",
        cert_file="cert.pem",
        key_file="key.pem",
        document_root="capsule",
        goners=frozenset({"/old-news"}),
        redirects={"/home": {"destination": "/", "permanent": True}},
    )

    async with anyio.create_task_group() as tg:
        await tg.start(VirtualHostServer.from_config(host).run)
        print("Listening on gemini://localhost/")
        print("Press Ctrl-C to stop.")

        # Keep the app alive.
        await anyio.sleep_forever()


if __name__ == "__main__":
    setup_logging()
    anyio.run(main)
