"""
Turns a request path into a response for one virtual host.

Order of precedence:
  1. goners   -> 52 GONE
  2. redirects -> 30/31
  3. the document root: files are served as-is, directories serve their
     index.gmi / index.gemini or a generated gemtext listing.

Everything except a successful response is raised as a ``GeminiError``.
"""

from __future__ import annotations

import stat

import anyio

from .config import VirtualHostConfig
from .errors import Forbidden, GeminiError, Gone, Internal, NotFound, Redirect
from .paths import canonicalize, join_url_path
from .response import GeminiResponse, media_type_for


INDEX_NAMES = ("index.gmi", "index.gemini")
PARENT_ENTRY = ".."


async def resolve(host: VirtualHostConfig, path: str) -> GeminiResponse:
    key = canonicalize(path)
    if key in host.goners:
        raise GeminiError(Gone(path))

    rule = host.redirects.get(key)
    if rule is not None:
        raise GeminiError(Redirect(rule.destination, rule.permanent))

    return await resolve_path(host.document_root, path)


async def resolve_path(document_root: str, path: str) -> GeminiResponse:
    """Serve a path from the filesystem, ignoring redirects and goners."""
    target = anyio.Path(document_root, path.lstrip("/"))
    try:
        info = await target.stat()
        if stat.S_ISREG(info.st_mode):
            return GeminiResponse.ok(media_type_for(target.name), await target.read_bytes())
        if stat.S_ISDIR(info.st_mode):
            return await _resolve_directory(document_root, path, target)
    except (FileNotFoundError, NotADirectoryError) as e:
        raise GeminiError(NotFound(path)) from e
    except PermissionError as e:
        raise GeminiError(Forbidden(path)) from e
    except OSError as e:
        raise GeminiError(Internal(e)) from e

    # Sockets, FIFOs, devices...
    raise GeminiError(NotFound(path))


async def _resolve_directory(document_root: str, path: str, directory: anyio.Path) -> GeminiResponse:
    files: set[str] = set()
    listing: list[str] = []
    async for entry in directory.iterdir():
        if await entry.is_file():
            files.add(entry.name)
            listing.append(entry.name)
        elif await entry.is_dir():
            listing.append(entry.name + "/")
        else:
            listing.append(entry.name)

    # Only a regular file counts as an index; index.gmi wins over index.gemini.
    for name in INDEX_NAMES:
        if name in files:
            return await resolve_path(document_root, join_url_path(path, name))

    return GeminiResponse.gemtext(render_listing(path, listing))


def render_listing(path: str, entries: list[str]) -> str:
    """Gemtext listing: a heading line, then ".." and the sorted entries as links."""
    lines = [f"Listing of {path}"]
    for entry in [PARENT_ENTRY, *sorted(entries)]:
        link = join_url_path(path, entry)
        lines.append(f"=> {link} {link}")
    return "\n".join(lines) + "\n"
