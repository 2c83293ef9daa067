"""URL path helpers shared by the config loader, the parser and the resolver."""

from __future__ import annotations

import re

_REPEATED_SLASHES = re.compile(r"/{2,}")


def canonicalize(path: str) -> str:
    """
    Canonical form used as the key for redirect and goner lookups.

    Ensures a single leading "/" and strips exactly one trailing "/".
    "a/b/" and "/a/b" both become "/a/b"; "/" becomes "".
    """
    canon = path if path.startswith("/") else "/" + path
    if canon.endswith("/"):
        canon = canon[:-1]
    return canon


def join_url_path(*parts: str) -> str:
    """Join path parts with "/" and collapse any doubled separators."""
    return _REPEATED_SLASHES.sub("/", "/".join(parts))


def remove_dot_segments(path: str) -> str:
    """
    Remove "." and ".." segments from an absolute URL path (RFC 3986 5.2.4).

    ".." never climbs above the root, so the result always stays inside it.
    A trailing "/" (or a trailing dot segment) is kept as a trailing "/".
    """
    if not path:
        return "/"

    segments = path.split("/")
    output: list[str] = []
    for segment in segments[1:] if path.startswith("/") else segments:
        match segment:
            case ".":
                continue
            case "..":
                if output:
                    output.pop()
            case _:
                output.append(segment)

    result = "/" + "/".join(output)
    if segments[-1] in (".", "..") and not result.endswith("/"):
        result += "/"
    return result
