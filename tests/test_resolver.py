"""Tests for turning request paths into responses."""

from __future__ import annotations

import os
import sys

import pytest

from geminid import Forbidden, GeminiError, Gone, Internal, NotFound, Redirect, StatusCode, resolve
from geminid.resolver import render_listing, resolve_path


async def resolve_failure(host, path):
    with pytest.raises(GeminiError) as info:
        await resolve(host, path)
    return info.value.failure


@pytest.mark.anyio
async def test_file_is_served_byte_for_byte(host, capsule):
    res = await resolve(host, "/a.gmi")
    assert res.code == StatusCode.SUCCESS
    assert res.meta == "text/gemini"
    assert res.body == (capsule / "a.gmi").read_bytes()


@pytest.mark.anyio
async def test_binary_file_media_type(host, capsule):
    res = await resolve(host, "/gallery/b.png")
    assert res.meta == "image/png"
    assert res.body == (capsule / "gallery" / "b.png").read_bytes()


@pytest.mark.anyio
async def test_goner_wins_over_existing_file(host):
    assert await resolve_failure(host, "/old") == Gone("/old")


@pytest.mark.anyio
async def test_goner_without_file_on_disk(make_host):
    host = make_host(goners=["/never-existed/"])
    assert await resolve_failure(host, "/never-existed") == Gone("/never-existed")


@pytest.mark.anyio
async def test_redirect_temporary(host):
    assert await resolve_failure(host, "/x") == Redirect("/y", permanent=False)


@pytest.mark.anyio
async def test_redirect_permanent_wins_over_directory(make_host):
    host = make_host(redirects={"/docs": {"permanent": True, "destination": "/manual"}})
    assert await resolve_failure(host, "/docs") == Redirect("/manual", permanent=True)


@pytest.mark.anyio
async def test_request_path_is_canonicalized_before_lookup(host, make_host):
    assert await resolve_failure(host, "/old/") == Gone("/old/")
    assert await resolve_failure(host, "/x/") == Redirect("/y")


@pytest.mark.anyio
async def test_goner_checked_before_redirect(make_host):
    host = make_host(goners=["/both"], redirects={"/both": {"destination": "/elsewhere"}})
    assert await resolve_failure(host, "/both") == Gone("/both")


@pytest.mark.anyio
async def test_missing_file(host):
    assert await resolve_failure(host, "/missing.gmi") == NotFound("/missing.gmi")


@pytest.mark.anyio
async def test_path_below_a_file(host):
    assert await resolve_failure(host, "/a.gmi/more") == NotFound("/a.gmi/more")


@pytest.mark.anyio
async def test_directory_serves_index_gmi(host):
    res = await resolve(host, "/docs")
    assert res.meta == "text/gemini"
    assert res.body == b"# Docs\n"


@pytest.mark.anyio
async def test_index_gemini_used_when_no_index_gmi(host, capsule):
    (capsule / "docs" / "index.gmi").unlink()
    res = await resolve(host, "/docs/")
    assert res.meta == "text/gemini"
    assert res.body == b"# Other docs\n"


@pytest.mark.anyio
async def test_index_directory_is_not_followed(host, capsule):
    (capsule / "gallery" / "index.gmi").mkdir()
    res = await resolve(host, "/gallery")
    assert res.body.decode().startswith("Listing of /gallery\n")


@pytest.mark.anyio
async def test_directory_listing(host):
    res = await resolve(host, "/gallery")
    assert res.code == StatusCode.SUCCESS
    assert res.meta == "text/gemini"
    assert res.body.decode().splitlines() == [
        "Listing of /gallery",
        "=> /gallery/.. /gallery/..",
        "=> /gallery/b.png /gallery/b.png",
        "=> /gallery/sub/ /gallery/sub/",
    ]


@pytest.mark.anyio
async def test_directory_listing_with_trailing_slash(host):
    res = await resolve(host, "/gallery/")
    lines = res.body.decode().splitlines()
    assert lines[0] == "Listing of /gallery/"
    assert lines[1] == "=> /gallery/.. /gallery/.."
    assert "=> /gallery/sub/ /gallery/sub/" in lines


@pytest.mark.anyio
async def test_root_listing(make_host, tmp_path):
    root = tmp_path / "empty-root"
    root.mkdir()
    (root / "zeta.gmi").write_text("z")
    (root / "alpha").mkdir()
    host = make_host(documentRoot=str(root))
    res = await resolve(host, "/")
    assert res.body.decode() == "Listing of /\n=> /.. /..\n=> /alpha/ /alpha/\n=> /zeta.gmi /zeta.gmi\n"


def test_render_listing_sorts_entries_after_parent():
    text = render_listing("/d", ["b", "-dash", "a/"])
    assert text.splitlines() == [
        "Listing of /d",
        "=> /d/.. /d/..",
        "=> /d/-dash /d/-dash",
        "=> /d/a/ /d/a/",
        "=> /d/b /d/b",
    ]


@pytest.mark.anyio
@pytest.mark.skipif(sys.platform == "win32", reason="POSIX symlinks")
async def test_dangling_symlink_is_not_found(host, capsule):
    os.symlink(capsule / "nowhere", capsule / "dangling")
    assert await resolve_failure(host, "/dangling") == NotFound("/dangling")


@pytest.mark.anyio
@pytest.mark.skipif(sys.platform == "win32" or os.geteuid() == 0, reason="root ignores permissions")
async def test_unreadable_directory_is_forbidden(host, capsule):
    locked = capsule / "locked"
    locked.mkdir()
    (locked / "secret.gmi").write_text("s")
    locked.chmod(0)
    try:
        assert await resolve_failure(host, "/locked/secret.gmi") == Forbidden("/locked/secret.gmi")
    finally:
        locked.chmod(0o755)


@pytest.mark.anyio
async def test_unexpected_os_error_is_internal(host, monkeypatch):
    import anyio

    async def broken_stat(self, *args, **kwargs):
        raise OSError(5, "Input/output error")

    monkeypatch.setattr(anyio.Path, "stat", broken_stat)
    failure = await resolve_failure(host, "/a.gmi")
    assert isinstance(failure, Internal)
    assert isinstance(failure.cause, OSError)


@pytest.mark.anyio
async def test_resolve_path_ignores_goners(capsule):
    res = await resolve_path(str(capsule), "/old")
    assert res.body == b"stale\n"
