"""Shared helpers for building in-memory modpacks and fake HTTP backends."""

import io
import json
import zipfile

import httpx
import pytest


CDN = "https://cdn.modrinth.com/data"


def build_mrpack(manifest=None, extra: dict[str, bytes] | None = None) -> bytes:
    """Build a ``.mrpack`` in memory. ``manifest=None`` omits the index file."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        if manifest is not None:
            raw = manifest if isinstance(manifest, (str, bytes)) else json.dumps(manifest)
            zf.writestr("modrinth.index.json", raw)
        for name, data in (extra or {}).items():
            zf.writestr(name, data)
    return buf.getvalue()


def manifest_of(*files, **fields) -> dict:
    manifest = {
        "formatVersion": 1,
        "game": "minecraft",
        "versionId": "1.0.0",
        "name": "Test Pack",
        "dependencies": {"minecraft": "1.20.1", "fabric-loader": "0.15.0"},
        "files": list(files),
    }
    manifest.update(fields)
    return manifest


def file_entry(path: str, url: str, size: int) -> dict:
    return {"path": path, "downloads": [url], "fileSize": size, "hashes": {}}


class FakeServer:
    """Route table for :class:`httpx.MockTransport`, recording every request."""

    def __init__(self) -> None:
        self.routes: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, **kwargs) -> None:
        kwargs.setdefault("status_code", 200)
        self.routes[url] = kwargs

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404)
        return httpx.Response(**route)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def requested_urls(self) -> list[str]:
        return [str(r.url) for r in self.requests]


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()
