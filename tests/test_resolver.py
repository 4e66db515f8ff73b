"""Tests for resolving catalog page URLs to .mrpack assets."""

import asyncio
import io
import zipfile

import pytest

from mrpack_convert.api import ModrinthAPI
from mrpack_convert.converter import MrpackConverter
from mrpack_convert.errors import (
    InvalidUrlFormatError,
    NoPrimaryAssetError,
    NoVersionsFoundError,
    VersionNotFoundError,
)
from mrpack_convert.resolver import CatalogResolver

from conftest import CDN, build_mrpack, manifest_of

API = "https://api.test/v2"
PACK_URL = f"{CDN}/abc/versions/def/Pack-1.0.mrpack"


def _version(number: str, files: list[dict], name: str = "Pack") -> dict:
    return {
        "id": f"id-{number}",
        "project_id": "abc",
        "name": name,
        "version_number": number,
        "files": files,
    }


def _mrpack_file(url: str = PACK_URL, primary: bool = True) -> dict:
    return {"filename": url.rsplit("/", 1)[-1], "url": url, "primary": primary, "size": 1}


def _resolve(server, url):
    calls = []

    async def run():
        async with ModrinthAPI(api_base=API, transport=server.transport) as api, MrpackConverter(
            transport=server.transport
        ) as converter:
            return await CatalogResolver(api, converter).resolve(url, calls.append)

    return asyncio.run(run())


@pytest.fixture
def pack_server(server):
    server.add(
        PACK_URL,
        content=build_mrpack(manifest_of(), {"overrides/config/a.txt": b"a"}),
        headers={"content-type": "application/x-modrinth-modpack+zip"},
    )
    return server


class TestResolve:
    def test_latest_version(self, pack_server):
        pack_server.add(
            f"{API}/project/abc/version",
            json=[
                _version("1.0", [_mrpack_file()]),
                _version("0.9", [_mrpack_file(f"{CDN}/old.mrpack")]),
            ],
        )

        result = _resolve(pack_server, "https://modrinth.com/modpack/abc")

        assert pack_server.requested_urls == [f"{API}/project/abc/version", PACK_URL]
        assert result.filename == "Pack-1.0.zip"
        with zipfile.ZipFile(io.BytesIO(result.content)) as zf:
            assert zf.namelist() == ["config/a.txt"]

    def test_specific_version(self, pack_server):
        pack_server.add(
            f"{API}/project/abc/version/0.9",
            json=_version("0.9", [_mrpack_file(PACK_URL)], name="Old Pack"),
        )

        result = _resolve(pack_server, "https://modrinth.com/project/abc/version/0.9")

        assert pack_server.requested_urls[0] == f"{API}/project/abc/version/0.9"
        assert result.filename == "Old Pack-0.9.zip"

    def test_filename_falls_back_to_project(self, pack_server):
        pack_server.add(
            f"{API}/project/abc/version",
            json=[_version("1.0", [_mrpack_file()], name="")],
        )
        result = _resolve(pack_server, "https://modrinth.com/modpack/abc")
        assert result.filename == "abc-1.0.zip"

    def test_picks_primary_mrpack(self, pack_server):
        pack_server.add(
            f"{API}/project/abc/version",
            json=[
                _version(
                    "1.0",
                    [
                        _mrpack_file(f"{CDN}/secondary.mrpack", primary=False),
                        {"filename": "readme.txt", "url": f"{CDN}/readme.txt", "primary": True},
                        _mrpack_file(),
                    ],
                )
            ],
        )
        _resolve(pack_server, "https://modrinth.com/modpack/abc")
        assert pack_server.requested_urls[-1] == PACK_URL


class TestResolveErrors:
    def test_invalid_url(self, server):
        with pytest.raises(InvalidUrlFormatError):
            _resolve(server, "https://curseforge.com/minecraft/modpacks/abc")
        assert server.requests == []

    def test_version_not_found(self, server):
        with pytest.raises(VersionNotFoundError, match="404"):
            _resolve(server, "https://modrinth.com/modpack/abc/version/9.9")

    def test_version_without_files(self, server):
        server.add(f"{API}/project/abc/version/1.0", json=_version("1.0", []))
        with pytest.raises(VersionNotFoundError, match="no files"):
            _resolve(server, "https://modrinth.com/modpack/abc/version/1.0")

    def test_no_versions(self, server):
        server.add(f"{API}/project/abc/version", json=[])
        with pytest.raises(NoVersionsFoundError, match="abc"):
            _resolve(server, "https://modrinth.com/modpack/abc")

    def test_versions_request_fails(self, server):
        server.add(f"{API}/project/abc/version", status_code=503)
        with pytest.raises(NoVersionsFoundError, match="503"):
            _resolve(server, "https://modrinth.com/modpack/abc")

    def test_versions_unreadable(self, server):
        server.add(f"{API}/project/abc/version", content=b"<html>oops</html>")
        with pytest.raises(NoVersionsFoundError):
            _resolve(server, "https://modrinth.com/modpack/abc")

    def test_no_primary_asset(self, server):
        server.add(
            f"{API}/project/abc/version",
            json=[_version("1.0", [_mrpack_file(primary=False)])],
        )
        with pytest.raises(NoPrimaryAssetError):
            _resolve(server, "https://modrinth.com/modpack/abc")

    def test_primary_asset_without_url(self, server):
        server.add(
            f"{API}/project/abc/version",
            json=[_version("1.0", [{"filename": "Pack.mrpack", "url": "", "primary": True}])],
        )
        with pytest.raises(NoPrimaryAssetError):
            _resolve(server, "https://modrinth.com/modpack/abc")

    def test_null_asset_url(self, server):
        server.add(
            f"{API}/project/abc/version/1.0",
            json=_version("1.0", [{"filename": "Pack.mrpack", "url": None, "primary": True}]),
        )
        with pytest.raises(NoPrimaryAssetError):
            _resolve(server, "https://modrinth.com/modpack/abc/version/1.0")


class TestModrinthAPI:
    def test_headers(self, server):
        server.add(f"{API}/project/abc/version", json=[])

        async def run():
            async with ModrinthAPI(token="secret", api_base=API, transport=server.transport) as api:
                return await api.get_versions("abc")

        assert asyncio.run(run()) == []
        request = server.requests[0]
        assert request.headers["Authorization"] == "secret"
        assert request.headers["User-Agent"].startswith("mrpack-convert/")
