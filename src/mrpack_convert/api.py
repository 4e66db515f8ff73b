"""
Async Modrinth API client.

Wraps the Modrinth v2 REST API with an :class:`httpx.AsyncClient`, adding
the ``User-Agent`` Modrinth asks for, optional token header injection and
concurrency limiting (semaphore).

Reference: https://docs.modrinth.com/api/
"""

from __future__ import annotations

import asyncio
import os
from typing import Any, Optional

import httpx
from dotenv import load_dotenv

# Load .env so MODRINTH_API_BASE / MODRINTH_TOKEN can be set via .env file
load_dotenv()

from mrpack_convert import __version__
from mrpack_convert.models import ModrinthVersion

DEFAULT_API_BASE = "https://api.modrinth.com/v2"
DEFAULT_USER_AGENT = f"mrpack-convert/{__version__}"
DEFAULT_CONCURRENCY = 8


class ModrinthAPI:
    """
    Async client for the Modrinth v2 API.

    Usage::

        async with ModrinthAPI() as api:
            versions = await api.get_versions("fabulously-optimized")
            print(versions[0].version_number)
    """

    def __init__(
        self,
        token: Optional[str] = None,
        api_base: Optional[str] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token or os.environ.get("MODRINTH_TOKEN", "")
        self.api_base = (
            api_base or os.environ.get("MODRINTH_API_BASE") or DEFAULT_API_BASE
        ).rstrip("/")
        self._semaphore = asyncio.Semaphore(concurrency)
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers=self._build_headers(),
            follow_redirects=True,
            transport=transport,
        )

    def _build_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": os.environ.get("MODRINTH_USER_AGENT", DEFAULT_USER_AGENT),
        }
        if self.token:
            headers["Authorization"] = self.token
        return headers

    async def __aenter__(self) -> ModrinthAPI:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    # ── Low-level helpers ──────────────────────────────────────────

    async def _get(self, path: str, params: Optional[dict] = None) -> Any:
        async with self._semaphore:
            resp = await self._client.get(f"{self.api_base}{path}", params=params)
            resp.raise_for_status()
            return resp.json()

    # ── Versions ───────────────────────────────────────────────────

    async def get_version(self, project: str, version: str) -> ModrinthVersion:
        """
        Get a single version of a project.

        ``version`` may be a version ID or a version number/slug.
        """
        data = await self._get(f"/project/{project}/version/{version}")
        return ModrinthVersion.model_validate(data)

    async def get_versions(self, project: str) -> list[ModrinthVersion]:
        """Get all versions of a project, newest first."""
        data = await self._get(f"/project/{project}/version")
        if not isinstance(data, list):
            raise ValueError(f"Unexpected version list payload for {project}")
        return [ModrinthVersion.model_validate(item) for item in data]
