"""
Resolve a Modrinth catalog page URL to its ``.mrpack`` asset and convert it.

Given ``https://modrinth.com/modpack/{project}[/version/{version}]``, the
version metadata is fetched from the Modrinth API, the primary ``.mrpack``
file of that version (or of the newest version) is selected, and its URL is
handed to :meth:`MrpackConverter.convert_url`.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from mrpack_convert.api import ModrinthAPI
from mrpack_convert.converter import MrpackConverter
from mrpack_convert.errors import (
    NoPrimaryAssetError,
    NoVersionsFoundError,
    VersionNotFoundError,
)
from mrpack_convert.models import ConversionResult, ModrinthVersion, VersionFile
from mrpack_convert.progress import ProgressCallback
from mrpack_convert.url import CatalogRef, parse_catalog_url

logger = logging.getLogger(__name__)

MRPACK_EXTENSION = ".mrpack"


class CatalogResolver:
    """
    Turn catalog URLs into converted archives.

    Usage::

        async with ModrinthAPI() as api, MrpackConverter() as converter:
            resolver = CatalogResolver(api, converter)
            result = await resolver.resolve("https://modrinth.com/modpack/adrenaline")
    """

    def __init__(self, api: ModrinthAPI, converter: MrpackConverter):
        self.api = api
        self.converter = converter

    async def find_version(self, ref: CatalogRef) -> ModrinthVersion:
        """Fetch the referenced version, or the newest one if none is given."""
        if ref.version:
            try:
                version = await self.api.get_version(ref.project, ref.version)
            except httpx.HTTPStatusError as e:
                raise VersionNotFoundError(
                    f"Could not fetch version {ref.version} for project {ref.project}. "
                    f"Status: {e.response.status_code}"
                ) from e
            except (httpx.HTTPError, ValueError) as e:
                raise VersionNotFoundError(
                    f"Could not fetch version {ref.version} for project {ref.project}: {e}"
                ) from e
            if not version.files:
                raise VersionNotFoundError(
                    f"Version {ref.version} for project {ref.project} not found or has no files."
                )
            return version

        try:
            versions = await self.api.get_versions(ref.project)
        except httpx.HTTPStatusError as e:
            raise NoVersionsFoundError(
                f"Could not fetch versions for project {ref.project}. "
                f"Status: {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise NoVersionsFoundError(
                f"Could not fetch versions for project {ref.project}: {e}"
            ) from e
        if not versions:
            raise NoVersionsFoundError(f"No versions found for project {ref.project}.")

        # The API lists versions newest first
        latest = versions[0]
        logger.debug("Latest version of %s is %s", ref.project, latest.version_number)
        return latest

    @staticmethod
    def select_asset(version: ModrinthVersion) -> VersionFile:
        asset = version.primary_file(MRPACK_EXTENSION)
        if asset is None or not asset.url:
            raise NoPrimaryAssetError(
                f"Could not find a primary {MRPACK_EXTENSION} file for version "
                f"{version.version_number or version.id}."
            )
        return asset

    async def resolve(
        self,
        url: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ConversionResult:
        """Resolve a catalog URL, download its ``.mrpack`` and convert it."""
        ref = parse_catalog_url(url)
        version = await self.find_version(ref)
        asset = self.select_asset(version)
        logger.info(
            "Resolved %s to %s (%s)", url, asset.filename, version.version_number
        )

        result = await self.converter.convert_url(asset.url, on_progress)
        result.filename = f"{version.name or ref.project}-{version.version_number}.zip"
        return result


async def resolve_from_catalog_url(
    url: str,
    on_progress: Optional[ProgressCallback] = None,
) -> ConversionResult:
    """Resolve and convert ``url`` with default API and converter instances."""
    async with ModrinthAPI() as api, MrpackConverter() as converter:
        return await CatalogResolver(api, converter).resolve(url, on_progress)
