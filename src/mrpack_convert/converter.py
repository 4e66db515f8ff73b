"""
mrpack to zip converter.

Handles the complete flow of converting a Modrinth modpack:
  1. Open the ``.mrpack`` and parse ``modrinth.index.json``
  2. Copy override files into the output archive, prefix stripped
  3. Download every manifest file hosted on the Modrinth CDN in parallel
     and place it at its manifest path
  4. Serialize the output archive
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from mrpack_convert.archive import MrpackArchive, OutputArchive, open_archive
from mrpack_convert.errors import (
    DownloadFailedError,
    MalformedManifestError,
    MissingManifestError,
)
from mrpack_convert.models import MANIFEST_KEYS, ConversionResult, Manifest, ManifestFile
from mrpack_convert.notifier import LoggingNotifier, UserNotifier
from mrpack_convert.progress import ProgressCallback, ProgressState
from mrpack_convert.url import filename_from_url, is_trusted_download, validate_download_url

logger = logging.getLogger(__name__)

MANIFEST_NAME = "modrinth.index.json"
OVERRIDE_PREFIXES = ("overrides/", "client-overrides/")
DEFAULT_FILENAME = "modpack.zip"


def _parse_file_entry(item) -> ManifestFile:
    """
    Validate one ``files`` entry.

    An entry that does not fit the schema becomes an empty (invalid)
    :class:`ManifestFile`, so it is skipped later instead of failing the
    whole manifest.
    """
    try:
        return ManifestFile.model_validate(item)
    except ValidationError as e:
        logger.warning("Malformed file entry %r: %s", item, e)
    path = item.get("path") if isinstance(item, dict) else None
    return ManifestFile(path=path if isinstance(path, str) else None)


class _Outcome:
    """Per-conversion bookkeeping of what happened to each manifest file."""

    def __init__(self) -> None:
        self.overrides = 0
        self.placed: list[str] = []
        self.deferred: list[str] = []
        self.failed: list[str] = []
        self.skipped: list[str] = []


class MrpackConverter:
    """
    Convert ``.mrpack`` archives into plain zips.

    Usage::

        async with MrpackConverter() as converter:
            result = await converter.convert(data, on_progress=print)
            save_archive(result.content, result.filename)
    """

    def __init__(
        self,
        notifier: Optional[UserNotifier] = None,
        concurrency: int = 16,
        download_timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.notifier = notifier or LoggingNotifier()
        self._concurrency = concurrency
        self._client = httpx.AsyncClient(
            timeout=download_timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> MrpackConverter:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    # ── Public entry points ────────────────────────────────────────

    async def convert(
        self,
        data: bytes,
        on_progress: Optional[ProgressCallback] = None,
        source_name: Optional[str] = None,
    ) -> ConversionResult:
        """
        Convert an in-memory ``.mrpack``.

        Args:
            data: Raw bytes of the modpack archive.
            on_progress: Optional callback receiving a 0-100 percentage.
            source_name: Name of the source file, used as the output name
                when the manifest has no name.

        Returns:
            A :class:`ConversionResult` with the zip bytes and a filename.
        """
        output = OutputArchive()
        outcome = _Outcome()

        with open_archive(data) as archive:
            # 1. Parse manifest
            manifest = self.parse_manifest(archive)
            logger.info(
                "Modpack: %s %s for %s (%d files)",
                manifest.name or "<unnamed>",
                manifest.version_id or "",
                manifest.game or "unknown game",
                len(manifest.files),
            )

            # 2 + 3. Overrides and downloads
            progress = ProgressState(on_progress)
            await asyncio.gather(
                self._extract_overrides(archive, output, outcome),
                self._download_files(manifest.files, output, progress, outcome),
            )

        # 4. Serialize
        content = output.to_bytes()
        if manifest.name:
            filename = f"{manifest.name}-{manifest.version_id or ''}.zip"
        else:
            filename = source_name or DEFAULT_FILENAME
        logger.info(
            "Converted %s: %d overrides, %d downloaded, %d deferred, %d failed",
            filename,
            outcome.overrides,
            len(outcome.placed),
            len(outcome.deferred),
            len(outcome.failed),
        )
        return ConversionResult(
            content=content,
            filename=filename,
            overrides=outcome.overrides,
            placed=outcome.placed,
            deferred=outcome.deferred,
            failed=outcome.failed,
            skipped=outcome.skipped,
        )

    async def convert_url(
        self,
        url: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ConversionResult:
        """Download a ``.mrpack`` from ``url`` and convert it."""
        validate_download_url(url)
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DownloadFailedError(
                f"Failed to download file from {url}. Status: {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise DownloadFailedError(f"Failed to download file from {url}: {e}") from e

        content_type = resp.headers.get("content-type", "")
        if "zip" not in content_type:
            logger.warning(
                "Downloaded file from %s has unexpected type: %s. Attempting to process anyway.",
                url,
                content_type,
            )
        return await self.convert(
            resp.content, on_progress, source_name=filename_from_url(url)
        )

    # ── Step 1: Parse manifest ─────────────────────────────────────

    @staticmethod
    def parse_manifest(archive: MrpackArchive) -> Manifest:
        entry = archive.get(MANIFEST_NAME)
        if entry is None:
            raise MissingManifestError(f"Missing '{MANIFEST_NAME}' in the mrpack file.")

        try:
            raw = json.loads(entry.read().decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedManifestError(f"Could not parse '{MANIFEST_NAME}': {e}") from e
        if not isinstance(raw, dict):
            raise MalformedManifestError(f"'{MANIFEST_NAME}' is not a JSON object.")

        missing = [key for key in MANIFEST_KEYS if key not in raw]
        if missing:
            logger.warning(
                "Manifest might be missing some standard fields: %s", ", ".join(missing)
            )
        if not isinstance(raw.get("files"), list):
            raise MalformedManifestError(f"'{MANIFEST_NAME}' has no 'files' list.")

        try:
            manifest = Manifest.model_validate({**raw, "files": []})
        except ValidationError as e:
            raise MalformedManifestError(f"Invalid '{MANIFEST_NAME}': {e}") from e
        manifest.files = [_parse_file_entry(item) for item in raw["files"]]
        return manifest

    # ── Step 2: Extract overrides ──────────────────────────────────

    async def _extract_overrides(
        self, archive: MrpackArchive, output: OutputArchive, outcome: _Outcome
    ) -> None:
        """Copy override files into the output archive with the prefix stripped."""

        async def copy_one(entry, rel_path: str):
            output.add(rel_path, entry.read())
            outcome.overrides += 1

        tasks = []
        for entry in archive:
            if entry.is_dir:
                continue
            prefix = next((p for p in OVERRIDE_PREFIXES if entry.name.startswith(p)), None)
            if prefix is None:
                continue
            rel_path = entry.name[len(prefix) :]
            if rel_path:
                tasks.append(copy_one(entry, rel_path))

        await asyncio.gather(*tasks)
        logger.info("Extracted %d override files", outcome.overrides)

    # ── Step 3: Download files ─────────────────────────────────────

    async def _download_files(
        self,
        files: list[ManifestFile],
        output: OutputArchive,
        progress: ProgressState,
        outcome: _Outcome,
    ) -> None:
        """Download all valid manifest files into the output archive."""
        valid: list[ManifestFile] = []
        for f in files:
            if f.is_valid:
                valid.append(f)
            else:
                logger.warning(
                    "Skipping file due to missing data: %s",
                    f.model_dump_json(by_alias=True),
                )
                outcome.skipped.append(f.path or "")
        if not valid:
            logger.warning("No files to download")
            return

        progress.begin(valid)
        semaphore = asyncio.Semaphore(self._concurrency)

        async def download_one(f: ManifestFile):
            if not is_trusted_download(f.downloads):
                self.notifier.prompt_manual_download(f.path, f.url)
                progress.defer(f.file_size)
                outcome.deferred.append(f.path)
                return

            async with semaphore:
                try:
                    data = await self._download_file(f.url)
                except (httpx.HTTPError, httpx.InvalidURL) as e:
                    logger.warning("Failed to download %s from %s: %s", f.path, f.url, e)
                    progress.fail(f.file_size)
                    outcome.failed.append(f.path)
                    return

            if len(data) != f.file_size:
                logger.warning(
                    "Downloaded size (%d) for %s does not match manifest size (%d).",
                    len(data),
                    f.path,
                    f.file_size,
                )
            output.add(f.path, data)
            outcome.placed.append(f.path)
            progress.complete(f.file_size)

        await asyncio.gather(*[download_one(f) for f in valid])
        logger.info("Downloaded %d / %d files", len(outcome.placed), len(valid))

    async def _download_file(self, url: str) -> bytes:
        resp = await self._client.get(url)
        resp.raise_for_status()
        return resp.content


async def convert_archive(
    data: bytes,
    on_progress: Optional[ProgressCallback] = None,
    source_name: Optional[str] = None,
) -> ConversionResult:
    """Convert an in-memory ``.mrpack`` with a default :class:`MrpackConverter`."""
    async with MrpackConverter() as converter:
        return await converter.convert(data, on_progress, source_name=source_name)
