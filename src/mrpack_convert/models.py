"""
Pydantic data models for the mrpack manifest and Modrinth API responses.

The manifest schema follows the ``modrinth.index.json`` format:
https://support.modrinth.com/en/articles/8802351-modrinth-modpack-format-mrpack
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


# ── Manifest models (parsed from the .mrpack) ──────────────────────


class ManifestFile(BaseModel):
    """
    A single downloadable file entry in ``modrinth.index.json``.

    Every field has a default so that incomplete entries still parse;
    use :attr:`is_valid` to decide whether the entry can be resolved.
    """

    path: Optional[str] = None
    downloads: Optional[list[Optional[str]]] = None
    file_size: Optional[int] = Field(default=None, alias="fileSize")
    hashes: Optional[dict[str, str]] = None
    env: Optional[dict[str, str]] = None

    model_config = {"populate_by_name": True}

    @property
    def is_valid(self) -> bool:
        """Whether the entry has a path, a first download URL and a positive size."""
        return bool(
            self.path
            and self.downloads
            and self.downloads[0]
            and self.file_size is not None
            and self.file_size > 0
        )

    @property
    def url(self) -> str:
        """The primary download URL (first candidate)."""
        return (self.downloads[0] or "") if self.downloads else ""


class Manifest(BaseModel):
    """Top-level mrpack manifest (``modrinth.index.json``)."""

    format_version: Optional[int] = Field(default=None, alias="formatVersion")
    game: Optional[str] = None
    version_id: Optional[str] = Field(default=None, alias="versionId")
    name: Optional[str] = None
    summary: Optional[str] = None
    dependencies: Optional[dict[str, str]] = None
    files: list[ManifestFile] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


# Keys a well-formed manifest is expected to carry
MANIFEST_KEYS = ("files", "formatVersion", "game", "versionId", "name", "dependencies")


# ── API response models ────────────────────────────────────────────


class VersionFile(BaseModel):
    """A file attached to a Modrinth project version."""

    filename: str = ""
    url: Optional[str] = None
    primary: bool = False
    size: int = 0


class ModrinthVersion(BaseModel):
    """
    A project version as returned by ``/project/{id}/version``.

    Only the fields needed to locate the ``.mrpack`` asset are modelled.
    """

    id: str = ""
    project_id: str = ""
    name: str = ""
    version_number: str = ""
    game_versions: list[str] = Field(default_factory=list)
    loaders: list[str] = Field(default_factory=list)
    files: list[VersionFile] = Field(default_factory=list)

    def primary_file(self, extension: str = ".mrpack") -> Optional[VersionFile]:
        """Return the primary file whose name ends in ``extension``."""
        for f in self.files:
            if f.primary and f.filename.endswith(extension):
                return f
        return None


# ── Conversion result ──────────────────────────────────────────────


class ConversionResult(BaseModel):
    """Output of a single conversion: the zip blob and its suggested name."""

    content: bytes
    filename: str
    overrides: int = 0
    placed: list[str] = Field(default_factory=list)
    deferred: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
