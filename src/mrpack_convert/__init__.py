"""
mrpack-convert: Modrinth modpack to zip converter.

Turn a ``.mrpack`` into a plain zip of game files by copying its overrides
and downloading the files listed in ``modrinth.index.json``.
"""

__version__ = "0.1.0"

from mrpack_convert.models import (
    Manifest,
    ManifestFile,
    ModrinthVersion,
    VersionFile,
    ConversionResult,
)
from mrpack_convert.errors import (
    ConversionError,
    InvalidUrlFormatError,
    VersionNotFoundError,
    NoVersionsFoundError,
    NoPrimaryAssetError,
    InvalidDownloadUrlError,
    DownloadFailedError,
    EmptyInputError,
    CorruptArchiveError,
    MissingManifestError,
    MalformedManifestError,
)
from mrpack_convert.api import ModrinthAPI
from mrpack_convert.archive import OutputArchive, open_archive, save_archive
from mrpack_convert.converter import MrpackConverter, convert_archive
from mrpack_convert.notifier import BrowserNotifier, LoggingNotifier, UserNotifier
from mrpack_convert.progress import ProgressState
from mrpack_convert.resolver import CatalogResolver, resolve_from_catalog_url

__all__ = [
    "Manifest",
    "ManifestFile",
    "ModrinthVersion",
    "VersionFile",
    "ConversionResult",
    "ConversionError",
    "InvalidUrlFormatError",
    "VersionNotFoundError",
    "NoVersionsFoundError",
    "NoPrimaryAssetError",
    "InvalidDownloadUrlError",
    "DownloadFailedError",
    "EmptyInputError",
    "CorruptArchiveError",
    "MissingManifestError",
    "MalformedManifestError",
    "ModrinthAPI",
    "OutputArchive",
    "open_archive",
    "save_archive",
    "MrpackConverter",
    "convert_archive",
    "BrowserNotifier",
    "LoggingNotifier",
    "UserNotifier",
    "ProgressState",
    "CatalogResolver",
    "resolve_from_catalog_url",
]
