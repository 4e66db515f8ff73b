"""
Exceptions raised by mrpack-convert.

Every error here is fatal to a conversion. Problems with individual
manifest files are logged and absorbed instead of raised.
"""

from __future__ import annotations


class ConversionError(Exception):
    """Base class for all fatal conversion errors."""


# ── Source resolution ──────────────────────────────────────────────


class InvalidUrlFormatError(ConversionError, ValueError):
    """The catalog URL is not a Modrinth project or version page."""


class VersionNotFoundError(ConversionError, LookupError):
    """The requested project version could not be fetched or has no files."""


class NoVersionsFoundError(ConversionError, LookupError):
    """The project has no readable versions."""


class NoPrimaryAssetError(ConversionError, LookupError):
    """The chosen version has no primary ``.mrpack`` file."""


class InvalidDownloadUrlError(ConversionError, ValueError):
    """The modpack download URL is not an http(s) URL."""


class DownloadFailedError(ConversionError):
    """The modpack archive itself could not be downloaded."""


# ── Archive / manifest ─────────────────────────────────────────────


class EmptyInputError(ConversionError, ValueError):
    """The input archive is zero-length."""


class CorruptArchiveError(ConversionError, ValueError):
    """The input is not a readable zip archive."""


class MissingManifestError(ConversionError, FileNotFoundError):
    """The archive has no ``modrinth.index.json``."""


class MalformedManifestError(ConversionError, ValueError):
    """``modrinth.index.json`` is not a usable manifest."""
