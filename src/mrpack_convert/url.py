"""
URL handling for Modrinth catalog pages and file downloads.

Catalog page pattern::

    https://modrinth.com/modpack/{projectIdOrSlug}
    https://modrinth.com/modpack/{projectIdOrSlug}/version/{versionIdOrSlug}

``/project/`` is accepted in place of ``/modpack/``.

Only files on the Modrinth CDN are downloaded automatically; anything else
(e.g. GitHub release assets) has to be fetched by the user.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional
from urllib.parse import unquote, urlsplit

from mrpack_convert.errors import InvalidDownloadUrlError, InvalidUrlFormatError

TRUSTED_CDN_PREFIX = "https://cdn.modrinth.com/"
DISALLOWED_HOSTS = ("github.com", "raw.githubusercontent.com")

_CATALOG_RE = re.compile(
    r"modrinth\.com/(?:modpack|project)/([^/?#]+)(?:/version/([^/?#]+))?"
)


class CatalogRef(NamedTuple):
    """A project (and optionally a version) referenced by a catalog URL."""

    project: str
    version: Optional[str] = None


def parse_catalog_url(url: str) -> CatalogRef:
    """
    Extract the project and optional version from a catalog page URL.

    Raises :class:`InvalidUrlFormatError` if the URL does not match.
    """
    match = _CATALOG_RE.search(url)
    if not match:
        raise InvalidUrlFormatError(
            f"Invalid Modrinth URL format: {url}. "
            "Please use a project or version page URL."
        )
    return CatalogRef(match.group(1), match.group(2))


def is_trusted_download(downloads: list[Optional[str]]) -> bool:
    """
    Whether a manifest file can be fetched automatically.

    All candidate URLs must avoid the disallowed hosts, and the first one
    must point at the Modrinth CDN.
    """
    if not downloads or not downloads[0]:
        return False
    for url in downloads:
        if url and any(host in url for host in DISALLOWED_HOSTS):
            return False
    return downloads[0].startswith(TRUSTED_CDN_PREFIX)


def validate_download_url(url: str) -> str:
    """Raise :class:`InvalidDownloadUrlError` unless ``url`` is http(s)."""
    if not url.startswith(("http://", "https://")):
        raise InvalidDownloadUrlError(f"Invalid download URL provided: {url}")
    return url


def filename_from_url(url: str) -> Optional[str]:
    """Last path segment of ``url``, or ``None`` if there is none."""
    name = unquote(urlsplit(url).path.rsplit("/", 1)[-1])
    return name or None
