"""
Zip archive reading and writing.

:class:`MrpackArchive` is a read-only view over the source ``.mrpack``;
:class:`OutputArchive` accumulates the converted files in memory and
serializes them into a new zip.
"""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path
from typing import Iterator, Optional

from mrpack_convert.errors import CorruptArchiveError, EmptyInputError

logger = logging.getLogger(__name__)

# Fixed timestamp for written entries so identical inputs give identical zips
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


class ArchiveEntry:
    """A single entry of the source archive. Bytes are read on demand."""

    def __init__(self, archive: zipfile.ZipFile, info: zipfile.ZipInfo):
        self._archive = archive
        self._info = info

    @property
    def name(self) -> str:
        return self._info.filename

    @property
    def is_dir(self) -> bool:
        return self._info.is_dir()

    @property
    def size(self) -> int:
        return self._info.file_size

    def read(self) -> bytes:
        return self._archive.read(self._info)

    def __repr__(self) -> str:
        return f"ArchiveEntry({self.name!r}, is_dir={self.is_dir})"


class MrpackArchive:
    """
    Read-only view over a zip held in memory.

    Usage::

        with open_archive(data) as archive:
            for entry in archive:
                print(entry.name)
    """

    def __init__(self, zf: zipfile.ZipFile):
        self._zf = zf

    def __iter__(self) -> Iterator[ArchiveEntry]:
        for info in self._zf.infolist():
            yield ArchiveEntry(self._zf, info)

    def __len__(self) -> int:
        return len(self._zf.infolist())

    def get(self, name: str) -> Optional[ArchiveEntry]:
        """Return the entry named exactly ``name``, or ``None``."""
        try:
            info = self._zf.getinfo(name)
        except KeyError:
            return None
        return ArchiveEntry(self._zf, info)

    def close(self) -> None:
        self._zf.close()

    def __enter__(self) -> MrpackArchive:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def open_archive(data: bytes) -> MrpackArchive:
    """
    Open ``data`` as a zip archive.

    Raises :class:`EmptyInputError` for zero-length input and
    :class:`CorruptArchiveError` if it is not a valid zip.
    """
    if not data:
        raise EmptyInputError("Invalid or empty file data")
    try:
        zf = zipfile.ZipFile(io.BytesIO(data), "r")
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError) as e:
        logger.error("Failed to load mrpack file: %s", e)
        raise CorruptArchiveError(
            "Failed to read the provided file. Is it a valid .mrpack file?"
        ) from e
    return MrpackArchive(zf)


class OutputArchive:
    """In-memory set of ``path -> bytes``. Writing an existing path replaces it."""

    def __init__(self) -> None:
        self._files: dict[str, bytes] = {}

    def add(self, path: str, data: bytes) -> None:
        if path in self._files:
            logger.debug("Overwriting %s in output archive", path)
        self._files[path] = data

    def paths(self) -> list[str]:
        return list(self._files)

    def __contains__(self, path: str) -> bool:
        return path in self._files

    def __getitem__(self, path: str) -> bytes:
        return self._files[path]

    def __len__(self) -> int:
        return len(self._files)

    def to_bytes(self) -> bytes:
        """Serialize all entries into a DEFLATE-compressed zip."""
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
            for path, data in self._files.items():
                info = zipfile.ZipInfo(path, date_time=_ZIP_EPOCH)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.external_attr = 0o644 << 16
                zf.writestr(info, data)
        return buf.getvalue()


def save_archive(content: bytes, filename: str, output_dir: str | Path = ".") -> Path:
    """Write a converted archive to ``output_dir / filename`` and return the path."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / filename
    target.write_bytes(content)
    logger.info("Saved %s (%d bytes)", target, len(content))
    return target
