"""Tests for zip reading and writing."""

import io
import zipfile

import pytest

from mrpack_convert.archive import OutputArchive, open_archive, save_archive
from mrpack_convert.errors import CorruptArchiveError, EmptyInputError

from conftest import build_mrpack


class TestOpenArchive:
    def test_empty_input(self):
        with pytest.raises(EmptyInputError):
            open_archive(b"")

    def test_corrupt_input(self):
        with pytest.raises(CorruptArchiveError, match="valid .mrpack"):
            open_archive(b"definitely not a zip file")

    def test_entries(self):
        data = build_mrpack(
            {"files": []},
            {"overrides/": b"", "overrides/config/a.txt": b"hello"},
        )
        with open_archive(data) as archive:
            entries = {e.name: e for e in archive}
            assert len(archive) == 3
            assert entries["overrides/"].is_dir is True
            assert entries["overrides/config/a.txt"].is_dir is False
            assert entries["overrides/config/a.txt"].read() == b"hello"
            assert entries["overrides/config/a.txt"].size == 5

    def test_get(self):
        data = build_mrpack({"files": []})
        with open_archive(data) as archive:
            assert archive.get("modrinth.index.json") is not None
            assert archive.get("missing.json") is None


class TestOutputArchive:
    def test_last_write_wins(self):
        out = OutputArchive()
        out.add("config/a.txt", b"first")
        out.add("config/a.txt", b"second")
        assert len(out) == 1
        assert out["config/a.txt"] == b"second"

    def test_to_bytes(self):
        out = OutputArchive()
        out.add("mods/a.jar", b"jar")
        out.add("config/b.txt", b"cfg")
        with zipfile.ZipFile(io.BytesIO(out.to_bytes())) as zf:
            assert sorted(zf.namelist()) == ["config/b.txt", "mods/a.jar"]
            assert zf.read("mods/a.jar") == b"jar"
            assert zf.getinfo("mods/a.jar").compress_type == zipfile.ZIP_DEFLATED

    def test_to_bytes_is_deterministic(self):
        def build():
            out = OutputArchive()
            out.add("mods/a.jar", b"jar" * 100)
            return out.to_bytes()

        assert build() == build()

    def test_empty_archive_is_valid_zip(self):
        with zipfile.ZipFile(io.BytesIO(OutputArchive().to_bytes())) as zf:
            assert zf.namelist() == []


class TestSaveArchive:
    def test_writes_file(self, tmp_path):
        target = save_archive(b"zipdata", "Pack-1.0.zip", tmp_path / "out")
        assert target == tmp_path / "out" / "Pack-1.0.zip"
        assert target.read_bytes() == b"zipdata"
