"""Tests for the byte-level copy and move utilities."""

import os
from pathlib import Path

import pytest

from nanosh import fileops
from nanosh.fileops import CHUNK_SIZE, ShortWriteError, copy_file, cp_main, move_file, mv_main


class TestCopy:
    """Verify copy_file()."""

    def test_copies_bytes_across_chunks(self, tmp_path: Path) -> None:
        """Content longer than one chunk is copied exactly."""
        src = tmp_path / "src.bin"
        data = bytes(range(256)) * 3
        src.write_bytes(data)
        assert copy_file(src, tmp_path / "dst.bin") == len(data)
        assert (tmp_path / "dst.bin").read_bytes() == data
        assert len(data) > CHUNK_SIZE

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty source produces an empty destination."""
        (tmp_path / "src").write_bytes(b"")
        assert copy_file(tmp_path / "src", tmp_path / "dst") == 0
        assert (tmp_path / "dst").read_bytes() == b""

    def test_truncates_destination(self, tmp_path: Path) -> None:
        """Existing destination content is replaced."""
        (tmp_path / "src").write_text("new")
        (tmp_path / "dst").write_text("much older content")
        copy_file(tmp_path / "src", tmp_path / "dst")
        assert (tmp_path / "dst").read_text() == "new"

    def test_missing_source(self, tmp_path: Path) -> None:
        """A missing source raises and creates nothing."""
        with pytest.raises(FileNotFoundError):
            copy_file(tmp_path / "nope", tmp_path / "dst")
        assert not (tmp_path / "dst").exists()

    def test_short_write_fails(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """A write that transfers fewer bytes is an error."""
        (tmp_path / "src").write_text("abcdef")
        real_write = os.write
        monkeypatch.setattr(fileops.os, "write", lambda fd, data: real_write(fd, data[:1]))
        with pytest.raises(ShortWriteError, match="write failed"):
            copy_file(tmp_path / "src", tmp_path / "dst")

    def test_bad_chunk_size(self, tmp_path: Path) -> None:
        """chunk_size must be positive."""
        with pytest.raises(ValueError, match="chunk_size"):
            copy_file(tmp_path / "a", tmp_path / "b", chunk_size=0)


class TestMove:
    """Verify move_file()."""

    def test_move_removes_source(self, tmp_path: Path) -> None:
        """The destination gets the bytes and the source is gone."""
        (tmp_path / "src").write_text("moving")
        move_file(tmp_path / "src", tmp_path / "dst")
        assert (tmp_path / "dst").read_text() == "moving"
        assert not (tmp_path / "src").exists()

    def test_failed_copy_keeps_source(self, tmp_path: Path) -> None:
        """If the copy fails the source is not removed."""
        (tmp_path / "src").write_text("stay")
        with pytest.raises(OSError):
            move_file(tmp_path / "src", tmp_path / "no" / "dir" / "dst")
        assert (tmp_path / "src").exists()


class TestEntryPoints:
    """Verify nanosh-cp and nanosh-mv."""

    def test_cp_main(self, tmp_path: Path) -> None:
        """nanosh-cp exits 0 after copying."""
        (tmp_path / "a").write_text("x")
        with pytest.raises(SystemExit) as excinfo:
            cp_main([str(tmp_path / "a"), str(tmp_path / "b")])
        assert excinfo.value.code == 0
        assert (tmp_path / "b").read_text() == "x"

    def test_mv_main_failure(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """nanosh-mv reports I/O errors and exits 1."""
        with pytest.raises(SystemExit) as excinfo:
            mv_main([str(tmp_path / "missing"), str(tmp_path / "b")])
        assert excinfo.value.code == 1
        assert "nanosh-mv:" in capsys.readouterr().err

    def test_usage_error(self) -> None:
        """A missing operand is a usage error."""
        with pytest.raises(SystemExit) as excinfo:
            cp_main(["only-one"])
        assert excinfo.value.code == 2
