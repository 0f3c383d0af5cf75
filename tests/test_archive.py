"""Tests for the zip archive writer."""

import os
import zipfile
from pathlib import Path

import pytest

from modsort.sorting import (
    ArchiveWriteError,
    ArchiveWriter,
    ModDescriptor,
    SideCategory,
    iter_archive_entries,
)


def _descriptor(source: Path, mod_id: str = "example") -> ModDescriptor:
    return ModDescriptor(
        id=mod_id, version="1.0", source_path=source, category=SideCategory.UNIVERSAL
    )


def test_empty_descriptor_list_writes_valid_empty_zip(tmp_path: Path) -> None:
    target = tmp_path / "empty.zip"

    ArchiveWriter().write(target, [])

    assert zipfile.is_zipfile(target)
    with zipfile.ZipFile(target) as archive:
        assert archive.namelist() == []


def test_file_source_is_stored_under_its_name(tmp_path: Path) -> None:
    jar = tmp_path / "sodium-0.5.jar"
    jar.write_bytes(b"PK-not-really\x00\x01")
    target = tmp_path / "out.zip"

    ArchiveWriter().write(target, [_descriptor(jar)])

    with zipfile.ZipFile(target) as archive:
        assert archive.namelist() == ["sodium-0.5.jar"]
        assert archive.read("sodium-0.5.jar") == jar.read_bytes()


@pytest.mark.parametrize("compression", ["deflated", "stored"])
def test_directory_source_round_trips_bytes(tmp_path: Path, compression: str) -> None:
    mod_dir = tmp_path / "devmod"
    (mod_dir / "assets" / "lang").mkdir(parents=True)
    (mod_dir / "fabric.mod.json").write_text('{"id": "devmod"}', encoding="utf-8")
    (mod_dir / "assets" / "lang" / "en_us.json").write_bytes(b'{"key": "value"}')
    (mod_dir / "assets" / "blob.bin").write_bytes(os.urandom(4096))
    target = tmp_path / "out.zip"

    ArchiveWriter(compression=compression).write(target, [_descriptor(mod_dir)])

    with zipfile.ZipFile(target) as archive:
        names = sorted(archive.namelist())
        assert names == [
            "devmod/assets/blob.bin",
            "devmod/assets/lang/en_us.json",
            "devmod/fabric.mod.json",
        ]
        for name in names:
            relative = Path(*name.split("/")[1:])
            assert archive.read(name) == (mod_dir / relative).read_bytes()


def test_entries_follow_file_symlinks_and_skip_directory_symlinks(tmp_path: Path) -> None:
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "shared.txt").write_text("shared", encoding="utf-8")

    mod_dir = tmp_path / "linked"
    mod_dir.mkdir()
    (mod_dir / "real.txt").write_text("real", encoding="utf-8")
    try:
        (mod_dir / "file-link.txt").symlink_to(outside / "shared.txt")
        (mod_dir / "dir-link").symlink_to(outside, target_is_directory=True)
        (mod_dir / "dangling").symlink_to(tmp_path / "missing")
    except OSError:
        pytest.skip("symlinks are not supported on this platform")

    entries = [name for _, name in iter_archive_entries(mod_dir)]

    assert entries == ["linked/file-link.txt", "linked/real.txt"]


def test_missing_source_raises_and_removes_partial_archive(tmp_path: Path) -> None:
    present = tmp_path / "present.jar"
    present.write_bytes(b"data")
    target = tmp_path / "out.zip"

    with pytest.raises(ArchiveWriteError):
        ArchiveWriter().write(
            target, [_descriptor(present), _descriptor(tmp_path / "gone.jar", "gone")]
        )

    assert not target.exists()


def test_unknown_compression_is_rejected() -> None:
    with pytest.raises(ValueError):
        ArchiveWriter(compression="lzma")  # type: ignore[arg-type]


def test_undecodable_file_name_raises_and_removes_partial_archive(tmp_path: Path) -> None:
    mod_dir = tmp_path / "oddnames"
    mod_dir.mkdir()
    (mod_dir / "ok.txt").write_text("fine", encoding="utf-8")
    try:
        (mod_dir / os.fsdecode(b"bad\xff.txt")).write_bytes(b"raw")
    except (OSError, UnicodeError):
        pytest.skip("file system rejects non UTF-8 file names")
    target = tmp_path / "out.zip"

    with pytest.raises(ArchiveWriteError):
        ArchiveWriter().write(target, [_descriptor(mod_dir)])

    assert not target.exists()
