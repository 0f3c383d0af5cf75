"""Zip archive writer for sorted mods."""

from __future__ import annotations

import logging
import os
import zipfile
from pathlib import Path
from typing import Iterable, Iterator, Literal, Optional, Tuple

from .errors import ArchiveWriteError
from .models import ModDescriptor

LOGGER = logging.getLogger(__name__)

_COMPRESSION_METHODS = {
    "deflated": zipfile.ZIP_DEFLATED,
    "stored": zipfile.ZIP_STORED,
}


def _raise_walk_error(exc: OSError) -> None:
    raise exc


def iter_archive_entries(source: Path) -> Iterator[Tuple[Path, str]]:
    """Yield ``(file, entry name)`` pairs for a mod source.

    A file yields a single entry named after itself. A directory yields one
    entry per regular file beneath it, named ``<dir name>/<relative path>``
    with forward slashes. Symlinks to regular files are followed, symlinked
    directories are not descended, and other special files are skipped.

    Raises:
        OSError: If the directory cannot be listed.
    """
    if not source.is_dir():
        yield source, source.name
        return

    for current, dirs, files in os.walk(source, onerror=_raise_walk_error):
        dirs.sort()
        current_path = Path(current)
        for filename in sorted(files):
            path = current_path / filename
            if not path.is_file():
                LOGGER.debug("Skipping non-regular entry %s", path)
                continue
            relative = path.relative_to(source).as_posix()
            yield path, f"{source.name}/{relative}"


class ArchiveWriter:
    """Write the sources of a group of mods into a single zip file."""

    def __init__(
        self,
        compression: Literal["deflated", "stored"] = "deflated",
        compresslevel: Optional[int] = None,
    ) -> None:
        if compression not in _COMPRESSION_METHODS:
            raise ValueError(f"Unsupported compression method: {compression}")
        self.compression = compression
        self.compresslevel = compresslevel

    def write(self, target: Path, descriptors: Iterable[ModDescriptor]) -> Path:
        """Write every descriptor's source into ``target``.

        An empty ``descriptors`` iterable still produces a valid, empty zip.
        On failure the partially written archive is removed.

        Args:
            target: Archive path to create; must not be open elsewhere.
            descriptors: Mods to include, in the order entries should appear.

        Returns:
            Path: The archive path that was written.

        Raises:
            ArchiveWriteError: If any source cannot be read or the archive cannot be written.
        """
        entry_count = 0
        try:
            with zipfile.ZipFile(
                target,
                mode="w",
                compression=_COMPRESSION_METHODS[self.compression],
                compresslevel=self.compresslevel,
                strict_timestamps=False,
            ) as archive:
                for descriptor in descriptors:
                    for path, entry_name in iter_archive_entries(descriptor.source_path):
                        archive.write(path, arcname=entry_name)
                        entry_count += 1
        except (OSError, ValueError, zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
            self._discard(target)
            raise ArchiveWriteError(f"Failed to write archive {target}: {exc}") from exc

        LOGGER.info("Wrote %d entries to %s", entry_count, target)
        return target

    def _discard(self, target: Path) -> None:
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            LOGGER.warning("Could not remove partial archive %s: %s", target, exc)


__all__ = ["ArchiveWriter", "iter_archive_entries"]
