"""Sorting run orchestration."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional

from modsort.config.models import ModsortConfig
from modsort.host import ModHost

from .archive import ArchiveWriter
from .collector import DescriptorCollector, normalize_path
from .errors import ArchiveWriteError, SourceNotFoundError
from .models import ModDescriptor, SideCategory, SortResult
from .paths import ensure_unique

LOGGER = logging.getLogger(__name__)


def _local_now() -> datetime:
    return datetime.now().astimezone()


def group_by_category(
    descriptors: Iterable[ModDescriptor],
) -> dict[SideCategory, list[ModDescriptor]]:
    """Group descriptors per category, keeping input order and every category."""
    grouped: dict[SideCategory, list[ModDescriptor]] = {category: [] for category in SideCategory}
    for descriptor in descriptors:
        grouped[descriptor.category].append(descriptor)
    return grouped


class ModSorter:
    """Collect mods from a host and write one zip archive per side category."""

    def __init__(
        self,
        host: ModHost,
        config: Optional[ModsortConfig] = None,
        *,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self.host = host
        self.config = config or ModsortConfig()
        self.clock = clock
        self.collector = DescriptorCollector(host, self_id=self.config.sorting.self_id)
        self.writer = ArchiveWriter(
            compression=self.config.archive.compression,
            compresslevel=self.config.archive.compresslevel,
        )

    def resolve_mods_dir(self) -> Path:
        """Return the normalized mods directory after checking it exists.

        Raises:
            SourceNotFoundError: If the directory is missing.
        """
        mods_dir = normalize_path(self.host.mods_dir)
        if not mods_dir.exists():
            raise SourceNotFoundError(f"Mods directory not found: {mods_dir}")
        if not mods_dir.is_dir():
            raise SourceNotFoundError(f"Mods path is not a directory: {mods_dir}")
        return mods_dir

    def preview(self) -> list[ModDescriptor]:
        """Collect and classify mods without writing anything."""
        return self.collector.collect(self.resolve_mods_dir())

    def archive_name(self, category: SideCategory, timestamp: datetime) -> str:
        """Return the preferred archive filename for a category and run timestamp."""
        sorting = self.config.sorting
        stamp = timestamp.strftime(sorting.timestamp_format)
        return f"{category.tag}-{sorting.items_noun}-{stamp}.zip"

    def run(self) -> SortResult:
        """Sort every eligible mod into per-category archives.

        Returns:
            SortResult: Immutable description of the written archives.

        Raises:
            SourceNotFoundError: If the mods directory is missing.
            CollectionError: If the host fails while enumerating mods.
            PathResolutionError: If no free archive filename is found.
            ArchiveWriteError: If an archive or the output directory cannot be written.
        """
        mods_dir = self.resolve_mods_dir()
        grouped = group_by_category(self.collector.collect(mods_dir))

        output_dir = mods_dir / self.config.sorting.output_dirname
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ArchiveWriteError(f"Cannot create output directory {output_dir}: {exc}") from exc

        timestamp = self.clock()
        archive_paths: dict[SideCategory, Path] = {}
        for category in SideCategory:
            base = output_dir / self.archive_name(category, timestamp)
            target = ensure_unique(base, max_attempts=self.config.sorting.max_unique_attempts)
            archive_paths[category] = self.writer.write(target, grouped[category])
            LOGGER.info(
                "%s: %d mod(s) -> %s", category.label, len(grouped[category]), target.name
            )

        return SortResult(
            mods_by_category={category: tuple(mods) for category, mods in grouped.items()},
            archive_paths=archive_paths,
            output_directory=output_dir,
            timestamp=timestamp,
        )


def sort_mods_into_zips(host: ModHost, config: Optional[ModsortConfig] = None) -> SortResult:
    """Run a single sorting pass for ``host`` with optional configuration."""
    return ModSorter(host, config).run()


__all__ = ["ModSorter", "group_by_category", "sort_mods_into_zips"]
