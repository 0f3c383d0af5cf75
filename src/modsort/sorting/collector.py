"""Descriptor collection from a mod host."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Optional

from modsort.host import HostError, ModHost, ModMetadata

from .classifier import classify_environment
from .errors import CollectionError
from .models import ModDescriptor

LOGGER = logging.getLogger(__name__)

DEFAULT_SELF_ID = "mod-client-or-server"


def normalize_path(path: Path) -> Path:
    """Return an absolute, lexically normalized path without resolving symlinks."""
    return Path(os.path.normpath(Path(path).expanduser().absolute()))


class DescriptorCollector:
    """Build sorted descriptors for the mods a host loaded from a directory."""

    def __init__(self, host: ModHost, *, self_id: str = DEFAULT_SELF_ID) -> None:
        self.host = host
        self.self_id = self_id

    def collect(self, mods_dir: Path) -> list[ModDescriptor]:
        """Return descriptors for every eligible mod, sorted by id ignoring case.

        Mods are skipped when they are this tool, when none of their origins
        lies inside ``mods_dir``, or when their origin no longer exists.

        Args:
            mods_dir: Directory whose mods should be collected.

        Returns:
            list[ModDescriptor]: Descriptors ordered by case-insensitive id.

        Raises:
            CollectionError: If the host fails to list mods or read metadata.
        """
        root = normalize_path(mods_dir)
        descriptors: list[ModDescriptor] = []

        try:
            handles = list(self.host.list_mods())
        except (HostError, OSError) as exc:
            raise CollectionError(f"Failed to list mods in {root}: {exc}") from exc

        for handle in handles:
            try:
                metadata = self.host.get_metadata(handle)
            except (HostError, OSError) as exc:
                raise CollectionError(f"Failed to read mod metadata for {handle}: {exc}") from exc

            descriptor = self._build_descriptor(metadata, root)
            if descriptor is not None:
                descriptors.append(descriptor)

        descriptors.sort(key=lambda descriptor: descriptor.id.lower())
        LOGGER.info("Collected %d mod(s) from %s", len(descriptors), root)
        return descriptors

    def _build_descriptor(self, metadata: ModMetadata, root: Path) -> Optional[ModDescriptor]:
        if metadata.id == self.self_id:
            LOGGER.debug("Skipping %s: excluded tool id", metadata.id)
            return None

        origin = self._origin_within(metadata.origin_paths, root)
        if origin is None:
            LOGGER.debug("Skipping %s: loaded from outside %s", metadata.id, root)
            return None
        if not origin.exists():
            LOGGER.debug("Skipping %s: origin %s no longer exists", metadata.id, origin)
            return None

        return ModDescriptor(
            id=metadata.id,
            name=metadata.name or "",
            version=metadata.version,
            source_path=origin,
            category=classify_environment(metadata.environment),
        )

    def _origin_within(self, origins: Iterable[Path], root: Path) -> Optional[Path]:
        for origin in origins:
            normalized = normalize_path(origin)
            if normalized.is_relative_to(root):
                return normalized
        return None


__all__ = ["DEFAULT_SELF_ID", "DescriptorCollector", "normalize_path"]
