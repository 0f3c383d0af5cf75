"""Host collaborators that enumerate installed mods.

The sorting pipeline never discovers mods on its own; it asks a host for the
mods directory, the list of mods and each mod's metadata. ``FabricModsHost``
reads Fabric manifests straight from the mods directory, while
``StaticModHost`` serves a fixed, in-memory set.
"""

from __future__ import annotations

import json
import logging
import zipfile
from pathlib import Path
from typing import Any, Hashable, Iterable, Mapping, Optional, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

LOGGER = logging.getLogger(__name__)

MANIFEST_NAME = "fabric.mod.json"


class HostError(Exception):
    """Raised when a host cannot enumerate mods or read their metadata."""


class ModMetadata(BaseModel):
    """Metadata a host exposes for one mod.

    Attributes:
        id: Unique mod identifier.
        name: Human-readable name; may be blank.
        version: Friendly version label.
        environment: Declared runtime environment tag, if any.
        origin_paths: Locations on disk the mod was loaded from.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: Optional[str] = None
    version: str = ""
    environment: Optional[str] = None
    origin_paths: tuple[Path, ...] = Field(default_factory=tuple)


class ModHost(Protocol):
    """Interface the sorting pipeline expects from its host environment."""

    @property
    def mods_dir(self) -> Path:
        """Directory scanned for mods and receiving the output directory."""
        ...

    def list_mods(self) -> Iterable[Hashable]:
        """Return opaque handles for every mod known to the host."""
        ...

    def get_metadata(self, handle: Hashable) -> ModMetadata:
        """Return metadata for a handle produced by :meth:`list_mods`."""
        ...


class StaticModHost:
    """Host backed by a fixed sequence of metadata records."""

    def __init__(self, mods_dir: Path, mods: Sequence[ModMetadata]) -> None:
        self._mods_dir = Path(mods_dir)
        self._mods = list(mods)

    @property
    def mods_dir(self) -> Path:
        return self._mods_dir

    def list_mods(self) -> Iterable[int]:
        return range(len(self._mods))

    def get_metadata(self, handle: Hashable) -> ModMetadata:
        if not isinstance(handle, int) or not 0 <= handle < len(self._mods):
            raise HostError(f"Unknown mod handle: {handle!r}")
        return self._mods[handle]


class FabricModsHost:
    """Discover Fabric mods by reading ``fabric.mod.json`` manifests.

    Every ``*.jar`` in the mods directory that contains a manifest and every
    subdirectory holding one is treated as a mod. Other entries are ignored.
    """

    def __init__(self, mods_dir: Path) -> None:
        self._mods_dir = Path(mods_dir).expanduser()

    @property
    def mods_dir(self) -> Path:
        return self._mods_dir

    def list_mods(self) -> Iterable[Path]:
        """Return the jar files and directories that carry a manifest.

        Raises:
            HostError: If the mods directory or a jar cannot be read.
        """
        try:
            entries = sorted(self._mods_dir.iterdir())
        except OSError as exc:
            raise HostError(f"Cannot list mods directory {self._mods_dir}: {exc}") from exc

        candidates: list[Path] = []
        for entry in entries:
            if entry.is_dir():
                if (entry / MANIFEST_NAME).is_file():
                    candidates.append(entry)
            elif entry.is_file() and entry.suffix.lower() == ".jar":
                if self._jar_has_manifest(entry):
                    candidates.append(entry)
                else:
                    LOGGER.debug("Ignoring %s: no %s", entry.name, MANIFEST_NAME)
        return candidates

    def get_metadata(self, handle: Hashable) -> ModMetadata:
        """Parse the manifest stored in a jar or directory.

        Raises:
            HostError: If the manifest is missing, unreadable or malformed.
        """
        path = Path(str(handle))
        manifest = self._read_manifest(path)
        try:
            return ModMetadata(
                id=manifest["id"],
                name=manifest.get("name"),
                version="" if manifest.get("version") is None else str(manifest["version"]),
                environment=manifest.get("environment"),
                origin_paths=(path,),
            )
        except (KeyError, ValidationError) as exc:
            raise HostError(f"Invalid {MANIFEST_NAME} in {path}: {exc}") from exc

    def _jar_has_manifest(self, jar: Path) -> bool:
        try:
            with zipfile.ZipFile(jar) as archive:
                return MANIFEST_NAME in archive.namelist()
        except (OSError, zipfile.BadZipFile) as exc:
            raise HostError(f"Cannot read mod jar {jar}: {exc}") from exc

    def _read_manifest(self, path: Path) -> Mapping[str, Any]:
        try:
            if path.is_dir():
                raw = (path / MANIFEST_NAME).read_text(encoding="utf-8-sig")
            else:
                with zipfile.ZipFile(path) as archive:
                    raw = archive.read(MANIFEST_NAME).decode("utf-8-sig")
        except (OSError, KeyError, UnicodeDecodeError, zipfile.BadZipFile) as exc:
            raise HostError(f"Cannot read {MANIFEST_NAME} from {path}: {exc}") from exc

        try:
            data = json.loads(raw, strict=False)
        except json.JSONDecodeError as exc:
            raise HostError(f"Malformed {MANIFEST_NAME} in {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise HostError(f"{MANIFEST_NAME} in {path} must contain a JSON object.")
        return data


__all__ = [
    "FabricModsHost",
    "HostError",
    "MANIFEST_NAME",
    "ModHost",
    "ModMetadata",
    "StaticModHost",
]
