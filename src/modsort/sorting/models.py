"""Data models for sorting runs."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class SideCategory(str, Enum):
    """Side a mod must be installed on; the value doubles as the filename tag."""

    CLIENT_ONLY = "client"
    SERVER_ONLY = "server"
    UNIVERSAL = "both"

    @property
    def tag(self) -> str:
        """Return the short tag embedded in archive filenames."""
        return self.value

    @property
    def label(self) -> str:
        """Return a human-readable label for tables and messages."""
        return _LABELS[self]


_LABELS = {
    SideCategory.CLIENT_ONLY: "Client-only",
    SideCategory.SERVER_ONLY: "Server-only",
    SideCategory.UNIVERSAL: "Universal",
}


class ModDescriptor(BaseModel):
    """Normalized, immutable view of a single installed mod.

    Attributes:
        id: Mod identifier; unique and used as the case-insensitive sort key.
        name: Display name, falling back to ``id`` when blank.
        version: Friendly version label.
        source_path: Jar file or directory the mod was loaded from.
        category: Side category derived from the declared environment.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    version: str = ""
    source_path: Path
    category: SideCategory = SideCategory.UNIVERSAL

    @model_validator(mode="before")
    @classmethod
    def _default_name(cls, data: Any) -> Any:
        if isinstance(data, dict):
            name = data.get("name")
            if name is None or not str(name).strip():
                data = {**data, "name": data.get("id")}
        return data


class SortResult(BaseModel):
    """Snapshot of a completed sorting run.

    Both mappings hold one entry per :class:`SideCategory`, in declaration
    order, and are read-only views.

    Attributes:
        mods_by_category: Descriptors per category in sorted order.
        archive_paths: Archive written for each category.
        output_directory: Directory containing the archives.
        timestamp: Moment shared by every archive name of the run.
    """

    model_config = ConfigDict(frozen=True)

    mods_by_category: Mapping[SideCategory, tuple[ModDescriptor, ...]]
    archive_paths: Mapping[SideCategory, Path]
    output_directory: Path
    timestamp: datetime

    @field_validator("mods_by_category", "archive_paths", mode="after")
    @classmethod
    def _freeze_per_category(cls, value: Mapping[SideCategory, Any]) -> Mapping[SideCategory, Any]:
        missing = [category.tag for category in SideCategory if category not in value]
        if missing:
            raise ValueError(f"missing entries for categories: {', '.join(missing)}")
        return MappingProxyType({category: value[category] for category in SideCategory})

    def __hash__(self) -> int:
        # Archive paths are unique per run and the mapping views are unhashable.
        return hash((tuple(self.archive_paths.items()), self.output_directory, self.timestamp))

    def total_mods(self) -> int:
        """Return the number of mods across all categories."""
        return sum(len(mods) for mods in self.mods_by_category.values())

    def count(self, category: SideCategory) -> int:
        """Return the number of mods sorted into ``category``."""
        return len(self.mods_by_category.get(category, ()))

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-serializable description of the run."""
        return {
            "output_directory": self.output_directory.as_posix(),
            "timestamp": self.timestamp.isoformat(),
            "total": self.total_mods(),
            "categories": {
                category.tag: {
                    "label": category.label,
                    "archive": self.archive_paths[category].as_posix(),
                    "mods": [
                        descriptor.model_dump(mode="json")
                        for descriptor in self.mods_by_category[category]
                    ],
                }
                for category in SideCategory
            },
        }


__all__ = ["SideCategory", "ModDescriptor", "SortResult"]
