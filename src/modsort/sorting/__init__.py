"""Classification and archival pipeline for installed mods."""

from .archive import ArchiveWriter, iter_archive_entries
from .classifier import classify_environment
from .collector import DEFAULT_SELF_ID, DescriptorCollector
from .errors import (
    ArchiveWriteError,
    CollectionError,
    PathResolutionError,
    SortError,
    SourceNotFoundError,
)
from .models import ModDescriptor, SideCategory, SortResult
from .orchestrator import ModSorter, group_by_category, sort_mods_into_zips
from .paths import ensure_unique

__all__ = [
    "ArchiveWriteError",
    "ArchiveWriter",
    "CollectionError",
    "DEFAULT_SELF_ID",
    "DescriptorCollector",
    "ModDescriptor",
    "ModSorter",
    "PathResolutionError",
    "SideCategory",
    "SortError",
    "SortResult",
    "SourceNotFoundError",
    "classify_environment",
    "ensure_unique",
    "group_by_category",
    "iter_archive_entries",
    "sort_mods_into_zips",
]
