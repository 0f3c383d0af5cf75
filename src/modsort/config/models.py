"""Configuration models describing modsort settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ModsortBaseModel(BaseModel):
    """Shared configuration for modsort Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class SortingOptions(ModsortBaseModel):
    """Options controlling how mods are collected and where archives land.

    Attributes:
        output_dirname: Name of the directory created under the mods directory.
        items_noun: Noun embedded in archive filenames (``client-<noun>-...``).
        self_id: Mod identifier excluded from every run.
        timestamp_format: ``strftime`` pattern used for archive filenames.
        max_unique_attempts: Upper bound on collision suffixes tried per archive.
    """

    output_dirname: str = "mod-client-or-server"
    items_noun: str = "mods"
    self_id: str = "mod-client-or-server"
    timestamp_format: str = "%Y%m%d-%H%M%S"
    max_unique_attempts: int = Field(default=10_000, ge=1)


class ArchiveOptions(ModsortBaseModel):
    """Zip archive settings.

    Attributes:
        compression: Storage method applied to every entry.
        compresslevel: Optional compression level forwarded to ``zipfile``.
    """

    compression: Literal["deflated", "stored"] = "deflated"
    compresslevel: Optional[int] = Field(default=None, ge=0, le=9)


class LoggingSettings(ModsortBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(ModsortBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class ModsortConfig(ModsortBaseModel):
    """Top-level configuration struct for modsort.

    Attributes:
        sorting: Collection and output naming settings.
        archive: Zip writer settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    sorting: SortingOptions = Field(default_factory=SortingOptions)
    archive: ArchiveOptions = Field(default_factory=ArchiveOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "ModsortBaseModel",
    "SortingOptions",
    "ArchiveOptions",
    "LoggingSettings",
    "CLIOptions",
    "ModsortConfig",
]
