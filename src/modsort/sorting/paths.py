"""Collision-free output path resolution."""

from __future__ import annotations

from pathlib import Path

from .errors import PathResolutionError

DEFAULT_MAX_ATTEMPTS = 10_000


def ensure_unique(base: Path, *, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> Path:
    """Return ``base`` or the first free ``<stem>-<n><suffix>`` sibling.

    Args:
        base: Desired output path.
        max_attempts: Highest numeric suffix tried before giving up.

    Returns:
        Path: A path that does not exist at the time of the call.

    Raises:
        PathResolutionError: If every candidate up to ``max_attempts`` exists.
    """
    if not base.exists():
        return base

    for counter in range(1, max_attempts + 1):
        candidate = base.with_name(f"{base.stem}-{counter}{base.suffix}")
        if not candidate.exists():
            return candidate

    raise PathResolutionError(
        f"No free filename for {base} after {max_attempts} attempts."
    )


__all__ = ["DEFAULT_MAX_ATTEMPTS", "ensure_unique"]
