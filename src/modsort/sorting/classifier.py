"""Environment tag classification."""

from __future__ import annotations

from typing import Optional

from .models import SideCategory

_ENVIRONMENT_CATEGORIES = {
    "client": SideCategory.CLIENT_ONLY,
    "server": SideCategory.SERVER_ONLY,
}


def classify_environment(environment: Optional[str]) -> SideCategory:
    """Map a declared environment tag to its side category.

    Only ``client`` and ``server`` select a restricted side; a missing tag,
    ``*`` and anything unrecognized count as universal.
    """
    if not environment:
        return SideCategory.UNIVERSAL
    return _ENVIRONMENT_CATEGORIES.get(environment.strip().lower(), SideCategory.UNIVERSAL)


__all__ = ["classify_environment"]
