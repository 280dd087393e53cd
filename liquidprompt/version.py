from __future__ import annotations

from importlib import metadata


def tool_version() -> str:
    """
    Single place to read the installed package version.
    Has no dependencies on other modules (to avoid import cycles).
    """
    for dist in ("liquidprompt",):
        try:
            return metadata.version(dist)
        except Exception:
            continue
    return "0.0.0"

__all__ = ["tool_version"]
