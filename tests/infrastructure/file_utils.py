"""
File helpers for tests.
"""

from __future__ import annotations

import textwrap
from pathlib import Path


def write(p: Path, text: str) -> Path:
    """
    Writes text to a file, creating parent directories as needed.

    Args:
        p: File path
        text: Content to write

    Returns:
        Path to the written file
    """
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    return p


def write_dedent(p: Path, text: str) -> Path:
    """Writes dedented text with a single trailing newline."""
    return write(p, textwrap.dedent(text).strip() + "\n")


__all__ = ["write", "write_dedent"]
