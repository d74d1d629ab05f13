"""
Item list loading for the CLI.

An items file holds one item per line (UTF-8). Surrounding whitespace is
stripped; blank lines and lines starting with '#' are skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path


logger = logging.getLogger(__name__)


class ItemsFileError(Exception):
    """Raised when an items file cannot be read."""
    pass


def parse_items(text: str) -> list[str]:
    """Parse item lines, preserving their order."""
    items: list[str] = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        items.append(line)
    return items


def load_items(path: str | Path) -> list[str]:
    """
    Read an items file.

    Raises:
        ItemsFileError: If the file is missing or not valid UTF-8
    """
    path = Path(path)
    if not path.is_file():
        raise ItemsFileError(f"Items file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ItemsFileError(f"Items file is not valid UTF-8: {path}") from e

    items = parse_items(text)
    logger.info(f"Loaded {len(items)} items from {path}")
    return items
