"""Utility functions."""

from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd


def ensure_dir(path: Union[str, Path]) -> Path:
    """Ensure directory exists."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_file_size_mb(path: Union[str, Path]) -> float:
    """Get file size in megabytes."""
    if not Path(path).exists():
        return 0.0
    return Path(path).stat().st_size / (1024 * 1024)


def resolve_deck_name(custom_name: Optional[str], fallback: str) -> str:
    """Use the caller's name when it has content, otherwise the fallback."""
    if custom_name and custom_name.strip():
        return custom_name.strip()
    return fallback


def is_null(value: Any) -> bool:
    """NULL cells come back from pandas as None or NaN."""
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def text_or_none(value: Any) -> Optional[str]:
    """Normalize a database cell to a non-blank string or None."""
    if is_null(value):
        return None
    text = str(value)
    return text if text.strip() else None


def is_bare_filename(name: str) -> bool:
    """True if ``name`` names a file directly, without any directory part."""
    if not name or name in (".", ".."):
        return False
    return Path(name).name == name and "/" not in name and "\\" not in name


def first_present(*values: Any) -> str:
    """First value that is not NULL; an empty string still counts as present."""
    for value in values:
        if not is_null(value):
            return str(value)
    return ""
