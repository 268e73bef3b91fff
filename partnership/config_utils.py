"""Small helpers for reading typed values out of environment variables."""
from __future__ import annotations

import os
from typing import Iterable, List, Optional


def env_str(name: str, default: str, *, strip: bool = True) -> str:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip() if strip else value


def env_optional_str(name: str, default: Optional[str] = None) -> Optional[str]:
    """Return the variable, treating an empty or whitespace value as unset."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip() or default


def env_bool(name: str, default: bool) -> bool:
    raw = (os.environ.get(name) or "").strip().lower()
    if raw in {"1", "true", "yes", "y", "on"}:
        return True
    if raw in {"0", "false", "no", "n", "off"}:
        return False
    return default


def env_choice(name: str, default: str, choices: Iterable[str]) -> str:
    """Lower-cased value if it is one of ``choices``, else ``default``."""
    raw = (os.environ.get(name) or "").strip().lower()
    return raw if raw in set(choices) else default


def env_list(name: str, default: List[str], *, sep: str = ",") -> List[str]:
    raw = os.environ.get(name)
    if raw is None:
        return list(default)
    items = [part.strip() for part in raw.split(sep)]
    return [item for item in items if item] or list(default)
