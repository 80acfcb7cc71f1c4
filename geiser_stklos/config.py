from __future__ import annotations
import os
from pathlib import Path
from typing import Iterable, List, Optional

from geiser_stklos import RUNTIME_VERSION


def _sep() -> str:
    return os.pathsep


# Defaults
_DEFAULT_LOAD_PATH: List[str] = []
_DEFAULT_MIN_VERSION = "1.50"

# Source files recognised as belonging to the runtime.
FILE_EXTENSIONS = ("stk", "stklos")

PROMPT = "stklos> "


def paths_from_env(var: str, defaults: Iterable[str]) -> List[str]:
    raw = os.environ.get(var)
    if not raw:
        return [str(p) for p in defaults]
    return [p.strip() for p in raw.split(_sep()) if p.strip()]


def get_load_path() -> List[str]:
    return paths_from_env('GEISER_STKLOS_LOAD_PATH', _DEFAULT_LOAD_PATH)


def get_log_file() -> Optional[str]:
    return os.environ.get('GEISER_STKLOS_LOG_FILE') or None


def get_min_version() -> str:
    return os.environ.get('GEISER_STKLOS_MIN_VERSION') or _DEFAULT_MIN_VERSION


def get_runtime_version() -> str:
    return os.environ.get('GEISER_STKLOS_RUNTIME_VERSION') or RUNTIME_VERSION


def is_source_file(path: str | Path) -> bool:
    return Path(path).suffix.lstrip('.') in FILE_EXTENSIONS


def parse_version(text: str) -> tuple[int, ...]:
    """Turn "2.10" or "1.7.0-rc" into a comparable tuple of ints."""
    parts = []
    for piece in text.strip().split('.'):
        digits = ''
        for ch in piece:
            if not ch.isdigit():
                break
            digits += ch
        if not digits:
            break
        parts.append(int(digits))
    return tuple(parts)
