"""Utility helpers for working with files."""

from __future__ import annotations

import json
import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Iterator

import numpy as np

SUPPORTED_EXTENSIONS = (".txt", ".md", ".pdf", ".doc", ".docx")


def is_supported(filename: str | Path) -> bool:
    """Return True when the file extension is one we can extract text from."""
    return Path(filename).suffix.lower() in SUPPORTED_EXTENSIONS


def file_type(filename: str | Path) -> str:
    """Lowercase extension without the leading dot."""
    return Path(filename).suffix.lower().lstrip(".")


def iter_folder_entries(folder: Path) -> Iterator[Path]:
    """Yield the immediate children of a folder in a stable order."""
    yield from sorted(folder.iterdir(), key=lambda child: child.name)


def _json_default(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _target_mode(path: Path) -> int:
    """Permission bits the written file should carry."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def atomic_write_json(path: Path, payload: Any) -> None:
    """Serialize `payload` next to `path` and atomically move it into place.

    The temporary file never ends in ``.json`` so directory listings do not
    mistake it for a table. An existing file keeps its permission bits; a new
    one gets the usual umask-filtered mode rather than mkstemp's 0600.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, ensure_ascii=False, default=_json_default)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(tmp_name, _target_mode(path))
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
