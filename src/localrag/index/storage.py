"""File-backed record tables.

Each table is one ``<name>.json`` file holding a JSON array of records inside
the connection's directory. Every operation reads or rewrites the whole file;
writes go through a temporary file and an atomic rename so a crash never
leaves a half-written table behind.

Tables are not safe for concurrent writers. Callers sharing a table across
threads or processes must serialize access themselves.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence

import numpy as np

from localrag.errors import StorageCorruptionError
from localrag.index.filters import Filter, matches, parse_filter
from localrag.index.search import VectorSearch
from localrag.utils.files import atomic_write_json

LOGGER = logging.getLogger(__name__)

TABLE_SUFFIX = ".json"

Record = Dict[str, Any]


def _validate_table_name(name: str) -> str:
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        raise ValueError(f"Invalid table name: {name!r}")
    return name


class Table:
    """A named collection of records persisted in a single JSON file."""

    def __init__(self, directory: Path, name: str) -> None:
        self.name = _validate_table_name(name)
        self.path = Path(directory) / f"{name}{TABLE_SUFFIX}"

    def __repr__(self) -> str:
        return f"Table(name={self.name!r}, path={str(self.path)!r})"

    def read_records(self) -> List[Record]:
        """Load every record; a missing file is an empty table."""
        if not self.path.exists():
            return []
        content = self.path.read_text(encoding="utf-8")
        if not content.strip():
            return []
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise StorageCorruptionError(self.path, f"invalid JSON ({exc})") from exc
        if not isinstance(data, list):
            raise StorageCorruptionError(self.path, f"expected an array, got {type(data).__name__}")
        for index, record in enumerate(data):
            if not isinstance(record, dict):
                raise StorageCorruptionError(
                    self.path, f"record {index} is not an object ({type(record).__name__})"
                )
        return data

    def _write_records(self, records: Sequence[Record]) -> None:
        atomic_write_json(self.path, list(records))

    def to_list(self) -> List[Record]:
        return self.read_records()

    def add(self, records: Iterable[Record]) -> None:
        """Append records to the table."""
        new_records = list(records)
        existing = self.read_records()
        self._write_records(existing + new_records)
        LOGGER.info("Added %d records to %s", len(new_records), self.name)

    def delete(self, condition: Filter | str) -> int:
        """Remove the records matching `condition` and return how many were removed."""
        flt = parse_filter(condition)
        if not self.path.exists():
            return 0

        records = self.read_records()
        kept = [record for record in records if not matches(record, flt)]
        removed = len(records) - len(kept)
        self._write_records(kept)
        LOGGER.info("Deleted %d records from %s (%s)", removed, self.name, flt)
        return removed

    def search(self, vector: Sequence[float] | np.ndarray) -> VectorSearch:
        """Start a similarity query against this table."""
        return VectorSearch(self, vector)

    def count_rows(self) -> int:
        return len(self.read_records())


class Connection:
    """Namespace of tables stored in one directory."""

    def __init__(self, uri: Path | str) -> None:
        self.directory = Path(uri)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._tables: Dict[str, Table] = {}

    def __repr__(self) -> str:
        return f"Connection(directory={str(self.directory)!r})"

    def create_table(self, name: str, records: Iterable[Record] | None = None) -> Table:
        """Create or replace a table, persisting `records` straight away."""
        table = Table(self.directory, name)
        initial = list(records or [])
        table._write_records(initial)
        self._tables[name] = table
        LOGGER.info("Created table %s with %d records", name, len(initial))
        return table

    def open_table(self, name: str) -> Table:
        """Return a handle to `name`; its file is created on the first add."""
        if name not in self._tables:
            self._tables[name] = Table(self.directory, name)
        return self._tables[name]

    def drop_table(self, name: str) -> None:
        path = self.directory / f"{_validate_table_name(name)}{TABLE_SUFFIX}"
        if path.exists():
            path.unlink()
            LOGGER.info("Dropped table %s", name)
        self._tables.pop(name, None)

    def table_names(self) -> List[str]:
        """Names of the tables currently on disk."""
        if not self.directory.exists():
            return []
        return sorted(
            child.name[: -len(TABLE_SUFFIX)]
            for child in self.directory.iterdir()
            if child.is_file() and child.name.endswith(TABLE_SUFFIX)
        )


def connect(uri: Path | str) -> Connection:
    LOGGER.debug("Connecting to file-backed store at %s", uri)
    return Connection(uri)
