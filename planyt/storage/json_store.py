from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from planyt.errors import StoreError


class JsonFileStore:
    """
    Minimal table store: one JSON file per table under `root`, each holding a
    list of records. Supports insert, upsert on a key tuple and filtered reads.
    """

    def __init__(self, root: str | os.PathLike) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _path(self, table: str) -> Path:
        return self.root / f"{table}.json"

    def _load(self, table: str) -> List[Dict[str, Any]]:
        path = self._path(table)
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Could not read table '{table}': {e}") from e
        return data if isinstance(data, list) else []

    def _save(self, table: str, records: List[Dict[str, Any]]) -> None:
        path = self._path(table)
        tmp = path.with_suffix(".json.tmp")
        try:
            tmp.write_text(json.dumps(records, indent=2, default=str), encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            raise StoreError(f"Could not write table '{table}': {e}") from e

    def insert(self, table: str, record: Mapping[str, Any]) -> None:
        with self._lock:
            records = self._load(table)
            records.append(dict(record))
            self._save(table, records)

    def upsert(self, table: str, records: Sequence[Mapping[str, Any]], on_conflict: Sequence[str]) -> None:
        with self._lock:
            existing = self._load(table)
            index = {tuple(r.get(k) for k in on_conflict): i for i, r in enumerate(existing)}
            for record in records:
                key = tuple(record.get(k) for k in on_conflict)
                if key in index:
                    existing[index[key]] = dict(record)
                else:
                    index[key] = len(existing)
                    existing.append(dict(record))
            self._save(table, existing)

    def select(
        self,
        table: str,
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            records = self._load(table)
        if where:
            records = [r for r in records if all(r.get(k) == v for k, v in where.items())]
        if order_by:
            # records without the sort key go last either way
            present = [r for r in records if r.get(order_by) is not None]
            missing = [r for r in records if r.get(order_by) is None]
            records = sorted(present, key=lambda r: r[order_by], reverse=descending) + missing
        if limit is not None:
            records = records[:limit]
        return records
