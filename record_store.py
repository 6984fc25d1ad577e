"""
record_store.py — JSON files on disk as record collections.

Every content resource (projects, education, skills, technologies, messages,
stats, archives, personal info) is one file under the data directory. Writers
to the same file are serialized with a per-file lock held across the whole
load-mutate-save sequence; the file itself is replaced atomically.
"""

import json
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

from errors import NotFound, StorageFailure
from utils import generate_id, logger, now_iso

# Assigned by the store, never taken from client input
RESERVED_KEYS = frozenset({"id", "_id", "createdAt", "updatedAt"})


def dump_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


class RecordStore:
    """Load/save named JSON documents under one directory."""

    def __init__(self, data_dir):
        self.data_dir = Path(data_dir)
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def path_for(self, name: str) -> Path:
        return self.data_dir / name

    def lock(self, name: str) -> threading.RLock:
        with self._locks_guard:
            if name not in self._locks:
                self._locks[name] = threading.RLock()
            return self._locks[name]

    def load(self, name: str) -> Optional[Any]:
        """Parsed content, or None when the file is missing or unreadable."""
        path = self.path_for(name)
        try:
            with open(path, "r", encoding="utf-8") as fh:
                return json.load(fh)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.error("Error loading %s: %s", name, e)
            return None

    def save(self, name: str, value: Any) -> bool:
        """Overwrite the whole file with pretty-printed JSON. Returns success."""
        path = self.path_for(name)
        tmp_path = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{name}.", dir=str(path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(dump_json(value))
            os.replace(tmp_path, path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error saving %s: %s", name, e)
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            return False

    @contextmanager
    def transaction(self, name: str, default: Callable[[], Any]) -> Iterator[Any]:
        """
        Hold the file's lock, yield its content (or ``default()``), and save it
        back when the block exits cleanly. Mutate the yielded value in place.
        """
        with self.lock(name):
            value = self.load(name)
            if value is None or not isinstance(value, type(default())):
                value = default()
            yield value
            if not self.save(name, value):
                raise StorageFailure(f"Failed to save {name}")


class Collection:
    """
    A list of records keyed by ``id`` inside one store file.

    With ``wrapper_key`` the file holds ``{wrapper_key: [...]}`` instead of a
    bare array; other top-level keys in the wrapper are left untouched.
    """

    def __init__(self, store: RecordStore, filename: str, label: str, wrapper_key: Optional[str] = None):
        self.store = store
        self.filename = filename
        self.label = label
        self.wrapper_key = wrapper_key

    # ── shape helpers ────────────────────────────────

    def _empty(self):
        return {self.wrapper_key: []} if self.wrapper_key else []

    def _records(self, raw) -> List[dict]:
        if self.wrapper_key:
            if not isinstance(raw, dict):
                return []
            records = raw.get(self.wrapper_key)
            if not isinstance(records, list):
                records = []
                raw[self.wrapper_key] = records
            return records
        return raw if isinstance(raw, list) else []

    def _not_found(self, record_id: str) -> NotFound:
        logger.info("%s %s not found in %s", self.label, record_id, self.filename)
        return NotFound(f"{self.label} not found")

    @contextmanager
    def editing(self) -> Iterator[List[dict]]:
        """Locked, mutable view of the record list; saved on clean exit."""
        with self.store.transaction(self.filename, self._empty) as raw:
            yield self._records(raw)

    # ── reads ────────────────────────────────────────

    def raw(self):
        """The file content as stored, or the empty shape."""
        raw = self.store.load(self.filename)
        if raw is None or not isinstance(raw, type(self._empty())):
            return self._empty()
        return raw

    def list(self) -> List[dict]:
        return list(self._records(self.raw()))

    def get(self, record_id: str) -> dict:
        for record in self._records(self.raw()):
            if record.get("id") == record_id:
                return record
        raise self._not_found(record_id)

    # ── writes ───────────────────────────────────────

    def insert(self, fields: dict, front: bool = False) -> dict:
        fields = {k: v for k, v in fields.items() if k not in RESERVED_KEYS}
        record = {"id": generate_id(), **fields, "createdAt": now_iso()}
        with self.editing() as records:
            if front:
                records.insert(0, record)
            else:
                records.append(record)
        return record

    def put(self, record: dict) -> dict:
        """Insert or replace by ``id``."""
        with self.editing() as records:
            for index, existing in enumerate(records):
                if existing.get("id") == record["id"]:
                    records[index] = record
                    break
            else:
                records.append(record)
        return record

    def update(self, record_id: str, mutate: Callable[[dict], dict]) -> dict:
        """Replace a record with ``mutate(existing)``, stamping ``updatedAt``."""
        with self.editing() as records:
            for index, existing in enumerate(records):
                if existing.get("id") == record_id:
                    updated = mutate(dict(existing))
                    updated["updatedAt"] = now_iso()
                    records[index] = updated
                    return updated
            raise self._not_found(record_id)

    def delete(self, record_id: str) -> dict:
        with self.editing() as records:
            for index, existing in enumerate(records):
                if existing.get("id") == record_id:
                    return records.pop(index)
            raise self._not_found(record_id)

    def replace_all(self, new_records: List[dict]) -> None:
        with self.editing() as records:
            records[:] = new_records
