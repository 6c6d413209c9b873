"""Record store - persistence boundary for the request collection.

The whole collection is loaded and saved as one versioned snapshot:

    {"version": 1, "requests": [...]}

``FileRecordStore`` picks JSON or YAML from the file suffix. Every save
overwrites the full document; there are no partial writes.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable

import yaml

from .errors import PersistenceError
from .migrations import CURRENT_SCHEMA_VERSION, migrate, normalize_document
from .serializer import request_from_dict, request_to_dict
from .types import WorkRequest

logger = logging.getLogger(__name__)

ID_PREFIX = "TR-"
_ID_PATTERN = re.compile(rf"^{ID_PREFIX}(\d+)$")


class RecordStore(ABC):
    """Loads and saves the full set of work requests."""

    def __init__(self) -> None:
        self._counter: int | None = None

    @abstractmethod
    def _read_document(self) -> Any:
        """Return the raw stored document, or None if nothing is stored."""

    @abstractmethod
    def _write_document(self, doc: Any) -> None:
        """Overwrite the stored document."""

    def load(self) -> list[WorkRequest]:
        """Load all requests, migrating and re-saving older documents.

        A migrated document is only written back once every record parses.
        """
        try:
            doc = normalize_document(self._read_document())
            migrated = doc["version"] != CURRENT_SCHEMA_VERSION
            if migrated:
                doc = migrate(doc)
            requests = [request_from_dict(r) for r in doc["requests"]]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise PersistenceError(f"Failed to load requests: {e}") from e

        if migrated:
            self._write_document(doc)
        logger.debug(f"Loaded {len(requests)} requests")
        return requests

    def save(self, requests: Iterable[WorkRequest]) -> None:
        """Overwrite the stored collection."""
        doc = {
            "version": CURRENT_SCHEMA_VERSION,
            "requests": [request_to_dict(r) for r in requests],
        }
        self._write_document(doc)
        logger.debug(f"Saved {len(doc['requests'])} requests")

    def next_id(self, existing: Iterable[str]) -> str:
        """Mint a new ``TR-NNNN`` id not present in ``existing``.

        The counter is monotonic for the life of the store and starts
        past the highest numeric id already in use.
        """
        taken = set(existing)
        highest = 0
        for request_id in taken:
            match = _ID_PATTERN.match(request_id)
            if match:
                highest = max(highest, int(match.group(1)))

        counter = max(self._counter or 0, highest)
        while True:
            counter += 1
            candidate = f"{ID_PREFIX}{counter:04d}"
            if candidate not in taken:
                break
        self._counter = counter
        return candidate


class InMemoryRecordStore(RecordStore):
    """Record store holding a serialized snapshot in memory.

    Loads always return fresh objects, so callers never share mutable
    state with the store.
    """

    def __init__(self, document: Any = None) -> None:
        super().__init__()
        self._document = copy.deepcopy(document)

    @property
    def document(self) -> Any:
        """Deep copy of the stored document."""
        return copy.deepcopy(self._document)

    def _read_document(self) -> Any:
        return copy.deepcopy(self._document)

    def _write_document(self, doc: Any) -> None:
        self._document = copy.deepcopy(doc)


class FileRecordStore(RecordStore):
    """
    File-backed record store.

    Usage:
        store = FileRecordStore(Path("data/requests.json"))
        requests = store.load()
        store.save(requests)

    If ``seed_file`` is given and ``path`` does not exist yet, the seed
    document becomes the initial state on first load.
    """

    def __init__(self, path: str | Path, seed_file: str | Path | None = None) -> None:
        super().__init__()
        self._path = Path(path)
        self._seed_file = Path(seed_file) if seed_file else None

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> Any:
        source = self._path
        if not source.exists():
            if self._seed_file is None or not self._seed_file.exists():
                return None
            logger.info(f"Seeding request store {self._path} from {self._seed_file}")
            # Written as-is; load() migrates and re-saves if it is older
            raw = _read_file(self._seed_file)
            if raw is not None:
                self._write_document(raw)
            return raw
        return _read_file(source)

    def _write_document(self, doc: Any) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as f:
                if _is_yaml(self._path):
                    yaml.safe_dump(doc, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
                else:
                    json.dump(doc, f, indent=2, ensure_ascii=False, default=str)
        except (OSError, yaml.YAMLError, TypeError) as e:
            raise PersistenceError(f"Failed to save requests to {self._path}: {e}") from e


def _is_yaml(path: Path) -> bool:
    return path.suffix.lower() in (".yaml", ".yml")


def _read_file(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            if _is_yaml(path):
                return yaml.safe_load(f)
            text = f.read()
            return json.loads(text) if text.strip() else None
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise PersistenceError(f"Failed to read requests from {path}: {e}") from e
