"""Schema migrations for stored request documents.

Each step upgrades a document from the version it is keyed by to the
next one. Steps are pure: they return a new document and never touch the
input.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 1

Document = dict[str, Any]


def _backfill_overdue(doc: Document) -> Document:
    """v0 -> v1: wrap bare lists and backfill ``isOverdue``."""
    requests = doc.get("requests") or []
    return {
        "version": 1,
        "requests": [
            {**req, "isOverdue": req.get("isOverdue") if req.get("isOverdue") is not None else False}
            for req in requests
        ],
    }


MIGRATIONS: dict[int, Callable[[Document], Document]] = {
    0: _backfill_overdue,
}


def stored_version(raw: Any) -> int:
    """Schema version of a raw stored document. Bare lists are version 0."""
    if isinstance(raw, dict):
        return int(raw.get("version") or 0)
    return 0


def normalize_document(raw: Any) -> Document:
    """Coerce a raw stored value into the ``{version, requests}`` envelope."""
    if raw is None:
        return {"version": CURRENT_SCHEMA_VERSION, "requests": []}
    if isinstance(raw, list):
        return {"version": 0, "requests": raw}
    if isinstance(raw, dict):
        return {"version": stored_version(raw), "requests": list(raw.get("requests") or [])}
    raise ValueError(f"Unrecognized request document of type {type(raw).__name__}")


def migrate(doc: Document) -> Document:
    """Apply migration steps in order until the document is current.

    Raises:
        ValueError: If the document is newer than this code understands,
            or a step is missing.
    """
    version = stored_version(doc)
    if version > CURRENT_SCHEMA_VERSION:
        raise ValueError(
            f"Stored schema version {version} is newer than supported version {CURRENT_SCHEMA_VERSION}"
        )

    while version < CURRENT_SCHEMA_VERSION:
        step = MIGRATIONS.get(version)
        if step is None:
            raise ValueError(f"No migration registered for schema version {version}")
        doc = step(doc)
        new_version = stored_version(doc)
        logger.info(f"Migrated request document v{version} -> v{new_version}")
        version = new_version

    return doc
