"""
RESPONSIBILITIES
- Provide a keyed document collection persisted in an XLSX workbook.
- Offer get/set(merge)/add/items primitives used by the encrypted stores.
PROCESS OVERVIEW
1. init() ensures <root>/store/<collection>.xlsx carries the doc_id/document/updated_at sheet.
2. set() reads the sheet under lock, merges or replaces the document by id and rewrites atomically.
3. get()/items() decode the JSON document column back into dictionaries.
"""

from __future__ import annotations

import json
import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from schoolroute_persist.stores.base_store import (
    PersistHealth,
    StoreError,
    StoreInitializationError,
    StoreValidationError,
)
from schoolroute_persist.utils.excel_io import ensure_workbook, read_sheet, workbook_lock, write_sheet
from schoolroute_persist.utils.log import get_logger
from schoolroute_persist.utils.paths import store_file_path

DOCUMENT_COLUMNS: tuple[str, ...] = ("doc_id", "document", "updated_at")
# openpyxl accepts longer strings but Excel truncates cells past this length.
MAX_CELL_CHARS = 32_767
_MAX_SHEET_TITLE = 31

Document = dict[str, Any]


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


class DocumentCollection:
    """A named collection of JSON documents keyed by ``doc_id``."""

    columns = DOCUMENT_COLUMNS

    def __init__(self, name: str, root: Path | str | None = None, *, logger: logging.Logger | None = None) -> None:
        if not name.strip():
            raise StoreInitializationError("Collection name must not be empty")
        resolved_root = Path(root).expanduser().resolve() if root else None
        self.name = name
        self.sheet_name = name[:_MAX_SHEET_TITLE]
        self.logger = logger or get_logger(f"collection.{name}", resolved_root)
        self.path = store_file_path(f"{name}.xlsx", resolved_root)

    def init(self) -> Path:
        try:
            ensure_workbook(self.path, self.sheet_name, self.columns)
        except OSError as exc:
            raise StoreInitializationError(str(exc)) from exc
        return self.path

    def get(self, doc_id: str) -> Document | None:
        """Return the stored document for *doc_id*, or ``None`` when absent."""

        if not self.path.exists():
            return None
        for row in read_sheet(self.path, self.sheet_name, self.columns):
            if str(row["doc_id"]) == doc_id:
                return self._decode(row)
        return None

    def set(self, doc_id: str, document: Mapping[str, Any], *, merge: bool = True) -> None:
        """Write *document* under *doc_id*.

        With ``merge=True`` top-level fields are merged onto the existing
        document; otherwise the stored document is replaced.
        """

        if not doc_id:
            raise StoreValidationError("doc_id is required")
        self.init()
        with workbook_lock(self.path):
            rows = read_sheet(self.path, self.sheet_name, self.columns, use_lock=False)
            now_iso = _utcnow_iso()
            updated: list[dict[str, object]] = []
            matched = False
            for row in rows:
                if str(row["doc_id"]) != doc_id:
                    updated.append(row)
                    continue
                merged: Document = self._decode(row) if merge else {}
                merged.update(document)
                updated.append(self._encode(doc_id, merged, now_iso))
                matched = True
            if not matched:
                updated.append(self._encode(doc_id, dict(document), now_iso))
            write_sheet(self.path, self.sheet_name, updated, self.columns, use_lock=False)
        self.logger.debug("Stored document %s in %s (merge=%s)", doc_id, self.name, merge)

    def add(self, document: Mapping[str, Any]) -> str:
        """Insert *document* under a generated id and return the id."""

        doc_id = uuid.uuid4().hex
        self.set(doc_id, document, merge=False)
        return doc_id

    def items(self) -> list[tuple[str, Document]]:
        """Return every ``(doc_id, document)`` pair in insertion order."""

        if not self.path.exists():
            return []
        rows = read_sheet(self.path, self.sheet_name, self.columns)
        return [(str(row["doc_id"]), self._decode(row)) for row in rows]

    def healthcheck(self) -> PersistHealth:
        issues: list[str] = []
        locked: list[str] = []
        target_dir = self.path.parent
        target_dir.mkdir(parents=True, exist_ok=True)
        writable = {str(target_dir): os.access(target_dir, os.W_OK | os.X_OK)}
        try:
            self.init()
        except StoreError as exc:
            issues.append(str(exc))
        try:
            with workbook_lock(self.path):
                pass
        except StoreError as exc:
            locked.append(str(self.path))
            issues.append(f"Lock acquisition failed: {exc}")
        return PersistHealth(writable_paths=writable, locked_paths=locked, issues=issues)

    # Helpers ----------------------------------------------------------------------

    def _encode(self, doc_id: str, document: Document, updated_at: str) -> dict[str, object]:
        try:
            text = json.dumps(document, ensure_ascii=False, sort_keys=True)
        except (TypeError, ValueError) as exc:
            raise StoreValidationError(f"Document {doc_id} is not JSON serializable: {exc}") from exc
        if len(text) > MAX_CELL_CHARS:
            raise StoreValidationError(
                f"Document {doc_id} exceeds {MAX_CELL_CHARS} characters ({len(text)})"
            )
        return {"doc_id": doc_id, "document": text, "updated_at": updated_at}

    def _decode(self, row: Mapping[str, object]) -> Document:
        raw = row.get("document")
        try:
            payload = json.loads(str(raw)) if raw not in (None, "") else {}
        except ValueError as exc:
            raise StoreError(f"Corrupted document {row.get('doc_id')} in {self.name}") from exc
        if not isinstance(payload, dict):
            raise StoreError(f"Corrupted document {row.get('doc_id')} in {self.name}")
        return payload


__all__ = ["DocumentCollection", "DOCUMENT_COLUMNS", "Document"]
