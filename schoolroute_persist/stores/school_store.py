"""
RESPONSIBILITIES
- Register schools as encrypted documents in the "schools" collection.
- Serve the known-schools lookup used by the import dry run.
PROCESS OVERVIEW
1. add_school() validates the payload, stamps status/createdAt and inserts the envelope.
2. list_schools() decrypts every stored document, skipping unusable ones.
3. known_school_names() returns normalized names for case-insensitive lookups.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError

from schoolroute.core.errors import EnvelopeError
from schoolroute_persist.crypto import RecordCipher
from schoolroute_persist.schemas.common import ActionResult, format_validation_error
from schoolroute_persist.schemas.school import NewSchool, School, normalize_school_name
from schoolroute_persist.stores.base_store import BaseStore, PersistHealth, StoreError
from schoolroute_persist.stores.document_store import DocumentCollection
from schoolroute_persist.utils.log import get_logger

SCHOOLS_COLLECTION = "schools"
CREATED_MESSAGE = "Escola cadastrada com sucesso."


class SchoolStore(BaseStore):
    """Encrypted store of registered schools."""

    collection_name = SCHOOLS_COLLECTION

    def __init__(
        self,
        cipher: RecordCipher,
        root: Path | str | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        resolved_root = Path(root).expanduser().resolve() if root else None
        super().__init__(logger=logger or get_logger("school_store", resolved_root))
        self._cipher = cipher
        self.collection = DocumentCollection(self.collection_name, resolved_root, logger=self.logger)

    def init_store(self) -> Path:
        return self.collection.init()

    def healthcheck(self) -> PersistHealth:
        return self.collection.healthcheck()

    def add_school(self, data: NewSchool | Mapping[str, Any]) -> ActionResult:
        try:
            payload = data if isinstance(data, NewSchool) else NewSchool.model_validate(data)
        except ValidationError as exc:
            message = format_validation_error(exc, "Erro de validação")
            self.logger.warning("Rejected school registration: %s", message)
            return ActionResult.fail(message)

        school = School(
            **payload.model_dump(by_alias=True),
            status="Ativa",
            createdAt=datetime.now(timezone.utc).replace(microsecond=0),
        )
        try:
            doc_id = self.collection.add(self._cipher.encrypt(school.to_document()))
        except (StoreError, EnvelopeError, OSError) as exc:
            self.logger.error("Error adding school %s: %s", payload.name, exc)
            return ActionResult.fail(str(exc))
        self.logger.info("School %s registered as %s", payload.name, doc_id)
        return ActionResult.ok(CREATED_MESSAGE)

    def list_schools(self) -> list[School]:
        """Return every readable school.

        Undecryptable or malformed documents are skipped. A collection workbook
        that cannot be opened raises :class:`StoreError` so callers can tell an
        empty registry from a broken one.
        """

        schools: list[School] = []
        for doc_id, document in self.collection.items():
            record = self._cipher.decrypt(document)
            if record is None:
                self.logger.warning("Skipping unreadable school document %s", doc_id)
                continue
            try:
                schools.append(School.model_validate({**record, "id": doc_id}))
            except ValidationError as exc:
                self.logger.warning("Skipping malformed school document %s: %s", doc_id, exc)
        return schools

    def find_by_name(self, name: str) -> School | None:
        key = normalize_school_name(name)
        return next((s for s in self.list_schools() if normalize_school_name(s.name) == key), None)

    def known_school_names(self) -> set[str]:
        return {normalize_school_name(school.name) for school in self.list_schools()}
