"""
RESPONSIBILITIES
- Persist spreadsheet import configurations keyed by source file name.
- Seal every configuration in an encrypted envelope before it reaches the collection.
PROCESS OVERVIEW
1. save() validates the ImportConfig shape, stamps updatedAt and upserts the envelope (merge).
2. get() reads the envelope by file name, decrypts and re-validates it.
3. Neither call raises: failures become ActionResult(success=False) or None.

``get`` returns ``None`` both for a file name that was never saved and for a
stored document that no longer decrypts; callers fall back to auto-mapping in
both cases.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from schoolroute.core.errors import EnvelopeError
from schoolroute_persist.crypto import RecordCipher
from schoolroute_persist.schemas.common import ActionResult, format_validation_error
from schoolroute_persist.schemas.import_config import ImportConfig
from schoolroute_persist.stores.base_store import BaseStore, PersistHealth, StoreError
from schoolroute_persist.stores.document_store import DocumentCollection
from schoolroute_persist.utils.log import get_logger

IMPORT_CONFIG_COLLECTION = "import-configurations"
SAVED_MESSAGE = "Configuração salva com sucesso."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


class ImportConfigStore(BaseStore):
    """Encrypted store of ImportConfig documents."""

    collection_name = IMPORT_CONFIG_COLLECTION

    def __init__(
        self,
        cipher: RecordCipher,
        root: Path | str | None = None,
        *,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        resolved_root = Path(root).expanduser().resolve() if root else None
        super().__init__(logger=logger or get_logger("import_config_store", resolved_root))
        self._cipher = cipher
        self._clock = clock
        self.collection = DocumentCollection(self.collection_name, resolved_root, logger=self.logger)

    # BaseStore API -----------------------------------------------------------------

    def init_store(self) -> Path:
        return self.collection.init()

    def healthcheck(self) -> PersistHealth:
        return self.collection.healthcheck()

    # Actions ----------------------------------------------------------------------

    def save(self, config: ImportConfig | Mapping[str, Any]) -> ActionResult:
        """Validate and upsert *config* under its file name."""

        try:
            validated = (
                ImportConfig.model_validate(config.model_dump(by_alias=True))
                if isinstance(config, ImportConfig)
                else ImportConfig.model_validate(config)
            )
        except ValidationError as exc:
            message = format_validation_error(exc, "Validation error")
            self.logger.warning("Rejected import configuration: %s", message)
            return ActionResult.fail(message)

        record = validated.to_document()
        record["updatedAt"] = self._clock().isoformat()
        try:
            envelope = self._cipher.encrypt(record)
            self.collection.set(validated.file_name, envelope, merge=True)
        except (StoreError, EnvelopeError, OSError) as exc:
            self.logger.error("Error saving configuration for %s: %s", validated.file_name, exc)
            return ActionResult.fail(str(exc))

        self.logger.info("Configuration for %s saved successfully.", validated.file_name)
        return ActionResult.ok(SAVED_MESSAGE)

    def get(self, file_name: str) -> ImportConfig | None:
        """Return the stored configuration for *file_name*, or ``None`` when unusable."""

        try:
            document = self.collection.get(file_name)
        except (StoreError, OSError) as exc:
            self.logger.error("Error fetching configuration for %s: %s", file_name, exc)
            return None
        if document is None:
            self.logger.info("No configuration found for %s.", file_name)
            return None

        record = self._cipher.decrypt(document)
        if record is None:
            self.logger.warning("Configuration for %s could not be decrypted.", file_name)
            return None
        try:
            config = ImportConfig.model_validate(record)
        except ValidationError as exc:
            self.logger.warning("Configuration for %s has an invalid shape: %s", file_name, exc)
            return None
        self.logger.info("Configuration for %s found.", file_name)
        return config


# Convenience facade ---------------------------------------------------------------


def save_import_config(
    config: ImportConfig | Mapping[str, Any],
    *,
    cipher: RecordCipher,
    root: Path | None = None,
) -> ActionResult:
    return ImportConfigStore(cipher, root).save(config)


def get_import_config(file_name: str, *, cipher: RecordCipher, root: Path | None = None) -> ImportConfig | None:
    return ImportConfigStore(cipher, root).get(file_name)
