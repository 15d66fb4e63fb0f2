"""Step-by-step student spreadsheet import session.

The wizard holds the state of one upload: the parsed workbook, the active
and primary sheets, the shared header row and the column mapping. Every
public method returns an :class:`ActionResult` (or a plain value) and never
raises, so a presentation layer can surface ``message`` directly.

Changing the active sheet or the header row recomputes headers and replaces
the whole mapping: earlier manual edits are discarded because the column
meaning may have changed. A saved configuration for the same file name is
replayed instead of the heuristic when the sheet and header row match it.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Callable, Dict, Iterable, List, Optional

from schoolroute_io.header_extractor import extract_sheet
from schoolroute_io.mapping import (
    BaseMappingStrategy,
    FixedMappingStrategy,
    HeaderAutoMappingStrategy,
    apply_column_mapping,
)
from schoolroute_io.schema import FIELD_KEYS, IGNORE, ColumnMap, SheetExtract, SpreadsheetBook
from schoolroute_io.spreadsheet_reader import (
    INVALID_TYPE_MESSAGE,
    SpreadsheetError,
    is_accepted,
    load_spreadsheet,
)
from schoolroute_persist.schemas.common import ActionResult
from schoolroute_persist.schemas.import_config import ImportConfig, SheetConfig
from schoolroute_persist.stores.base_store import StoreError
from schoolroute_persist.stores.import_config_store import ImportConfigStore

from .validation import ImportSummary, validate_rows

LOGGER = logging.getLogger("schoolroute.services.student_import")

NO_FILE_MESSAGE = "Por favor, carregue uma planilha para continuar."
EMPTY_SHEET_MESSAGE = (
    "A planilha selecionada não contém dados a partir da linha de cabeçalho especificada."
)
NO_SHEETS_MESSAGE = "O arquivo não contém nenhuma planilha."
WRONG_STEP_MESSAGE = "Conclua a etapa atual antes de continuar."


class WizardStep(IntEnum):
    UPLOAD = 1
    MAPPING = 2
    SUMMARY = 3


class StudentImportWizard:
    """Drive upload -> mapping -> summary for one spreadsheet."""

    def __init__(
        self,
        config_store: ImportConfigStore,
        known_schools: Callable[[], Iterable[str]],
        *,
        auto_mapping: BaseMappingStrategy | None = None,
    ) -> None:
        self._config_store = config_store
        self._known_schools = known_schools
        self._auto_mapping = auto_mapping or HeaderAutoMappingStrategy()
        self.step = WizardStep.UPLOAD
        self.file_name: Optional[str] = None
        self._content: bytes = b""
        self._reset_workbook()

    def _reset_workbook(self) -> None:
        self.book: Optional[SpreadsheetBook] = None
        self.selected_sheet: Optional[str] = None
        self.primary_sheet: Optional[str] = None
        self.header_row = 1
        self.extract = SheetExtract(headers=[], rows=[])
        self.column_mapping: ColumnMap = {}
        self.saved_config: Optional[ImportConfig] = None
        self.summary: Optional[ImportSummary] = None

    # Step 1 -----------------------------------------------------------------------

    def select_file(self, file_name: str, content: bytes) -> ActionResult:
        if not is_accepted(file_name):
            return ActionResult.fail(INVALID_TYPE_MESSAGE)
        self.file_name = file_name
        self._content = content
        self.step = WizardStep.UPLOAD
        self._reset_workbook()
        return ActionResult.ok(f"Arquivo selecionado: {file_name}")

    def proceed_to_mapping(self) -> ActionResult:
        if self.step != WizardStep.UPLOAD:
            return ActionResult.fail(WRONG_STEP_MESSAGE)
        if self.file_name is None:
            return ActionResult.fail(NO_FILE_MESSAGE)
        try:
            book = load_spreadsheet(self._content, self.file_name)
        except SpreadsheetError as exc:
            return ActionResult.fail(str(exc))
        if not book.sheet_names:
            return ActionResult.fail(NO_SHEETS_MESSAGE)

        self._reset_workbook()
        self.book = book
        self.step = WizardStep.MAPPING
        self.saved_config = self._config_store.get(self.file_name)

        first = book.sheet_names[0]
        saved_primary = self.saved_config.primary_sheet if self.saved_config else None
        if saved_primary is not None and saved_primary.sheet_name in book.sheet_names:
            self.primary_sheet = saved_primary.sheet_name
        else:
            self.primary_sheet = first
        return self.select_sheet(self.primary_sheet)

    # Step 2 -----------------------------------------------------------------------

    def select_sheet(self, sheet_name: str) -> ActionResult:
        if self.book is None or self.step != WizardStep.MAPPING:
            return ActionResult.fail(WRONG_STEP_MESSAGE)
        if sheet_name not in self.book.sheet_names:
            return ActionResult.fail(f"Planilha não encontrada: {sheet_name}")
        self.selected_sheet = sheet_name
        saved_sheet = self._saved_sheet(sheet_name)
        if saved_sheet is not None:
            self.header_row = saved_sheet.header_row
        return self._recompute()

    def set_header_row(self, header_row: int) -> ActionResult:
        if self.book is None or self.step != WizardStep.MAPPING:
            return ActionResult.fail(WRONG_STEP_MESSAGE)
        if header_row < 1:
            return ActionResult.fail("A linha do cabeçalho deve ser maior ou igual a 1.")
        self.header_row = header_row
        return self._recompute()

    def set_primary_sheet(self, sheet_name: str) -> ActionResult:
        if self.book is None or sheet_name not in self.book.sheet_names:
            return ActionResult.fail(f"Planilha não encontrada: {sheet_name}")
        self.primary_sheet = sheet_name
        return ActionResult.ok(f"Planilha principal: {sheet_name}")

    def update_mapping(self, header: str, system_field: str) -> ActionResult:
        if header not in self.extract.headers:
            return ActionResult.fail(f"Coluna não encontrada: {header}")
        if system_field != IGNORE and system_field not in FIELD_KEYS:
            return ActionResult.fail(f"Campo do sistema desconhecido: {system_field}")
        self.column_mapping[header] = system_field
        return ActionResult.ok(f"{header} -> {system_field}")

    def mapping_for(self, header: str) -> str:
        return self.column_mapping.get(header) or IGNORE

    def save_configuration(self) -> ActionResult:
        """Persist the current header row and mapping for every sheet of the file."""

        if self.book is None or self.file_name is None:
            return ActionResult.fail(WRONG_STEP_MESSAGE)
        payload = {
            "fileName": self.file_name,
            "configurations": [
                {
                    "sheetName": name,
                    "isPrimary": name == self.primary_sheet,
                    "headerRow": self.header_row,
                    "columnMapping": dict(self.column_mapping),
                }
                for name in self.book.sheet_names
            ],
        }
        result = self._config_store.save(payload)
        if result.success:
            self.saved_config = self._config_store.get(self.file_name)
        return result

    # Step 3 -----------------------------------------------------------------------

    def run_validation(self) -> ActionResult:
        """Dry-run the primary sheet through the current mapping and move to the summary."""

        if self.book is None or self.step != WizardStep.MAPPING or self.primary_sheet is None:
            return ActionResult.fail(WRONG_STEP_MESSAGE)
        if self.primary_sheet == self.selected_sheet:
            rows = self.extract.rows
        else:
            rows = extract_sheet(self.book, self.primary_sheet, self.header_row).rows
        try:
            known = list(self._known_schools())
        except (StoreError, OSError) as exc:
            LOGGER.error("Known-schools lookup failed: %s", exc)
            return ActionResult.fail(str(exc))

        mapped = apply_column_mapping(rows, self.column_mapping)
        self.summary = validate_rows(mapped, known)
        self.step = WizardStep.SUMMARY
        LOGGER.info(
            "Dry run for %s/%s: %s ok, %s errors, %s pending new schools",
            self.file_name,
            self.primary_sheet,
            self.summary.success_count,
            self.summary.error_count,
            self.summary.pending_count,
        )
        return ActionResult.ok(
            f"{self.summary.success_count} alunos prontos para importar, "
            f"{self.summary.error_count} com dados faltando."
        )

    def back(self) -> ActionResult:
        if self.step == WizardStep.SUMMARY:
            self.step = WizardStep.MAPPING
            self.summary = None
        elif self.step == WizardStep.MAPPING:
            self.step = WizardStep.UPLOAD
        return ActionResult.ok(f"Etapa {int(self.step)}")

    # Helpers ----------------------------------------------------------------------

    @property
    def sheet_names(self) -> List[str]:
        return list(self.book.sheet_names) if self.book else []

    @property
    def headers(self) -> List[str]:
        return list(self.extract.headers)

    def _saved_sheet(self, sheet_name: str) -> Optional[SheetConfig]:
        return self.saved_config.sheet(sheet_name) if self.saved_config else None

    def _strategy(self) -> BaseMappingStrategy:
        saved_sheet = self._saved_sheet(self.selected_sheet or "")
        if saved_sheet is not None and saved_sheet.header_row == self.header_row:
            return FixedMappingStrategy(saved_sheet.column_mapping)
        return self._auto_mapping

    def _recompute(self) -> ActionResult:
        if self.book is None or self.selected_sheet is None:
            return ActionResult.fail(WRONG_STEP_MESSAGE)
        self.extract = extract_sheet(self.book, self.selected_sheet, self.header_row)
        self.column_mapping = dict(self._strategy().map(self.extract.headers))
        if not self.extract.rows:
            return ActionResult.fail(EMPTY_SHEET_MESSAGE)
        mapped: Dict[str, str] = {h: t for h, t in self.column_mapping.items() if t != IGNORE}
        return ActionResult.ok(
            f"{len(self.extract.headers)} colunas encontradas, {len(mapped)} mapeadas."
        )
