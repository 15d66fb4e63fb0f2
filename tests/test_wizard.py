"""Import wizard flow tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from schoolroute.services.student_import import StudentImportWizard, WizardStep
from schoolroute.services.student_import.wizard import EMPTY_SHEET_MESSAGE
from schoolroute_io.schema import IGNORE
from schoolroute_io.spreadsheet_reader import INVALID_TYPE_MESSAGE, PARSE_FAILURE_MESSAGE
from schoolroute_persist.crypto import RecordCipher
from schoolroute_persist.stores.import_config_store import ImportConfigStore
from schoolroute_persist.stores.school_store import SchoolStore


@pytest.fixture()
def config_store(cipher: RecordCipher, root: Path) -> ImportConfigStore:
    return ImportConfigStore(cipher, root)


@pytest.fixture()
def school_store(cipher: RecordCipher, root: Path) -> SchoolStore:
    store = SchoolStore(cipher, root)
    store.add_school({"name": "EMEF Centro", "address": "Rua A", "hash": "h1", "schoolType": "MUNICIPAL"})
    return store


@pytest.fixture()
def wizard(config_store: ImportConfigStore, school_store: SchoolStore) -> StudentImportWizard:
    return StudentImportWizard(config_store, school_store.known_school_names)


def test_rejects_unsupported_file(wizard: StudentImportWizard) -> None:
    result = wizard.select_file("alunos.pdf", b"%PDF")

    assert not result.success
    assert result.message == INVALID_TYPE_MESSAGE
    assert wizard.file_name is None


def test_unparseable_file_stays_on_upload(wizard: StudentImportWizard) -> None:
    wizard.select_file("turma.xlsx", b"garbage")

    result = wizard.proceed_to_mapping()

    assert not result.success
    assert result.message == PARSE_FAILURE_MESSAGE
    assert wizard.step == WizardStep.UPLOAD


def test_full_flow_proposes_mapping_and_validates(wizard, workbook_factory, student_rows_factory) -> None:
    rows = student_rows_factory(10, blank_names=(0, 5))
    rows.append(["Carla", "999", "EE Norte", "6B"])
    content = workbook_factory({"Alunos": rows, "Resumo": [["Total"], [11]]})

    assert wizard.select_file("turma.xlsx", content).success
    assert wizard.proceed_to_mapping().success
    assert wizard.step == WizardStep.MAPPING
    assert wizard.sheet_names == ["Alunos", "Resumo"]
    assert wizard.primary_sheet == "Alunos"
    assert wizard.column_mapping == {
        "Nome do Aluno": "name",
        "CPF": "cpf",
        "Nome da Escola": "schoolName",
        "Turma": "className",
    }

    result = wizard.run_validation()

    assert result.success
    assert wizard.step == WizardStep.SUMMARY
    assert wizard.summary is not None
    assert wizard.summary.success_count == 8
    assert wizard.summary.error_count == 2
    assert wizard.summary.new_schools == {"EE Norte": 1}


def test_header_row_beyond_data_reports_empty_sheet(wizard, workbook_factory, student_rows_factory) -> None:
    wizard.select_file("turma.xlsx", workbook_factory({"Alunos": student_rows_factory(4)}))
    wizard.proceed_to_mapping()

    result = wizard.set_header_row(6)

    assert not result.success
    assert result.message == EMPTY_SHEET_MESSAGE
    assert wizard.headers == []
    assert wizard.column_mapping == {}
    assert not wizard.set_header_row(0).success


def test_changing_header_row_replaces_manual_edits(wizard, workbook_factory) -> None:
    content = workbook_factory(
        {"Alunos": [["Lista 2024"], ["Nome do Aluno", "Escola"], ["Ana", "EMEF Centro"]]}
    )
    wizard.select_file("turma.xlsx", content)
    wizard.proceed_to_mapping()
    assert wizard.headers == ["Lista 2024"]

    wizard.set_header_row(2)
    assert wizard.mapping_for("Escola") == IGNORE
    assert wizard.update_mapping("Escola", "schoolName").success
    assert not wizard.update_mapping("Escola", "schoolId").success
    assert not wizard.update_mapping("Coluna", "name").success

    wizard.set_header_row(2)

    assert wizard.mapping_for("Escola") == IGNORE


def test_saved_configuration_is_replayed(wizard, config_store, school_store, workbook_factory) -> None:
    content = workbook_factory(
        {
            "Capa": [["Relatório"]],
            "Alunos": [["Lista"], ["Aluno", "Escola"], ["Ana", "EMEF Centro"], ["Bia", "EMEF Centro"]],
        }
    )
    wizard.select_file("turma.xlsx", content)
    wizard.proceed_to_mapping()
    wizard.select_sheet("Alunos")
    wizard.set_header_row(2)
    wizard.update_mapping("Aluno", "name")
    wizard.update_mapping("Escola", "schoolName")
    assert wizard.set_primary_sheet("Alunos").success
    assert wizard.save_configuration().success

    saved = config_store.get("turma.xlsx")
    assert saved is not None
    assert [sheet.sheet_name for sheet in saved.configurations] == ["Capa", "Alunos"]
    assert saved.primary_sheet.sheet_name == "Alunos"

    again = StudentImportWizard(config_store, school_store.known_school_names)
    again.select_file("turma.xlsx", content)
    assert again.proceed_to_mapping().success

    assert again.selected_sheet == "Alunos"
    assert again.header_row == 2
    assert again.column_mapping == {"Aluno": "name", "Escola": "schoolName"}
    assert again.run_validation().success
    assert again.summary.success_count == 2


def test_back_returns_to_previous_step(wizard, workbook_factory, student_rows_factory) -> None:
    wizard.select_file("turma.xlsx", workbook_factory({"Alunos": student_rows_factory(2)}))
    wizard.proceed_to_mapping()
    wizard.run_validation()

    wizard.back()
    assert wizard.step == WizardStep.MAPPING
    assert wizard.summary is None
    wizard.back()
    assert wizard.step == WizardStep.UPLOAD


def test_corrupt_stores_do_not_escape_the_wizard(
    wizard, config_store, school_store, workbook_factory, student_rows_factory
) -> None:
    config_store.init_store()
    config_store.collection.path.write_bytes(b"not a zip")
    school_store.collection.path.write_bytes(b"not a zip")
    wizard.select_file("turma.xlsx", workbook_factory({"Alunos": student_rows_factory(2)}))

    assert wizard.proceed_to_mapping().success
    assert wizard.saved_config is None
    assert wizard.column_mapping["Nome do Aluno"] == "name"
    assert not wizard.save_configuration().success

    result = wizard.run_validation()

    assert not result.success
    assert wizard.step == WizardStep.MAPPING
    assert wizard.summary is None
