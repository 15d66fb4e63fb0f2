"""CLI tests driven through typer's CliRunner."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from typer.testing import CliRunner

from schoolroute.cli import app

runner = CliRunner()

ENV = {"ENCRYPTION_SECRET_KEY": "cli-secret"}


def _invoke(root: Path, *args: str, env: dict[str, str] | None = None):
    return runner.invoke(app, ["--root", str(root), *args], env=ENV if env is None else env)


def _write_workbook(path: Path, workbook_factory, student_rows_factory) -> Path:
    rows = [["Turma 5A"]] + student_rows_factory(3, blank_names=(1,))
    path.write_bytes(workbook_factory({"Alunos": rows}))
    return path


def test_init_creates_collection_workbooks(tmp_path: Path) -> None:
    root = tmp_path / "persist"

    result = _invoke(root, "init")

    assert result.exit_code == 0, result.output
    assert (root / "store" / "import-configurations.xlsx").exists()
    assert (root / "store" / "schools.xlsx").exists()


def test_missing_secret_key_is_reported(tmp_path: Path) -> None:
    result = _invoke(tmp_path / "persist", "show-config", "turma.xlsx", env={"ENCRYPTION_SECRET_KEY": ""})

    assert result.exit_code != 0
    assert "ENCRYPTION_SECRET_KEY" in result.output


def test_preview_prints_proposed_mapping(tmp_path: Path, workbook_factory, student_rows_factory) -> None:
    path = _write_workbook(tmp_path / "turma.xlsx", workbook_factory, student_rows_factory)

    result = _invoke(tmp_path / "persist", "preview", str(path), "--header-row", "2")

    assert result.exit_code == 0, result.output
    assert "Nome do Aluno -> name" in result.output
    assert "Nome da Escola -> schoolName" in result.output


def test_save_show_and_validate(tmp_path: Path, workbook_factory, student_rows_factory) -> None:
    root = tmp_path / "persist"
    path = _write_workbook(tmp_path / "turma.xlsx", workbook_factory, student_rows_factory)
    overrides = tmp_path / "mapping.json"
    overrides.write_text(json.dumps({"Turma": "ignore"}), encoding="utf-8")

    added = _invoke(
        root,
        "add-school",
        "--name",
        "EMEF Centro",
        "--address",
        "Rua A",
        "--hash",
        "h1",
        "--school-type",
        "municipal",
    )
    saved = _invoke(root, "save-config", str(path), "--header-row", "2", "--mapping", str(overrides))
    shown = _invoke(root, "show-config", "turma.xlsx")
    validated = _invoke(root, "validate", str(path))

    assert added.exit_code == 0, added.output
    assert saved.exit_code == 0, saved.output
    assert shown.exit_code == 0, shown.output
    assert '"headerRow": 2' in shown.output
    assert '"Turma": "ignore"' in shown.output
    assert validated.exit_code == 0, validated.output
    assert "2 alunos prontos para importar, 1 com dados faltando." in validated.output
    assert "linha 2: faltando name" in validated.output


def test_show_config_for_unknown_file_fails(tmp_path: Path) -> None:
    result = _invoke(tmp_path / "persist", "show-config", "nunca.xlsx")

    assert result.exit_code == 1


def test_invalid_school_is_rejected(tmp_path: Path) -> None:
    result = _invoke(
        tmp_path / "persist",
        "add-school",
        "--name",
        "EMEF Centro",
        "--address",
        " ",
        "--hash",
        "h1",
        "--school-type",
        "MUNICIPAL",
    )

    assert result.exit_code == 1
    assert "O endereço é obrigatório." in result.output


def test_log_level_option_sets_application_logger(tmp_path: Path) -> None:
    logger = logging.getLogger("schoolroute")
    previous = logger.level
    try:
        result = _invoke(tmp_path / "persist", "--log-level", "warning", "init")
        assert result.exit_code == 0, result.output
        assert logger.level == logging.WARNING
    finally:
        logger.setLevel(previous)
