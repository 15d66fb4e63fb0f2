"""Typer based command line entry points for SchoolRoute."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from schoolroute.config import Settings, resolve_settings
from schoolroute.core.errors import ConfigError
from schoolroute.core.logger import get_logger
from schoolroute.services.student_import import StudentImportWizard, WizardStep
from schoolroute_io.schema import IGNORE, STUDENT_FIELDS
from schoolroute_persist.crypto import RecordCipher
from schoolroute_persist.schemas.common import ActionResult
from schoolroute_persist.stores.import_config_store import ImportConfigStore
from schoolroute_persist.stores.school_store import SchoolStore

app = typer.Typer(help="Manage student spreadsheet imports and mapping configurations.")

_FIELD_LABELS = {option.value: option.label for option in STUDENT_FIELDS}


@dataclass
class _CliState:
    settings: Settings

    def cipher(self) -> RecordCipher:
        try:
            return RecordCipher.from_settings(self.settings)
        except ConfigError as exc:
            raise typer.BadParameter(str(exc)) from exc

    def config_store(self) -> ImportConfigStore:
        return ImportConfigStore(self.cipher(), self.settings.data_root)

    def school_store(self) -> SchoolStore:
        return SchoolStore(self.cipher(), self.settings.data_root)

    def wizard(self) -> StudentImportWizard:
        schools = self.school_store()
        return StudentImportWizard(self.config_store(), schools.known_school_names)


def _state(ctx: typer.Context) -> _CliState:
    state = ctx.obj
    if not isinstance(state, _CliState):
        raise typer.BadParameter("Settings were not resolved")
    return state


def _exit_on_failure(result: ActionResult) -> None:
    if not result.success:
        typer.secho(result.message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.callback()
def main_callback(
    ctx: typer.Context,
    settings_path: Optional[Path] = typer.Option(None, "--settings", help="Optional YAML settings file."),
    root: Optional[Path] = typer.Option(None, help="Alternate persistence root (defaults to ~/SchoolRoute)."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Set logging level (e.g. DEBUG/INFO/WARNING)."),
) -> None:
    """Resolve settings and configure logging before executing commands."""

    try:
        settings = resolve_settings(settings_path)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if root is not None:
        settings = Settings(
            encryption_secret_key=settings.encryption_secret_key,
            data_root=root.expanduser().resolve(),
            log_level=settings.log_level,
        )

    level_name = (log_level or settings.log_level).upper()
    if not isinstance(getattr(logging, level_name, None), int):
        raise typer.BadParameter(f"Unknown log level: {level_name}")
    get_logger(settings.data_root / "logs", level=level_name)
    ctx.obj = _CliState(settings=settings)


def _open_wizard(
    state: _CliState,
    path: Path,
    sheet: Optional[str],
    header_row: Optional[int],
) -> StudentImportWizard:
    wizard = state.wizard()
    _exit_on_failure(wizard.select_file(path.name, path.read_bytes()))
    result = wizard.proceed_to_mapping()
    if wizard.step != WizardStep.MAPPING:
        _exit_on_failure(result)
    if sheet is not None:
        result = wizard.select_sheet(sheet)
        if wizard.selected_sheet != sheet:
            _exit_on_failure(result)
    if header_row is not None:
        result = wizard.set_header_row(header_row)
    if not result.success:
        typer.secho(result.message, fg=typer.colors.YELLOW, err=True)
    return wizard


def _print_mapping(wizard: StudentImportWizard) -> None:
    typer.echo(f"Sheets: {', '.join(wizard.sheet_names)} (primary: {wizard.primary_sheet})")
    typer.echo(f"Sheet {wizard.selected_sheet}, header row {wizard.header_row}, {len(wizard.extract.rows)} data rows")
    for header in wizard.headers:
        target = wizard.mapping_for(header)
        label = _FIELD_LABELS.get(target, "Ignorar esta coluna") if target != IGNORE else "Ignorar esta coluna"
        typer.echo(f"  {header or '<vazio>'} -> {target} ({label})")


@app.command("init")
def init_command(ctx: typer.Context) -> None:
    """Ensure the collection workbooks exist."""

    state = _state(ctx)
    typer.echo(f"import-configurations ready: {state.config_store().init_store()}")
    typer.echo(f"schools ready: {state.school_store().init_store()}")


@app.command("preview")
def preview_command(
    ctx: typer.Context,
    path: Path = typer.Argument(..., exists=True, file_okay=True, dir_okay=False, readable=True),
    sheet: Optional[str] = typer.Option(None, help="Sheet to inspect (defaults to the primary sheet)."),
    header_row: Optional[int] = typer.Option(None, min=1, help="1-based row holding the column titles."),
) -> None:
    """Show headers and the proposed column mapping for a spreadsheet."""

    wizard = _open_wizard(_state(ctx), path, sheet, header_row)
    _print_mapping(wizard)


@app.command("save-config")
def save_config_command(
    ctx: typer.Context,
    path: Path = typer.Argument(..., exists=True, file_okay=True, dir_okay=False, readable=True),
    header_row: Optional[int] = typer.Option(None, min=1, help="1-based row holding the column titles."),
    primary_sheet: Optional[str] = typer.Option(None, help="Sheet to mark as primary."),
    mapping: Optional[Path] = typer.Option(
        None,
        exists=True,
        readable=True,
        help="JSON file with header -> field overrides applied on top of the proposal.",
    ),
) -> None:
    """Persist the mapping for every sheet of the spreadsheet, keyed by its file name."""

    state = _state(ctx)
    wizard = _open_wizard(state, path, primary_sheet, header_row)
    if primary_sheet is not None:
        _exit_on_failure(wizard.set_primary_sheet(primary_sheet))
    if mapping is not None:
        overrides = json.loads(mapping.read_text(encoding="utf-8"))
        if not isinstance(overrides, dict):
            raise typer.BadParameter("Mapping file must contain a JSON object")
        for header, target in overrides.items():
            _exit_on_failure(wizard.update_mapping(str(header), str(target)))
    result = wizard.save_configuration()
    _exit_on_failure(result)
    typer.echo(result.message)
    _print_mapping(wizard)


@app.command("show-config")
def show_config_command(
    ctx: typer.Context,
    file_name: str = typer.Argument(..., help="Original spreadsheet file name, e.g. turma.xlsx."),
) -> None:
    """Print the stored configuration for a file name."""

    config = _state(ctx).config_store().get(file_name)
    if config is None:
        typer.echo(f"Nenhuma configuração utilizável para {file_name}.")
        raise typer.Exit(code=1)
    typer.echo(json.dumps(config.to_document(), ensure_ascii=False, indent=2))


@app.command("validate")
def validate_command(
    ctx: typer.Context,
    path: Path = typer.Argument(..., exists=True, file_okay=True, dir_okay=False, readable=True),
    sheet: Optional[str] = typer.Option(None, help="Sheet to use as primary."),
    header_row: Optional[int] = typer.Option(None, min=1, help="1-based row holding the column titles."),
) -> None:
    """Dry-run the spreadsheet against registered schools without importing anything."""

    wizard = _open_wizard(_state(ctx), path, sheet, header_row)
    if sheet is not None:
        _exit_on_failure(wizard.set_primary_sheet(sheet))
    result = wizard.run_validation()
    _exit_on_failure(result)
    summary = wizard.summary
    if summary is None:
        raise typer.Exit(code=1)
    typer.echo(result.message)
    for issue in summary.issues:
        typer.echo(f"  linha {issue.row_index}: faltando {', '.join(issue.missing_fields)}")
    if summary.new_schools:
        typer.echo("Escolas não cadastradas:")
        for name, count in summary.new_schools.items():
            typer.echo(f"  {name} ({count} alunos)")


@app.command("add-school")
def add_school_command(
    ctx: typer.Context,
    name: str = typer.Option(..., help="School name."),
    address: str = typer.Option(..., help="Street address."),
    school_hash: str = typer.Option(..., "--hash", help="Registration hash."),
    school_type: str = typer.Option(..., help="MUNICIPAL, ESTADUAL or MUNICIPALIZADA."),
) -> None:
    """Register a school so its students validate as importable."""

    result = _state(ctx).school_store().add_school(
        {"name": name, "address": address, "hash": school_hash, "schoolType": school_type.upper()}
    )
    _exit_on_failure(result)
    typer.echo(result.message)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
