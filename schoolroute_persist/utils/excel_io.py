"""
RESPONSIBILITIES
- Manage atomic read/write operations for collection workbooks via openpyxl.
- Provide lightweight locking to guard against concurrent writers.
PROCESS OVERVIEW
1. workbook_lock() acquires an in-process lock plus a sidecar lock file.
2. ensure_workbook() guarantees the sheet/header skeleton exists.
3. read_sheet() loads rows into dictionaries keyed by the declared columns.
4. write_sheet() writes rows back atomically using a temporary file swap.
"""

from __future__ import annotations

import os
import threading
import time
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Mapping, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from schoolroute_persist.stores.base_store import (
    StoreCorruptedError,
    StoreInitializationError,
    StoreLockedError,
)

LOCK_TIMEOUT_SEC = 5.0
_LOCK_POLL_SEC = 0.05

_IN_PROCESS_LOCKS: dict[Path, threading.RLock] = {}
_LOCK_REGISTRY_GUARD = threading.Lock()


def _inprocess_lock(path: Path) -> threading.RLock:
    with _LOCK_REGISTRY_GUARD:
        lock = _IN_PROCESS_LOCKS.get(path)
        if lock is None:
            lock = threading.RLock()
            _IN_PROCESS_LOCKS[path] = lock
        return lock


def _lock_path(path: Path) -> Path:
    return path.with_suffix(path.suffix + ".lock")


@contextmanager
def workbook_lock(path: Path, *, timeout: float = LOCK_TIMEOUT_SEC) -> Iterator[None]:
    """Hold exclusive write access to *path* for the duration of the block.

    The sidecar ``.lock`` file is polled until *timeout*; a writer that holds
    it longer surfaces as :class:`StoreLockedError`.
    """

    path = path.resolve()
    inproc = _inprocess_lock(path)
    if not inproc.acquire(timeout=timeout):
        raise StoreLockedError(f"Timeout acquiring in-process lock for {path}")
    lock_path = _lock_path(path)
    fd: int | None = None
    try:
        deadline = time.monotonic() + timeout
        while fd is None:
            try:
                fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            except FileExistsError as exc:
                if time.monotonic() >= deadline:
                    raise StoreLockedError(f"Workbook appears locked: {lock_path}") from exc
                time.sleep(_LOCK_POLL_SEC)
        os.write(fd, str(os.getpid()).encode("ascii"))
        yield
    finally:
        if fd is not None:
            os.close(fd)
            lock_path.unlink(missing_ok=True)
        inproc.release()


def _atomic_save(workbook: Workbook, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    workbook.save(tmp_path)
    os.replace(tmp_path, path)


def _open_workbook(path: Path, **kwargs: object) -> Workbook:
    try:
        return load_workbook(path, **kwargs)
    except (zipfile.BadZipFile, InvalidFileException, KeyError) as exc:
        raise StoreCorruptedError(f"Workbook {path} is not a readable XLSX file: {exc}") from exc


def _header(values: Sequence[object] | None) -> list[str]:
    return [str(cell).strip() if cell is not None else "" for cell in (values or ())]


def ensure_workbook(path: Path, sheet_name: str, columns: Sequence[str]) -> None:
    """Ensure the workbook at *path* holds *sheet_name* with the *columns* header."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with workbook_lock(path):
        if not path.exists():
            workbook = Workbook()
            worksheet = workbook.active
            worksheet.title = sheet_name
            worksheet.append(list(columns))
            _atomic_save(workbook, path)
            return

        workbook = _open_workbook(path)
        try:
            if sheet_name not in workbook.sheetnames:
                worksheet = workbook.create_sheet(title=sheet_name)
                worksheet.append(list(columns))
                _atomic_save(workbook, path)
                return
            worksheet = workbook[sheet_name]
            first = next(worksheet.iter_rows(min_row=1, max_row=1, values_only=True), None)
            current = _header(first)
            if current != list(columns):
                raise StoreInitializationError(
                    f"Unexpected header in {path}:{sheet_name}: {current} (expected {list(columns)})"
                )
        finally:
            workbook.close()


def _read_without_lock(path: Path, sheet_name: str, columns: Sequence[str]) -> list[dict[str, object]]:
    if not path.exists():
        return []
    workbook = _open_workbook(path, read_only=True, data_only=True)
    try:
        if sheet_name not in workbook.sheetnames:
            return []
        rows_iter = workbook[sheet_name].iter_rows(values_only=True)
        header = _header(next(rows_iter, None))
        index_map = {name: idx for idx, name in enumerate(header) if name}
        records: list[dict[str, object]] = []
        for raw_values in rows_iter:
            if not raw_values or not any(cell is not None and str(cell).strip() for cell in raw_values):
                continue
            record: dict[str, object] = {}
            for column in columns:
                idx = index_map.get(column)
                value = raw_values[idx] if idx is not None and idx < len(raw_values) else None
                record[column] = "" if value is None else value
            records.append(record)
        return records
    finally:
        workbook.close()


def read_sheet(path: Path, sheet_name: str, columns: Sequence[str], *, use_lock: bool = True) -> list[dict[str, object]]:
    """Return worksheet content as dictionaries keyed by *columns*."""

    if use_lock:
        with workbook_lock(path):
            return _read_without_lock(path, sheet_name, columns)
    return _read_without_lock(path, sheet_name, columns)


def write_sheet(
    path: Path,
    sheet_name: str,
    rows: Iterable[Mapping[str, object]],
    columns: Sequence[str],
    *,
    use_lock: bool = True,
) -> None:
    """Replace the worksheet content with *rows*, atomically."""

    def _write() -> None:
        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = sheet_name
        worksheet.append(list(columns))
        for row in rows:
            worksheet.append([row.get(column, "") for column in columns])
        _atomic_save(workbook, path)

    if use_lock:
        with workbook_lock(path):
            _write()
    else:
        _write()
