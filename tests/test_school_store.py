"""School registration store tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from schoolroute_persist.crypto import ENVELOPE_FIELD, RecordCipher
from schoolroute_persist.stores.base_store import StoreCorruptedError
from schoolroute_persist.stores.school_store import CREATED_MESSAGE, SchoolStore


def _school(name: str = "EMEF Centro", **overrides: object) -> dict:
    payload: dict[str, object] = {
        "name": name,
        "address": "Rua das Flores, 10",
        "hash": "abc123",
        "schoolType": "MUNICIPAL",
    }
    payload.update(overrides)
    return payload


def test_add_school_stamps_status_and_creation_time(cipher: RecordCipher, root: Path) -> None:
    store = SchoolStore(cipher, root)

    result = store.add_school(_school(grades=[{"name": "5º ano", "classes": [{"name": "A", "period": "Manhã"}]}]))

    assert result.success
    assert result.message == CREATED_MESSAGE
    [school] = store.list_schools()
    assert school.id
    assert school.status == "Ativa"
    assert school.created_at is not None
    assert school.grades is not None and school.grades[0].classes[0].period == "Manhã"


def test_school_documents_are_encrypted(cipher: RecordCipher, root: Path) -> None:
    store = SchoolStore(cipher, root)
    store.add_school(_school())

    [(_, document)] = store.collection.items()

    assert set(document) == {ENVELOPE_FIELD}
    assert "EMEF" not in document[ENVELOPE_FIELD]


def test_required_fields_are_reported_together(cipher: RecordCipher, root: Path) -> None:
    result = SchoolStore(cipher, root).add_school(_school(name=" ", address="", schoolType="PARTICULAR"))

    assert not result.success
    assert result.message.startswith("Erro de validação:")
    assert "O nome é obrigatório." in result.message
    assert "O endereço é obrigatório." in result.message
    assert "schoolType" in result.message


def test_lookup_is_case_insensitive(cipher: RecordCipher, root: Path) -> None:
    store = SchoolStore(cipher, root)
    store.add_school(_school("EMEF Centro"))
    store.add_school(_school("EE Norte", schoolType="ESTADUAL"))

    assert store.known_school_names() == {"emef centro", "ee norte"}
    found = store.find_by_name("  emef CENTRO ")
    assert found is not None and found.name == "EMEF Centro"
    assert store.find_by_name("Outra") is None


def test_unreadable_documents_are_skipped(cipher: RecordCipher, root: Path) -> None:
    store = SchoolStore(cipher, root)
    store.add_school(_school())
    store.collection.set("lixo", {ENVELOPE_FIELD: "invalido"}, merge=False)

    assert [school.name for school in store.list_schools()] == ["EMEF Centro"]


def test_corrupt_collection_workbook_raises_store_error(cipher: RecordCipher, root: Path) -> None:
    store = SchoolStore(cipher, root)
    store.add_school(_school())
    store.collection.path.write_bytes(b"not a zip")

    with pytest.raises(StoreCorruptedError):
        store.list_schools()
    assert not store.add_school(_school("EE Norte")).success
