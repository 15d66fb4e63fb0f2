"""
Persistence facade exposing the encrypted, XLSX-backed stores.
"""

from .crypto import ENVELOPE_FIELD, RecordCipher
from .schemas import ActionResult, ImportConfig, NewSchool, School, SheetConfig
from .stores.document_store import DocumentCollection
from .stores.import_config_store import ImportConfigStore, get_import_config, save_import_config
from .stores.school_store import SchoolStore

__all__ = [
    "ENVELOPE_FIELD",
    "RecordCipher",
    "ActionResult",
    "ImportConfig",
    "SheetConfig",
    "NewSchool",
    "School",
    "DocumentCollection",
    "ImportConfigStore",
    "SchoolStore",
    "save_import_config",
    "get_import_config",
]
