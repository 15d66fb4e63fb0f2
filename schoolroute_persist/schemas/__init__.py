from .common import ActionResult, format_validation_error
from .import_config import ImportConfig, SheetConfig
from .school import NewSchool, School, SchoolClass, SchoolGrade, normalize_school_name

__all__ = [
    "ActionResult",
    "format_validation_error",
    "ImportConfig",
    "SheetConfig",
    "NewSchool",
    "School",
    "SchoolClass",
    "SchoolGrade",
    "normalize_school_name",
]
