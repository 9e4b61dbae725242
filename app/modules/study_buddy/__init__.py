"""Study buddy module exports."""

from .models import StudyPackage
from .extractor import extract_json_object
from .validator import ValidatedPackage, load_study_package
from .handler import GenerationHandler

__all__ = [
    "StudyPackage",
    "extract_json_object",
    "ValidatedPackage",
    "load_study_package",
    "GenerationHandler",
]
