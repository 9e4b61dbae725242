"""Parse a candidate JSON string and check it against the StudyPackage shape."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import ValidationError

from app.core.errors import ParseError, SchemaError
from app.modules.study_buddy.models import StudyPackage


class IssueKind(str, Enum):
    MISSING_FIELD = "missing_field"
    CARDINALITY = "cardinality"
    OPTION_COUNT = "option_count"
    INDEX_RANGE = "index_range"
    DUPLICATE_OPTIONS = "duplicate_options"
    FIXED_VALUE = "fixed_value"
    BLANK_TEXT = "blank_text"
    WRONG_TYPE = "wrong_type"


@dataclass(frozen=True)
class SchemaIssue:
    kind: IssueKind
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path or '<root>'}: {self.message}"


@dataclass
class ValidatedPackage:
    """Typed package plus the parsed payload exactly as the model sent it."""

    package: StudyPackage
    payload: dict[str, Any]


_OPTION_FIELDS = {"options", "optionsTamil"}


def _path(loc: tuple) -> str:
    return ".".join(str(p) for p in loc)


def _classify(err: dict) -> IssueKind:
    etype = err["type"]
    loc = err["loc"]
    last = loc[-1] if loc else None

    if etype == "missing":
        return IssueKind.MISSING_FIELD
    if etype in ("too_short", "too_long"):
        if last in _OPTION_FIELDS:
            return IssueKind.OPTION_COUNT
        return IssueKind.CARDINALITY
    if etype in ("greater_than_equal", "less_than_equal") and last == "correct":
        return IssueKind.INDEX_RANGE
    if etype == "duplicate_options":
        return IssueKind.DUPLICATE_OPTIONS
    if etype == "literal_error":
        return IssueKind.FIXED_VALUE
    if etype == "string_pattern_mismatch":
        return IssueKind.BLANK_TEXT
    return IssueKind.WRONG_TYPE


def issues_from_validation_error(exc: ValidationError) -> list[SchemaIssue]:
    issues: list[SchemaIssue] = []
    for err in exc.errors(include_url=False):
        kind = _classify(err)
        msg = err["msg"]
        if kind is IssueKind.BLANK_TEXT:
            msg = "text must not be blank"
        issues.append(SchemaIssue(kind=kind, path=_path(err["loc"]), message=msg))
    return issues


def _reject_constant(name: str):
    raise ParseError(detail=f"non-standard constant {name} in reply")


def parse_candidate(candidate: str) -> dict[str, Any]:
    try:
        # NaN and Infinity are not JSON and cannot be rendered back out
        payload = json.loads(candidate, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise ParseError(detail=f"{e.msg} at line {e.lineno} column {e.colno}") from e

    if not isinstance(payload, dict):
        raise SchemaError(
            issues=[
                SchemaIssue(
                    kind=IssueKind.WRONG_TYPE,
                    path="",
                    message=f"expected a JSON object, got {type(payload).__name__}",
                )
            ]
        )
    return payload


def validate_study_package(payload: dict[str, Any]) -> StudyPackage:
    """Validate ``payload``; raise ``SchemaError`` listing every issue found."""
    try:
        return StudyPackage.model_validate(payload)
    except ValidationError as e:
        issues = issues_from_validation_error(e)
        first = issues[0] if issues else None
        message = SchemaError.default_message
        if first is not None:
            message = f"{message} {first}"
        raise SchemaError(message, issues=issues) from e


def load_study_package(candidate: str) -> ValidatedPackage:
    payload = parse_candidate(candidate)
    return ValidatedPackage(package=validate_study_package(payload), payload=payload)
