import json

import pytest

from app.core.errors import ParseError, SchemaError
from app.modules.study_buddy.validator import (
    IssueKind,
    load_study_package,
    parse_candidate,
    validate_study_package,
)


def _kinds(exc: SchemaError) -> set:
    return {i.kind for i in exc.issues}


def test_valid_package_round_trips(package, package_json):
    result = load_study_package(package_json)
    assert result.payload == package
    assert list(result.payload) == list(package)
    assert result.package.practice_questions.long.marks == 5
    assert result.package.flashcards[0].answer_tamil == "பச்சையம்"


def test_extra_keys_are_kept_in_payload(package):
    package["source"] = "model"
    result = load_study_package(json.dumps(package))
    assert result.payload["source"] == "model"


def test_malformed_json_is_parse_error():
    with pytest.raises(ParseError):
        parse_candidate('{"explanation": {"english": "x",}')


def test_top_level_must_be_object():
    with pytest.raises(SchemaError):
        parse_candidate("[1, 2]")


def test_missing_field(package):
    del package["quickRevision"]
    with pytest.raises(SchemaError) as exc:
        validate_study_package(package)
    assert _kinds(exc.value) == {IssueKind.MISSING_FIELD}
    assert exc.value.issues[0].path == "quickRevision"


def test_missing_tamil_text(package):
    del package["flashcards"][1]["answerTamil"]
    with pytest.raises(SchemaError) as exc:
        validate_study_package(package)
    assert exc.value.issues[0].path == "flashcards.1.answerTamil"


@pytest.mark.parametrize("count", [2, 6])
def test_flashcard_count_out_of_range(package, count):
    card = package["flashcards"][0]
    package["flashcards"] = [dict(card) for _ in range(count)]
    with pytest.raises(SchemaError) as exc:
        validate_study_package(package)
    assert _kinds(exc.value) == {IssueKind.CARDINALITY}


@pytest.mark.parametrize("count", [3, 4, 5])
def test_flashcard_count_in_range(package, count):
    card = package["flashcards"][0]
    package["flashcards"] = [dict(card) for _ in range(count)]
    assert len(validate_study_package(package).flashcards) == count


def test_mcq_and_short_counts(package):
    package["practiceQuestions"]["mcq"].pop()
    package["practiceQuestions"]["short"].pop()
    with pytest.raises(SchemaError) as exc:
        validate_study_package(package)
    paths = {i.path for i in exc.value.issues}
    assert paths == {"practiceQuestions.mcq", "practiceQuestions.short"}
    assert _kinds(exc.value) == {IssueKind.CARDINALITY}


def test_option_count(package):
    package["practiceQuestions"]["mcq"][0]["options"] = ["A", "B", "C"]
    with pytest.raises(SchemaError) as exc:
        validate_study_package(package)
    assert _kinds(exc.value) == {IssueKind.OPTION_COUNT}


@pytest.mark.parametrize("correct", [-1, 4, 5])
def test_correct_index_out_of_range(package, correct):
    package["practiceQuestions"]["mcq"][2]["correct"] = correct
    with pytest.raises(SchemaError) as exc:
        validate_study_package(package)
    assert _kinds(exc.value) == {IssueKind.INDEX_RANGE}
    assert "practiceQuestions.mcq.2.correct" in exc.value.public_message


@pytest.mark.parametrize("correct", ["1", True, 1.0])
def test_correct_index_must_be_integer(package, correct):
    package["practiceQuestions"]["mcq"][0]["correct"] = correct
    with pytest.raises(SchemaError) as exc:
        validate_study_package(package)
    assert _kinds(exc.value) == {IssueKind.WRONG_TYPE}


def test_duplicate_options(package):
    package["practiceQuestions"]["mcq"][1]["optionsTamil"] = ["அ", "ஆ", "அ", "ஈ"]
    with pytest.raises(SchemaError) as exc:
        validate_study_package(package)
    assert _kinds(exc.value) == {IssueKind.DUPLICATE_OPTIONS}
    assert exc.value.issues[0].path == "practiceQuestions.mcq.1.optionsTamil"


def test_fixed_marks(package):
    package["practiceQuestions"]["long"]["marks"] = 10
    with pytest.raises(SchemaError) as exc:
        validate_study_package(package)
    assert _kinds(exc.value) == {IssueKind.FIXED_VALUE}


def test_blank_text(package):
    package["explanation"]["tamil"] = "   "
    with pytest.raises(SchemaError) as exc:
        validate_study_package(package)
    assert _kinds(exc.value) == {IssueKind.BLANK_TEXT}


def test_wrong_container_type(package):
    package["flashcards"] = {"question": "x"}
    with pytest.raises(SchemaError) as exc:
        validate_study_package(package)
    assert _kinds(exc.value) == {IssueKind.WRONG_TYPE}


@pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
def test_non_standard_constants_are_parse_errors(package_json, constant):
    with pytest.raises(ParseError):
        load_study_package(package_json[:-1] + f', "score": {constant}}}')
