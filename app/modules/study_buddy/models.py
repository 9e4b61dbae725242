"""Pydantic models for the bilingual StudyPackage.

Field names mirror the JSON contract the front end consumes (camelCase
aliases). Only structure is enforced: the English and Tamil texts are both
required and non-blank, but whether they mean the same thing cannot be checked
here.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    StringConstraints,
    field_validator,
)
from pydantic_core import PydanticCustomError


FLASHCARDS_MIN = 3
FLASHCARDS_MAX = 5
MCQ_COUNT = 3
MCQ_OPTIONS = 4
SHORT_COUNT = 2

# Non-blank JSON string; no coercion from numbers
Text = Annotated[StrictStr, StringConstraints(pattern=r"\S")]
Options = Annotated[list[Text], Field(min_length=MCQ_OPTIONS, max_length=MCQ_OPTIONS)]


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class BilingualText(_Model):
    english: Text
    tamil: Text


class Flashcard(_Model):
    question: Text
    answer: Text
    question_tamil: Text = Field(alias="questionTamil")
    answer_tamil: Text = Field(alias="answerTamil")


class MultipleChoiceQuestion(_Model):
    question: Text
    question_tamil: Text = Field(alias="questionTamil")
    options: Options
    options_tamil: Options = Field(alias="optionsTamil")
    correct: StrictInt = Field(ge=0, le=MCQ_OPTIONS - 1)

    @field_validator("options", "options_tamil")
    @classmethod
    def _unique_options(cls, value: list[str]) -> list[str]:
        seen: set[str] = set()
        for opt in value:
            key = opt.strip()
            if key in seen:
                raise PydanticCustomError(
                    "duplicate_options",
                    "options must be unique, {option!r} appears more than once",
                    {"option": opt},
                )
            seen.add(key)
        return value


class ShortAnswerQuestion(_Model):
    question: Text
    question_tamil: Text = Field(alias="questionTamil")
    marks: Literal[2]


class LongAnswerQuestion(_Model):
    question: Text
    question_tamil: Text = Field(alias="questionTamil")
    marks: Literal[5]


class PracticeQuestions(_Model):
    mcq: list[MultipleChoiceQuestion] = Field(
        min_length=MCQ_COUNT, max_length=MCQ_COUNT
    )
    short: list[ShortAnswerQuestion] = Field(
        min_length=SHORT_COUNT, max_length=SHORT_COUNT
    )
    long: LongAnswerQuestion


class StudyPackage(_Model):
    """The validated bilingual study material returned for one query."""

    explanation: BilingualText
    flashcards: list[Flashcard] = Field(
        min_length=FLASHCARDS_MIN, max_length=FLASHCARDS_MAX
    )
    practice_questions: PracticeQuestions = Field(alias="practiceQuestions")
    quick_revision: BilingualText = Field(alias="quickRevision")
