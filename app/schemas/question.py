# backend/app/schemas/question.py

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, model_validator


class QuestionType(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    RADIO = "radio"
    SELECT = "select"
    CHECKBOX = "checkbox"
    EMAIL = "email"
    PHONE = "phone"
    DATE = "date"
    DATETIME = "datetime"
    SCALE = "scale"


CHOICE_TYPES = frozenset({QuestionType.RADIO, QuestionType.SELECT, QuestionType.CHECKBOX})
TEXT_TYPES = frozenset({
    QuestionType.TEXT,
    QuestionType.TEXTAREA,
    QuestionType.EMAIL,
    QuestionType.PHONE,
    QuestionType.DATE,
    QuestionType.DATETIME,
})

DEFAULT_SCALE_MIN = 1
DEFAULT_SCALE_MAX = 5


class QuestionOption(BaseModel):
    id: str
    label: str


class Question(BaseModel):
    """
    One item of a survey structure.

    `type` keeps the raw string from the stored structure so that surveys
    saved with a type this backend does not know still load; use `kind`
    to get the parsed QuestionType (None when unrecognized).
    """
    id: str
    type: str
    label: str
    description: Optional[str] = None
    required: bool = False
    options: Optional[List[QuestionOption]] = None
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None
    step: Optional[Union[int, float]] = None

    @model_validator(mode="after")
    def check_unique_option_ids(self):
        if self.options:
            option_ids = [opt.id for opt in self.options]
            if len(option_ids) != len(set(option_ids)):
                raise ValueError(f"Question {self.id} has duplicate option ids")
        return self

    @property
    def kind(self) -> Optional[QuestionType]:
        try:
            return QuestionType(self.type)
        except ValueError:
            return None

    @property
    def option_ids(self) -> List[str]:
        return [opt.id for opt in self.options or []]

    @property
    def scale_min(self) -> Union[int, float]:
        return self.min if self.min is not None else DEFAULT_SCALE_MIN

    @property
    def scale_max(self) -> Union[int, float]:
        return self.max if self.max is not None else DEFAULT_SCALE_MAX


def ensure_unique_question_ids(structure: List[Question]) -> None:
    question_ids = [q.id for q in structure]
    if len(question_ids) != len(set(question_ids)):
        raise ValueError("Survey structure has duplicate question ids")
