# backend/app/schemas/response.py

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional, Union
from datetime import datetime


class SubmissionRequest(BaseModel):
    data: Dict[str, Any] = Field(default_factory=dict)

class SubmissionAccepted(BaseModel):
    message: str

class AnswerRecord(BaseModel):
    id: Optional[str] = None
    survey_id: str
    data: Dict[str, Any]
    submitter_ip: Optional[str] = None
    submitted_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: dict) -> "AnswerRecord":
        return cls(
            id=row.get("id"),
            survey_id=row["survey_id"],
            data=row.get("data") or {},
            submitter_ip=row.get("ip"),
            submitted_at=row.get("submitted_at"),
        )

class ValidationResult(BaseModel):
    accepted: bool
    errors: List[str] = Field(default_factory=list)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class OptionStats(CamelModel):
    id: str
    label: str
    count: int
    percentage: float

class ChoiceStats(CamelModel):
    question_label: str
    type: str
    options: List[OptionStats]
    total_answers: int

class ScaleStats(CamelModel):
    question_label: str
    type: str
    average: float
    min: Union[int, float]
    max: Union[int, float]
    total_answers: int

class TextStats(CamelModel):
    question_label: str
    type: str
    total_answers: int
    filled_percentage: float

class AnswerCountStats(CamelModel):
    question_label: str
    type: str
    total_answers: int

QuestionStats = Union[ChoiceStats, ScaleStats, TextStats, AnswerCountStats]

class ResponseSummary(CamelModel):
    total_responses: int
    first_response: Optional[datetime] = None
    last_response: Optional[datetime] = None

class SurveyStats(CamelModel):
    survey_id: str
    basic_stats: ResponseSummary
    detailed_stats: Dict[str, QuestionStats]


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

class SurveyResponses(CamelModel):
    survey_id: str
    responses: List[AnswerRecord]
    pagination: Pagination
