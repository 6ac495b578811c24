# backend/app/schemas/survey.py

from pydantic import BaseModel, field_validator
from typing import Optional, List
from datetime import datetime
from app.schemas.question import Question, ensure_unique_question_ids
from app.schemas.response import CamelModel

class SurveyBase(BaseModel):
    title: str
    description: Optional[str] = None
    expires_at: Optional[datetime] = None
    is_anonymous: bool = False

class SurveyCreate(SurveyBase):
    structure: List[Question]

    @field_validator("structure")
    @classmethod
    def check_unique_question_ids(cls, structure: List[Question]) -> List[Question]:
        ensure_unique_question_ids(structure)
        return structure

class SurveyUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    structure: Optional[List[Question]] = None
    expires_at: Optional[datetime] = None
    is_anonymous: Optional[bool] = None

    @field_validator("structure")
    @classmethod
    def check_unique_question_ids(cls, structure: Optional[List[Question]]) -> Optional[List[Question]]:
        if structure is not None:
            ensure_unique_question_ids(structure)
        return structure

class SurveyActiveToggle(BaseModel):
    # None flips the current state
    active: Optional[bool] = None

class SurveyActiveState(CamelModel):
    id: str
    is_active: bool

class Survey(SurveyBase):
    id: str
    structure: List[Question]
    is_active: bool
    created_by: str
    created_at: datetime
    updated_at: datetime
    public_url: Optional[str] = None

    @field_validator("structure")
    @classmethod
    def check_unique_question_ids(cls, structure: List[Question]) -> List[Question]:
        ensure_unique_question_ids(structure)
        return structure

    def is_expired(self, now: datetime) -> bool:
        if self.expires_at is None:
            return False
        expires_at = self.expires_at
        # naive timestamps from storage are treated as being in the caller's zone
        if expires_at.tzinfo is None and now.tzinfo is not None:
            expires_at = expires_at.replace(tzinfo=now.tzinfo)
        return now > expires_at

class SurveySummary(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    is_active: bool
    expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    response_count: int
