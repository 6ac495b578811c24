# backend/tests/test_schemas.py

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from app.schemas.question import Question, QuestionType
from app.schemas.survey import Survey
from conftest import make_survey_row


def test_question_kind_parses_known_types():
    assert Question(id="q1", type="checkbox", label="Tags").kind is QuestionType.CHECKBOX
    assert Question(id="q1", type="hologram", label="?").kind is None


def test_scale_bounds_default_to_one_to_five():
    question = Question(id="q1", type="scale", label="Mood")

    assert (question.scale_min, question.scale_max) == (1, 5)


def test_duplicate_option_ids_are_rejected():
    with pytest.raises(ValidationError):
        Question(id="q1", type="radio", label="Pick", options=[{"id": "a", "label": "A"}, {"id": "a", "label": "B"}])


def test_duplicate_question_ids_are_rejected():
    row = make_survey_row(structure=[
        {"id": "q1", "type": "text", "label": "One"},
        {"id": "q1", "type": "text", "label": "Two"},
    ])

    with pytest.raises(ValidationError):
        Survey(**row)


def test_survey_expiry():
    now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    assert not Survey(**make_survey_row()).is_expired(now)
    assert Survey(**make_survey_row(expires_at=(now - timedelta(days=1)).isoformat())).is_expired(now)
    assert not Survey(**make_survey_row(expires_at=(now + timedelta(days=1)).isoformat())).is_expired(now)
    assert Survey(**make_survey_row(expires_at="2024-05-01T00:00:00")).is_expired(now)
