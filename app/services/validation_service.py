# backend/app/services/validation_service.py

import logging
import math
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from app.schemas.question import Question, QuestionType
from app.schemas.response import ValidationResult

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_PATTERN = re.compile(r"\+?[0-9\s\-()]{7,15}")
DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def is_unanswered(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def is_valid_email(value: str) -> bool:
    return EMAIL_PATTERN.fullmatch(value) is not None


def is_valid_phone(value: str) -> bool:
    return PHONE_PATTERN.fullmatch(value) is not None


def is_valid_date(value: str) -> bool:
    if DATE_PATTERN.fullmatch(value) is None:
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def is_valid_datetime(value: str) -> bool:
    try:
        datetime.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def is_integer(value: Any) -> bool:
    # JSON numbers: 3 and 3.0 are the same integer, booleans are not numbers
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value) and value.is_integer()


def _check_text(question: Question, answer: Any) -> Optional[str]:
    if not isinstance(answer, str):
        return f'Answer to "{question.label}" must be text'
    return None


def _check_email(question: Question, answer: Any) -> Optional[str]:
    if not isinstance(answer, str) or not is_valid_email(answer):
        return f'Answer to "{question.label}" must be a valid email address'
    return None


def _check_phone(question: Question, answer: Any) -> Optional[str]:
    if not isinstance(answer, str) or not is_valid_phone(answer):
        return f'Answer to "{question.label}" must be a valid phone number'
    return None


def _check_date(question: Question, answer: Any) -> Optional[str]:
    if not isinstance(answer, str) or not is_valid_date(answer):
        return f'Answer to "{question.label}" must be a valid date (YYYY-MM-DD)'
    return None


def _check_datetime(question: Question, answer: Any) -> Optional[str]:
    if not isinstance(answer, str) or not is_valid_datetime(answer):
        return f'Answer to "{question.label}" must be a valid date and time'
    return None


def _check_single_choice(question: Question, answer: Any) -> Optional[str]:
    if not isinstance(answer, str):
        return f'Answer to "{question.label}" must be a string (id of the selected option)'
    if question.options is not None and answer not in question.option_ids:
        return f'Answer to "{question.label}" does not match any of the allowed options'
    return None


def _check_multiple_choice(question: Question, answer: Any) -> Optional[str]:
    if not isinstance(answer, list):
        return f'Answer to "{question.label}" must be an array (selected options)'
    if question.options is not None:
        allowed = question.option_ids
        if any(value not in allowed for value in answer):
            return f'Some answers to "{question.label}" do not match the allowed options'
    return None


def _check_scale(question: Question, answer: Any) -> Optional[str]:
    if not is_integer(answer):
        return f'Answer to "{question.label}" must be an integer'
    low, high = question.scale_min, question.scale_max
    if answer < low or answer > high:
        return f'Answer to "{question.label}" must be in range {low}-{high}'
    return None


ANSWER_CHECKS: Dict[QuestionType, Callable[[Question, Any], Optional[str]]] = {
    QuestionType.TEXT: _check_text,
    QuestionType.TEXTAREA: _check_text,
    QuestionType.EMAIL: _check_email,
    QuestionType.PHONE: _check_phone,
    QuestionType.DATE: _check_date,
    QuestionType.DATETIME: _check_datetime,
    QuestionType.RADIO: _check_single_choice,
    QuestionType.SELECT: _check_single_choice,
    QuestionType.CHECKBOX: _check_multiple_choice,
    QuestionType.SCALE: _check_scale,
}

_missing_checks = set(QuestionType) - set(ANSWER_CHECKS)
if _missing_checks:
    raise RuntimeError(f"No answer check registered for: {sorted(t.value for t in _missing_checks)}")


def validate_survey_response(
    structure: List[Question],
    data: Dict[str, Any],
    *,
    reject_empty_required_checkbox: bool = False,
) -> ValidationResult:
    """
    Validate one submission against the survey structure.

    Every problem is collected, so the respondent sees all of them in one
    round trip. Errors follow the order of the structure; fields that are not
    part of the survey are reported last.

    Args:
        structure (List[Question]): The ordered questions of the survey.
        data (Dict[str, Any]): Answers keyed by question id.
        reject_empty_required_checkbox (bool): Treat [] as unanswered for
            required checkbox questions. Off by default, in which case [] is
            accepted and a warning is logged.

    Returns:
        ValidationResult: accepted with no errors, or rejected with all of them.
    """
    errors: List[str] = []

    for question in structure:
        answer = data.get(question.id)

        if question.required and is_unanswered(answer):
            errors.append(f'Required question "{question.label}" is not answered')
            continue

        if is_unanswered(answer):
            continue

        kind = question.kind
        if kind is None:
            errors.append(f"Unknown question type: {question.type}")
            continue

        if kind is QuestionType.CHECKBOX and question.required and answer == []:
            if reject_empty_required_checkbox:
                errors.append(f'Required question "{question.label}" is not answered')
                continue
            logger.warning(f"Required checkbox question {question.id} accepted with no selected options")

        error = ANSWER_CHECKS[kind](question, answer)
        if error:
            errors.append(error)

    allowed_keys = {q.id for q in structure}
    for key in data:
        if key not in allowed_keys:
            errors.append(f'Field "{key}" is not part of the survey')

    return ValidationResult(accepted=not errors, errors=errors)
