# backend/app/services/stats_service.py

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, List, Optional

from app.schemas.question import CHOICE_TYPES, TEXT_TYPES, Question, QuestionType
from app.schemas.response import (
    AnswerCountStats,
    AnswerRecord,
    ChoiceStats,
    OptionStats,
    QuestionStats,
    ResponseSummary,
    ScaleStats,
    TextStats,
)


def round_half_up(value: float) -> float:
    # ties go away from zero: 3.125 -> 3.13
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def percent(part: int, whole: int) -> float:
    if whole == 0:
        return 0.0
    return round_half_up(part / whole * 100)


def is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def _choice_stats(question: Question, answers: List[Any], record_count: int) -> ChoiceStats:
    counts: Dict[str, int] = {opt.id: 0 for opt in question.options or []}

    for answer in answers:
        multiple = question.kind is QuestionType.CHECKBOX and isinstance(answer, list)
        selected = answer if multiple else [answer]
        for value in selected:
            if isinstance(value, str) and value in counts:
                counts[value] += 1

    total = len(answers)
    return ChoiceStats(
        question_label=question.label,
        type=question.type,
        options=[
            OptionStats(
                id=opt.id,
                label=opt.label,
                count=counts[opt.id],
                percentage=percent(counts[opt.id], total),
            )
            for opt in question.options or []
        ],
        total_answers=total,
    )


def _scale_stats(question: Question, answers: List[Any], record_count: int) -> Optional[ScaleStats]:
    numbers = [a for a in answers if is_number(a)]
    if not numbers:
        return None
    return ScaleStats(
        question_label=question.label,
        type=question.type,
        average=round_half_up(sum(numbers) / len(numbers)),
        min=min(numbers),
        max=max(numbers),
        total_answers=len(numbers),
    )


def _text_stats(question: Question, answers: List[Any], record_count: int) -> TextStats:
    return TextStats(
        question_label=question.label,
        type=question.type,
        total_answers=len(answers),
        filled_percentage=percent(len(answers), record_count),
    )


def _count_stats(question: Question, answers: List[Any], record_count: int) -> AnswerCountStats:
    return AnswerCountStats(
        question_label=question.label,
        type=question.type,
        total_answers=len(answers),
    )


StatsBuilder = Callable[[Question, List[Any], int], Optional[QuestionStats]]

STATS_BUILDERS: Dict[QuestionType, StatsBuilder] = {
    **{t: _choice_stats for t in CHOICE_TYPES},
    **{t: _text_stats for t in TEXT_TYPES},
    QuestionType.SCALE: _scale_stats,
}

_missing_builders = set(QuestionType) - set(STATS_BUILDERS)
if _missing_builders:
    raise RuntimeError(f"No stats builder registered for: {sorted(t.value for t in _missing_builders)}")


def aggregate_survey_stats(
    structure: List[Question],
    records: List[AnswerRecord],
) -> Dict[str, QuestionStats]:
    """
    Compute per-question statistics over every stored answer of a survey.

    A question only sees the records that contain its id. Scale questions
    with no numeric answer are left out of the result, and an empty record
    set gives an empty mapping.

    Args:
        structure (List[Question]): The ordered questions of the survey.
        records (List[AnswerRecord]): All stored answers for the survey.

    Returns:
        Dict[str, QuestionStats]: Statistics keyed by question id.
    """
    if not records:
        return {}

    record_count = len(records)
    stats: Dict[str, QuestionStats] = {}

    for question in structure:
        answers = [r.data[question.id] for r in records if question.id in r.data]
        builder = STATS_BUILDERS.get(question.kind, _count_stats)
        question_stats = builder(question, answers, record_count)
        if question_stats is not None:
            stats[question.id] = question_stats

    return stats


def summarize_responses(records: List[AnswerRecord]) -> ResponseSummary:
    timestamps = [r.submitted_at for r in records if r.submitted_at is not None]
    return ResponseSummary(
        total_responses=len(records),
        first_response=min(timestamps) if timestamps else None,
        last_response=max(timestamps) if timestamps else None,
    )
