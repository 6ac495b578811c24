# backend/app/api/v1/endpoints/surveys.py

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from app.schemas.survey import (
    Survey,
    SurveyActiveState,
    SurveyActiveToggle,
    SurveyCreate,
    SurveySummary,
    SurveyUpdate,
)
from app.schemas.response import (
    AnswerRecord,
    Pagination,
    SubmissionAccepted,
    SubmissionRequest,
    SurveyResponses,
    SurveyStats,
)
from app.schemas.user import User
from app.api import deps
from app.core.config import settings
from app.db.session import get_supabase
from app.services.link_generator import generate_public_url
from app.services.validation_service import validate_survey_response
from app.services.stats_service import aggregate_survey_stats, summarize_responses
from app.utils.audit import client_ip, log_error, log_user_action
from datetime import datetime, timezone
from typing import List, Optional
import logging
import math
from pydantic import ValidationError
from postgrest.exceptions import APIError

router = APIRouter()

def to_survey(row: dict) -> Survey:
    return Survey(**row, public_url=generate_public_url(row["id"]))

def load_survey(survey_id: str) -> Optional[Survey]:
    supabase = get_supabase()
    try:
        response = supabase.table("surveys").select("*").eq("id", survey_id).execute()
    except APIError as e:
        logging.error(f"Supabase API error: {str(e)}")
        raise HTTPException(status_code=400, detail="Invalid survey ID format")

    if not response.data:
        return None

    try:
        return to_survey(response.data[0])
    except ValidationError as ve:
        logging.error(f"Stored survey {survey_id} has a malformed structure: {ve.errors()}")
        raise HTTPException(status_code=500, detail="Internal server error")

def get_owned_survey(survey_id: str, current_user: User) -> Survey:
    survey = load_survey(survey_id)
    if survey is None:
        raise HTTPException(status_code=404, detail="Survey not found")

    if survey.created_by != str(current_user.id) and not current_user.is_superadmin:
        logging.warning(f"User {current_user.id} attempted to access survey owned by another user.")
        raise HTTPException(status_code=403, detail="Access denied")

    return survey

def fetch_all_responses(survey_id: str) -> List[AnswerRecord]:
    # PostgREST caps rows per request (max-rows), so page until the exact count is read
    supabase = get_supabase()
    page_size = settings.STATS_FETCH_PAGE_SIZE
    rows = []
    total = None
    while total is None or len(rows) < total:
        response = (
            supabase.table("responses")
            .select("*", count="exact")
            .eq("survey_id", survey_id)
            .order("submitted_at")
            .order("id")
            .range(len(rows), len(rows) + page_size - 1)
            .execute()
        )
        page = response.data or []
        total = response.count if response.count is not None else len(rows) + len(page)
        if not page:
            break
        rows.extend(page)
    return [AnswerRecord.from_row(row) for row in rows]

def count_responses(survey_id: str) -> int:
    supabase = get_supabase()
    response = supabase.table("responses").select("id", count="exact").eq("survey_id", survey_id).range(0, 0).execute()
    return response.count or 0

def dump_structure(structure) -> list:
    return [q.model_dump(exclude_none=True) for q in structure]

@router.post("/", response_model=Survey, status_code=201)
async def create_survey(
    survey: SurveyCreate,
    request: Request,
    current_user: User = Depends(deps.get_staff_user),
):
    supabase = get_supabase()
    survey_data = {
        "title": survey.title,
        "description": survey.description,
        "structure": dump_structure(survey.structure),
        "expires_at": survey.expires_at.isoformat() if survey.expires_at else None,
        "is_anonymous": survey.is_anonymous,
        "is_active": True,
        "created_by": str(current_user.id),
    }
    try:
        response = supabase.table("surveys").insert(survey_data).execute()
        if not response.data:
            logging.error(f"Failed to create survey. Supabase response: {response}")
            raise HTTPException(status_code=500, detail="Internal server error")
        created = to_survey(response.data[0])
    except HTTPException:
        raise
    except Exception as e:
        log_error("CREATE_SURVEY", request, e, {"title": survey.title}, user=current_user)
        logging.error(f"Error creating survey: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    log_user_action("CREATE_SURVEY", request, {
        "surveyId": created.id,
        "title": created.title,
        "isAnonymous": created.is_anonymous,
    }, created.id, "survey", user=current_user)
    return created

@router.get("/", response_model=List[SurveySummary])
async def get_surveys(current_user: User = Depends(deps.get_staff_user)):
    supabase = get_supabase()
    rows = (
        supabase.table("surveys")
        .select("*")
        .eq("created_by", str(current_user.id))
        .order("created_at", desc=True)
        .execute()
    ).data or []

    return [
        SurveySummary(
            id=row["id"],
            title=row["title"],
            description=row.get("description"),
            is_active=row["is_active"],
            expires_at=row.get("expires_at"),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            response_count=count_responses(row["id"]),
        )
        for row in rows
    ]

@router.get("/{survey_id}", response_model=Survey)
async def get_survey(survey_id: str, current_user: User = Depends(deps.get_staff_user)):
    logging.info(f"Fetching survey with id: {survey_id}")
    return get_owned_survey(survey_id, current_user)

@router.put("/{survey_id}", response_model=Survey)
async def update_survey(
    survey_id: str,
    survey_update: SurveyUpdate,
    request: Request,
    current_user: User = Depends(deps.get_staff_user),
):
    get_owned_survey(survey_id, current_user)

    updates = survey_update.model_dump(exclude_unset=True)
    if "structure" in updates:
        updates["structure"] = dump_structure(survey_update.structure or [])
    if updates.get("expires_at") is not None:
        updates["expires_at"] = updates["expires_at"].isoformat()
    updates["updated_at"] = datetime.now(timezone.utc).isoformat()

    supabase = get_supabase()
    response = supabase.table("surveys").update(updates).eq("id", survey_id).execute()
    if not response.data:
        logging.error(f"Failed to update survey {survey_id}. Supabase response: {response}")
        raise HTTPException(status_code=500, detail="Internal server error")

    log_user_action("UPDATE_SURVEY", request, {
        "surveyId": survey_id,
        "fields": sorted(k for k in updates if k != "updated_at"),
    }, survey_id, "survey", user=current_user)
    return to_survey(response.data[0])

@router.delete("/{survey_id}", status_code=204)
async def delete_survey(
    survey_id: str,
    request: Request,
    current_user: User = Depends(deps.get_staff_user),
):
    get_owned_survey(survey_id, current_user)

    # Responses go with the survey (cascade on survey_id)
    supabase = get_supabase()
    supabase.table("surveys").delete().eq("id", survey_id).execute()
    log_user_action("DELETE_SURVEY", request, {"surveyId": survey_id}, survey_id, "survey", user=current_user)

@router.patch("/{survey_id}/active", response_model=SurveyActiveState)
async def toggle_survey_active(
    survey_id: str,
    request: Request,
    toggle: Optional[SurveyActiveToggle] = None,
    current_user: User = Depends(deps.get_staff_user),
):
    survey = get_owned_survey(survey_id, current_user)
    requested = toggle.active if toggle else None
    is_active = requested if requested is not None else not survey.is_active

    supabase = get_supabase()
    response = supabase.table("surveys").update({
        "is_active": is_active,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }).eq("id", survey_id).execute()
    if not response.data:
        log_user_action("TOGGLE_SURVEY_ACTIVE_FAILED", request, {
            "reason": "Failed to update survey status",
            "surveyId": survey_id,
        }, survey_id, "survey", user=current_user)
        raise HTTPException(status_code=400, detail="Failed to update survey status")

    updated = response.data[0]
    log_user_action("ACTIVATE_SURVEY" if is_active else "DEACTIVATE_SURVEY", request, {
        "surveyId": survey_id,
        "isActive": updated["is_active"],
    }, survey_id, "survey", user=current_user)
    return SurveyActiveState(id=updated["id"], is_active=updated["is_active"])

@router.post("/{survey_id}/submit", response_model=SubmissionAccepted, status_code=201)
async def submit_survey(survey_id: str, submission: SubmissionRequest, request: Request):
    survey = load_survey(survey_id)

    if survey is None:
        log_user_action("SUBMIT_SURVEY_FAILED", request, {"reason": "Survey not found", "surveyId": survey_id}, survey_id, "survey")
        raise HTTPException(status_code=404, detail="Survey not found")

    if not survey.is_active:
        log_user_action("SUBMIT_SURVEY_FAILED", request, {"reason": "Survey is not active", "surveyId": survey_id}, survey_id, "survey")
        raise HTTPException(status_code=400, detail="Survey is not active")

    if survey.is_expired(datetime.now(timezone.utc)):
        log_user_action("SUBMIT_SURVEY_FAILED", request, {"reason": "Survey has expired", "surveyId": survey_id}, survey_id, "survey")
        raise HTTPException(status_code=400, detail="Survey has expired")

    validation = validate_survey_response(
        survey.structure,
        submission.data,
        reject_empty_required_checkbox=settings.REJECT_EMPTY_REQUIRED_CHECKBOX,
    )
    if not validation.accepted:
        log_user_action("SUBMIT_SURVEY_FAILED", request, {
            "reason": "Invalid response data",
            "surveyId": survey_id,
            "validationErrors": validation.errors,
        }, survey_id, "survey")
        raise HTTPException(status_code=400, detail={"error": "Invalid response data", "details": validation.errors})

    ip = None if survey.is_anonymous else client_ip(request)

    try:
        supabase = get_supabase()
        response = supabase.table("responses").insert({
            "survey_id": survey_id,
            "data": submission.data,
            "ip": ip,
        }).execute()
        if not response.data:
            logging.error(f"Failed to store response. Supabase response: {response}")
            raise HTTPException(status_code=500, detail="Internal server error")
        created = response.data[0]
    except HTTPException:
        raise
    except Exception as e:
        log_error("SUBMIT_SURVEY", request, e, {"surveyId": survey_id})
        logging.error(f"Error storing survey response: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    log_user_action("SUBMIT_SURVEY", request, {
        "surveyId": survey_id,
        "responseId": created.get("id"),
        "isAnonymous": survey.is_anonymous,
        "ip": "anonymous" if survey.is_anonymous else ip,
    }, survey_id, "survey")

    return SubmissionAccepted(message="Thank you for taking part!")

@router.get("/{survey_id}/responses", response_model=SurveyResponses)
async def get_survey_responses(
    survey_id: str,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    current_user: User = Depends(deps.get_staff_user),
):
    get_owned_survey(survey_id, current_user)

    limit = limit or settings.RESPONSES_PAGE_SIZE
    offset = (page - 1) * limit

    supabase = get_supabase()
    response = (
        supabase.table("responses")
        .select("*", count="exact")
        .eq("survey_id", survey_id)
        .order("submitted_at", desc=True)
        .range(offset, offset + limit - 1)
        .execute()
    )
    total = response.count or 0

    return SurveyResponses(
        survey_id=survey_id,
        responses=[AnswerRecord.from_row(row) for row in response.data or []],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )

@router.get("/{survey_id}/stats", response_model=SurveyStats)
async def get_survey_stats(survey_id: str, current_user: User = Depends(deps.get_staff_user)):
    survey = get_owned_survey(survey_id, current_user)

    records = fetch_all_responses(survey_id)
    logging.info(f"Computing stats for survey {survey_id} over {len(records)} responses")

    return SurveyStats(
        survey_id=survey_id,
        basic_stats=summarize_responses(records),
        detailed_stats=aggregate_survey_stats(survey.structure, records),
    )
