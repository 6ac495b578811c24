# backend/app/api/v1/endpoints/users.py

from fastapi import APIRouter, Depends
from app.schemas.user import User, UserProfile, STAFF_ROLES
from app.api import deps

router = APIRouter()

@router.get("/me", response_model=UserProfile)
def read_users_me(current_user: User = Depends(deps.get_current_user)):
    return UserProfile(
        id=current_user.id,
        email=current_user.email,
        role=current_user.role,
        can_manage_surveys=current_user.role in STAFF_ROLES,
    )
