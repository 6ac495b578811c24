# backend/app/schemas/user.py

from pydantic import BaseModel, EmailStr
from typing import Optional

STAFF_ROLES = ("admin", "superadmin")

class UserBase(BaseModel):
    email: EmailStr

class User(UserBase):
    id: str
    role: Optional[str] = None

    @property
    def is_superadmin(self) -> bool:
        return self.role == "superadmin"

class UserProfile(User):
    can_manage_surveys: bool
