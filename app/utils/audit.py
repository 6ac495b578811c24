# backend/app/utils/audit.py

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional, Union

from fastapi import Request

from app.schemas.user import User

logger = logging.getLogger("app.audit")


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _entry(level: str, action: str, request: Request, user: Optional[User], message: str, **fields) -> str:
    entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "action": action,
        "userId": user.id if user else None,
        "role": user.role if user else None,
        "ip": client_ip(request) or "",
        "userAgent": request.headers.get("user-agent", ""),
        "message": message,
        **fields,
    }
    return json.dumps(entry, default=str)


def log_user_action(
    action: str,
    request: Request,
    details: Any = None,
    target_id: Optional[str] = None,
    target_type: Optional[str] = None,
    user: Optional[User] = None,
) -> None:
    actor = user.id if user else "anonymous"
    logger.info(_entry(
        "info",
        action,
        request,
        user,
        f"User {actor} performed action: {action}",
        targetId=target_id,
        targetType=target_type,
        details=details,
    ))


def log_error(
    action: str,
    request: Request,
    error: Union[Exception, str],
    details: Optional[dict] = None,
    user: Optional[User] = None,
) -> None:
    logger.error(_entry(
        "error",
        action,
        request,
        user,
        f"Error in action: {action}, Error: {error}",
        details={**(details or {}), "error": str(error)},
    ))
