# backend/app/api/deps.py

import logging
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt
from jose.exceptions import JWTError, ExpiredSignatureError, JWTClaimsError
from app.core.config import settings
from app.schemas.user import User, STAFF_ROLES
from typing import Optional

logger = logging.getLogger(__name__)
security = HTTPBearer()

def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> User:
    token = credentials.credentials
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        expected_audience = "authenticated"
        expected_issuer = f"{settings.SUPABASE_URL}/auth/v1"

        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.ALGORITHM],
            audience=expected_audience,
            issuer=expected_issuer,
        )
        user_id: Optional[str] = payload.get("sub")
        email: Optional[str] = payload.get("email")
        if user_id is None or email is None:
            logger.warning("Invalid token payload")
            raise credentials_exception
    except ExpiredSignatureError:
        logger.warning("Access token has expired")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except JWTClaimsError as e:
        logger.error(f"JWT claims error: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid claims: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except JWTError as e:
        logger.error(f"JWT error: {e}")
        raise credentials_exception

    # Staff roles are custom claims set by the admin tooling
    role = (payload.get("app_metadata") or {}).get("role")
    logger.info(f"User authenticated: {user_id} ({role})")
    return User(id=user_id, email=email, role=role)

def require_roles(*roles: str):
    allowed = roles or STAFF_ROLES

    def role_guard(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            logger.warning(f"User {current_user.id} with role {current_user.role} denied, requires one of {allowed}")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user

    return role_guard

get_staff_user = require_roles(*STAFF_ROLES)
