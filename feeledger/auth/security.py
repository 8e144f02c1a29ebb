from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from jose import jwt

from feeledger.core.config import settings


def create_access_token(
    *, subject: Dict, expires_minutes: Optional[int] = None
) -> str:
    if expires_minutes is None:
        expires_minutes = settings.access_token_expire_minutes

    to_encode = subject.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm
    )
    return encoded_jwt


def create_staff_token(current_user, expires_minutes: Optional[int] = None) -> str:
    """Token carrying everything get_current_user needs, so no user table is consulted."""
    return create_access_token(
        subject={
            "sub": current_user.staff_id,
            "name": current_user.name,
            "role": current_user.role,
            "permissions": current_user.permissions,
            "finance_authorized": current_user.finance_authorized,
        },
        expires_minutes=expires_minutes,
    )
