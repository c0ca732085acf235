from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt  # pyjwt

from config import get_settings

ALGORITHM = "HS256"
ACCESS_TOKEN_MINUTES = get_settings().access_token_minutes


def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    to_encode = data.copy()
    minutes = expires_minutes if expires_minutes is not None else ACCESS_TOKEN_MINUTES
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, get_settings().jwt_secret, algorithm=ALGORITHM)


def create_owner_token(owner) -> str:
    """Token for a user or admin; ``role`` picks the table on the way back."""
    return create_access_token({"sub": owner.email, "user_id": owner.id, "role": owner.role})


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, get_settings().jwt_secret, algorithms=[ALGORITHM])
