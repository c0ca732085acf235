import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from database import get_db
from errors import AuthError, ForbiddenError, NotFoundError
from jwt_utils import decode_access_token
from models import ACCOUNT_MODELS

security = HTTPBearer()


def get_token_payload(creds: HTTPAuthorizationCredentials = Depends(security)) -> dict:
    try:
        payload = decode_access_token(creds.credentials)
    except jwt.PyJWTError:
        raise AuthError("Token is not valid")

    if not payload.get("user_id"):
        raise AuthError("Token is not valid (missing user_id)")
    if payload.get("role", "user") not in ACCOUNT_MODELS:
        raise AuthError("Token is not valid (unknown role)")
    return payload


def get_current_owner(
    payload: dict = Depends(get_token_payload),
    db: Session = Depends(get_db),
):
    """User or admin behind the bearer token."""
    model = ACCOUNT_MODELS[payload.get("role", "user")]
    owner = db.query(model).filter(model.id == payload["user_id"]).first()
    if not owner:
        raise NotFoundError("User not found")
    return owner


def require_admin(owner=Depends(get_current_owner)):
    if owner.role != "admin":
        raise ForbiddenError("Forbidden")
    return owner
