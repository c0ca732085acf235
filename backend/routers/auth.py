import logging
from typing import Optional, Type

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth_utils import consume_otp, hash_password, issue_otp, verify_password
from config import Settings, get_settings
from database import get_db
from deps_auth import get_current_owner
from email_utils import send_otp_email
from errors import AuthError, ConflictError, ForbiddenError, NotFoundError, UpstreamError, ValidationError
from jwt_utils import create_owner_token
from models import AccountMixin
from schemas_auth import (
    AccountOut,
    AuthOut,
    ChangePasswordIn,
    DeleteProfileIn,
    IdentifierIn,
    LoginIn,
    RegisterIn,
    ResetPasswordIn,
    SendOtpIn,
    UpdateProfileIn,
    VerifyOtpIn,
)

logger = logging.getLogger(__name__)


def _normalize_email(email: Optional[str]) -> Optional[str]:
    return email.strip().lower() if email else None


def _normalize_username(username: Optional[str]) -> Optional[str]:
    if username is None:
        return None
    return username.strip() or None


def _deliver_otp(email: str, otp: str, procedure: str, first_name: Optional[str]) -> None:
    try:
        send_otp_email(email, otp, procedure, first_name)
    except Exception as exc:
        logger.exception("OTP email to %s failed", email)
        raise UpstreamError(f"Failed to send OTP email: {exc}")


def build_account_router(model: Type[AccountMixin], role: str) -> APIRouter:
    """
    Registration / login / profile endpoints for one account table.

    Users and admins get the same set of routes, each bound to its own model,
    so a token issued for one role is refused by the other's routes.
    """
    router = APIRouter(tags=[f"{role} account"])

    def find_account(db: Session, username: Optional[str] = None, email: Optional[str] = None):
        conditions = []
        if email:
            conditions.append(func.lower(model.email) == _normalize_email(email))
        if username:
            conditions.append(model.username == _normalize_username(username))
        if not conditions:
            return None
        return db.query(model).filter(or_(*conditions)).first()

    def current_account(owner=Depends(get_current_owner)):
        if not isinstance(owner, model):
            raise ForbiddenError("Forbidden")
        return owner

    def ensure_unique(db: Session, username: Optional[str], email: Optional[str], exclude_id: Optional[int] = None):
        if email:
            query = db.query(model).filter(func.lower(model.email) == _normalize_email(email))
            if exclude_id is not None:
                query = query.filter(model.id != exclude_id)
            if query.first():
                raise ConflictError("Email already exists.")
        if username:
            query = db.query(model).filter(model.username == _normalize_username(username))
            if exclude_id is not None:
                query = query.filter(model.id != exclude_id)
            if query.first():
                raise ConflictError("Username already exists.")

    def commit_account(db: Session, account):
        db.add(account)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Email or username already exists.")
        db.refresh(account)
        return account

    @router.post("/signup/send-otp")
    def send_signup_otp(
        data: SendOtpIn,
        db: Session = Depends(get_db),
        settings: Settings = Depends(get_settings),
    ):
        email = _normalize_email(data.email)
        ensure_unique(db, data.username, email)

        otp = issue_otp(db, email, settings.otp_expiration_seconds)
        _deliver_otp(email, otp, "verify email", data.first_name)
        return {"ok": True, "message": "OTP sent to your email."}

    @router.post("/register", response_model=AccountOut, status_code=status.HTTP_201_CREATED)
    def register(data: RegisterIn, db: Session = Depends(get_db)):
        email = _normalize_email(data.email)
        username = _normalize_username(data.username)
        if not username or len(username) < 3:
            raise ValidationError("Username must be at least 3 characters long.")

        ensure_unique(db, username, email)
        consume_otp(db, email, data.otp)

        account = model(
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            username=username,
            email=email,
            password_hash=hash_password(data.password),
            role=role,
        )
        account = commit_account(db, account)
        logger.info("Registered %s id=%s username=%s", role, account.id, account.username)
        return account

    @router.post("/login", response_model=AuthOut)
    def login(data: LoginIn, db: Session = Depends(get_db)):
        account = find_account(db, data.username, data.email)
        if not account:
            raise AuthError("Invalid Username or Email.")
        if not verify_password(data.password, account.password_hash):
            raise AuthError("Invalid password.")

        return {"user": account, "token": create_owner_token(account)}

    @router.get("/profile", response_model=AccountOut)
    def profile(account=Depends(current_account)):
        return account

    @router.post("/forgot-password/send-otp")
    def send_reset_otp(
        data: IdentifierIn,
        db: Session = Depends(get_db),
        settings: Settings = Depends(get_settings),
    ):
        account = find_account(db, data.username, data.email)
        if not account:
            raise NotFoundError("User not found.")

        otp = issue_otp(db, account.email, settings.otp_expiration_seconds)
        _deliver_otp(account.email, otp, "reset password", account.first_name)
        return {"ok": True, "message": "OTP sent to your email."}

    @router.post("/forgot-password/verify-otp", response_model=AuthOut)
    def verify_reset_otp(data: VerifyOtpIn, db: Session = Depends(get_db)):
        account = find_account(db, data.username, data.email)
        if not account:
            raise ValidationError("Invalid Email or Username.")

        consume_otp(db, account.email, data.otp)
        return {"user": account, "token": create_owner_token(account)}

    @router.post("/reset-password")
    def reset_password(
        data: ResetPasswordIn,
        db: Session = Depends(get_db),
        account=Depends(current_account),
    ):
        account.password_hash = hash_password(data.new_password)
        commit_account(db, account)
        return {"ok": True, "message": "Password reset successfully."}

    @router.post("/change-password")
    def change_password(
        data: ChangePasswordIn,
        db: Session = Depends(get_db),
        account=Depends(current_account),
    ):
        if not verify_password(data.old_password, account.password_hash):
            raise ValidationError("Invalid old password.")

        account.password_hash = hash_password(data.new_password)
        commit_account(db, account)
        return {"ok": True, "message": "Password changed successfully."}

    @router.put("/update-profile", response_model=AccountOut)
    def update_profile(
        data: UpdateProfileIn,
        db: Session = Depends(get_db),
        account=Depends(current_account),
    ):
        if data.password is not None and not verify_password(data.password, account.password_hash):
            raise ValidationError("Invalid password.")

        email = _normalize_email(data.email)
        username = _normalize_username(data.username)
        ensure_unique(db, username, email, exclude_id=account.id)

        if username:
            account.username = username
        if email:
            account.email = email
        if data.first_name:
            account.first_name = data.first_name.strip()
        if data.last_name:
            account.last_name = data.last_name.strip()

        return commit_account(db, account)

    @router.delete("/delete-profile")
    def delete_profile(
        data: DeleteProfileIn,
        db: Session = Depends(get_db),
        account=Depends(current_account),
    ):
        if not verify_password(data.password, account.password_hash):
            raise ValidationError("Invalid password.")

        account_id = account.id
        db.delete(account)
        db.commit()
        logger.info("Deleted %s id=%s", role, account_id)
        return {"ok": True, "message": "User deleted successfully."}

    return router
