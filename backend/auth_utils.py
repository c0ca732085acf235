import logging
import secrets
from datetime import datetime, timedelta, timezone

from passlib.context import CryptContext
from sqlalchemy.orm import Session

from errors import ValidationError
from models import OtpCode

logger = logging.getLogger(__name__)

# Allow both bcrypt and bcrypt_sha256 to verify existing hashes.
pwd_context = CryptContext(schemes=["bcrypt_sha256", "bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


# ======================
#   OTP
# ======================

def generate_otp() -> str:
    return f"{secrets.randbelow(10 ** 6):06d}"


def issue_otp(db: Session, email: str, ttl_seconds: int) -> str:
    """Stores a fresh code for ``email``, replacing any previous one."""
    otp = generate_otp()
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)

    record = db.query(OtpCode).filter(OtpCode.email == email).first()
    if record:
        record.otp = otp
        record.expires_at = expires_at
    else:
        record = OtpCode(email=email, otp=otp, expires_at=expires_at)
    db.add(record)
    db.commit()
    logger.info("OTP issued for %s (valid %ss)", email, ttl_seconds)
    return otp


def _is_expired(expires_at: datetime) -> bool:
    # SQLite vrací naive datetime
    if expires_at.tzinfo:
        now = datetime.now(timezone.utc)
    else:
        now = datetime.now(timezone.utc).replace(tzinfo=None)
    return expires_at < now


def consume_otp(db: Session, email: str, otp: str) -> None:
    record = db.query(OtpCode).filter(OtpCode.email == email).first()
    if not record or record.otp != otp:
        raise ValidationError("Invalid OTP. Please try again.")
    if _is_expired(record.expires_at):
        raise ValidationError("OTP has expired. Please request a new one.")

    db.delete(record)
    db.commit()
