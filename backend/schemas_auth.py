from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import EmailStr, Field, model_validator

from schemas import CamelModel


class SendOtpIn(CamelModel):
    email: EmailStr
    username: Optional[str] = None
    first_name: Optional[str] = None


class RegisterIn(CamelModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    otp: str = Field(min_length=1, max_length=6)


class IdentifierIn(CamelModel):
    username: Optional[str] = None
    email: Optional[EmailStr] = None

    @model_validator(mode="after")
    def username_or_email(self):
        if not self.username and not self.email:
            raise ValueError("Email or username is required.")
        return self


class LoginIn(IdentifierIn):
    password: str = Field(min_length=1, max_length=128)


class VerifyOtpIn(IdentifierIn):
    otp: str = Field(min_length=1, max_length=6)


class ResetPasswordIn(CamelModel):
    new_password: str = Field(min_length=6, max_length=128)


class ChangePasswordIn(CamelModel):
    old_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=6, max_length=128)


class UpdateProfileIn(CamelModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    username: Optional[str] = Field(default=None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    # heslo je potvrzení změny, nepřepisuje se
    password: Optional[str] = None


class DeleteProfileIn(CamelModel):
    password: str


class AccountOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    username: str
    email: EmailStr
    role: str
    favorite_list: List[int] = []
    wishlist: List[Dict[str, Any]] = []
    compares: List[int] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthOut(CamelModel):
    user: AccountOut
    token: str


class AccountPageOut(CamelModel):
    users: List[AccountOut]
    current_page: int
    total_pages: int
    total_users: int
    results_per_page: int
