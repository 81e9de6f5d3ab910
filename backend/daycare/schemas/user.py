"""User 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class UserBase(BaseModel):
    login_id: str
    name: str
    role: str
    email: Optional[str] = None
    phone: Optional[str] = None
    child_name: Optional[str] = None
    rfid_tag: Optional[str] = None


class UserCreate(UserBase):
    pass


class UserUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    child_name: Optional[str] = None
    rfid_tag: Optional[str] = None
    is_active: Optional[bool] = None


class UserOut(UserBase):
    user_id: int
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class LoginRequest(BaseModel):
    login_id: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class MeOut(UserOut):
    section_ids: list[int] = []
