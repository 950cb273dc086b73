"""
storefront/schemas/user.py - User profile and authentication schemas.

| Schema            | Used by |
|-------------------|---------|
| `UserProfile`     | `GET /users/me`, register response |
| `RegisterBody`    | `POST /auth/register` |
| `LoginRequest`    | `POST /auth/login` |
| `LoginResponse`   | `POST /auth/login` |
| `ContactIn`       | `POST /contact` |
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserProfile(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: str = "customer"
    is_guest: bool = False
    created_at: Optional[datetime] = None


class RegisterBody(BaseModel):
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)


class RegisterResponse(BaseModel):
    user_id: str
    user: UserProfile
    id_token: str = ""
    refresh_token: str = ""
    expires_in: int = 0


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginResponse(BaseModel):
    id_token: str
    refresh_token: str
    expires_in: int
    user_id: str


class ContactIn(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1, max_length=5000)
