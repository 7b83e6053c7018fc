# clinic_api/auth/schemas.py

from typing import Optional
from pydantic import BaseModel, EmailStr, Field, model_validator
from fastapi import HTTPException
from enum import Enum

from clinic_api.models.models import UserRole


class RegisterRole(str, Enum):
    """Roles open to self-registration. Doctors are created by admins."""
    PATIENT = "patient"
    ADMIN = "admin"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """User info returned after login/registration"""
    id: str
    name: str
    email: EmailStr
    role: UserRole
    contact_number: Optional[str] = None

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=8)
    password_confirm: str = Field(..., min_length=8)
    role: RegisterRole = RegisterRole.PATIENT
    contact_number: Optional[str] = Field(None, max_length=20)

    @model_validator(mode="after")
    def validate_passwords_match(self):
        if self.password != self.password_confirm:
            raise HTTPException(
                status_code=400,
                detail="Passwords do not match."
            )
        return self


class RegisterResponse(BaseModel):
    message: str = "Account created successfully."
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
