"""
Authentication Schemas

Request/response models for authentication endpoints.
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from fencemark.models.organization import MemberRole


class LoginRequest(BaseModel):
    """Login request body."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """Self-service signup: creates the user and their organization."""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    organization_name: str = Field(..., min_length=1, max_length=255)

    class Config:
        json_schema_extra = {
            "example": {
                "email": "owner@acme-fencing.com",
                "password": "securepassword123",
                "organization_name": "Acme Fencing"
            }
        }


class AuthResponse(BaseModel):
    """Returned by register and login. The token is also set as a cookie."""
    success: bool = True
    message: Optional[str] = None
    user_id: str
    organization_id: Optional[str] = None
    email: str
    is_guest: bool = False
    access_token: str
    token_type: str = "bearer"


class CurrentUserResponse(BaseModel):
    user_id: str
    email: str
    organization_id: Optional[str] = None
    role: Optional[MemberRole] = None
