"""
Organization Schemas

Membership listing and the invitation flow.
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

from fencemark.models.organization import MemberRole


class MemberResponse(BaseModel):
    user_id: str
    email: str
    role: MemberRole
    joined_at: Optional[datetime] = None
    is_guest: bool
    is_accepted: bool


class InviteRequest(BaseModel):
    email: EmailStr
    # Free-form so unknown roles produce a business error, not a schema error
    role: str = Field(..., min_length=1, max_length=50)


class InviteResponse(BaseModel):
    success: bool = True
    message: str = "Invitation sent successfully"
    invitation_token: Optional[str] = None


class AcceptInvitationRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8, max_length=100)


class UpdateRoleRequest(BaseModel):
    user_id: str
    role: str = Field(..., min_length=1, max_length=50)
