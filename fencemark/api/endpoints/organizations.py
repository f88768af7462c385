"""
Organization Endpoints

Member management, the invitation flow and sample data seeding.

SECURITY: Every path that names an organization must name the caller's
own; anything else is a 403 and a logged security event. Changing who
belongs to an organization requires Owner or Admin.
"""
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from fencemark.database import get_db
from fencemark.api.deps import (
    CurrentUserContext,
    require_organization,
    get_tenant_db,
    ensure_same_organization,
)
from fencemark.api.endpoints.auth import auth_response
from fencemark.core.exceptions import InvalidInputError
from fencemark.core.permissions import require_member_manager
from fencemark.schemas.auth import AuthResponse
from fencemark.schemas.organization import (
    MemberResponse,
    InviteRequest,
    InviteResponse,
    AcceptInvitationRequest,
    UpdateRoleRequest,
)
from fencemark.schemas.common import SuccessResponse
from fencemark.services.organizations import OrganizationService
from fencemark.services.sample_data import has_sample_data, seed_sample_data
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.get("/{organization_id}/members", response_model=list[MemberResponse])
def list_members(
    organization_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    ensure_same_organization(context, organization_id)
    return OrganizationService(db).get_members(organization_id)


@router.post("/{organization_id}/invite", response_model=InviteResponse)
def invite_member(
    organization_id: str,
    invitation: InviteRequest,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    """
    Invite a user by email.

    The token is returned to the caller for out-of-band delivery; the
    invitee redeems it at /api/organizations/accept-invitation.
    """
    ensure_same_organization(context, organization_id)
    require_member_manager(context.role)

    token = OrganizationService(db).invite(
        organization_id,
        invitation.email,
        invitation.role,
        actor_role=context.role,
        actor_user_id=context.user_id,
    )
    return InviteResponse(invitation_token=token)


@router.post("/accept-invitation", response_model=AuthResponse)
def accept_invitation(
    request: AcceptInvitationRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Redeem an invitation token and sign the invitee in to the organization
    they joined. Accounts that already have a password must supply it.
    """
    membership = OrganizationService(db).accept_invitation(request.token, request.password)
    return auth_response(
        response,
        membership.user,
        membership.organization_id,
        "Invitation accepted successfully",
    )


@router.put("/{organization_id}/members/role", response_model=SuccessResponse)
def update_member_role(
    organization_id: str,
    request: UpdateRoleRequest,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    ensure_same_organization(context, organization_id)
    require_member_manager(context.role)

    OrganizationService(db).update_role(
        organization_id, request.user_id, request.role, actor_role=context.role
    )
    return SuccessResponse(message="Role updated successfully")


@router.delete("/{organization_id}/members/{user_id}", response_model=SuccessResponse)
def remove_member(
    organization_id: str,
    user_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    ensure_same_organization(context, organization_id)
    require_member_manager(context.role)

    OrganizationService(db).remove_member(organization_id, user_id)
    return SuccessResponse(message="Member removed successfully")


@router.post("/seed-sample-data", response_model=SuccessResponse)
def seed_organization_sample_data(
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    """One-time sample catalog for the caller's organization."""
    if has_sample_data(db, context.organization_id):
        raise InvalidInputError("Sample data already exists for this organization")

    seed_sample_data(db, context.organization_id)
    db.commit()
    return SuccessResponse(message="Sample data seeded successfully")
