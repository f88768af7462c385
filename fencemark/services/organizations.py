"""
Organization membership service.

Membership rows move through a small state machine:

    invited  -- accept_invitation -->  active
       |                                  |
       +--------- remove_member ----------+

Inviting creates a pending row carrying a single-use token (and a
placeholder guest account when the email is unknown). Accepting consumes
the token. Callers are responsible for checking that the acting user
belongs to organization_id and may manage members.
"""
import secrets
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from fencemark.core.exceptions import InvalidInputError, ResourceNotFoundError
from fencemark.core.permissions import parse_role, can_assign_role
from fencemark.core.security import get_password_hash, verify_password
from fencemark.models.organization import MemberRole, Organization, OrganizationMember
from fencemark.models.user import User
from fencemark.schemas.organization import MemberResponse
from fencemark.utils.clock import utcnow
from fencemark.utils.logging import get_logger, log_security_event

logger = get_logger(__name__)


def generate_invitation_token() -> str:
    return secrets.token_urlsafe(32)


class OrganizationService:

    def __init__(self, db: Session):
        self.db = db

    def _membership(self, organization_id: str, user_id: str) -> Optional[OrganizationMember]:
        return (
            self.db.query(OrganizationMember)
            .filter(
                OrganizationMember.organization_id == organization_id,
                OrganizationMember.user_id == user_id
            )
            .first()
        )

    def create_organization(self, owner: User, name: str) -> Organization:
        """Create an organization with owner as its accepted Owner."""
        organization = Organization(name=name)
        organization.members.append(
            OrganizationMember(
                user=owner,
                role=MemberRole.OWNER,
                joined_at=utcnow(),
                is_accepted=True,
            )
        )
        self.db.add(organization)
        self.db.flush()
        return organization

    def get_members(self, organization_id: str) -> list[MemberResponse]:
        members = (
            self.db.query(OrganizationMember)
            .options(joinedload(OrganizationMember.user))
            .filter(OrganizationMember.organization_id == organization_id)
            .order_by(OrganizationMember.joined_at, OrganizationMember.invited_at)
            .all()
        )
        return [
            MemberResponse(
                user_id=member.user_id,
                email=member.user.email,
                role=member.role,
                joined_at=member.joined_at,
                is_guest=member.user.is_guest,
                is_accepted=member.is_accepted,
            )
            for member in members
        ]

    def invite(
        self,
        organization_id: str,
        email: str,
        role_name: str,
        actor_role: Optional[MemberRole] = None,
        actor_user_id: Optional[str] = None
    ) -> str:
        """
        Create a pending membership and return its invitation token.

        Raises InvalidInputError for unknown roles, Owner invitations,
        roles above the actor's own, and existing members.
        """
        email = email.lower()
        user = self.db.query(User).filter(User.email == email).first()
        if user is not None and self._membership(organization_id, user.id) is not None:
            raise InvalidInputError("User is already a member of this organization")

        role = parse_role(role_name)
        if role is None:
            raise InvalidInputError("Invalid role specified")
        if role == MemberRole.OWNER:
            raise InvalidInputError(
                "Cannot invite another owner. Only one owner per organization is allowed."
            )
        if actor_role is not None and not can_assign_role(actor_role, role):
            log_security_event(
                "privilege_escalation",
                {
                    "user_id": actor_user_id,
                    "organization_id": organization_id,
                    "attempted_role": role.value,
                },
                logger
            )
            raise InvalidInputError("Invalid role specified")

        if user is None:
            # Placeholder account; the invitee sets a password on acceptance
            user = User(email=email, is_guest=True, is_email_verified=False)
            self.db.add(user)
            self.db.flush()

        token = generate_invitation_token()
        self.db.add(
            OrganizationMember(
                user_id=user.id,
                organization_id=organization_id,
                role=role,
                invited_at=utcnow(),
                invitation_token=token,
                is_accepted=False,
            )
        )
        self.db.commit()

        logger.info(
            f"Invitation created for {email} as {role.value}",
            extra={"organization_id": organization_id, "user_id": actor_user_id}
        )
        return token

    def accept_invitation(self, token: str, password: str) -> OrganizationMember:
        """
        Consume an invitation token and activate the membership.

        A placeholder account takes the submitted password. An account that
        already has one must present it; a wrong password raises and leaves
        the invitation pending.
        """
        membership = (
            self.db.query(OrganizationMember)
            .options(joinedload(OrganizationMember.user))
            .filter(OrganizationMember.invitation_token == token)
            .first()
        )
        if membership is None:
            log_security_event("invalid_invitation", {"reason": "unknown_token"}, logger)
            raise InvalidInputError("Invalid invitation token")
        if membership.is_accepted:
            raise InvalidInputError("Invitation already accepted")

        user = membership.user
        if not user.hashed_password:
            user.hashed_password = get_password_hash(password)
        elif not verify_password(password, user.hashed_password):
            log_security_event(
                "invalid_invitation",
                {
                    "reason": "password_mismatch",
                    "user_id": user.id,
                    "organization_id": membership.organization_id,
                },
                logger
            )
            raise InvalidInputError("Invalid password for existing account")

        membership.is_accepted = True
        membership.joined_at = utcnow()
        membership.invitation_token = None

        user.is_email_verified = True
        user.is_guest = False

        self.db.commit()

        logger.info(
            "Invitation accepted",
            extra={"organization_id": membership.organization_id, "user_id": user.id}
        )
        return membership

    def update_role(
        self,
        organization_id: str,
        user_id: str,
        role_name: str,
        actor_role: Optional[MemberRole] = None
    ) -> OrganizationMember:
        """
        Change a member's role.

        The owner's role is fixed and nobody can be promoted to Owner. All
        refusals share one message.
        """
        membership = self._membership(organization_id, user_id)
        role = parse_role(role_name)

        if (
            membership is None
            or membership.role == MemberRole.OWNER
            or role is None
            or role == MemberRole.OWNER
            or (actor_role is not None and not can_assign_role(actor_role, role))
        ):
            raise InvalidInputError("Failed to update role")

        membership.role = role
        self.db.commit()

        logger.info(
            f"Role of {user_id} changed to {role.value}",
            extra={"organization_id": organization_id}
        )
        return membership

    def remove_member(self, organization_id: str, user_id: str) -> None:
        membership = self._membership(organization_id, user_id)
        if membership is None:
            raise ResourceNotFoundError("Member", user_id)
        if membership.role == MemberRole.OWNER:
            raise InvalidInputError("Cannot remove the organization owner")

        self.db.delete(membership)
        self.db.commit()

        logger.info(f"Member {user_id} removed", extra={"organization_id": organization_id})
