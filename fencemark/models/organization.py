"""
Organization and membership models.

The organization is the root of tenancy. A membership row links a user to
an organization with a role and tracks the invitation lifecycle:

    invited (invitation_token set, is_accepted False)
        -> active (token consumed, is_accepted True, joined_at set)
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum

from fencemark.database import Base
from fencemark.models.base import new_id, TimestampMixin
from fencemark.utils.clock import utcnow


class MemberRole(str, enum.Enum):
    """
    Organization roles.

    OWNER: Created the organization; exactly one per organization
    ADMIN: Manages members and all business data
    MEMBER: Works with business data
    BILLING: Billing contact
    READ_ONLY: View-only access
    """
    OWNER = "Owner"
    ADMIN = "Admin"
    MEMBER = "Member"
    BILLING = "Billing"
    READ_ONLY = "ReadOnly"


ROLE_HIERARCHY = {
    MemberRole.READ_ONLY: 1,
    MemberRole.BILLING: 2,
    MemberRole.MEMBER: 2,
    MemberRole.ADMIN: 3,
    MemberRole.OWNER: 4,
}


class Organization(TimestampMixin, Base):
    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)

    members = relationship(
        "OrganizationMember",
        back_populates="organization",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self):
        return f"<Organization {self.name}>"


class OrganizationMember(Base):
    __tablename__ = "organization_members"

    id = Column(String(36), primary_key=True, default=new_id)

    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    organization_id = Column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    role = Column(SQLEnum(MemberRole), default=MemberRole.MEMBER, nullable=False)

    invited_at = Column(DateTime, default=utcnow, nullable=False)
    joined_at = Column(DateTime, nullable=True)

    # Single-use token delivered out-of-band; cleared on acceptance
    invitation_token = Column(String(64), nullable=True, unique=True)
    is_accepted = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="memberships")
    organization = relationship("Organization", back_populates="members")

    __table_args__ = (
        # A user holds at most one membership per organization
        Index('idx_member_user_org', 'user_id', 'organization_id', unique=True),
    )

    def __repr__(self):
        return f"<OrganizationMember user={self.user_id} org={self.organization_id} role={self.role}>"

    def has_role(self, required_role: MemberRole) -> bool:
        """Simple hierarchy: OWNER > ADMIN > MEMBER/BILLING > READ_ONLY"""
        return ROLE_HIERARCHY[self.role] >= ROLE_HIERARCHY[required_role]
