"""
User Model

Users are global accounts; access to an organization's data is granted
through an accepted OrganizationMember row, never through the user itself.
"""
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship

from fencemark.database import Base
from fencemark.models.base import new_id
from fencemark.utils.clock import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)

    email = Column(String(255), nullable=False, unique=True, index=True)

    # Null for placeholder accounts created by an invitation until the
    # invitee accepts and chooses a password
    hashed_password = Column(String(255), nullable=True)

    is_email_verified = Column(Boolean, default=False, nullable=False)

    # Self-registered and invited accounts start as guests until verified
    is_guest = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    last_login_at = Column(DateTime, nullable=True)

    memberships = relationship(
        "OrganizationMember",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self):
        return f"<User {self.email}>"
