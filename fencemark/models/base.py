"""
Shared model columns.

Every tenant-scoped business entity carries a mandatory organization_id.
Queries MUST filter on it; see fencemark.api.scoping for the helpers
endpoints use to do so.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import declared_attr
import uuid

from fencemark.utils.clock import utcnow


def new_id() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class OrganizationScopedMixin(TimestampMixin):
    """
    Primary key, owning organization and timestamps.

    CRITICAL: organization_id is stamped server-side on create and never
    copied from client input.
    """

    id = Column(String(36), primary_key=True, default=new_id)

    @declared_attr
    def organization_id(cls):
        return Column(
            String(36),
            ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
            index=True
        )
