"""
Parcel Model

A land parcel belonging to a job, optionally with boundary coordinates
used for snapping drawn fence segments.
"""
from sqlalchemy import Column, String, Text, Numeric, ForeignKey, Index

from fencemark.database import Base
from fencemark.models.base import OrganizationScopedMixin


class Parcel(OrganizationScopedMixin, Base):
    __tablename__ = "parcels"

    job_id = Column(
        String(36),
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=True)
    parcel_number = Column(String(100), nullable=True)
    total_area = Column(Numeric(18, 2), nullable=True)
    area_unit = Column(String(20), nullable=False, default="sqft")
    # GeoJSON polygon of the parcel boundary
    coordinates = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        Index('idx_parcel_org_name', 'organization_id', 'name'),
    )

    def __repr__(self):
        return f"<Parcel {self.name} (job={self.job_id})>"
