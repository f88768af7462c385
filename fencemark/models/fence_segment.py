"""
Fence segment and gate position models.

Segments are drawn on the map for a job (optionally within a parcel) and
carry GeoJSON geometry plus measured lengths. Gates are placed along a
segment at a fractional position.
"""
from sqlalchemy import Column, String, Text, Numeric, Boolean, ForeignKey, Index

from fencemark.database import Base
from fencemark.models.base import OrganizationScopedMixin


class FenceSegment(OrganizationScopedMixin, Base):
    __tablename__ = "fence_segments"

    job_id = Column(
        String(36),
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    parcel_id = Column(
        String(36),
        ForeignKey("parcels.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    fence_type_id = Column(
        String(36),
        ForeignKey("fence_types.id", ondelete="SET NULL"),
        nullable=True
    )

    name = Column(String(255), nullable=False)
    geo_json_geometry = Column(Text, nullable=True)
    length_in_feet = Column(Numeric(18, 2), nullable=False, default=0)
    length_in_meters = Column(Numeric(18, 2), nullable=False, default=0)
    is_snapped_to_boundary = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)

    # Set by the crew after measuring on site
    is_verified_onsite = Column(Boolean, nullable=False, default=False)
    onsite_verified_length_in_feet = Column(Numeric(18, 2), nullable=True)

    __table_args__ = (
        Index('idx_segment_org_job', 'organization_id', 'job_id'),
    )

    def __repr__(self):
        return f"<FenceSegment {self.name} (job={self.job_id})>"


class GatePosition(OrganizationScopedMixin, Base):
    __tablename__ = "gate_positions"

    fence_segment_id = Column(
        String(36),
        ForeignKey("fence_segments.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    gate_type_id = Column(
        String(36),
        ForeignKey("gate_types.id", ondelete="SET NULL"),
        nullable=True
    )

    name = Column(String(255), nullable=False)
    geo_json_location = Column(Text, nullable=True)
    # 0.0 at the segment start, 1.0 at its end
    position_along_segment = Column(Numeric(9, 4), nullable=False, default=0)
    notes = Column(Text, nullable=True)
    is_verified_onsite = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<GatePosition {self.name} (segment={self.fence_segment_id})>"
