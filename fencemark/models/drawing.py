"""
Drawing Model

Metadata for a site plan or sketch attached to a job and/or parcel.
File bytes live in external storage; only the path is recorded here.
"""
from sqlalchemy import Column, String, Text, Integer, BigInteger, ForeignKey

from fencemark.database import Base
from fencemark.models.base import OrganizationScopedMixin


class Drawing(OrganizationScopedMixin, Base):
    __tablename__ = "drawings"

    job_id = Column(
        String(36),
        ForeignKey("jobs.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    parcel_id = Column(
        String(36),
        ForeignKey("parcels.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    drawing_type = Column(String(50), nullable=False, default="SitePlan")
    file_name = Column(String(255), nullable=True)
    file_path = Column(String(1000), nullable=True)
    mime_type = Column(String(100), nullable=True)
    file_size = Column(BigInteger().with_variant(Integer, "sqlite"), nullable=True)
    version = Column(Integer, nullable=False, default=1)

    def __repr__(self):
        return f"<Drawing {self.name} v{self.version}>"
