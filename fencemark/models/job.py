"""
Job Model

A job is a customer installation: contact details, the fence and gate line
items being quoted, and rolled-up cost figures.
"""
from sqlalchemy import Column, String, Text, Numeric, Integer, DateTime, ForeignKey, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum

from fencemark.database import Base
from fencemark.models.base import OrganizationScopedMixin, new_id


class JobStatus(str, enum.Enum):
    DRAFT = "Draft"
    QUOTED = "Quoted"
    APPROVED = "Approved"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class LineItemType(str, enum.Enum):
    FENCE = "Fence"
    GATE = "Gate"
    LABOR = "Labor"
    OTHER = "Other"


class Job(OrganizationScopedMixin, Base):
    __tablename__ = "jobs"

    name = Column(String(255), nullable=False)
    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=True)
    customer_phone = Column(String(50), nullable=True)
    installation_address = Column(String(500), nullable=True)

    status = Column(SQLEnum(JobStatus), default=JobStatus.DRAFT, nullable=False, index=True)

    total_linear_feet = Column(Numeric(18, 2), nullable=False, default=0)
    labor_cost = Column(Numeric(18, 2), nullable=False, default=0)
    materials_cost = Column(Numeric(18, 2), nullable=False, default=0)
    total_cost = Column(Numeric(18, 2), nullable=False, default=0)

    notes = Column(Text, nullable=True)
    estimated_start_date = Column(DateTime, nullable=True)
    estimated_completion_date = Column(DateTime, nullable=True)

    line_items = relationship(
        "JobLineItem",
        back_populates="job",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="JobLineItem.position"
    )

    __table_args__ = (
        Index('idx_job_org_created', 'organization_id', 'created_at'),
    )

    def __repr__(self):
        return f"<Job {self.name} (org={self.organization_id})>"


class JobLineItem(Base):
    __tablename__ = "job_line_items"

    id = Column(String(36), primary_key=True, default=new_id)
    job_id = Column(
        String(36),
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    item_type = Column(SQLEnum(LineItemType), nullable=False)

    fence_type_id = Column(
        String(36),
        ForeignKey("fence_types.id", ondelete="SET NULL"),
        nullable=True
    )
    gate_type_id = Column(
        String(36),
        ForeignKey("gate_types.id", ondelete="SET NULL"),
        nullable=True
    )

    description = Column(String(500), nullable=False, default="")
    # Linear feet for fence items, gate count for gate items
    quantity = Column(Numeric(18, 2), nullable=False, default=0)
    unit_price = Column(Numeric(18, 2), nullable=False, default=0)
    total_price = Column(Numeric(18, 2), nullable=False, default=0)

    # Preserves the order items were submitted in
    position = Column(Integer, nullable=False, default=0)

    job = relationship("Job", back_populates="line_items")
    fence_type = relationship("FenceType")
    gate_type = relationship("GateType")
