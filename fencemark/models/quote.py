"""
Quote models.

A quote snapshots a job's bill of materials and cost roll-up under a
pricing configuration. Every generation or recalculation appends a
QuoteVersion holding JSON snapshots so earlier figures stay auditable.
"""
from sqlalchemy import Column, String, Text, Numeric, Integer, DateTime, ForeignKey, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum

from fencemark.database import Base
from fencemark.models.base import OrganizationScopedMixin, new_id
from fencemark.utils.clock import utcnow


class QuoteStatus(str, enum.Enum):
    DRAFT = "Draft"
    PENDING = "Pending"
    SENT = "Sent"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    EXPIRED = "Expired"
    REVISED = "Revised"


class Quote(OrganizationScopedMixin, Base):
    __tablename__ = "quotes"

    job_id = Column(
        String(36),
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    pricing_config_id = Column(
        String(36),
        ForeignKey("pricing_configs.id", ondelete="SET NULL"),
        nullable=True
    )

    quote_number = Column(String(50), nullable=False)
    current_version = Column(Integer, nullable=False, default=1)
    status = Column(SQLEnum(QuoteStatus), nullable=False, default=QuoteStatus.DRAFT)

    materials_cost = Column(Numeric(18, 2), nullable=False, default=0)
    labor_cost = Column(Numeric(18, 2), nullable=False, default=0)
    subtotal = Column(Numeric(18, 2), nullable=False, default=0)
    contingency_amount = Column(Numeric(18, 2), nullable=False, default=0)
    profit_amount = Column(Numeric(18, 2), nullable=False, default=0)
    total_amount = Column(Numeric(18, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(18, 2), nullable=False, default=0)
    grand_total = Column(Numeric(18, 2), nullable=False, default=0)

    valid_until = Column(DateTime, nullable=True)
    terms = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    job = relationship("Job")
    pricing_config = relationship("PricingConfig")
    bill_of_materials = relationship(
        "BillOfMaterialsItem",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by=lambda: [BillOfMaterialsItem.category, BillOfMaterialsItem.sort_order]
    )
    versions = relationship(
        "QuoteVersion",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="QuoteVersion.version_number"
    )

    __table_args__ = (
        Index('uq_quote_org_number', 'organization_id', 'quote_number', unique=True),
    )

    def __repr__(self):
        return f"<Quote {self.quote_number} v{self.current_version}>"


class BillOfMaterialsItem(Base):
    __tablename__ = "bill_of_materials_items"

    id = Column(String(36), primary_key=True, default=new_id)
    quote_id = Column(
        String(36),
        ForeignKey("quotes.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    component_id = Column(
        String(36),
        ForeignKey("components.id", ondelete="SET NULL"),
        nullable=True
    )

    category = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False)
    sku = Column(String(100), nullable=True)
    quantity = Column(Numeric(18, 4), nullable=False, default=0)
    unit_of_measure = Column(String(50), nullable=False, default="Each")
    unit_price = Column(Numeric(18, 2), nullable=False, default=0)
    total_price = Column(Numeric(18, 2), nullable=False, default=0)
    sort_order = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=True)


class QuoteVersion(Base):
    __tablename__ = "quote_versions"

    id = Column(String(36), primary_key=True, default=new_id)
    quote_id = Column(
        String(36),
        ForeignKey("quotes.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    version_number = Column(Integer, nullable=False)
    change_summary = Column(String(500), nullable=True)

    materials_cost = Column(Numeric(18, 2), nullable=False, default=0)
    labor_cost = Column(Numeric(18, 2), nullable=False, default=0)
    subtotal = Column(Numeric(18, 2), nullable=False, default=0)
    contingency_amount = Column(Numeric(18, 2), nullable=False, default=0)
    profit_amount = Column(Numeric(18, 2), nullable=False, default=0)
    total_amount = Column(Numeric(18, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(18, 2), nullable=False, default=0)
    grand_total = Column(Numeric(18, 2), nullable=False, default=0)

    # JSON documents; see fencemark.services.pricing
    bom_snapshot = Column(Text, nullable=False, default="[]")
    pricing_config_snapshot = Column(Text, nullable=False, default="{}")

    created_by_user_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
