"""
Pricing models.

PricingConfig holds labor and margin settings with height-based surcharge
tiers; TaxRegion holds a sales tax rate. Each organization has at most one
default of each.
"""
from sqlalchemy import Column, String, Text, Numeric, Boolean, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from decimal import Decimal

from fencemark.database import Base
from fencemark.models.base import OrganizationScopedMixin, new_id


def _single_default_index(name: str) -> Index:
    """Partial unique index allowing one is_default row per organization."""
    return Index(
        name,
        'organization_id',
        unique=True,
        sqlite_where=text("is_default = 1"),
        postgresql_where=text("is_default"),
        mssql_where=text("is_default = 1"),
    )


class PricingConfig(OrganizationScopedMixin, Base):
    __tablename__ = "pricing_configs"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    labor_rate_per_hour = Column(Numeric(18, 2), nullable=False, default=0)
    hours_per_linear_meter = Column(Numeric(18, 4), nullable=False, default=0)
    contingency_percentage = Column(Numeric(9, 4), nullable=False, default=Decimal("0.10"))
    profit_margin_percentage = Column(Numeric(9, 4), nullable=False, default=Decimal("0.20"))
    is_default = Column(Boolean, nullable=False, default=False)

    height_tiers = relationship(
        "HeightTier",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="HeightTier.min_height_in_meters"
    )

    __table_args__ = (
        _single_default_index('uq_pricing_config_org_default'),
    )

    def __repr__(self):
        return f"<PricingConfig {self.name} default={self.is_default}>"


class HeightTier(Base):
    __tablename__ = "height_tiers"

    id = Column(String(36), primary_key=True, default=new_id)
    pricing_config_id = Column(
        String(36),
        ForeignKey("pricing_configs.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    min_height_in_meters = Column(Numeric(9, 2), nullable=False, default=0)
    # None means open-ended
    max_height_in_meters = Column(Numeric(9, 2), nullable=True)
    multiplier = Column(Numeric(9, 4), nullable=False, default=1)
    description = Column(String(255), nullable=True)


class TaxRegion(OrganizationScopedMixin, Base):
    __tablename__ = "tax_regions"

    name = Column(String(255), nullable=False)
    code = Column(String(20), nullable=False)
    tax_rate = Column(Numeric(9, 4), nullable=False, default=0)
    description = Column(Text, nullable=True)
    is_default = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        _single_default_index('uq_tax_region_org_default'),
    )

    def __repr__(self):
        return f"<TaxRegion {self.code} default={self.is_default}>"
