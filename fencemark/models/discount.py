"""
Discount Rule Model

Percentage, fixed-amount or per-foot discounts, optionally unlocked by a
promo code and constrained by a validity window and minimum order size.
"""
from sqlalchemy import Column, String, Text, Numeric, Boolean, DateTime, Index, Enum as SQLEnum, text
import enum

from fencemark.database import Base
from fencemark.models.base import OrganizationScopedMixin


class DiscountType(str, enum.Enum):
    PERCENTAGE = "Percentage"
    FIXED_AMOUNT = "FixedAmount"
    PER_LINEAR_FOOT = "PerLinearFoot"


class DiscountRule(OrganizationScopedMixin, Base):
    __tablename__ = "discount_rules"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    discount_type = Column(SQLEnum(DiscountType), nullable=False, default=DiscountType.PERCENTAGE)
    discount_value = Column(Numeric(18, 4), nullable=False, default=0)

    minimum_order_value = Column(Numeric(18, 2), nullable=True)
    minimum_linear_feet = Column(Numeric(18, 2), nullable=True)

    valid_from = Column(DateTime, nullable=True)
    valid_until = Column(DateTime, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    promo_code = Column(String(50), nullable=True)

    __table_args__ = (
        # Backstop for the application-level uniqueness check
        Index(
            'uq_discount_org_promo_code',
            'organization_id', 'promo_code',
            unique=True,
            sqlite_where=text("promo_code IS NOT NULL"),
            postgresql_where=text("promo_code IS NOT NULL"),
            mssql_where=text("promo_code IS NOT NULL"),
        ),
    )

    def __repr__(self):
        return f"<DiscountRule {self.name} promo={self.promo_code}>"
