"""
Discount Schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal

from fencemark.models.discount import DiscountType
from fencemark.schemas.common import Money, Quantity, UtcDateTime


def _normalize_promo_code(value: Optional[str]) -> Optional[str]:
    """Blank promo codes mean "no code"."""
    if value is None:
        return None
    value = value.strip()
    return value or None


class DiscountRuleBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    discount_type: DiscountType = DiscountType.PERCENTAGE
    discount_value: Quantity = Field(Decimal("0"), ge=0)
    minimum_order_value: Optional[Money] = Field(None, ge=0)
    minimum_linear_feet: Optional[Quantity] = Field(None, ge=0)
    valid_from: Optional[UtcDateTime] = None
    valid_until: Optional[UtcDateTime] = None
    is_active: bool = True
    promo_code: Optional[str] = Field(None, max_length=50)


class DiscountRuleCreate(DiscountRuleBase):

    @field_validator("promo_code")
    @classmethod
    def normalize_promo_code(cls, value):
        return _normalize_promo_code(value)


class DiscountRuleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Quantity] = Field(None, ge=0)
    minimum_order_value: Optional[Money] = Field(None, ge=0)
    minimum_linear_feet: Optional[Quantity] = Field(None, ge=0)
    valid_from: Optional[UtcDateTime] = None
    valid_until: Optional[UtcDateTime] = None
    is_active: Optional[bool] = None
    promo_code: Optional[str] = Field(None, max_length=50)

    @field_validator("promo_code")
    @classmethod
    def normalize_promo_code(cls, value):
        return _normalize_promo_code(value)


class DiscountRuleResponse(DiscountRuleBase):
    id: str
    organization_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ValidatePromoRequest(BaseModel):
    promo_code: str = Field(..., min_length=1, max_length=50)
    order_value: Optional[Money] = None
    linear_feet: Optional[Quantity] = None
