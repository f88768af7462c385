"""
Pricing Schemas

Pricing configurations with height tiers, and tax regions.
"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal

from fencemark.schemas.common import Money, Quantity


class HeightTierBase(BaseModel):
    min_height_in_meters: Quantity = Field(Decimal("0"), ge=0)
    max_height_in_meters: Optional[Quantity] = Field(None, ge=0)
    multiplier: Quantity = Field(Decimal("1.0"), gt=0)
    description: Optional[str] = Field(None, max_length=255)

    @model_validator(mode="after")
    def check_range(self):
        if self.max_height_in_meters is not None and self.max_height_in_meters < self.min_height_in_meters:
            raise ValueError("max_height_in_meters must be greater than or equal to min_height_in_meters")
        return self


class HeightTierCreate(HeightTierBase):
    pass


class HeightTierResponse(HeightTierBase):
    id: str

    class Config:
        from_attributes = True


class PricingConfigBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    labor_rate_per_hour: Money = Field(Decimal("0"), ge=0)
    hours_per_linear_meter: Quantity = Field(Decimal("0"), ge=0)
    contingency_percentage: Quantity = Field(Decimal("0.10"), ge=0, le=1)
    profit_margin_percentage: Quantity = Field(Decimal("0.20"), ge=0, le=1)
    is_default: bool = False


class PricingConfigCreate(PricingConfigBase):
    height_tiers: list[HeightTierCreate] = []


class PricingConfigUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    labor_rate_per_hour: Optional[Money] = Field(None, ge=0)
    hours_per_linear_meter: Optional[Quantity] = Field(None, ge=0)
    contingency_percentage: Optional[Quantity] = Field(None, ge=0, le=1)
    profit_margin_percentage: Optional[Quantity] = Field(None, ge=0, le=1)
    is_default: Optional[bool] = None
    # When present, replaces all tiers
    height_tiers: Optional[list[HeightTierCreate]] = None


class PricingConfigResponse(PricingConfigBase):
    id: str
    organization_id: str
    height_tiers: list[HeightTierResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TaxRegionBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=20)
    tax_rate: Quantity = Field(Decimal("0"), ge=0, le=1)
    description: Optional[str] = None
    is_default: bool = False


class TaxRegionCreate(TaxRegionBase):
    pass


class TaxRegionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    code: Optional[str] = Field(None, min_length=1, max_length=20)
    tax_rate: Optional[Quantity] = Field(None, ge=0, le=1)
    description: Optional[str] = None
    is_default: Optional[bool] = None


class TaxRegionResponse(TaxRegionBase):
    id: str
    organization_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
