"""
Catalog Schemas

Components, fence types and gate types.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from fencemark.schemas.common import Money, Quantity


class ComponentBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    sku: Optional[str] = Field(None, max_length=100)
    category: str = Field("General", min_length=1, max_length=100)
    unit_of_measure: str = Field("Each", min_length=1, max_length=50)
    unit_price: Money = Field(Decimal("0"), ge=0)
    material: Optional[str] = Field(None, max_length=100)
    dimensions: Optional[str] = Field(None, max_length=100)


class ComponentCreate(ComponentBase):
    pass


class ComponentUpdate(BaseModel):
    """All fields optional; only fields present in the body are changed."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    sku: Optional[str] = Field(None, max_length=100)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    unit_of_measure: Optional[str] = Field(None, min_length=1, max_length=50)
    unit_price: Optional[Money] = Field(None, ge=0)
    material: Optional[str] = Field(None, max_length=100)
    dimensions: Optional[str] = Field(None, max_length=100)


class ComponentResponse(ComponentBase):
    id: str
    organization_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FenceComponentLink(BaseModel):
    component_id: str
    quantity_per_linear_foot: Quantity = Field(..., ge=0)


class FenceComponentResponse(FenceComponentLink):
    id: str
    component: Optional[ComponentResponse] = None

    class Config:
        from_attributes = True


class FenceTypeBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    height_in_feet: Quantity = Field(Decimal("0"), ge=0)
    material: Optional[str] = Field(None, max_length=100)
    style: Optional[str] = Field(None, max_length=100)
    price_per_linear_foot: Money = Field(Decimal("0"), ge=0)


class FenceTypeCreate(FenceTypeBase):
    components: list[FenceComponentLink] = []


class FenceTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    height_in_feet: Optional[Quantity] = Field(None, ge=0)
    material: Optional[str] = Field(None, max_length=100)
    style: Optional[str] = Field(None, max_length=100)
    price_per_linear_foot: Optional[Money] = Field(None, ge=0)
    # When present, replaces the whole component list
    components: Optional[list[FenceComponentLink]] = None


class FenceTypeResponse(FenceTypeBase):
    id: str
    organization_id: str
    components: list[FenceComponentResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GateComponentLink(BaseModel):
    component_id: str
    quantity_per_gate: Quantity = Field(..., ge=0)


class GateComponentResponse(GateComponentLink):
    id: str
    component: Optional[ComponentResponse] = None

    class Config:
        from_attributes = True


class GateTypeBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    width_in_feet: Quantity = Field(Decimal("0"), ge=0)
    height_in_feet: Quantity = Field(Decimal("0"), ge=0)
    material: Optional[str] = Field(None, max_length=100)
    style: Optional[str] = Field(None, max_length=100)
    base_price: Money = Field(Decimal("0"), ge=0)


class GateTypeCreate(GateTypeBase):
    components: list[GateComponentLink] = []


class GateTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    width_in_feet: Optional[Quantity] = Field(None, ge=0)
    height_in_feet: Optional[Quantity] = Field(None, ge=0)
    material: Optional[str] = Field(None, max_length=100)
    style: Optional[str] = Field(None, max_length=100)
    base_price: Optional[Money] = Field(None, ge=0)
    components: Optional[list[GateComponentLink]] = None


class GateTypeResponse(GateTypeBase):
    id: str
    organization_id: str
    components: list[GateComponentResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
