"""
Job Schemas
"""
from pydantic import BaseModel, Field, EmailStr
from typing import Optional
from datetime import datetime
from decimal import Decimal

from fencemark.models.job import JobStatus, LineItemType
from fencemark.schemas.common import Money, Quantity, UtcDateTime


class JobLineItemCreate(BaseModel):
    item_type: LineItemType
    fence_type_id: Optional[str] = None
    gate_type_id: Optional[str] = None
    description: str = Field("", max_length=500)
    quantity: Quantity = Field(Decimal("0"), ge=0)
    unit_price: Money = Field(Decimal("0"), ge=0)


class JobLineItemResponse(BaseModel):
    id: str
    item_type: LineItemType
    fence_type_id: Optional[str] = None
    gate_type_id: Optional[str] = None
    description: str
    quantity: Quantity
    unit_price: Money
    total_price: Money

    class Config:
        from_attributes = True


class JobBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = Field(None, max_length=50)
    installation_address: Optional[str] = Field(None, max_length=500)
    status: JobStatus = JobStatus.DRAFT
    total_linear_feet: Quantity = Field(Decimal("0"), ge=0)
    labor_cost: Money = Field(Decimal("0"), ge=0)
    materials_cost: Money = Field(Decimal("0"), ge=0)
    notes: Optional[str] = None
    estimated_start_date: Optional[UtcDateTime] = None
    estimated_completion_date: Optional[UtcDateTime] = None


class JobCreate(JobBase):
    line_items: list[JobLineItemCreate] = []


class JobUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    customer_name: Optional[str] = Field(None, min_length=1, max_length=255)
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = Field(None, max_length=50)
    installation_address: Optional[str] = Field(None, max_length=500)
    status: Optional[JobStatus] = None
    total_linear_feet: Optional[Quantity] = Field(None, ge=0)
    labor_cost: Optional[Money] = Field(None, ge=0)
    materials_cost: Optional[Money] = Field(None, ge=0)
    notes: Optional[str] = None
    estimated_start_date: Optional[UtcDateTime] = None
    estimated_completion_date: Optional[UtcDateTime] = None
    # When present, replaces all line items
    line_items: Optional[list[JobLineItemCreate]] = None


class JobResponse(BaseModel):
    id: str
    organization_id: str
    name: str
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    installation_address: Optional[str] = None
    status: JobStatus
    total_linear_feet: Quantity
    labor_cost: Money
    materials_cost: Money
    total_cost: Money
    notes: Optional[str] = None
    estimated_start_date: Optional[datetime] = None
    estimated_completion_date: Optional[datetime] = None
    line_items: list[JobLineItemResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
