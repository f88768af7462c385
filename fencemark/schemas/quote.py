"""
Quote Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from fencemark.models.quote import QuoteStatus
from fencemark.schemas.common import Money, Quantity, UtcDateTime


class BillOfMaterialsItemResponse(BaseModel):
    id: Optional[str] = None
    component_id: Optional[str] = None
    category: str
    description: str
    sku: Optional[str] = None
    quantity: Quantity
    unit_of_measure: str
    unit_price: Money
    total_price: Money
    sort_order: int
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class QuoteVersionResponse(BaseModel):
    id: str
    version_number: int
    change_summary: Optional[str] = None
    materials_cost: Money
    labor_cost: Money
    subtotal: Money
    contingency_amount: Money
    profit_amount: Money
    total_amount: Money
    tax_amount: Money
    grand_total: Money
    bom_snapshot: str
    pricing_config_snapshot: str
    created_by_user_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class QuoteResponse(BaseModel):
    id: str
    organization_id: str
    job_id: str
    pricing_config_id: Optional[str] = None
    quote_number: str
    current_version: int
    status: QuoteStatus
    materials_cost: Money
    labor_cost: Money
    subtotal: Money
    contingency_amount: Money
    profit_amount: Money
    total_amount: Money
    tax_amount: Money
    grand_total: Money
    valid_until: Optional[datetime] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    bill_of_materials: list[BillOfMaterialsItemResponse] = []
    versions: list[QuoteVersionResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class QuoteSummaryResponse(BaseModel):
    """List view without the BOM and version history."""
    id: str
    job_id: str
    quote_number: str
    current_version: int
    status: QuoteStatus
    total_amount: Money
    grand_total: Money
    valid_until: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class GenerateQuoteRequest(BaseModel):
    job_id: str
    pricing_config_id: Optional[str] = None


class RecalculateQuoteRequest(BaseModel):
    change_summary: Optional[str] = Field(None, max_length=500)


class QuoteUpdate(BaseModel):
    status: Optional[QuoteStatus] = None
    valid_until: Optional[UtcDateTime] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    tax_amount: Optional[Money] = Field(None, ge=0)
