"""
Site Schemas

Parcels, drawings, fence segments and gate positions: everything drawn or
attached on the job's map.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from fencemark.schemas.common import Quantity


class ParcelBase(BaseModel):
    job_id: str
    name: str = Field(..., min_length=1, max_length=255)
    address: Optional[str] = Field(None, max_length=500)
    parcel_number: Optional[str] = Field(None, max_length=100)
    total_area: Optional[Quantity] = Field(None, ge=0)
    area_unit: str = Field("sqft", max_length=20)
    coordinates: Optional[str] = None
    notes: Optional[str] = None


class ParcelCreate(ParcelBase):
    pass


class ParcelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, max_length=500)
    parcel_number: Optional[str] = Field(None, max_length=100)
    total_area: Optional[Quantity] = Field(None, ge=0)
    area_unit: Optional[str] = Field(None, max_length=20)
    coordinates: Optional[str] = None
    notes: Optional[str] = None


class ParcelResponse(ParcelBase):
    id: str
    organization_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DrawingBase(BaseModel):
    job_id: Optional[str] = None
    parcel_id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    drawing_type: str = Field("SitePlan", max_length=50)
    file_name: Optional[str] = Field(None, max_length=255)
    file_path: Optional[str] = Field(None, max_length=1000)
    mime_type: Optional[str] = Field(None, max_length=100)
    file_size: Optional[int] = Field(None, ge=0)
    version: int = Field(1, ge=1)


class DrawingCreate(DrawingBase):
    pass


class DrawingUpdate(BaseModel):
    """Only metadata is editable; file and ownership fields are fixed at upload."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    drawing_type: Optional[str] = Field(None, max_length=50)
    version: Optional[int] = Field(None, ge=1)


class DrawingResponse(DrawingBase):
    id: str
    organization_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FenceSegmentBase(BaseModel):
    job_id: str
    parcel_id: Optional[str] = None
    fence_type_id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=255)
    geo_json_geometry: Optional[str] = None
    length_in_feet: Quantity = Field(Decimal("0"), ge=0)
    length_in_meters: Quantity = Field(Decimal("0"), ge=0)
    is_snapped_to_boundary: bool = False
    notes: Optional[str] = None


class FenceSegmentCreate(FenceSegmentBase):
    pass


class FenceSegmentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    fence_type_id: Optional[str] = None
    geo_json_geometry: Optional[str] = None
    length_in_feet: Optional[Quantity] = Field(None, ge=0)
    length_in_meters: Optional[Quantity] = Field(None, ge=0)
    is_snapped_to_boundary: Optional[bool] = None
    notes: Optional[str] = None
    is_verified_onsite: Optional[bool] = None
    onsite_verified_length_in_feet: Optional[Quantity] = Field(None, ge=0)


class FenceSegmentResponse(FenceSegmentBase):
    id: str
    organization_id: str
    is_verified_onsite: bool
    onsite_verified_length_in_feet: Optional[Quantity] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GatePositionBase(BaseModel):
    fence_segment_id: str
    gate_type_id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=255)
    geo_json_location: Optional[str] = None
    position_along_segment: Quantity = Field(Decimal("0"), ge=0, le=1)
    notes: Optional[str] = None


class GatePositionCreate(GatePositionBase):
    pass


class GatePositionUpdate(BaseModel):
    gate_type_id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    geo_json_location: Optional[str] = None
    position_along_segment: Optional[Quantity] = Field(None, ge=0, le=1)
    notes: Optional[str] = None
    is_verified_onsite: Optional[bool] = None


class GatePositionResponse(GatePositionBase):
    id: str
    organization_id: str
    is_verified_onsite: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
