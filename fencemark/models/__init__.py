"""
Database Models

All business models carry organization_id for multi-tenant isolation.
Importing this package registers every table on Base.metadata.
"""
from fencemark.models.user import User
from fencemark.models.organization import Organization, OrganizationMember, MemberRole
from fencemark.models.component import Component
from fencemark.models.fence_type import FenceType, FenceComponent, GateType, GateComponent
from fencemark.models.job import Job, JobLineItem, JobStatus, LineItemType
from fencemark.models.parcel import Parcel
from fencemark.models.drawing import Drawing
from fencemark.models.fence_segment import FenceSegment, GatePosition
from fencemark.models.discount import DiscountRule, DiscountType
from fencemark.models.pricing import PricingConfig, HeightTier, TaxRegion
from fencemark.models.quote import Quote, QuoteStatus, BillOfMaterialsItem, QuoteVersion

__all__ = [
    "User",
    "Organization",
    "OrganizationMember",
    "MemberRole",
    "Component",
    "FenceType",
    "FenceComponent",
    "GateType",
    "GateComponent",
    "Job",
    "JobLineItem",
    "JobStatus",
    "LineItemType",
    "Parcel",
    "Drawing",
    "FenceSegment",
    "GatePosition",
    "DiscountRule",
    "DiscountType",
    "PricingConfig",
    "HeightTier",
    "TaxRegion",
    "Quote",
    "QuoteStatus",
    "BillOfMaterialsItem",
    "QuoteVersion",
]
