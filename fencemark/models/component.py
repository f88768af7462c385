"""
Component Model

Catalog parts (posts, rails, panels, hardware) priced per unit of measure.
Fence and gate types reference components to build a bill of materials.
"""
from sqlalchemy import Column, String, Text, Numeric, Index

from fencemark.database import Base
from fencemark.models.base import OrganizationScopedMixin


class Component(OrganizationScopedMixin, Base):
    __tablename__ = "components"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    sku = Column(String(100), nullable=True)
    category = Column(String(100), nullable=False, default="General")
    unit_of_measure = Column(String(50), nullable=False, default="Each")
    unit_price = Column(Numeric(18, 2), nullable=False, default=0)
    material = Column(String(100), nullable=True)
    dimensions = Column(String(100), nullable=True)

    __table_args__ = (
        Index('idx_component_org_category_name', 'organization_id', 'category', 'name'),
    )

    def __repr__(self):
        return f"<Component {self.name} (org={self.organization_id})>"
