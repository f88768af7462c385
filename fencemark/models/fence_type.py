"""
Fence and gate catalog models.

A fence type lists the components needed per linear foot of fence; a gate
type lists the components needed per gate.
"""
from sqlalchemy import Column, String, Text, Numeric, ForeignKey, Index
from sqlalchemy.orm import relationship

from fencemark.database import Base
from fencemark.models.base import OrganizationScopedMixin, new_id


class FenceType(OrganizationScopedMixin, Base):
    __tablename__ = "fence_types"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    height_in_feet = Column(Numeric(9, 2), nullable=False, default=0)
    material = Column(String(100), nullable=True)
    style = Column(String(100), nullable=True)
    price_per_linear_foot = Column(Numeric(18, 2), nullable=False, default=0)

    components = relationship(
        "FenceComponent",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin"
    )

    __table_args__ = (
        Index('idx_fence_type_org_name', 'organization_id', 'name'),
    )

    def __repr__(self):
        return f"<FenceType {self.name} (org={self.organization_id})>"


class FenceComponent(Base):
    __tablename__ = "fence_components"

    id = Column(String(36), primary_key=True, default=new_id)
    fence_type_id = Column(
        String(36),
        ForeignKey("fence_types.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    component_id = Column(
        String(36),
        ForeignKey("components.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    quantity_per_linear_foot = Column(Numeric(18, 4), nullable=False, default=0)

    component = relationship("Component", lazy="joined")


class GateType(OrganizationScopedMixin, Base):
    __tablename__ = "gate_types"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    width_in_feet = Column(Numeric(9, 2), nullable=False, default=0)
    height_in_feet = Column(Numeric(9, 2), nullable=False, default=0)
    material = Column(String(100), nullable=True)
    style = Column(String(100), nullable=True)
    base_price = Column(Numeric(18, 2), nullable=False, default=0)

    components = relationship(
        "GateComponent",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin"
    )

    __table_args__ = (
        Index('idx_gate_type_org_name', 'organization_id', 'name'),
    )

    def __repr__(self):
        return f"<GateType {self.name} (org={self.organization_id})>"


class GateComponent(Base):
    __tablename__ = "gate_components"

    id = Column(String(36), primary_key=True, default=new_id)
    gate_type_id = Column(
        String(36),
        ForeignKey("gate_types.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    component_id = Column(
        String(36),
        ForeignKey("components.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    quantity_per_gate = Column(Numeric(18, 4), nullable=False, default=0)

    component = relationship("Component", lazy="joined")
