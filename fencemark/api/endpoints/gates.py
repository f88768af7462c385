"""
Gate Type Endpoints

CRUD for gate types and the hardware they are built from.
Component links are validated against the caller's organization.
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from fencemark.api.deps import CurrentUserContext, require_organization, get_tenant_db
from fencemark.api.scoping import (
    scoped_query,
    get_owned_or_404,
    require_owned_reference,
    apply_updates,
    set_location,
)
from fencemark.models.component import Component
from fencemark.models.fence_type import GateType, GateComponent
from fencemark.schemas.catalog import (
    GateTypeCreate,
    GateTypeUpdate,
    GateTypeResponse,
    GateComponentLink,
)
from fencemark.schemas.common import SuccessResponse
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/gates", tags=["gates"])

COMPONENT_NOT_FOUND = "Component not found or access denied"


def build_gate_components(
    db: Session,
    organization_id: str,
    links: list[GateComponentLink]
) -> list[GateComponent]:
    return [
        GateComponent(
            component_id=require_owned_reference(
                db, Component, link.component_id, organization_id, COMPONENT_NOT_FOUND
            ).id,
            quantity_per_gate=link.quantity_per_gate,
        )
        for link in links
    ]


@router.get("", response_model=list[GateTypeResponse])
def list_gate_types(
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return (
        scoped_query(db, GateType, context.organization_id)
        .order_by(GateType.name)
        .all()
    )


@router.get("/{gate_type_id}", response_model=GateTypeResponse)
def get_gate_type(
    gate_type_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return get_owned_or_404(db, GateType, gate_type_id, context.organization_id, "Gate type")


@router.post("", response_model=GateTypeResponse, status_code=status.HTTP_201_CREATED)
def create_gate_type(
    payload: GateTypeCreate,
    response: Response,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    gate_type = GateType(
        organization_id=context.organization_id,
        **payload.model_dump(exclude={"components"})
    )
    gate_type.components = build_gate_components(db, context.organization_id, payload.components)

    db.add(gate_type)
    db.commit()

    logger.info(f"Gate type created: {gate_type.id} by {context.user_id}")
    set_location(response, "gates", gate_type.id)
    return gate_type


@router.put("/{gate_type_id}", response_model=GateTypeResponse)
def update_gate_type(
    gate_type_id: str,
    payload: GateTypeUpdate,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    gate_type = get_owned_or_404(db, GateType, gate_type_id, context.organization_id, "Gate type")

    changes = payload.model_dump(exclude_unset=True, exclude={"components"})
    if payload.components is not None:
        gate_type.components = build_gate_components(db, context.organization_id, payload.components)
    apply_updates(gate_type, changes)

    db.commit()
    return gate_type


@router.delete("/{gate_type_id}", response_model=SuccessResponse)
def delete_gate_type(
    gate_type_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    gate_type = get_owned_or_404(db, GateType, gate_type_id, context.organization_id, "Gate type")
    db.delete(gate_type)
    db.commit()

    logger.info(f"Gate type deleted: {gate_type_id} by {context.user_id}")
    return SuccessResponse()
