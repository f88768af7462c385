"""
Fence Type Endpoints

CRUD for fence types and the components they are built from.
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
from fencemark.models.fence_type import FenceType, FenceComponent
from fencemark.schemas.catalog import (
    FenceTypeCreate,
    FenceTypeUpdate,
    FenceTypeResponse,
    FenceComponentLink,
)
from fencemark.schemas.common import SuccessResponse
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/fences", tags=["fences"])

COMPONENT_NOT_FOUND = "Component not found or access denied"


def build_fence_components(
    db: Session,
    organization_id: str,
    links: list[FenceComponentLink]
) -> list[FenceComponent]:
    return [
        FenceComponent(
            component_id=require_owned_reference(
                db, Component, link.component_id, organization_id, COMPONENT_NOT_FOUND
            ).id,
            quantity_per_linear_foot=link.quantity_per_linear_foot,
        )
        for link in links
    ]


@router.get("", response_model=list[FenceTypeResponse])
def list_fence_types(
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return (
        scoped_query(db, FenceType, context.organization_id)
        .order_by(FenceType.name)
        .all()
    )


@router.get("/{fence_type_id}", response_model=FenceTypeResponse)
def get_fence_type(
    fence_type_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return get_owned_or_404(db, FenceType, fence_type_id, context.organization_id, "Fence type")


@router.post("", response_model=FenceTypeResponse, status_code=status.HTTP_201_CREATED)
def create_fence_type(
    payload: FenceTypeCreate,
    response: Response,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    fence_type = FenceType(
        organization_id=context.organization_id,
        **payload.model_dump(exclude={"components"})
    )
    fence_type.components = build_fence_components(db, context.organization_id, payload.components)

    db.add(fence_type)
    db.commit()

    logger.info(f"Fence type created: {fence_type.id} by {context.user_id}")
    set_location(response, "fences", fence_type.id)
    return fence_type


@router.put("/{fence_type_id}", response_model=FenceTypeResponse)
def update_fence_type(
    fence_type_id: str,
    payload: FenceTypeUpdate,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    fence_type = get_owned_or_404(db, FenceType, fence_type_id, context.organization_id, "Fence type")

    changes = payload.model_dump(exclude_unset=True, exclude={"components"})
    if payload.components is not None:
        fence_type.components = build_fence_components(db, context.organization_id, payload.components)
    apply_updates(fence_type, changes)

    db.commit()
    return fence_type


@router.delete("/{fence_type_id}", response_model=SuccessResponse)
def delete_fence_type(
    fence_type_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    fence_type = get_owned_or_404(db, FenceType, fence_type_id, context.organization_id, "Fence type")
    db.delete(fence_type)
    db.commit()

    logger.info(f"Fence type deleted: {fence_type_id} by {context.user_id}")
    return SuccessResponse()
