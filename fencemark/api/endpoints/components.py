"""
Component Endpoints

CRUD for catalog components within the caller's organization.
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from fencemark.api.deps import CurrentUserContext, require_organization, get_tenant_db
from fencemark.api.scoping import scoped_query, get_owned_or_404, apply_updates, set_location
from fencemark.models.component import Component
from fencemark.schemas.catalog import ComponentCreate, ComponentUpdate, ComponentResponse
from fencemark.schemas.common import SuccessResponse
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/components", tags=["components"])


@router.get("", response_model=list[ComponentResponse])
def list_components(
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    """List components ordered by category, then name."""
    return (
        scoped_query(db, Component, context.organization_id)
        .order_by(Component.category, Component.name)
        .all()
    )


@router.get("/{component_id}", response_model=ComponentResponse)
def get_component(
    component_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return get_owned_or_404(db, Component, component_id, context.organization_id, "Component")


@router.post("", response_model=ComponentResponse, status_code=status.HTTP_201_CREATED)
def create_component(
    payload: ComponentCreate,
    response: Response,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    component = Component(
        organization_id=context.organization_id,  # CRITICAL: Set organization_id
        **payload.model_dump()
    )
    db.add(component)
    db.commit()

    logger.info(f"Component created: {component.id} by {context.user_id}")
    set_location(response, "components", component.id)
    return component


@router.put("/{component_id}", response_model=ComponentResponse)
def update_component(
    component_id: str,
    payload: ComponentUpdate,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    component = get_owned_or_404(db, Component, component_id, context.organization_id, "Component")
    apply_updates(component, payload.model_dump(exclude_unset=True))
    db.commit()
    return component


@router.delete("/{component_id}", response_model=SuccessResponse)
def delete_component(
    component_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    component = get_owned_or_404(db, Component, component_id, context.organization_id, "Component")
    db.delete(component)
    db.commit()

    logger.info(f"Component deleted: {component_id} by {context.user_id}")
    return SuccessResponse()
