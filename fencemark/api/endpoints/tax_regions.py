"""
Tax Region Endpoints

At most one tax region per organization is the default.
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from fencemark.api.deps import CurrentUserContext, require_organization, get_tenant_db
from fencemark.api.scoping import (
    scoped_query,
    get_owned_or_404,
    clear_other_defaults,
    apply_updates,
    set_location,
)
from fencemark.models.pricing import TaxRegion
from fencemark.schemas.pricing import TaxRegionCreate, TaxRegionUpdate, TaxRegionResponse
from fencemark.schemas.common import SuccessResponse
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/tax-regions", tags=["tax-regions"])


@router.get("", response_model=list[TaxRegionResponse])
def list_tax_regions(
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return (
        scoped_query(db, TaxRegion, context.organization_id)
        .order_by(TaxRegion.is_default.desc(), TaxRegion.name)
        .all()
    )


@router.get("/{region_id}", response_model=TaxRegionResponse)
def get_tax_region(
    region_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return get_owned_or_404(db, TaxRegion, region_id, context.organization_id, "Tax region")


@router.post("", response_model=TaxRegionResponse, status_code=status.HTTP_201_CREATED)
def create_tax_region(
    payload: TaxRegionCreate,
    response: Response,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    if payload.is_default:
        clear_other_defaults(db, TaxRegion, context.organization_id)

    region = TaxRegion(organization_id=context.organization_id, **payload.model_dump())
    db.add(region)
    db.commit()

    logger.info(f"Tax region created: {region.id} ({region.code})")
    set_location(response, "tax-regions", region.id)
    return region


@router.put("/{region_id}", response_model=TaxRegionResponse)
def update_tax_region(
    region_id: str,
    payload: TaxRegionUpdate,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    region = get_owned_or_404(db, TaxRegion, region_id, context.organization_id, "Tax region")
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("is_default") and not region.is_default:
        clear_other_defaults(db, TaxRegion, context.organization_id, keep_id=region.id)

    apply_updates(region, changes)
    db.commit()
    return region


@router.delete("/{region_id}", response_model=SuccessResponse)
def delete_tax_region(
    region_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    region = get_owned_or_404(db, TaxRegion, region_id, context.organization_id, "Tax region")
    db.delete(region)
    db.commit()
    return SuccessResponse()
