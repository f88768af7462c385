"""
Parcel Endpoints

CRUD for parcels. Every parcel belongs to a job of the same organization.
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
from fencemark.models.job import Job
from fencemark.models.parcel import Parcel
from fencemark.schemas.site import ParcelCreate, ParcelUpdate, ParcelResponse
from fencemark.schemas.common import SuccessResponse
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/parcels", tags=["parcels"])

JOB_NOT_FOUND = "Job not found or access denied"


@router.get("", response_model=list[ParcelResponse])
def list_parcels(
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return (
        scoped_query(db, Parcel, context.organization_id)
        .order_by(Parcel.name)
        .all()
    )


@router.get("/by-job/{job_id}", response_model=list[ParcelResponse])
def list_parcels_by_job(
    job_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    """Parcels of one job. A foreign or unknown job yields an empty list."""
    return (
        scoped_query(db, Parcel, context.organization_id)
        .filter(Parcel.job_id == job_id)
        .order_by(Parcel.name)
        .all()
    )


@router.get("/{parcel_id}", response_model=ParcelResponse)
def get_parcel(
    parcel_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return get_owned_or_404(db, Parcel, parcel_id, context.organization_id, "Parcel")


@router.post("", response_model=ParcelResponse, status_code=status.HTTP_201_CREATED)
def create_parcel(
    payload: ParcelCreate,
    response: Response,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    require_owned_reference(db, Job, payload.job_id, context.organization_id, JOB_NOT_FOUND)

    parcel = Parcel(organization_id=context.organization_id, **payload.model_dump())
    db.add(parcel)
    db.commit()

    logger.info(f"Parcel created: {parcel.id} for job {parcel.job_id}")
    set_location(response, "parcels", parcel.id)
    return parcel


@router.put("/{parcel_id}", response_model=ParcelResponse)
def update_parcel(
    parcel_id: str,
    payload: ParcelUpdate,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    parcel = get_owned_or_404(db, Parcel, parcel_id, context.organization_id, "Parcel")
    apply_updates(parcel, payload.model_dump(exclude_unset=True))
    db.commit()
    return parcel


@router.delete("/{parcel_id}", response_model=SuccessResponse)
def delete_parcel(
    parcel_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    parcel = get_owned_or_404(db, Parcel, parcel_id, context.organization_id, "Parcel")
    db.delete(parcel)
    db.commit()

    logger.info(f"Parcel deleted: {parcel_id} by {context.user_id}")
    return SuccessResponse()
