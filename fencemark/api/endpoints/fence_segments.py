"""
Fence Segment Endpoints

Segments drawn on a job's map. The job, and optionally the parcel and
fence type, must belong to the caller's organization.
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
from fencemark.models.fence_segment import FenceSegment
from fencemark.models.fence_type import FenceType
from fencemark.models.job import Job
from fencemark.models.parcel import Parcel
from fencemark.schemas.site import (
    FenceSegmentCreate,
    FenceSegmentUpdate,
    FenceSegmentResponse,
)
from fencemark.schemas.common import SuccessResponse
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/fence-segments", tags=["fence-segments"])

FENCE_TYPE_NOT_FOUND = "Fence type not found or access denied"


@router.get("", response_model=list[FenceSegmentResponse])
def list_fence_segments(
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return (
        scoped_query(db, FenceSegment, context.organization_id)
        .order_by(FenceSegment.created_at.desc())
        .all()
    )


@router.get("/by-job/{job_id}", response_model=list[FenceSegmentResponse])
def list_fence_segments_by_job(
    job_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return (
        scoped_query(db, FenceSegment, context.organization_id)
        .filter(FenceSegment.job_id == job_id)
        .order_by(FenceSegment.name)
        .all()
    )


@router.get("/by-parcel/{parcel_id}", response_model=list[FenceSegmentResponse])
def list_fence_segments_by_parcel(
    parcel_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return (
        scoped_query(db, FenceSegment, context.organization_id)
        .filter(FenceSegment.parcel_id == parcel_id)
        .order_by(FenceSegment.name)
        .all()
    )


@router.get("/{segment_id}", response_model=FenceSegmentResponse)
def get_fence_segment(
    segment_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return get_owned_or_404(
        db, FenceSegment, segment_id, context.organization_id, "Fence segment"
    )


@router.post("", response_model=FenceSegmentResponse, status_code=status.HTTP_201_CREATED)
def create_fence_segment(
    payload: FenceSegmentCreate,
    response: Response,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    organization_id = context.organization_id
    require_owned_reference(db, Job, payload.job_id, organization_id, "Job not found or access denied")
    require_owned_reference(db, Parcel, payload.parcel_id, organization_id, "Parcel not found or access denied")
    require_owned_reference(db, FenceType, payload.fence_type_id, organization_id, FENCE_TYPE_NOT_FOUND)

    segment = FenceSegment(
        organization_id=organization_id,
        is_verified_onsite=False,
        **payload.model_dump()
    )
    db.add(segment)
    db.commit()

    logger.info(f"Fence segment created: {segment.id} for job {segment.job_id}")
    set_location(response, "fence-segments", segment.id)
    return segment


@router.put("/{segment_id}", response_model=FenceSegmentResponse)
def update_fence_segment(
    segment_id: str,
    payload: FenceSegmentUpdate,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    segment = get_owned_or_404(
        db, FenceSegment, segment_id, context.organization_id, "Fence segment"
    )
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("fence_type_id"):
        require_owned_reference(
            db, FenceType, changes["fence_type_id"], context.organization_id, FENCE_TYPE_NOT_FOUND
        )

    apply_updates(segment, changes)
    db.commit()
    return segment


@router.delete("/{segment_id}", response_model=SuccessResponse)
def delete_fence_segment(
    segment_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    segment = get_owned_or_404(
        db, FenceSegment, segment_id, context.organization_id, "Fence segment"
    )
    db.delete(segment)
    db.commit()

    logger.info(f"Fence segment deleted: {segment_id} by {context.user_id}")
    return SuccessResponse()
