"""
Drawing Endpoints

Drawing metadata attached to jobs and parcels. Only name, description,
drawing type and version can change after creation.
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
from fencemark.models.drawing import Drawing
from fencemark.models.job import Job
from fencemark.models.parcel import Parcel
from fencemark.schemas.site import DrawingCreate, DrawingUpdate, DrawingResponse
from fencemark.schemas.common import SuccessResponse
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/drawings", tags=["drawings"])


@router.get("", response_model=list[DrawingResponse])
def list_drawings(
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return (
        scoped_query(db, Drawing, context.organization_id)
        .order_by(Drawing.created_at.desc())
        .all()
    )


@router.get("/by-job/{job_id}", response_model=list[DrawingResponse])
def list_drawings_by_job(
    job_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return (
        scoped_query(db, Drawing, context.organization_id)
        .filter(Drawing.job_id == job_id)
        .order_by(Drawing.created_at.desc())
        .all()
    )


@router.get("/by-parcel/{parcel_id}", response_model=list[DrawingResponse])
def list_drawings_by_parcel(
    parcel_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return (
        scoped_query(db, Drawing, context.organization_id)
        .filter(Drawing.parcel_id == parcel_id)
        .order_by(Drawing.created_at.desc())
        .all()
    )


@router.get("/{drawing_id}", response_model=DrawingResponse)
def get_drawing(
    drawing_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return get_owned_or_404(db, Drawing, drawing_id, context.organization_id, "Drawing")


@router.post("", response_model=DrawingResponse, status_code=status.HTTP_201_CREATED)
def create_drawing(
    payload: DrawingCreate,
    response: Response,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    require_owned_reference(
        db, Job, payload.job_id, context.organization_id, "Job not found or access denied"
    )
    require_owned_reference(
        db, Parcel, payload.parcel_id, context.organization_id, "Parcel not found or access denied"
    )

    drawing = Drawing(organization_id=context.organization_id, **payload.model_dump())
    db.add(drawing)
    db.commit()

    logger.info(f"Drawing created: {drawing.id} by {context.user_id}")
    set_location(response, "drawings", drawing.id)
    return drawing


@router.put("/{drawing_id}", response_model=DrawingResponse)
def update_drawing(
    drawing_id: str,
    payload: DrawingUpdate,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    drawing = get_owned_or_404(db, Drawing, drawing_id, context.organization_id, "Drawing")
    apply_updates(drawing, payload.model_dump(exclude_unset=True))
    db.commit()
    return drawing


@router.delete("/{drawing_id}", response_model=SuccessResponse)
def delete_drawing(
    drawing_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    drawing = get_owned_or_404(db, Drawing, drawing_id, context.organization_id, "Drawing")
    db.delete(drawing)
    db.commit()

    logger.info(f"Drawing deleted: {drawing_id} by {context.user_id}")
    return SuccessResponse()
