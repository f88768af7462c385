"""
Job Endpoints

CRUD for jobs and their line items, plus the job's bill of materials.

Line items may reference fence and gate types; references are validated
against the caller's organization. A line item without a unit price takes
the catalog price of its fence or gate type.
"""
from decimal import Decimal
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
from fencemark.core.exceptions import InvalidInputError
from fencemark.models.fence_type import FenceType, GateType
from fencemark.models.job import Job, JobLineItem, LineItemType
from fencemark.schemas.job import JobCreate, JobUpdate, JobResponse, JobLineItemCreate
from fencemark.schemas.quote import BillOfMaterialsItemResponse
from fencemark.schemas.common import SuccessResponse
from fencemark.services.pricing import PricingService, to_money
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])


def build_line_items(
    db: Session,
    organization_id: str,
    items: list[JobLineItemCreate]
) -> list[JobLineItem]:
    line_items = []
    for position, item in enumerate(items):
        fence_type = require_owned_reference(
            db, FenceType, item.fence_type_id, organization_id,
            "Fence type not found or access denied"
        )
        gate_type = require_owned_reference(
            db, GateType, item.gate_type_id, organization_id,
            "Gate type not found or access denied"
        )

        if item.item_type == LineItemType.FENCE and fence_type is None:
            raise InvalidInputError("Fence line items require a fence type")
        if item.item_type == LineItemType.GATE and gate_type is None:
            raise InvalidInputError("Gate line items require a gate type")

        unit_price = item.unit_price
        description = item.description
        if item.item_type == LineItemType.FENCE:
            unit_price = unit_price or fence_type.price_per_linear_foot
            description = description or fence_type.name
        elif item.item_type == LineItemType.GATE:
            unit_price = unit_price or gate_type.base_price
            description = description or gate_type.name

        unit_price = to_money(unit_price)
        line_items.append(JobLineItem(
            item_type=item.item_type,
            fence_type_id=fence_type.id if fence_type else None,
            gate_type_id=gate_type.id if gate_type else None,
            description=description,
            quantity=item.quantity,
            unit_price=unit_price,
            total_price=to_money(Decimal(item.quantity) * unit_price),
            position=position,
        ))
    return line_items


def _refresh_total_cost(job: Job) -> None:
    job.total_cost = to_money(job.materials_cost) + to_money(job.labor_cost)


@router.get("", response_model=list[JobResponse])
def list_jobs(
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    """List jobs, newest first."""
    return (
        scoped_query(db, Job, context.organization_id)
        .order_by(Job.created_at.desc())
        .all()
    )


@router.get("/{job_id}", response_model=JobResponse)
def get_job(
    job_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return get_owned_or_404(db, Job, job_id, context.organization_id, "Job")


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
def create_job(
    payload: JobCreate,
    response: Response,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    """
    Create a job.

    Client-supplied id and organization_id are not part of the schema and
    are ignored; both are set server-side.
    """
    job = Job(
        organization_id=context.organization_id,  # CRITICAL: Set organization_id
        **payload.model_dump(exclude={"line_items"})
    )
    job.line_items = build_line_items(db, context.organization_id, payload.line_items)
    _refresh_total_cost(job)

    db.add(job)
    db.commit()

    logger.info(f"Job created: {job.id} by {context.user_id}")
    set_location(response, "jobs", job.id)
    return job


@router.put("/{job_id}", response_model=JobResponse)
def update_job(
    job_id: str,
    payload: JobUpdate,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    job = get_owned_or_404(db, Job, job_id, context.organization_id, "Job")

    changes = payload.model_dump(exclude_unset=True, exclude={"line_items"})
    if payload.line_items is not None:
        job.line_items = build_line_items(db, context.organization_id, payload.line_items)
    apply_updates(job, changes)
    _refresh_total_cost(job)

    db.commit()

    logger.info(f"Job updated: {job.id} by {context.user_id}")
    return job


@router.delete("/{job_id}", response_model=SuccessResponse)
def delete_job(
    job_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    """Hard delete. Parcels, segments and quotes of the job go with it."""
    job = get_owned_or_404(db, Job, job_id, context.organization_id, "Job")
    db.delete(job)
    db.commit()

    logger.info(f"Job deleted: {job_id} by {context.user_id}")
    return SuccessResponse()


@router.get("/{job_id}/bom", response_model=list[BillOfMaterialsItemResponse])
def get_job_bill_of_materials(
    job_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    """Bill of materials under the organization's default pricing configuration."""
    job = get_owned_or_404(db, Job, job_id, context.organization_id, "Job")
    return PricingService(db, context.organization_id, context.user_id).bill_of_materials_for_job(job)
