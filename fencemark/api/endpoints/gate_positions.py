"""
Gate Position Endpoints

Gates placed along a fence segment.
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
from fencemark.models.fence_segment import FenceSegment, GatePosition
from fencemark.models.fence_type import GateType
from fencemark.schemas.site import (
    GatePositionCreate,
    GatePositionUpdate,
    GatePositionResponse,
)
from fencemark.schemas.common import SuccessResponse
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/gate-positions", tags=["gate-positions"])

GATE_TYPE_NOT_FOUND = "Gate type not found or access denied"


@router.get("", response_model=list[GatePositionResponse])
def list_gate_positions(
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return (
        scoped_query(db, GatePosition, context.organization_id)
        .order_by(GatePosition.created_at.desc())
        .all()
    )


@router.get("/by-segment/{segment_id}", response_model=list[GatePositionResponse])
def list_gate_positions_by_segment(
    segment_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    """Gates of one segment, from the segment start to its end."""
    return (
        scoped_query(db, GatePosition, context.organization_id)
        .filter(GatePosition.fence_segment_id == segment_id)
        .order_by(GatePosition.position_along_segment)
        .all()
    )


@router.get("/{position_id}", response_model=GatePositionResponse)
def get_gate_position(
    position_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return get_owned_or_404(
        db, GatePosition, position_id, context.organization_id, "Gate position"
    )


@router.post("", response_model=GatePositionResponse, status_code=status.HTTP_201_CREATED)
def create_gate_position(
    payload: GatePositionCreate,
    response: Response,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    organization_id = context.organization_id
    require_owned_reference(
        db, FenceSegment, payload.fence_segment_id, organization_id,
        "Fence segment not found or access denied"
    )
    require_owned_reference(db, GateType, payload.gate_type_id, organization_id, GATE_TYPE_NOT_FOUND)

    position = GatePosition(
        organization_id=organization_id,
        is_verified_onsite=False,
        **payload.model_dump()
    )
    db.add(position)
    db.commit()

    set_location(response, "gate-positions", position.id)
    return position


@router.put("/{position_id}", response_model=GatePositionResponse)
def update_gate_position(
    position_id: str,
    payload: GatePositionUpdate,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    position = get_owned_or_404(
        db, GatePosition, position_id, context.organization_id, "Gate position"
    )
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("gate_type_id"):
        require_owned_reference(
            db, GateType, changes["gate_type_id"], context.organization_id, GATE_TYPE_NOT_FOUND
        )

    apply_updates(position, changes)
    db.commit()
    return position


@router.delete("/{position_id}", response_model=SuccessResponse)
def delete_gate_position(
    position_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    position = get_owned_or_404(
        db, GatePosition, position_id, context.organization_id, "Gate position"
    )
    db.delete(position)
    db.commit()
    return SuccessResponse()
