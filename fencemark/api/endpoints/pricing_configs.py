"""
Pricing Configuration Endpoints

Labor rates, margins and height tiers used to price quotes. At most one
configuration per organization is the default.
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
from fencemark.models.pricing import PricingConfig, HeightTier
from fencemark.schemas.pricing import (
    PricingConfigCreate,
    PricingConfigUpdate,
    PricingConfigResponse,
)
from fencemark.schemas.common import SuccessResponse
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/pricing-configs", tags=["pricing-configs"])


def build_height_tiers(tiers) -> list[HeightTier]:
    return [HeightTier(**tier.model_dump()) for tier in tiers]


@router.get("", response_model=list[PricingConfigResponse])
def list_pricing_configs(
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    """The default configuration first, then by name."""
    return (
        scoped_query(db, PricingConfig, context.organization_id)
        .order_by(PricingConfig.is_default.desc(), PricingConfig.name)
        .all()
    )


@router.get("/{config_id}", response_model=PricingConfigResponse)
def get_pricing_config(
    config_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return get_owned_or_404(
        db, PricingConfig, config_id, context.organization_id, "Pricing configuration"
    )


@router.post("", response_model=PricingConfigResponse, status_code=status.HTTP_201_CREATED)
def create_pricing_config(
    payload: PricingConfigCreate,
    response: Response,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    if payload.is_default:
        clear_other_defaults(db, PricingConfig, context.organization_id)

    config = PricingConfig(
        organization_id=context.organization_id,
        **payload.model_dump(exclude={"height_tiers"})
    )
    config.height_tiers = build_height_tiers(payload.height_tiers)
    db.add(config)
    db.commit()

    logger.info(f"Pricing configuration created: {config.id} (default={config.is_default})")
    set_location(response, "pricing-configs", config.id)
    return config


@router.put("/{config_id}", response_model=PricingConfigResponse)
def update_pricing_config(
    config_id: str,
    payload: PricingConfigUpdate,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    config = get_owned_or_404(
        db, PricingConfig, config_id, context.organization_id, "Pricing configuration"
    )
    changes = payload.model_dump(exclude_unset=True, exclude={"height_tiers"})

    if changes.get("is_default") and not config.is_default:
        clear_other_defaults(db, PricingConfig, context.organization_id, keep_id=config.id)

    if payload.height_tiers is not None:
        config.height_tiers = build_height_tiers(payload.height_tiers)

    apply_updates(config, changes)
    db.commit()
    db.refresh(config)
    return config


@router.delete("/{config_id}", response_model=SuccessResponse)
def delete_pricing_config(
    config_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    config = get_owned_or_404(
        db, PricingConfig, config_id, context.organization_id, "Pricing configuration"
    )
    db.delete(config)
    db.commit()

    logger.info(f"Pricing configuration deleted: {config_id} by {context.user_id}")
    return SuccessResponse()
