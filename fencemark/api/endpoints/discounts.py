"""
Discount Endpoints

Discount rules and promo-code validation.

Promo codes are unique per organization. The check here gives a readable
400; the partial unique index on discount_rules backs it up under
concurrent writes.
"""
from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fencemark.api.deps import CurrentUserContext, require_organization, get_tenant_db
from fencemark.api.scoping import scoped_query, get_owned_or_404, apply_updates, set_location
from fencemark.core.exceptions import InvalidInputError
from fencemark.models.discount import DiscountRule
from fencemark.schemas.discount import (
    DiscountRuleCreate,
    DiscountRuleUpdate,
    DiscountRuleResponse,
    ValidatePromoRequest,
)
from fencemark.schemas.common import SuccessResponse
from fencemark.utils.clock import utcnow
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/discounts", tags=["discounts"])

PROMO_CODE_EXISTS = "Promo code already exists"


def _promo_code_taken(
    db: Session,
    organization_id: str,
    promo_code: str,
    exclude_id: Optional[str] = None
) -> bool:
    query = scoped_query(db, DiscountRule, organization_id).filter(
        DiscountRule.promo_code == promo_code
    )
    if exclude_id is not None:
        query = query.filter(DiscountRule.id != exclude_id)
    return db.query(query.exists()).scalar()


def _commit_discount(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent write of the same code
        db.rollback()
        raise InvalidInputError(PROMO_CODE_EXISTS)


def check_promo_code(discount: Optional[DiscountRule], request: ValidatePromoRequest) -> None:
    """
    Raise InvalidInputError with the first rule the promo code fails.

    Missing order value or linear feet count as zero against a minimum.
    """
    if discount is None:
        raise InvalidInputError("Invalid promo code")

    now = utcnow()
    if discount.valid_from is not None and now < discount.valid_from:
        raise InvalidInputError("Promo code is not yet active")
    if discount.valid_until is not None and now > discount.valid_until:
        raise InvalidInputError("Promo code has expired")

    order_value = request.order_value or Decimal("0")
    if discount.minimum_order_value is not None and order_value < discount.minimum_order_value:
        raise InvalidInputError(
            f"Minimum order value of ${discount.minimum_order_value:.2f} required"
        )

    linear_feet = request.linear_feet or Decimal("0")
    if discount.minimum_linear_feet is not None and linear_feet < discount.minimum_linear_feet:
        raise InvalidInputError(
            f"Minimum {discount.minimum_linear_feet:.2f} linear feet required"
        )


@router.get("", response_model=list[DiscountRuleResponse])
def list_discounts(
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    """Active rules first, then by name."""
    return (
        scoped_query(db, DiscountRule, context.organization_id)
        .order_by(DiscountRule.is_active.desc(), DiscountRule.name)
        .all()
    )


@router.get("/{discount_id}", response_model=DiscountRuleResponse)
def get_discount(
    discount_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return get_owned_or_404(db, DiscountRule, discount_id, context.organization_id, "Discount")


@router.post("", response_model=DiscountRuleResponse, status_code=status.HTTP_201_CREATED)
def create_discount(
    payload: DiscountRuleCreate,
    response: Response,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    if payload.promo_code and _promo_code_taken(db, context.organization_id, payload.promo_code):
        raise InvalidInputError(PROMO_CODE_EXISTS)

    discount = DiscountRule(organization_id=context.organization_id, **payload.model_dump())
    db.add(discount)
    _commit_discount(db)

    logger.info(f"Discount created: {discount.id} ({discount.name})")
    set_location(response, "discounts", discount.id)
    return discount


@router.put("/{discount_id}", response_model=DiscountRuleResponse)
def update_discount(
    discount_id: str,
    payload: DiscountRuleUpdate,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    discount = get_owned_or_404(db, DiscountRule, discount_id, context.organization_id, "Discount")
    changes = payload.model_dump(exclude_unset=True)

    new_code = changes.get("promo_code")
    if new_code and new_code != discount.promo_code:
        if _promo_code_taken(db, context.organization_id, new_code, exclude_id=discount.id):
            raise InvalidInputError(PROMO_CODE_EXISTS)

    apply_updates(discount, changes)
    _commit_discount(db)
    return discount


@router.delete("/{discount_id}", response_model=SuccessResponse)
def delete_discount(
    discount_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    discount = get_owned_or_404(db, DiscountRule, discount_id, context.organization_id, "Discount")
    db.delete(discount)
    db.commit()

    logger.info(f"Discount deleted: {discount_id} by {context.user_id}")
    return SuccessResponse()


@router.post("/validate-promo", response_model=DiscountRuleResponse)
def validate_promo_code(
    payload: ValidatePromoRequest,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    """
    Check a promo code against the caller's active discount rules.

    Returns the matching rule, or 400 with the first failed condition:
    unknown or inactive code, validity window, minimum order value,
    minimum linear feet.
    """
    discount = (
        scoped_query(db, DiscountRule, context.organization_id)
        .filter(
            DiscountRule.promo_code == payload.promo_code.strip(),
            DiscountRule.is_active.is_(True)
        )
        .first()
    )
    check_promo_code(discount, payload)
    return discount
