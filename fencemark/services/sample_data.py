"""
Sample data for new organizations.

Gives a fresh organization a small working catalog (components, fence
and gate types wired to their components), a default pricing
configuration, tax regions and two discount rules.
"""
from decimal import Decimal

from sqlalchemy.orm import Session

from fencemark.models.component import Component
from fencemark.models.discount import DiscountRule, DiscountType
from fencemark.models.fence_type import FenceType, FenceComponent, GateType, GateComponent
from fencemark.models.pricing import PricingConfig, HeightTier, TaxRegion
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)

COMPONENTS = {
    "post": dict(
        name="6x6 Treated Post",
        description='Pressure treated 6"x6" fence post',
        sku="POST-6X6-PT",
        category="Post",
        unit_of_measure="Each",
        unit_price=Decimal("45.00"),
        material="Pressure Treated Pine",
        dimensions="6\" x 6\" x 8'",
    ),
    "rail": dict(
        name="2x4 Treated Rail",
        description='Pressure treated 2"x4" horizontal rail',
        sku="RAIL-2X4-PT",
        category="Rail",
        unit_of_measure="Linear Foot",
        unit_price=Decimal("8.20"),
        material="Pressure Treated Pine",
        dimensions="2\" x 4\" x 8'",
    ),
    "panel": dict(
        name="6' Privacy Panel",
        description="Cedar privacy fence panel",
        sku="PANEL-6FT-CEDAR",
        category="Panel",
        unit_of_measure="Each",
        unit_price=Decimal("12.69"),
        material="Western Red Cedar",
        dimensions="6' x 8'",
    ),
    "hinges": dict(
        name="Gate Hinges Heavy Duty",
        description="Heavy duty gate hinges (pair)",
        sku="HINGE-HD-PAIR",
        category="Gate Hardware",
        unit_of_measure="Pair",
        unit_price=Decimal("12.50"),
        material="Galvanized Steel",
        dimensions='12"',
    ),
    "latch": dict(
        name="Gate Latch",
        description="Self-closing gate latch",
        sku="LATCH-SC",
        category="Gate Hardware",
        unit_of_measure="Each",
        unit_price=Decimal("8.95"),
        material="Stainless Steel",
        dimensions="Standard",
    ),
}

# (fields, {component key: quantity per linear foot})
FENCE_TYPES = [
    (
        dict(
            name="6ft Privacy Fence",
            description="Standard 6-foot cedar privacy fence",
            height_in_feet=Decimal("6.0"),
            material="Cedar",
            style="Privacy",
            price_per_linear_foot=Decimal("35.00"),
        ),
        {"post": Decimal("0.125"), "rail": Decimal("3.0"), "panel": Decimal("0.125")},
    ),
    (
        dict(
            name="4ft Picket Fence",
            description="Classic 4-foot white picket fence",
            height_in_feet=Decimal("4.0"),
            material="Vinyl",
            style="Picket",
            price_per_linear_foot=Decimal("28.00"),
        ),
        {"post": Decimal("0.125"), "rail": Decimal("2.0")},
    ),
]

# (fields, {component key: quantity per gate})
GATE_TYPES = [
    (
        dict(
            name="Single Walk Gate",
            description="Standard 3-foot walk gate",
            width_in_feet=Decimal("3.0"),
            height_in_feet=Decimal("6.0"),
            material="Cedar",
            base_price=Decimal("250.00"),
        ),
        {"hinges": Decimal("1"), "latch": Decimal("1")},
    ),
    (
        dict(
            name="Double Drive Gate",
            description="10-foot double drive gate",
            width_in_feet=Decimal("10.0"),
            height_in_feet=Decimal("6.0"),
            material="Cedar",
            base_price=Decimal("850.00"),
        ),
        {"hinges": Decimal("2"), "latch": Decimal("1")},
    ),
]

HEIGHT_TIERS = [
    dict(min_height_in_meters=Decimal("0"), max_height_in_meters=Decimal("1.83"),
         multiplier=Decimal("1.0"), description="Standard height"),
    dict(min_height_in_meters=Decimal("1.83"), max_height_in_meters=Decimal("2.44"),
         multiplier=Decimal("1.25"), description="Tall fence surcharge (25% increase)"),
    dict(min_height_in_meters=Decimal("2.44"), max_height_in_meters=None,
         multiplier=Decimal("1.5"), description="Extra tall fence (50% increase)"),
]

TAX_REGIONS = [
    dict(name="California", code="CA", tax_rate=Decimal("0.0875"),
         description="California state sales tax", is_default=True),
    dict(name="Texas", code="TX", tax_rate=Decimal("0.0625"),
         description="Texas state sales tax", is_default=False),
]

DISCOUNT_RULES = [
    dict(
        name="Volume Discount",
        description="10% off for orders over 500 linear feet",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("0.10"),
        minimum_linear_feet=Decimal("500"),
        is_active=True,
    ),
    dict(
        name="Early Bird Special",
        description="$500 off for bookings 60 days in advance",
        discount_type=DiscountType.FIXED_AMOUNT,
        discount_value=Decimal("500.00"),
        minimum_order_value=Decimal("3000"),
        promo_code="EARLY2024",
        is_active=True,
    ),
]


def _has_default(db: Session, model, organization_id: str) -> bool:
    return db.query(
        db.query(model)
        .filter(model.organization_id == organization_id, model.is_default.is_(True))
        .exists()
    ).scalar()


def _promo_code_exists(db: Session, organization_id: str, promo_code: str) -> bool:
    return db.query(
        db.query(DiscountRule)
        .filter(DiscountRule.organization_id == organization_id, DiscountRule.promo_code == promo_code)
        .exists()
    ).scalar()


def has_sample_data(db: Session, organization_id: str) -> bool:
    """An organization with any component or fence type counts as seeded."""
    has_components = db.query(
        db.query(Component).filter(Component.organization_id == organization_id).exists()
    ).scalar()
    has_fences = db.query(
        db.query(FenceType).filter(FenceType.organization_id == organization_id).exists()
    ).scalar()
    return bool(has_components or has_fences)


def seed_sample_data(db: Session, organization_id: str) -> bool:
    """
    Add the sample catalog to an organization.

    Returns False without writing anything if the organization already
    has catalog data. Flushes but does not commit; the caller owns the
    transaction.
    """
    if has_sample_data(db, organization_id):
        return False

    components = {
        key: Component(organization_id=organization_id, **fields)
        for key, fields in COMPONENTS.items()
    }
    db.add_all(components.values())

    for fields, links in FENCE_TYPES:
        fence_type = FenceType(organization_id=organization_id, **fields)
        fence_type.components = [
            FenceComponent(component=components[key], quantity_per_linear_foot=quantity)
            for key, quantity in links.items()
        ]
        db.add(fence_type)

    for fields, links in GATE_TYPES:
        gate_type = GateType(organization_id=organization_id, **fields)
        gate_type.components = [
            GateComponent(component=components[key], quantity_per_gate=quantity)
            for key, quantity in links.items()
        ]
        db.add(gate_type)

    pricing_config = PricingConfig(
        organization_id=organization_id,
        name="Standard Pricing 2024",
        description="Default pricing for residential projects",
        labor_rate_per_hour=Decimal("50.00"),
        hours_per_linear_meter=Decimal("0.492"),
        contingency_percentage=Decimal("0.10"),
        profit_margin_percentage=Decimal("0.20"),
        is_default=not _has_default(db, PricingConfig, organization_id),
    )
    pricing_config.height_tiers = [HeightTier(**tier) for tier in HEIGHT_TIERS]
    db.add(pricing_config)

    # Existing defaults and promo codes win over the sample ones
    keep_tax_default = _has_default(db, TaxRegion, organization_id)
    for fields in TAX_REGIONS:
        region = TaxRegion(organization_id=organization_id, **fields)
        if keep_tax_default:
            region.is_default = False
        db.add(region)

    for fields in DISCOUNT_RULES:
        promo_code = fields.get("promo_code")
        if promo_code and _promo_code_exists(db, organization_id, promo_code):
            continue
        db.add(DiscountRule(organization_id=organization_id, **fields))

    db.flush()
    logger.info("Sample data seeded", extra={"organization_id": organization_id})
    return True
