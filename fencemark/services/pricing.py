"""
Pricing Service

Builds a job's bill of materials and rolls it up into a quote.

Calculation:
- Fence line items need quantity_per_linear_foot x line quantity (feet) of
  each component of the fence type; gate line items need quantity_per_gate
  x line quantity (gates) of each component of the gate type.
- Quantities are merged per component, grouped by category (categories
  sorted alphabetically, components by name within a category).
- Labor = total_linear_feet x 0.3048 x hours_per_linear_meter x labor rate,
  appended as a single "Labor" line when positive.
- subtotal = materials + labor
  contingency = subtotal x contingency_percentage
  profit = (subtotal + contingency) x profit_margin_percentage
  total = subtotal + contingency + profit
  grand_total = total + tax

All money figures are rounded half-up to cents.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional
import json

from sqlalchemy.orm import Session

from fencemark.api.scoping import scoped_query
from fencemark.config import get_settings
from fencemark.core.exceptions import InvalidInputError
from fencemark.models.job import Job, JobStatus, LineItemType
from fencemark.models.pricing import PricingConfig, HeightTier
from fencemark.models.quote import Quote, QuoteStatus, QuoteVersion, BillOfMaterialsItem
from fencemark.utils.clock import utcnow
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

FEET_TO_METERS = Decimal("0.3048")
LABOR_CATEGORY = "Labor"
CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(value or 0).quantize(CENT, rounding=ROUND_HALF_UP)


def get_height_multiplier(tiers: Iterable[HeightTier], height_in_feet) -> Decimal:
    """
    Multiplier of the lowest tier containing the height.

    Tiers are in meters; a tier with no max height is open-ended.
    Returns 1.0 when no tier applies.
    """
    height_in_meters = Decimal(height_in_feet or 0) * FEET_TO_METERS
    applicable = sorted(
        (
            tier for tier in tiers
            if height_in_meters >= tier.min_height_in_meters
            and (tier.max_height_in_meters is None or height_in_meters <= tier.max_height_in_meters)
        ),
        key=lambda tier: tier.min_height_in_meters
    )
    return Decimal(applicable[0].multiplier) if applicable else Decimal("1.0")


def calculate_labor_cost(total_linear_feet, pricing_config: PricingConfig) -> Decimal:
    total_linear_meters = Decimal(total_linear_feet or 0) * FEET_TO_METERS
    total_hours = total_linear_meters * Decimal(pricing_config.hours_per_linear_meter)
    return to_money(total_hours * Decimal(pricing_config.labor_rate_per_hour))


def calculate_bill_of_materials(job: Job, pricing_config: PricingConfig) -> list[BillOfMaterialsItem]:
    """Unsaved BOM lines for the job, labor last."""
    # category -> component id -> [component, quantity]
    by_category: dict[str, dict[str, list]] = {}

    def add(component, quantity):
        bucket = by_category.setdefault(component.category, {})
        entry = bucket.setdefault(component.id, [component, Decimal("0")])
        entry[1] += quantity

    for line_item in job.line_items:
        if line_item.item_type == LineItemType.FENCE and line_item.fence_type is not None:
            for link in line_item.fence_type.components:
                if link.component is not None:
                    add(link.component, Decimal(link.quantity_per_linear_foot) * Decimal(line_item.quantity))
        elif line_item.item_type == LineItemType.GATE and line_item.gate_type is not None:
            for link in line_item.gate_type.components:
                if link.component is not None:
                    add(link.component, Decimal(link.quantity_per_gate) * Decimal(line_item.quantity))

    items = []
    sort_order = 0
    for category in sorted(by_category):
        entries = sorted(by_category[category].values(), key=lambda entry: entry[0].name)
        for component, quantity in entries:
            unit_price = to_money(component.unit_price)
            items.append(BillOfMaterialsItem(
                component_id=component.id,
                category=category,
                description=component.name,
                sku=component.sku,
                quantity=quantity,
                unit_of_measure=component.unit_of_measure,
                unit_price=unit_price,
                total_price=to_money(quantity * unit_price),
                sort_order=sort_order,
            ))
            sort_order += 1

    labor_cost = calculate_labor_cost(job.total_linear_feet, pricing_config)
    if labor_cost > 0:
        items.append(BillOfMaterialsItem(
            category=LABOR_CATEGORY,
            description=f"Installation Labor ({Decimal(job.total_linear_feet):,.2f} linear feet)",
            quantity=Decimal("1"),
            unit_of_measure="Job",
            unit_price=labor_cost,
            total_price=labor_cost,
            sort_order=sort_order,
        ))

    return items


@dataclass(frozen=True)
class QuoteTotals:
    materials_cost: Decimal
    labor_cost: Decimal
    subtotal: Decimal
    contingency_amount: Decimal
    profit_amount: Decimal
    total_amount: Decimal


def calculate_totals(
    bom_items: Iterable[BillOfMaterialsItem],
    total_linear_feet,
    pricing_config: PricingConfig
) -> QuoteTotals:
    materials_cost = to_money(sum(
        (Decimal(item.total_price) for item in bom_items if item.category != LABOR_CATEGORY),
        Decimal("0")
    ))
    labor_cost = calculate_labor_cost(total_linear_feet, pricing_config)
    subtotal = materials_cost + labor_cost
    contingency_amount = to_money(subtotal * Decimal(pricing_config.contingency_percentage))
    profit_amount = to_money(
        (subtotal + contingency_amount) * Decimal(pricing_config.profit_margin_percentage)
    )
    return QuoteTotals(
        materials_cost=materials_cost,
        labor_cost=labor_cost,
        subtotal=subtotal,
        contingency_amount=contingency_amount,
        profit_amount=profit_amount,
        total_amount=subtotal + contingency_amount + profit_amount,
    )


def next_quote_number(db: Session, organization_id: str, today: Optional[datetime] = None) -> str:
    """
    Q-YYYYMMDD-NNNN, sequential per organization per day.

    Uses the highest existing suffix rather than a row count so numbers are
    not reused after a quote is deleted.
    """
    prefix = f"Q-{(today or utcnow()):%Y%m%d}"
    numbers = (
        scoped_query(db, Quote, organization_id)
        .filter(Quote.quote_number.like(f"{prefix}-%"))
        .with_entities(Quote.quote_number)
        .all()
    )
    highest = 0
    for (number,) in numbers:
        suffix = number.rsplit("-", 1)[-1]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}-{highest + 1:04d}"


def get_pricing_config(
    db: Session,
    organization_id: str,
    pricing_config_id: Optional[str] = None
) -> PricingConfig:
    """The requested configuration, or the organization's default."""
    query = scoped_query(db, PricingConfig, organization_id)
    if pricing_config_id:
        config = query.filter(PricingConfig.id == pricing_config_id).first()
        if config is None:
            raise InvalidInputError("Pricing configuration not found or access denied")
        return config

    config = query.filter(PricingConfig.is_default.is_(True)).first()
    if config is None:
        raise InvalidInputError("No default pricing configuration found for this organization")
    return config


def _bom_snapshot(bom_items: Iterable[BillOfMaterialsItem]) -> str:
    return json.dumps([
        {
            "category": item.category,
            "description": item.description,
            "sku": item.sku,
            "quantity": float(item.quantity),
            "unit_of_measure": item.unit_of_measure,
            "unit_price": float(item.unit_price),
            "total_price": float(item.total_price),
            "sort_order": item.sort_order,
        }
        for item in bom_items
    ])


def _pricing_config_snapshot(config: PricingConfig) -> str:
    return json.dumps({
        "name": config.name,
        "labor_rate_per_hour": float(config.labor_rate_per_hour),
        "hours_per_linear_meter": float(config.hours_per_linear_meter),
        "contingency_percentage": float(config.contingency_percentage),
        "profit_margin_percentage": float(config.profit_margin_percentage),
        "height_tiers": [
            {
                "min_height_in_meters": float(tier.min_height_in_meters),
                "max_height_in_meters": (
                    float(tier.max_height_in_meters) if tier.max_height_in_meters is not None else None
                ),
                "multiplier": float(tier.multiplier),
                "description": tier.description,
            }
            for tier in config.height_tiers
        ],
    })


def _apply_totals(quote: Quote, totals: QuoteTotals) -> None:
    quote.materials_cost = totals.materials_cost
    quote.labor_cost = totals.labor_cost
    quote.subtotal = totals.subtotal
    quote.contingency_amount = totals.contingency_amount
    quote.profit_amount = totals.profit_amount
    quote.total_amount = totals.total_amount
    quote.grand_total = totals.total_amount + to_money(quote.tax_amount)


def _snapshot_version(
    quote: Quote,
    bom_items: list[BillOfMaterialsItem],
    pricing_config: PricingConfig,
    change_summary: str,
    user_id: Optional[str]
) -> QuoteVersion:
    return QuoteVersion(
        version_number=quote.current_version,
        change_summary=change_summary,
        materials_cost=quote.materials_cost,
        labor_cost=quote.labor_cost,
        subtotal=quote.subtotal,
        contingency_amount=quote.contingency_amount,
        profit_amount=quote.profit_amount,
        total_amount=quote.total_amount,
        tax_amount=quote.tax_amount,
        grand_total=quote.grand_total,
        bom_snapshot=_bom_snapshot(bom_items),
        pricing_config_snapshot=_pricing_config_snapshot(pricing_config),
        created_by_user_id=user_id,
    )


class PricingService:
    """
    Quote generation for one organization.

    The caller's context is passed in explicitly; every lookup is scoped to
    its organization.
    """

    def __init__(self, db: Session, organization_id: str, user_id: Optional[str] = None):
        self.db = db
        self.organization_id = organization_id
        self.user_id = user_id

    def bill_of_materials_for_job(self, job: Job) -> list[BillOfMaterialsItem]:
        config = get_pricing_config(self.db, self.organization_id)
        return calculate_bill_of_materials(job, config)

    def generate_quote(self, job_id: str, pricing_config_id: Optional[str] = None) -> Quote:
        job = (
            scoped_query(self.db, Job, self.organization_id)
            .filter(Job.id == job_id)
            .first()
        )
        if job is None:
            raise InvalidInputError("Job not found or access denied")

        config = get_pricing_config(self.db, self.organization_id, pricing_config_id)
        bom_items = calculate_bill_of_materials(job, config)
        totals = calculate_totals(bom_items, job.total_linear_feet, config)

        quote = Quote(
            organization_id=self.organization_id,
            job_id=job.id,
            pricing_config_id=config.id,
            quote_number=next_quote_number(self.db, self.organization_id),
            current_version=1,
            status=QuoteStatus.DRAFT,
            tax_amount=Decimal("0.00"),
            valid_until=utcnow() + timedelta(days=settings.QUOTE_VALIDITY_DAYS),
        )
        _apply_totals(quote, totals)
        quote.bill_of_materials = bom_items
        quote.versions = [
            _snapshot_version(quote, bom_items, config, "Initial quote", self.user_id)
        ]

        if job.status == JobStatus.DRAFT:
            job.status = JobStatus.QUOTED
        job.materials_cost = totals.materials_cost
        job.labor_cost = totals.labor_cost
        job.total_cost = totals.materials_cost + totals.labor_cost

        self.db.add(quote)
        self.db.commit()

        logger.info(
            f"Quote generated: {quote.quote_number} for job {job.id}",
            extra={"organization_id": self.organization_id, "user_id": self.user_id}
        )
        return quote

    def recalculate_quote(self, quote: Quote, change_summary: Optional[str] = None) -> Quote:
        job = quote.job
        config = quote.pricing_config
        if job is None or config is None:
            raise InvalidInputError("Quote is missing required job or pricing configuration")

        bom_items = calculate_bill_of_materials(job, config)
        totals = calculate_totals(bom_items, job.total_linear_feet, config)

        _apply_totals(quote, totals)
        quote.bill_of_materials = bom_items
        quote.current_version += 1
        quote.status = QuoteStatus.REVISED
        quote.versions.append(
            _snapshot_version(
                quote, bom_items, config, change_summary or "Quote recalculated", self.user_id
            )
        )

        self.db.commit()

        logger.info(
            f"Quote recalculated: {quote.quote_number} v{quote.current_version}",
            extra={"organization_id": self.organization_id, "user_id": self.user_id}
        )
        return quote
