"""
Quote Endpoints

Generate, recalculate, edit and export quotes.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import HTMLResponse, PlainTextResponse
from sqlalchemy.orm import Session

from fencemark.api.deps import CurrentUserContext, require_organization, get_tenant_db
from fencemark.api.scoping import scoped_query, get_owned_or_404, apply_updates, set_location
from fencemark.models.organization import Organization
from fencemark.models.quote import Quote
from fencemark.schemas.quote import (
    QuoteResponse,
    QuoteSummaryResponse,
    QuoteUpdate,
    GenerateQuoteRequest,
    RecalculateQuoteRequest,
)
from fencemark.schemas.common import SuccessResponse
from fencemark.services.pricing import PricingService, to_money
from fencemark.services.quote_export import render_quote_html, render_bom_csv
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("/generate", response_model=QuoteResponse, status_code=status.HTTP_201_CREATED)
def generate_quote(
    payload: GenerateQuoteRequest,
    response: Response,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    """
    Price a job and create a quote (version 1).

    Uses the given pricing configuration, or the organization's default.
    """
    service = PricingService(db, context.organization_id, context.user_id)
    quote = service.generate_quote(payload.job_id, payload.pricing_config_id)
    set_location(response, "quotes", quote.id)
    return quote


@router.post("/{quote_id}/recalculate", response_model=QuoteResponse)
def recalculate_quote(
    quote_id: str,
    payload: Optional[RecalculateQuoteRequest] = None,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    """Rebuild the BOM from the job's current line items and add a version."""
    quote = get_owned_or_404(db, Quote, quote_id, context.organization_id, "Quote")
    service = PricingService(db, context.organization_id, context.user_id)
    return service.recalculate_quote(quote, payload.change_summary if payload else None)


@router.get("", response_model=list[QuoteSummaryResponse])
def list_quotes(
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return (
        scoped_query(db, Quote, context.organization_id)
        .order_by(Quote.created_at.desc())
        .all()
    )


@router.get("/{quote_id}", response_model=QuoteResponse)
def get_quote(
    quote_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    return get_owned_or_404(db, Quote, quote_id, context.organization_id, "Quote")


@router.put("/{quote_id}", response_model=QuoteResponse)
def update_quote(
    quote_id: str,
    payload: QuoteUpdate,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    """Edit status, validity, terms, notes and tax. Grand total follows tax."""
    quote = get_owned_or_404(db, Quote, quote_id, context.organization_id, "Quote")
    apply_updates(quote, payload.model_dump(exclude_unset=True))
    quote.grand_total = to_money(quote.total_amount) + to_money(quote.tax_amount)
    db.commit()

    logger.info(f"Quote updated: {quote.id} by {context.user_id}")
    return quote


@router.delete("/{quote_id}", response_model=SuccessResponse)
def delete_quote(
    quote_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    quote = get_owned_or_404(db, Quote, quote_id, context.organization_id, "Quote")
    db.delete(quote)
    db.commit()

    logger.info(f"Quote deleted: {quote_id} by {context.user_id}")
    return SuccessResponse()


@router.get("/{quote_id}/export/html", response_class=HTMLResponse)
def export_quote_html(
    quote_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    quote = get_owned_or_404(db, Quote, quote_id, context.organization_id, "Quote")
    organization = db.get(Organization, context.organization_id)
    return HTMLResponse(render_quote_html(quote, organization.name if organization else None))


@router.get("/{quote_id}/export/csv", response_class=PlainTextResponse)
def export_quote_csv(
    quote_id: str,
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_tenant_db)
):
    quote = get_owned_or_404(db, Quote, quote_id, context.organization_id, "Quote")
    return PlainTextResponse(
        render_bom_csv(quote),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{quote.quote_number}.csv"'}
    )
