"""
Per-resource API clients.
"""
from decimal import Decimal
from typing import Optional

from fencemark.clients.base import ApiClient
from fencemark.schemas.catalog import ComponentResponse, FenceTypeResponse, GateTypeResponse
from fencemark.schemas.discount import DiscountRuleResponse, ValidatePromoRequest
from fencemark.schemas.job import JobResponse
from fencemark.schemas.pricing import PricingConfigResponse, TaxRegionResponse
from fencemark.schemas.quote import (
    BillOfMaterialsItemResponse,
    GenerateQuoteRequest,
    QuoteResponse,
    QuoteSummaryResponse,
    RecalculateQuoteRequest,
)
from fencemark.schemas.site import (
    DrawingResponse,
    FenceSegmentResponse,
    GatePositionResponse,
    ParcelResponse,
)


class JobClient(ApiClient[JobResponse]):
    path = "jobs"
    model = JobResponse

    def get_bill_of_materials(self, job_id: str) -> Optional[list[BillOfMaterialsItemResponse]]:
        return self._parse(
            self._request("GET", self._url(f"/{job_id}/bom")),
            list[BillOfMaterialsItemResponse]
        )


class ParcelClient(ApiClient[ParcelResponse]):
    path = "parcels"
    model = ParcelResponse

    def get_by_job(self, job_id: str) -> Optional[list[ParcelResponse]]:
        return self._get_list(f"/by-job/{job_id}")


class ComponentClient(ApiClient[ComponentResponse]):
    path = "components"
    model = ComponentResponse


class FenceTypeClient(ApiClient[FenceTypeResponse]):
    path = "fences"
    model = FenceTypeResponse


class GateTypeClient(ApiClient[GateTypeResponse]):
    path = "gates"
    model = GateTypeResponse


class FenceSegmentClient(ApiClient[FenceSegmentResponse]):
    path = "fence-segments"
    model = FenceSegmentResponse

    def get_by_job(self, job_id: str) -> Optional[list[FenceSegmentResponse]]:
        return self._get_list(f"/by-job/{job_id}")

    def get_by_parcel(self, parcel_id: str) -> Optional[list[FenceSegmentResponse]]:
        return self._get_list(f"/by-parcel/{parcel_id}")


class GatePositionClient(ApiClient[GatePositionResponse]):
    path = "gate-positions"
    model = GatePositionResponse

    def get_by_segment(self, segment_id: str) -> Optional[list[GatePositionResponse]]:
        return self._get_list(f"/by-segment/{segment_id}")


class DrawingClient(ApiClient[DrawingResponse]):
    path = "drawings"
    model = DrawingResponse

    def get_by_job(self, job_id: str) -> Optional[list[DrawingResponse]]:
        return self._get_list(f"/by-job/{job_id}")

    def get_by_parcel(self, parcel_id: str) -> Optional[list[DrawingResponse]]:
        return self._get_list(f"/by-parcel/{parcel_id}")


class DiscountClient(ApiClient[DiscountRuleResponse]):
    path = "discounts"
    model = DiscountRuleResponse

    def validate_promo_code(
        self,
        promo_code: str,
        order_value: Optional[Decimal] = None,
        linear_feet: Optional[Decimal] = None
    ) -> Optional[DiscountRuleResponse]:
        """The matching discount, or None with the reason in last_error."""
        request = ValidatePromoRequest(
            promo_code=promo_code,
            order_value=order_value,
            linear_feet=linear_feet,
        )
        response = self._request(
            "POST", self._url("/validate-promo"), json=request.model_dump(mode="json")
        )
        return self._parse(response, DiscountRuleResponse)


class PricingConfigClient(ApiClient[PricingConfigResponse]):
    path = "pricing-configs"
    model = PricingConfigResponse


class TaxRegionClient(ApiClient[TaxRegionResponse]):
    path = "tax-regions"
    model = TaxRegionResponse


class QuoteClient(ApiClient[QuoteResponse]):
    path = "quotes"
    model = QuoteResponse

    def get_all(self) -> Optional[list[QuoteSummaryResponse]]:
        return self._parse(self._request("GET", self._url()), list[QuoteSummaryResponse])

    def generate(self, job_id: str, pricing_config_id: Optional[str] = None) -> Optional[QuoteResponse]:
        request = GenerateQuoteRequest(job_id=job_id, pricing_config_id=pricing_config_id)
        response = self._request("POST", self._url("/generate"), json=request.model_dump(mode="json"))
        return self._parse(response, QuoteResponse)

    def recalculate(self, quote_id: str, change_summary: Optional[str] = None) -> Optional[QuoteResponse]:
        request = RecalculateQuoteRequest(change_summary=change_summary)
        response = self._request(
            "POST", self._url(f"/{quote_id}/recalculate"), json=request.model_dump(mode="json")
        )
        return self._parse(response, QuoteResponse)

    def export_csv(self, quote_id: str) -> Optional[str]:
        response = self._request("GET", self._url(f"/{quote_id}/export/csv"))
        return response.text if response is not None else None

    def export_html(self, quote_id: str) -> Optional[str]:
        response = self._request("GET", self._url(f"/{quote_id}/export/html"))
        return response.text if response is not None else None
