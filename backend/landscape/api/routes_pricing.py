import logging

from fastapi import APIRouter, Depends, Request

from landscape.dependencies import get_pricing_tables
from landscape.domain.errors import DomainError
from landscape.domain.pricing import rates, validation
from landscape.domain.pricing.estimator import calculate_quote_range, compute_breakdown
from landscape.domain.pricing.models import (
    PricingBreakdown,
    PricingInputs,
    QuoteRange,
    QuoteRangeRequest,
    ValidationResult,
)
from landscape.domain.pricing.rates import PricingTables
from landscape.domain.pricing.services_catalog import catalog_payload
from landscape.infra.metrics import metrics

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/v1/pricing/rates")
async def get_rates(tables: PricingTables = Depends(get_pricing_tables)) -> dict:
    return {
        **tables.as_dict(),
        "tax_rate": rates.PHOENIX_TAX_RATE,
        "quote_low_multiplier": rates.QUOTE_LOW_MULTIPLIER,
        "quote_high_multiplier": rates.QUOTE_HIGH_MULTIPLIER,
        "limits": {
            "hours": [validation.HOURS_MIN, validation.HOURS_MAX],
            "sqft": [validation.SQFT_MIN, validation.SQFT_MAX],
            "visits": [validation.VISITS_MIN, validation.VISITS_MAX],
        },
        "services": catalog_payload(),
    }


@router.post("/v1/pricing/validate", response_model=ValidationResult)
async def validate_inputs(request: PricingInputs) -> ValidationResult:
    return validation.validate_pricing_inputs(request.hours, request.sqft, request.visits)


@router.post("/v1/pricing/breakdown", response_model=PricingBreakdown)
async def create_breakdown(
    request: PricingInputs,
    tables: PricingTables = Depends(get_pricing_tables),
) -> PricingBreakdown:
    result = validation.validate_pricing_inputs(request.hours, request.sqft, request.visits)
    if not result.valid:
        raise DomainError(
            detail="Pricing inputs are out of range",
            title="Invalid pricing inputs",
            errors=[{"field": "body", "message": message} for message in result.errors],
        )
    return compute_breakdown(request, tables)


@router.post("/v1/estimate", response_model=QuoteRange)
async def create_estimate(
    request: QuoteRangeRequest,
    http_request: Request,
    tables: PricingTables = Depends(get_pricing_tables),
) -> QuoteRange:
    estimate = calculate_quote_range(request, tables)
    metrics_client = getattr(http_request.app.state, "metrics", None) or metrics
    metrics_client.record_quote_estimate(estimate.valid)
    if not estimate.valid:
        logger.info("estimate_rejected", extra={"extra": {"errors": estimate.errors}})
    return estimate
