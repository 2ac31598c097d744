import math

from landscape.domain.pricing.models import (
    InvoiceTotal,
    PricingBreakdown,
    PricingInputs,
    QuoteRange,
)
from landscape.domain.pricing.rates import (
    DEFAULT_TABLES,
    PHOENIX_TAX_RATE,
    QUOTE_HIGH_MULTIPLIER,
    QUOTE_LOW_MULTIPLIER,
    PricingTables,
)
from landscape.domain.pricing.validation import validate_pricing_inputs


def round2(value: float) -> float:
    """Round to cents, half away from zero (``round()`` would round half to even)."""
    return math.copysign(math.floor(abs(value) * 100 + 0.5), value) / 100


def to_cents(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) * 100 + 0.5), value))


def compute_breakdown(inputs: PricingInputs, tables: PricingTables = DEFAULT_TABLES) -> PricingBreakdown:
    multiplier = tables.multiplier_for(inputs.zone)
    rate = tables.rate_for(inputs.project_type)

    labor = round2(inputs.hours * rate.hourly_rate * multiplier)
    materials = round2(inputs.sqft * rate.material_rate * multiplier)
    visit_fees = max(0, inputs.visits - 1) * tables.visit_fee
    subtotal = labor + materials + visit_fees

    return PricingBreakdown(
        labor=labor,
        materials=materials,
        visit_fees=visit_fees,
        subtotal=subtotal,
    )


def calculate_quote_range(request: PricingInputs, tables: PricingTables = DEFAULT_TABLES) -> QuoteRange:
    validation = validate_pricing_inputs(request.hours, request.sqft, request.visits)
    if not validation.valid:
        return QuoteRange(
            min_total=0,
            max_total=0,
            breakdown=PricingBreakdown.zero(),
            valid=False,
            errors=validation.errors,
        )

    breakdown = compute_breakdown(request, tables)
    return QuoteRange(
        min_total=round2(breakdown.subtotal * QUOTE_LOW_MULTIPLIER),
        max_total=round2(breakdown.subtotal * QUOTE_HIGH_MULTIPLIER),
        breakdown=breakdown,
        valid=True,
        errors=[],
    )


def calculate_invoice_total(subtotal: float) -> InvoiceTotal:
    tax = round2(subtotal * PHOENIX_TAX_RATE)
    return InvoiceTotal(subtotal=subtotal, tax=tax, total=subtotal + tax)
