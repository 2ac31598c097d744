from landscape.domain.errors import DomainError
from landscape.domain.invoices.schemas import (
    InvoiceLineItem,
    InvoiceLineResponse,
    InvoiceTotalsResponse,
    JobCostResponse,
)
from landscape.domain.pricing.estimator import calculate_invoice_total, compute_breakdown, round2
from landscape.domain.pricing.models import PricingInputs
from landscape.domain.pricing.rates import DEFAULT_TABLES, PricingTables
from landscape.domain.pricing.validation import validate_pricing_inputs


def line_total(item: InvoiceLineItem) -> float:
    return round2(item.quantity * item.unit_price)


def calculate_invoice_totals(items: list[InvoiceLineItem]) -> InvoiceTotalsResponse:
    lines = [
        InvoiceLineResponse(
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total=line_total(item),
        )
        for item in items
    ]
    subtotal = round2(sum(line.total for line in lines))
    return InvoiceTotalsResponse(items=lines, totals=calculate_invoice_total(subtotal))


def calculate_job_cost(inputs: PricingInputs, tables: PricingTables = DEFAULT_TABLES) -> JobCostResponse:
    """Exact, taxed cost of a job priced from hours, area and visits."""
    validation = validate_pricing_inputs(inputs.hours, inputs.sqft, inputs.visits)
    if not validation.valid:
        raise DomainError(
            detail="Job inputs are out of range",
            title="Invalid job inputs",
            errors=[{"field": "body", "message": message} for message in validation.errors],
        )
    breakdown = compute_breakdown(inputs, tables)
    return JobCostResponse(breakdown=breakdown, totals=calculate_invoice_total(breakdown.subtotal))
