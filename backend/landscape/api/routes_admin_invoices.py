from fastapi import APIRouter, Depends

from landscape.api.admin_auth import AdminIdentity, require_admin
from landscape.dependencies import get_pricing_tables
from landscape.domain.invoices import service as invoice_service
from landscape.domain.invoices.schemas import InvoiceTotalsRequest, InvoiceTotalsResponse, JobCostResponse
from landscape.domain.pricing.models import PricingInputs
from landscape.domain.pricing.rates import PricingTables

router = APIRouter(prefix="/v1/admin")


@router.post("/invoices/totals", response_model=InvoiceTotalsResponse)
async def invoice_totals(
    payload: InvoiceTotalsRequest,
    _identity: AdminIdentity = Depends(require_admin),
) -> InvoiceTotalsResponse:
    return invoice_service.calculate_invoice_totals(payload.items)


@router.post("/jobs/cost", response_model=JobCostResponse)
async def job_cost(
    payload: PricingInputs,
    tables: PricingTables = Depends(get_pricing_tables),
    _identity: AdminIdentity = Depends(require_admin),
) -> JobCostResponse:
    return invoice_service.calculate_job_cost(payload, tables)
