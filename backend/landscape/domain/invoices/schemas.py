from typing import List

from pydantic import BaseModel, Field

from landscape.domain.pricing.models import InvoiceTotal, PricingBreakdown


class InvoiceLineItem(BaseModel):
    description: str = Field(min_length=1, max_length=255)
    quantity: float = Field(gt=0)
    unit_price: float = Field(ge=0)


class InvoiceTotalsRequest(BaseModel):
    items: List[InvoiceLineItem] = Field(min_length=1, max_length=50)


class InvoiceLineResponse(BaseModel):
    description: str
    quantity: float
    unit_price: float
    total: float


class InvoiceTotalsResponse(BaseModel):
    items: List[InvoiceLineResponse]
    totals: InvoiceTotal


class JobCostResponse(BaseModel):
    breakdown: PricingBreakdown
    totals: InvoiceTotal
