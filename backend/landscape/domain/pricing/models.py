from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from landscape.domain.pricing.rates import ProjectType, Zone


class PricingInputs(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    hours: float
    sqft: float
    visits: int
    zone: Zone
    project_type: ProjectType


class QuoteRangeRequest(PricingInputs):
    service_name: Optional[str] = Field(default=None, max_length=255)
    extras: Optional[str] = Field(default=None, max_length=512)


class ValidationResult(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


class PricingBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    labor: float
    materials: float
    visit_fees: float
    subtotal: float

    @classmethod
    def zero(cls) -> "PricingBreakdown":
        return cls(labor=0, materials=0, visit_fees=0, subtotal=0)


class QuoteRange(BaseModel):
    min_total: float
    max_total: float
    breakdown: PricingBreakdown
    valid: bool
    errors: List[str] = Field(default_factory=list)


class InvoiceTotal(BaseModel):
    subtotal: float
    tax: float
    total: float
