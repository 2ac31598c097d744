from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from landscape.domain.pricing.models import PricingBreakdown, QuoteRangeRequest
from landscape.domain.quotes.statuses import (
    QUOTE_STATUS_PENDING,
    QUOTE_STATUS_REVIEWED,
    QUOTE_STATUS_SENT,
)

QuoteStatus = Literal[
    QUOTE_STATUS_PENDING,
    QUOTE_STATUS_REVIEWED,
    QUOTE_STATUS_SENT,
]


class QuoteRequestCreate(QuoteRangeRequest):
    model_config = ConfigDict(extra="forbid", frozen=True)

    client_name: str = Field(..., min_length=1, max_length=255)
    client_email: EmailStr
    client_phone: Optional[str] = Field(default=None, max_length=64)
    service_id: Optional[str] = Field(default=None, max_length=16)
    service_name: str = Field(..., min_length=1, max_length=255)


class QuoteRequestCreated(BaseModel):
    quote_request_id: str
    status: QuoteStatus
    min_total: float
    max_total: float
    breakdown: PricingBreakdown


class QuoteRequestUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: Optional[QuoteStatus] = None
    message_to_client: Optional[str] = Field(default=None, max_length=5000)
    approved_min_cents: Optional[int] = Field(default=None, ge=0)
    approved_max_cents: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def validate_approved_range(self) -> "QuoteRequestUpdate":
        if (
            self.approved_min_cents is not None
            and self.approved_max_cents is not None
            and self.approved_min_cents > self.approved_max_cents
        ):
            raise ValueError("approved_min_cents must not exceed approved_max_cents")
        return self


class QuoteRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    quote_request_id: str
    client_name: str
    client_email: str
    client_phone: Optional[str] = None
    service_name: str
    project_type: str
    zone: str
    hours: float
    sqft: float
    visits: int
    extras: Optional[str] = None
    min_cents: int
    max_cents: int
    breakdown_metadata: dict = Field(default_factory=dict)
    status: QuoteStatus
    message_to_client: Optional[str] = None
    approved_min_cents: Optional[int] = None
    approved_max_cents: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    sent_at: Optional[datetime] = None


class QuoteRequestListResponse(BaseModel):
    items: List[QuoteRequestResponse]
    total: int


class AdminNotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    notification_id: str
    type: str
    entity_id: str
    read: bool
    quote_request_id: Optional[str] = None
    created_at: datetime


class AdminNotificationListResponse(BaseModel):
    items: List[AdminNotificationResponse]
    unread: int


class QuoteRequestSendResponse(BaseModel):
    quote: QuoteRequestResponse
    sms_status: str
    sms_error_code: Optional[str] = None


class QuoteNotificationsReadResponse(BaseModel):
    quote_request_id: str
    updated: int
