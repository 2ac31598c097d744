import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from landscape.dependencies import get_db_session, get_pricing_tables
from landscape.domain.pricing.rates import PricingTables
from landscape.domain.quotes import service as quote_service
from landscape.domain.quotes.db_models import QuoteRequest
from landscape.domain.quotes.schemas import QuoteRequestCreate, QuoteRequestCreated
from landscape.infra.communication import resolve_app_communication_adapter
from landscape.infra.metrics import metrics

logger = logging.getLogger(__name__)

router = APIRouter()


async def send_admin_notification(adapter, quote: QuoteRequest, admin_phone: str | None, metrics_client) -> None:
    result = await quote_service.notify_admin_of_quote_request(adapter, quote, admin_phone)
    metrics_client.record_sms_notification(result.status)


@router.post("/v1/quote-requests", response_model=QuoteRequestCreated, status_code=status.HTTP_201_CREATED)
async def create_quote_request(
    request: QuoteRequestCreate,
    background_tasks: BackgroundTasks,
    http_request: Request,
    session: AsyncSession = Depends(get_db_session),
    tables: PricingTables = Depends(get_pricing_tables),
) -> QuoteRequestCreated:
    async with session.begin():
        quote, estimate = await quote_service.create_quote_request(session, request, tables)

    metrics_client = getattr(http_request.app.state, "metrics", None) or metrics
    metrics_client.record_quote_request(quote.project_type, quote.zone)

    app_settings = getattr(http_request.app.state, "app_settings", None)
    admin_phone = getattr(app_settings, "admin_notification_phone", None)
    adapter = resolve_app_communication_adapter(http_request)
    background_tasks.add_task(send_admin_notification, adapter, quote, admin_phone, metrics_client)

    return QuoteRequestCreated(
        quote_request_id=quote.quote_request_id,
        status=quote.status,
        min_total=estimate.min_total,
        max_total=estimate.max_total,
        breakdown=estimate.breakdown,
    )
