import logging
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from landscape.domain.errors import DomainError
from landscape.domain.pricing.estimator import calculate_quote_range, to_cents
from landscape.domain.pricing.models import QuoteRange
from landscape.domain.pricing.rates import DEFAULT_TABLES, PricingTables
from landscape.domain.pricing.services_catalog import ensure_project_type_allowed
from landscape.domain.quotes import statuses
from landscape.domain.quotes.db_models import AdminNotification, QuoteRequest
from landscape.domain.quotes.schemas import QuoteRequestCreate, QuoteRequestUpdate
from landscape.infra.communication import CommunicationResult

logger = logging.getLogger(__name__)

NOTIFICATION_TYPE_QUOTE_REQUEST = "quote_request"


def estimate_for_request(payload: QuoteRequestCreate, tables: PricingTables = DEFAULT_TABLES) -> QuoteRange:
    if payload.service_id is not None:
        ensure_project_type_allowed(payload.service_id, payload.project_type)
    estimate = calculate_quote_range(payload, tables)
    if not estimate.valid:
        raise DomainError(
            detail="Quote inputs are out of range",
            title="Invalid quote inputs",
            errors=[{"field": "body", "message": message} for message in estimate.errors],
        )
    return estimate


async def create_quote_request(
    session: AsyncSession,
    payload: QuoteRequestCreate,
    tables: PricingTables = DEFAULT_TABLES,
) -> tuple[QuoteRequest, QuoteRange]:
    """Store a quote request priced on the server and queue an admin notification.

    Totals sent by the browser are never trusted; the range is recomputed
    from the raw inputs and stored in cents.
    """
    estimate = estimate_for_request(payload, tables)
    quote = QuoteRequest(
        client_name=payload.client_name,
        client_email=str(payload.client_email),
        client_phone=payload.client_phone,
        service_name=payload.service_name,
        project_type=payload.project_type.value,
        zone=payload.zone.value,
        hours=payload.hours,
        sqft=payload.sqft,
        visits=payload.visits,
        extras=payload.extras,
        min_cents=to_cents(estimate.min_total),
        max_cents=to_cents(estimate.max_total),
        breakdown_metadata=estimate.breakdown.model_dump(mode="json"),
        status=statuses.default_quote_status(),
    )
    session.add(quote)
    await session.flush()

    session.add(
        AdminNotification(
            type=NOTIFICATION_TYPE_QUOTE_REQUEST,
            entity_id=quote.quote_request_id,
            read=False,
            quote_request_id=quote.quote_request_id,
        )
    )
    await session.flush()
    logger.info(
        "quote_request_created",
        extra={
            "extra": {
                "quote_request_id": quote.quote_request_id,
                "project_type": quote.project_type,
                "zone": quote.zone,
                "min_cents": quote.min_cents,
                "max_cents": quote.max_cents,
            }
        },
    )
    return quote, estimate


def format_dollars(cents: int) -> str:
    """Whole dollars, half a dollar rounding up."""
    return f"${(int(cents) + 50) // 100}"


def admin_sms_body(quote: QuoteRequest) -> str:
    return (
        f"New quote request: {quote.service_name} from {quote.client_name}. "
        f"Estimate: {format_dollars(quote.min_cents)}–{format_dollars(quote.max_cents)}. Check admin quotes."
    )


def client_sms_body(quote: QuoteRequest) -> str:
    if quote.message_to_client:
        return quote.message_to_client
    low = quote.approved_min_cents if quote.approved_min_cents is not None else quote.min_cents
    high = quote.approved_max_cents if quote.approved_max_cents is not None else quote.max_cents
    return f"Your estimate: {format_dollars(low)} – {format_dollars(high)} for {quote.service_name}."


async def _dispatch_sms(
    adapter, to_number: str | None, body: str, *, quote_request_id: str, audience: str
) -> CommunicationResult:
    log_extra = {"quote_request_id": quote_request_id, "audience": audience}
    if adapter is None or not to_number:
        logger.info("quote_request_sms_skipped", extra={"extra": {**log_extra, "reason": "not_configured"}})
        return CommunicationResult(status="failed", error_code="not_configured")
    try:
        result = await adapter.send_sms(to_number=to_number, body=body)
    except Exception as exc:  # noqa: BLE001
        logger.warning("quote_request_sms_failed", extra={"extra": {**log_extra, "reason": type(exc).__name__}})
        return CommunicationResult(status="failed", error_code="sms_exception")
    if result.status != "sent":
        logger.warning("quote_request_sms_not_sent", extra={"extra": {**log_extra, "error_code": result.error_code}})
    return result


async def notify_admin_of_quote_request(adapter, quote: QuoteRequest, admin_phone: str | None) -> CommunicationResult:
    return await _dispatch_sms(
        adapter,
        admin_phone,
        admin_sms_body(quote),
        quote_request_id=quote.quote_request_id,
        audience="admin",
    )


async def list_quote_requests(
    session: AsyncSession,
    *,
    status: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[QuoteRequest], int]:
    stmt = select(QuoteRequest)
    count_stmt = select(func.count()).select_from(QuoteRequest)
    if status is not None:
        if status not in statuses.statuses_for_filter():
            raise DomainError(detail=f"Unknown quote request status: {status}", title="Invalid status filter")
        stmt = stmt.where(QuoteRequest.status == status)
        count_stmt = count_stmt.where(QuoteRequest.status == status)
    stmt = stmt.order_by(QuoteRequest.created_at.desc(), QuoteRequest.quote_request_id).limit(limit).offset(offset)
    items = (await session.execute(stmt)).scalars().all()
    total = int((await session.execute(count_stmt)).scalar_one())
    return list(items), total


async def get_quote_request(session: AsyncSession, quote_request_id: str) -> QuoteRequest | None:
    return await session.get(QuoteRequest, quote_request_id)


def apply_quote_update(quote: QuoteRequest, changes: QuoteRequestUpdate) -> QuoteRequest:
    """Apply an admin edit in place.

    Fields left out of the payload are unchanged; an explicit ``null`` clears
    the message or approved amounts. Sending a quote freezes the approved
    range, falling back to the computed range where none was approved.
    """
    provided = changes.model_fields_set
    if changes.status is not None:
        try:
            statuses.assert_valid_transition(quote.status, changes.status)
        except ValueError as exc:
            raise DomainError(detail=str(exc), title="Invalid status transition") from exc

    approved_min = changes.approved_min_cents if "approved_min_cents" in provided else quote.approved_min_cents
    approved_max = changes.approved_max_cents if "approved_max_cents" in provided else quote.approved_max_cents
    if approved_min is not None and approved_max is not None and approved_min > approved_max:
        raise DomainError(
            detail="Approved minimum must not exceed approved maximum",
            title="Invalid approved range",
        )

    if "message_to_client" in provided:
        quote.message_to_client = changes.message_to_client
    quote.approved_min_cents = approved_min
    quote.approved_max_cents = approved_max
    if changes.status is not None and changes.status != quote.status:
        quote.status = changes.status
        if changes.status == statuses.QUOTE_STATUS_SENT:
            _stamp_sent(quote)
    return quote


def _stamp_sent(quote: QuoteRequest) -> None:
    quote.sent_at = datetime.now(tz=timezone.utc)
    if quote.approved_min_cents is None:
        quote.approved_min_cents = quote.min_cents
    if quote.approved_max_cents is None:
        quote.approved_max_cents = quote.max_cents


async def update_quote_request(
    session: AsyncSession, quote: QuoteRequest, changes: QuoteRequestUpdate
) -> QuoteRequest:
    previous_status = quote.status
    apply_quote_update(quote, changes)
    await session.flush()
    logger.info(
        "quote_request_updated",
        extra={
            "extra": {
                "quote_request_id": quote.quote_request_id,
                "from_status": previous_status,
                "to_status": quote.status,
            }
        },
    )
    return quote


async def mark_quote_sent(session: AsyncSession, quote: QuoteRequest) -> QuoteRequest:
    """Move a quote to ``sent``; re-sending an already sent quote re-stamps ``sent_at``."""
    if quote.status == statuses.QUOTE_STATUS_SENT:
        _stamp_sent(quote)
        await session.flush()
        return quote
    return await update_quote_request(session, quote, QuoteRequestUpdate(status=statuses.QUOTE_STATUS_SENT))


async def send_quote_to_client(adapter, quote: QuoteRequest) -> CommunicationResult:
    """Text the approved range (or the admin's message) to the client.

    Call after the ``sent`` status is committed; the quote stays sent when
    the SMS cannot be delivered.
    """
    return await _dispatch_sms(
        adapter,
        quote.client_phone,
        client_sms_body(quote),
        quote_request_id=quote.quote_request_id,
        audience="client",
    )


async def list_notifications(
    session: AsyncSession,
    *,
    unread_only: bool = False,
    limit: int = 50,
    notification_type: str = NOTIFICATION_TYPE_QUOTE_REQUEST,
) -> tuple[list[AdminNotification], int]:
    stmt = select(AdminNotification).where(AdminNotification.type == notification_type)
    if unread_only:
        stmt = stmt.where(AdminNotification.read.is_(False))
    stmt = stmt.order_by(AdminNotification.created_at.desc(), AdminNotification.notification_id).limit(limit)
    items = (await session.execute(stmt)).scalars().all()
    unread = (
        await session.execute(
            select(func.count())
            .select_from(AdminNotification)
            .where(AdminNotification.type == notification_type, AdminNotification.read.is_(False))
        )
    ).scalar_one()
    return list(items), int(unread)


async def mark_notification_read(session: AsyncSession, notification_id: str) -> AdminNotification | None:
    notification = await session.get(AdminNotification, notification_id)
    if notification is None:
        return None
    notification.read = True
    await session.flush()
    return notification


async def mark_quote_notifications_read(session: AsyncSession, quote_request_id: str) -> int:
    result = await session.execute(
        update(AdminNotification)
        .where(
            AdminNotification.quote_request_id == quote_request_id,
            AdminNotification.read.is_(False),
        )
        .values(read=True)
        .execution_options(synchronize_session="fetch")
    )
    return int(result.rowcount or 0)
