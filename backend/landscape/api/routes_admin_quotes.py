import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from landscape.api.admin_auth import AdminIdentity, require_admin
from landscape.dependencies import get_db_session
from landscape.domain.quotes import service as quote_service
from landscape.domain.quotes.schemas import (
    AdminNotificationListResponse,
    AdminNotificationResponse,
    QuoteNotificationsReadResponse,
    QuoteRequestListResponse,
    QuoteRequestResponse,
    QuoteRequestSendResponse,
    QuoteRequestUpdate,
)
from landscape.infra.communication import resolve_app_communication_adapter
from landscape.infra.metrics import metrics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin")


@router.get("/quote-requests", response_model=QuoteRequestListResponse)
async def list_quote_requests(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_db_session),
    _identity: AdminIdentity = Depends(require_admin),
) -> QuoteRequestListResponse:
    items, total = await quote_service.list_quote_requests(
        session, status=status_filter, limit=limit, offset=offset
    )
    return QuoteRequestListResponse(
        items=[QuoteRequestResponse.model_validate(item) for item in items],
        total=total,
    )


@router.get("/quote-requests/{quote_request_id}", response_model=QuoteRequestResponse)
async def get_quote_request(
    quote_request_id: str,
    session: AsyncSession = Depends(get_db_session),
    _identity: AdminIdentity = Depends(require_admin),
) -> QuoteRequestResponse:
    quote = await quote_service.get_quote_request(session, quote_request_id)
    if quote is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quote request not found")
    return QuoteRequestResponse.model_validate(quote)


@router.patch("/quote-requests/{quote_request_id}", response_model=QuoteRequestResponse)
async def update_quote_request(
    quote_request_id: str,
    payload: QuoteRequestUpdate,
    session: AsyncSession = Depends(get_db_session),
    identity: AdminIdentity = Depends(require_admin),
) -> QuoteRequestResponse:
    quote = await quote_service.get_quote_request(session, quote_request_id)
    if quote is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quote request not found")
    await quote_service.update_quote_request(session, quote, payload)
    await session.commit()
    await session.refresh(quote)
    logger.info(
        "admin_quote_request_updated",
        extra={"extra": {"quote_request_id": quote_request_id, "admin": identity.username}},
    )
    return QuoteRequestResponse.model_validate(quote)


@router.post("/quote-requests/{quote_request_id}/send", response_model=QuoteRequestSendResponse)
async def send_quote_request(
    quote_request_id: str,
    http_request: Request,
    session: AsyncSession = Depends(get_db_session),
    identity: AdminIdentity = Depends(require_admin),
) -> QuoteRequestSendResponse:
    quote = await quote_service.get_quote_request(session, quote_request_id)
    if quote is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quote request not found")
    await quote_service.mark_quote_sent(session, quote)
    await session.commit()
    await session.refresh(quote)

    adapter = resolve_app_communication_adapter(http_request)
    result = await quote_service.send_quote_to_client(adapter, quote)
    metrics_client = getattr(http_request.app.state, "metrics", None) or metrics
    metrics_client.record_sms_notification(result.status)
    logger.info(
        "admin_quote_request_sent",
        extra={
            "extra": {
                "quote_request_id": quote_request_id,
                "admin": identity.username,
                "sms_status": result.status,
            }
        },
    )
    return QuoteRequestSendResponse(
        quote=QuoteRequestResponse.model_validate(quote),
        sms_status=result.status,
        sms_error_code=result.error_code,
    )


@router.post(
    "/quote-requests/{quote_request_id}/notifications/read",
    response_model=QuoteNotificationsReadResponse,
)
async def mark_quote_notifications_read(
    quote_request_id: str,
    session: AsyncSession = Depends(get_db_session),
    _identity: AdminIdentity = Depends(require_admin),
) -> QuoteNotificationsReadResponse:
    quote = await quote_service.get_quote_request(session, quote_request_id)
    if quote is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quote request not found")
    updated = await quote_service.mark_quote_notifications_read(session, quote_request_id)
    await session.commit()
    return QuoteNotificationsReadResponse(quote_request_id=quote_request_id, updated=updated)


@router.get("/notifications", response_model=AdminNotificationListResponse)
async def list_notifications(
    unread: bool = Query(default=False),
    session: AsyncSession = Depends(get_db_session),
    _identity: AdminIdentity = Depends(require_admin),
) -> AdminNotificationListResponse:
    items, unread_count = await quote_service.list_notifications(session, unread_only=unread)
    return AdminNotificationListResponse(
        items=[AdminNotificationResponse.model_validate(item) for item in items],
        unread=unread_count,
    )


@router.post("/notifications/{notification_id}/read", response_model=AdminNotificationResponse)
async def mark_notification_read(
    notification_id: str,
    session: AsyncSession = Depends(get_db_session),
    _identity: AdminIdentity = Depends(require_admin),
) -> AdminNotificationResponse:
    notification = await quote_service.mark_notification_read(session, notification_id)
    if notification is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    await session.commit()
    await session.refresh(notification)
    return AdminNotificationResponse.model_validate(notification)
