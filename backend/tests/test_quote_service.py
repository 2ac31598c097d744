import pytest
from sqlalchemy import select

from landscape.domain.errors import DomainError
from landscape.domain.quotes import service as quote_service
from landscape.domain.quotes.db_models import AdminNotification, QuoteRequest
from landscape.domain.quotes.schemas import QuoteRequestCreate, QuoteRequestUpdate
from landscape.infra.communication import CommunicationResult


def _payload(**overrides) -> QuoteRequestCreate:
    data = {
        "client_name": "Dana Ruiz",
        "client_email": "dana@example.com",
        "client_phone": "602-555-0142",
        "service_id": "1",
        "service_name": "Lawn Care & Maintenance",
        "project_type": "maintenance",
        "zone": "residential",
        "hours": 10,
        "sqft": 500,
        "visits": 1,
    }
    data.update(overrides)
    return QuoteRequestCreate(**data)


def _quote(**overrides) -> QuoteRequest:
    data = {
        "quote_request_id": "qr-1",
        "client_name": "Dana Ruiz",
        "client_email": "dana@example.com",
        "service_name": "Desert Landscaping",
        "project_type": "installation",
        "zone": "residential",
        "hours": 1,
        "sqft": 1,
        "visits": 1,
        "min_cents": 100000,
        "max_cents": 150000,
        "status": "pending",
    }
    data.update(overrides)
    return QuoteRequest(**data)


class ExplodingAdapter:
    async def send_sms(self, *, to_number: str, body: str) -> CommunicationResult:
        raise RuntimeError("provider down")


class RecordingAdapter:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    async def send_sms(self, *, to_number: str, body: str) -> CommunicationResult:
        self.calls.append((to_number, body))
        return CommunicationResult(status="sent", provider_msg_id="SM1")


@pytest.mark.anyio
async def test_create_quote_request_stores_cents_and_notification(async_session_maker):
    async with async_session_maker() as session:
        quote, estimate = await quote_service.create_quote_request(session, _payload())
        await session.commit()

    assert estimate.min_total == pytest.approx(1232.5)
    assert estimate.max_total == pytest.approx(1667.5)
    assert quote.min_cents == 123250
    assert quote.max_cents == 166750
    assert quote.status == "pending"
    assert quote.breakdown_metadata["subtotal"] == 1450

    async with async_session_maker() as session:
        notifications = (await session.execute(select(AdminNotification))).scalars().all()
    assert len(notifications) == 1
    assert notifications[0].entity_id == quote.quote_request_id
    assert notifications[0].type == quote_service.NOTIFICATION_TYPE_QUOTE_REQUEST
    assert notifications[0].read is False


def test_estimate_rejects_project_type_not_offered():
    with pytest.raises(DomainError) as excinfo:
        quote_service.estimate_for_request(_payload(project_type="installation"))
    assert excinfo.value.title == "Project type not offered"


def test_estimate_rejects_out_of_range_inputs():
    with pytest.raises(DomainError) as excinfo:
        quote_service.estimate_for_request(_payload(visits=60))
    assert excinfo.value.title == "Invalid quote inputs"
    assert excinfo.value.errors == [{"field": "body", "message": "Visits must be between 1 and 50"}]


def test_admin_sms_body_mentions_service_and_client():
    body = quote_service.admin_sms_body(_quote())
    assert body.startswith("New quote request: Desert Landscaping from Dana Ruiz.")
    assert "$1000" in body
    assert "$1500" in body
    assert "dana@example.com" not in body


@pytest.mark.anyio
async def test_notify_admin_sends_sms():
    adapter = RecordingAdapter()
    result = await quote_service.notify_admin_of_quote_request(adapter, _quote(), "+16025550100")
    assert result.status == "sent"
    assert adapter.calls[0][0] == "+16025550100"


@pytest.mark.anyio
async def test_notify_admin_skips_without_phone():
    adapter = RecordingAdapter()
    result = await quote_service.notify_admin_of_quote_request(adapter, _quote(), None)
    assert result.error_code == "not_configured"
    assert adapter.calls == []


@pytest.mark.anyio
async def test_notify_admin_swallows_provider_errors():
    result = await quote_service.notify_admin_of_quote_request(ExplodingAdapter(), _quote(), "+16025550100")
    assert result.status == "failed"
    assert result.error_code == "sms_exception"


def test_apply_update_sets_sent_at_when_sending():
    quote = _quote(status="reviewed")
    quote_service.apply_quote_update(quote, QuoteRequestUpdate(status="sent", message_to_client="See attached"))
    assert quote.status == "sent"
    assert quote.sent_at is not None
    assert quote.message_to_client == "See attached"
    assert quote.approved_min_cents == 100000
    assert quote.approved_max_cents == 150000


def test_apply_update_rejects_backwards_transition():
    quote = _quote(status="sent")
    with pytest.raises(DomainError) as excinfo:
        quote_service.apply_quote_update(quote, QuoteRequestUpdate(status="pending"))
    assert excinfo.value.title == "Invalid status transition"


def test_apply_update_checks_merged_approved_range():
    quote = _quote(approved_min_cents=None, approved_max_cents=90000)
    with pytest.raises(DomainError) as excinfo:
        quote_service.apply_quote_update(quote, QuoteRequestUpdate(approved_min_cents=95000))
    assert excinfo.value.title == "Invalid approved range"


@pytest.mark.anyio
async def test_list_quote_requests_filters_by_status(async_session_maker):
    async with async_session_maker() as session:
        first, _ = await quote_service.create_quote_request(session, _payload())
        await quote_service.create_quote_request(session, _payload(client_name="Lee Park"))
        quote_service.apply_quote_update(first, QuoteRequestUpdate(status="reviewed"))
        await session.commit()

    async with async_session_maker() as session:
        pending, pending_total = await quote_service.list_quote_requests(session, status="pending")
        reviewed, reviewed_total = await quote_service.list_quote_requests(session, status="reviewed")
        everything, total = await quote_service.list_quote_requests(session)

    assert pending_total == 1
    assert pending[0].client_name == "Lee Park"
    assert reviewed_total == 1
    assert reviewed[0].quote_request_id == first.quote_request_id
    assert total == 2
    assert len(everything) == 2


@pytest.mark.anyio
async def test_list_quote_requests_rejects_unknown_status(async_session_maker):
    async with async_session_maker() as session:
        with pytest.raises(DomainError):
            await quote_service.list_quote_requests(session, status="archived")


@pytest.mark.anyio
async def test_mark_notification_read(async_session_maker):
    async with async_session_maker() as session:
        await quote_service.create_quote_request(session, _payload())
        await session.commit()

    async with async_session_maker() as session:
        items, unread = await quote_service.list_notifications(session, unread_only=True)
        assert unread == 1
        notification = await quote_service.mark_notification_read(session, items[0].notification_id)
        await session.commit()
        assert notification.read is True

    async with async_session_maker() as session:
        items, unread = await quote_service.list_notifications(session, unread_only=True)
        assert items == []
        assert unread == 0
        assert await quote_service.mark_notification_read(session, "missing") is None


def test_sending_keeps_an_approved_range():
    quote = _quote(approved_min_cents=120000, approved_max_cents=None)
    quote_service.apply_quote_update(quote, QuoteRequestUpdate(status="sent"))
    assert quote.approved_min_cents == 120000
    assert quote.approved_max_cents == 150000


def test_explicit_null_clears_approved_amounts_and_message():
    quote = _quote(approved_min_cents=90000, approved_max_cents=110000, message_to_client="Hi")
    quote_service.apply_quote_update(
        quote,
        QuoteRequestUpdate(approved_min_cents=None, approved_max_cents=None, message_to_client=None),
    )
    assert quote.approved_min_cents is None
    assert quote.approved_max_cents is None
    assert quote.message_to_client is None


def test_omitted_fields_are_left_unchanged():
    quote = _quote(approved_min_cents=90000, approved_max_cents=110000, message_to_client="Hi")
    quote_service.apply_quote_update(quote, QuoteRequestUpdate(status="reviewed"))
    assert quote.approved_min_cents == 90000
    assert quote.approved_max_cents == 110000
    assert quote.message_to_client == "Hi"


@pytest.mark.parametrize("cents, expected", [(123250, "$1233"), (166749, "$1667"), (0, "$0")])
def test_format_dollars_rounds_half_up(cents, expected):
    assert quote_service.format_dollars(cents) == expected


def test_client_sms_body_defaults_to_estimate():
    quote = _quote(approved_min_cents=90000, approved_max_cents=110000)
    assert quote_service.client_sms_body(quote) == "Your estimate: $900 – $1100 for Desert Landscaping."


def test_client_sms_body_prefers_admin_message():
    quote = _quote(message_to_client="Thanks! We can start Monday.")
    assert quote_service.client_sms_body(quote) == "Thanks! We can start Monday."


@pytest.mark.anyio
async def test_send_quote_to_client_texts_client_phone():
    adapter = RecordingAdapter()
    quote = _quote(client_phone="602-555-0142", approved_min_cents=100000, approved_max_cents=150000)
    result = await quote_service.send_quote_to_client(adapter, quote)
    assert result.status == "sent"
    assert adapter.calls == [("602-555-0142", "Your estimate: $1000 – $1500 for Desert Landscaping.")]


@pytest.mark.anyio
async def test_send_quote_to_client_without_phone_is_skipped():
    adapter = RecordingAdapter()
    result = await quote_service.send_quote_to_client(adapter, _quote(client_phone=None))
    assert result.error_code == "not_configured"
    assert adapter.calls == []


@pytest.mark.anyio
async def test_send_quote_to_client_swallows_provider_errors():
    result = await quote_service.send_quote_to_client(ExplodingAdapter(), _quote(client_phone="602-555-0142"))
    assert result.error_code == "sms_exception"


@pytest.mark.anyio
async def test_mark_quote_sent_fills_approved_range(async_session_maker):
    async with async_session_maker() as session:
        quote, _ = await quote_service.create_quote_request(session, _payload())
        await quote_service.mark_quote_sent(session, quote)
        await session.commit()

    assert quote.status == "sent"
    assert quote.sent_at is not None
    assert quote.approved_min_cents == quote.min_cents
    assert quote.approved_max_cents == quote.max_cents


@pytest.mark.anyio
async def test_mark_quote_notifications_read_by_quote(async_session_maker):
    async with async_session_maker() as session:
        first, _ = await quote_service.create_quote_request(session, _payload())
        await quote_service.create_quote_request(session, _payload(client_name="Lee Park"))
        await session.commit()

    async with async_session_maker() as session:
        updated = await quote_service.mark_quote_notifications_read(session, first.quote_request_id)
        await session.commit()
    assert updated == 1

    async with async_session_maker() as session:
        items, unread = await quote_service.list_notifications(session, unread_only=True)
    assert unread == 1
    assert len(items) == 1
    assert items[0].entity_id != first.quote_request_id


@pytest.mark.anyio
async def test_list_notifications_only_returns_quote_notifications(async_session_maker):
    async with async_session_maker() as session:
        await quote_service.create_quote_request(session, _payload())
        session.add(AdminNotification(type="invoice_overdue", entity_id="inv-1", read=False))
        await session.commit()

    async with async_session_maker() as session:
        items, unread = await quote_service.list_notifications(session)
    assert unread == 1
    assert [item.type for item in items] == [quote_service.NOTIFICATION_TYPE_QUOTE_REQUEST]
