from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


@dataclass(frozen=True)
class CommunicationResult:
    status: str
    provider_msg_id: str | None = None
    error_code: str | None = None


class NoopCommunicationAdapter:
    """Used when SMS is switched off; every send reports ``sms_disabled``."""

    async def send_sms(self, *, to_number: str, body: str) -> CommunicationResult:
        del to_number, body
        logger.info("sms_send_skipped", extra={"extra": {"mode": "noop"}})
        return CommunicationResult(status="failed", error_code="sms_disabled")


class TwilioCommunicationAdapter:
    def __init__(self, app_settings, http_client: httpx.AsyncClient | None = None) -> None:
        self.app_settings = app_settings
        self.http_client = http_client

    @property
    def configured(self) -> bool:
        return bool(
            self.app_settings.twilio_account_sid
            and self.app_settings.twilio_auth_token
            and self.app_settings.twilio_sms_from
        )

    @property
    def messages_url(self) -> str:
        return f"{TWILIO_API_BASE}/Accounts/{self.app_settings.twilio_account_sid}/Messages.json"

    async def send_sms(self, *, to_number: str, body: str) -> CommunicationResult:
        if self.app_settings.sms_mode != "twilio":
            logger.info("sms_send_skipped", extra={"extra": {"mode": self.app_settings.sms_mode}})
            return CommunicationResult(status="failed", error_code="sms_disabled")
        if not self.configured:
            logger.warning("sms_send_not_configured")
            return CommunicationResult(status="failed", error_code="twilio_not_configured")
        payload = {"To": to_number, "From": self.app_settings.twilio_sms_from, "Body": body}
        return await self._post_message(payload)

    async def _post_message(self, payload: dict[str, str]) -> CommunicationResult:
        client = self.http_client or httpx.AsyncClient()
        close_client = self.http_client is None
        try:
            response = await client.post(
                self.messages_url,
                data=payload,
                auth=(self.app_settings.twilio_account_sid, self.app_settings.twilio_auth_token),
                timeout=self.app_settings.twilio_timeout_seconds,
            )
        except httpx.HTTPError as exc:
            logger.warning("twilio_request_failed", extra={"extra": {"reason": type(exc).__name__}})
            return CommunicationResult(status="failed", error_code="twilio_request_failed")
        finally:
            if close_client:
                await client.aclose()

        if response.status_code >= 400:
            logger.warning("twilio_request_error", extra={"extra": {"status_code": response.status_code}})
            return CommunicationResult(status="failed", error_code=f"twilio_status_{response.status_code}")

        provider_msg_id = None
        try:
            provider_msg_id = response.json().get("sid")
        except ValueError:
            logger.warning("twilio_response_parse_failed")
        return CommunicationResult(status="sent", provider_msg_id=provider_msg_id)


def resolve_communication_adapter(app_settings) -> TwilioCommunicationAdapter | NoopCommunicationAdapter:
    if app_settings.sms_mode != "twilio":
        return NoopCommunicationAdapter()
    return TwilioCommunicationAdapter(app_settings)


def resolve_app_communication_adapter(app_like) -> TwilioCommunicationAdapter | NoopCommunicationAdapter | None:
    state = getattr(app_like, "state", None)
    if state is None:
        return None
    app_state = getattr(getattr(app_like, "app", None), "state", None) or state
    adapter = getattr(app_state, "communication_adapter", None)
    if adapter is not None:
        return adapter
    services = getattr(app_state, "services", None)
    if services is not None:
        return getattr(services, "communication_adapter", None)
    return None
