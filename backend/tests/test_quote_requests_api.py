import pytest

from landscape.infra.communication import CommunicationResult
from landscape.settings import settings


def _payload(**overrides) -> dict:
    payload = {
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
        "extras": "Gate code 1234",
    }
    payload.update(overrides)
    return payload


def test_create_quote_request(client, sms_adapter):
    response = client.post("/v1/quote-requests", json=_payload())
    assert response.status_code == 201
    body = response.json()
    assert body["quote_request_id"]
    assert body["status"] == "pending"
    assert body["min_total"] == pytest.approx(1232.5)
    assert body["max_total"] == pytest.approx(1667.5)
    assert body["breakdown"]["subtotal"] == 1450

    assert len(sms_adapter.sent) == 1
    message = sms_adapter.sent[0]
    assert message["to_number"] == "+16025550100"
    assert "Lawn Care & Maintenance from Dana Ruiz" in message["body"]


def test_create_quote_request_without_admin_phone_skips_sms(client, sms_adapter):
    settings.admin_notification_phone = None
    response = client.post("/v1/quote-requests", json=_payload())
    assert response.status_code == 201
    assert sms_adapter.sent == []


def test_sms_failure_does_not_fail_request(client, sms_adapter):
    sms_adapter.result = CommunicationResult(status="failed", error_code="twilio_status_500")
    response = client.post("/v1/quote-requests", json=_payload())
    assert response.status_code == 201
    assert len(sms_adapter.sent) == 1


def test_project_type_must_match_service(client, sms_adapter):
    response = client.post("/v1/quote-requests", json=_payload(project_type="installation"))
    assert response.status_code == 400
    body = response.json()
    assert body["title"] == "Project type not offered"
    assert body["detail"] == "Lawn Care & Maintenance supports Maintenance only"
    assert sms_adapter.sent == []


def test_out_of_range_inputs_are_rejected(client):
    response = client.post("/v1/quote-requests", json=_payload(hours=500))
    assert response.status_code == 400
    body = response.json()
    assert body["title"] == "Invalid quote inputs"
    assert body["errors"] == [{"field": "body", "message": "Hours must be between 0 and 200"}]


def test_invalid_email_is_validation_error(client):
    response = client.post("/v1/quote-requests", json=_payload(client_email="not-an-email"))
    assert response.status_code == 422
    assert any(error["field"] == "client_email" for error in response.json()["errors"])


def test_missing_client_name_is_validation_error(client):
    payload = _payload()
    payload.pop("client_name")
    response = client.post("/v1/quote-requests", json=payload)
    assert response.status_code == 422
