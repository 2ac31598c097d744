import base64

import pytest


def _auth_headers(username: str = "admin", password: str = "secret") -> dict[str, str]:
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


def test_invoice_totals_endpoint(client):
    response = client.post(
        "/v1/admin/invoices/totals",
        json={
            "items": [
                {"description": "Mulch", "quantity": 3, "unit_price": 12.5},
                {"description": "Labor", "quantity": 2.5, "unit_price": 45},
            ]
        },
        headers=_auth_headers(),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["totals"]["subtotal"] == 150
    assert body["totals"]["tax"] == pytest.approx(12.9)
    assert body["totals"]["total"] == pytest.approx(162.9)
    assert [line["total"] for line in body["items"]] == [37.5, 112.5]


def test_invoice_totals_requires_admin(client):
    response = client.post(
        "/v1/admin/invoices/totals",
        json={"items": [{"description": "Mulch", "quantity": 1, "unit_price": 1}]},
    )
    assert response.status_code == 401


def test_job_cost_endpoint(client):
    response = client.post(
        "/v1/admin/jobs/cost",
        json={"hours": 4, "sqft": 100, "visits": 2, "zone": "residential", "project_type": "maintenance"},
        headers=_auth_headers(),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["breakdown"]["subtotal"] == 430
    assert body["totals"]["tax"] == pytest.approx(36.98)
    assert body["totals"]["total"] == pytest.approx(466.98)


def test_job_cost_rejects_out_of_range_inputs(client):
    response = client.post(
        "/v1/admin/jobs/cost",
        json={"hours": 4, "sqft": 100, "visits": 0, "zone": "residential", "project_type": "maintenance"},
        headers=_auth_headers(),
    )
    assert response.status_code == 400
    assert response.json()["title"] == "Invalid job inputs"
