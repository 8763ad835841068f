"""Integration tests for the onboarding endpoints."""

from __future__ import annotations

import responses

from tests.factories.onboarding import EmployerFormFactory, PaidEmployerFormFactory
from tests.helpers.assertions import assert_json_keys, assert_problem, notice_messages
from tests.helpers.http import API_URL, mock_products

FLOWS = "/api/v1/onboarding/flows"


def _open_flow(client, **body) -> dict:
    resp = client.post(FLOWS, json=body)
    assert resp.status_code == 201
    return resp.get_json()["data"]


def test_products_endpoint_uses_upstream(client) -> None:
    with responses.RequestsMock() as rsps:
        mock_products(rsps)
        resp = client.get("/api/v1/onboarding/products")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["data"][0]["ProductId"] == 5
    assert body["notices"] == []


def test_products_endpoint_degrades_to_empty(client) -> None:
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, f"{API_URL}/master/product/public", status=500)
        resp = client.get("/api/v1/onboarding/products")

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["data"] == []
    assert [n["level"] for n in body["notices"]] == ["error"]


def test_create_flow_loads_catalog(client, registry) -> None:
    data = _open_flow(client)

    assert_json_keys(data, {"flowId", "sessionId", "state", "products", "paymentState"})
    assert data["state"] == "form"
    assert data["step"] == "employer_form"
    assert [p["ProductId"] for p in data["products"]] == [5]


def test_pending_registration(client, registry, backend, scheduler) -> None:
    flow_id = _open_flow(client)["flowId"]
    backend.statuses = [{"Status": "pending"}, {"Status": "approved"}]

    resp = client.post(f"{FLOWS}/{flow_id}/registration", json=EmployerFormFactory())

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["state"] == "pending"
    assert data["route"] == "/employer/pending"
    assert data["empId"] == 101
    assert notice_messages(resp.get_json()) == [
        "Registration request submitted! Please wait for admin approval."
    ]

    scheduler.advance(60)
    scheduler.advance(60)

    data = client.get(f"{FLOWS}/{flow_id}").get_json()["data"]
    assert data["state"] == "approved"
    assert data["route"] == "/employer/dashboard"


def test_invalid_registration_is_422(client, registry, backend) -> None:
    flow_id = _open_flow(client)["flowId"]

    resp = client.post(f"{FLOWS}/{flow_id}/registration", json=EmployerFormFactory(MobileNo="1"))

    assert resp.status_code == 422
    body = resp.get_json()
    assert_problem(body, status=422, code="validation_error")
    assert "MobileNo" in body["details"]["errors"]
    assert backend.ops() == ["products"]


def test_paid_registration(client, registry, backend, scheduler) -> None:
    flow_id = _open_flow(client)["flowId"]

    resp = client.post(
        f"{FLOWS}/{flow_id}/registration",
        json=PaidEmployerFormFactory(ProductId=5, paymentMethod="upi"),
    )
    data = resp.get_json()["data"]
    assert data["state"] == "payment"
    assert data["paymentState"] == "form_open"
    assert data["paymentMethod"] == "upi"

    resp = client.post(f"{FLOWS}/{flow_id}/payment", json={"upiId": "acme@upi"})

    data = resp.get_json()["data"]
    assert resp.status_code == 200
    assert data["paymentState"] == "succeeded"
    assert data["state"] == "approved"
    assert "get-employer-status" not in backend.ops()
    assert backend.calls[-1][1]["paymentMethod"] == "upi"

    scheduler.advance(3)
    assert client.get(f"{FLOWS}/{flow_id}").get_json()["data"]["route"] == "/employer/dashboard"


def test_payment_validation_notice(client, registry, backend) -> None:
    flow_id = _open_flow(client)["flowId"]
    client.post(f"{FLOWS}/{flow_id}/registration", json=PaidEmployerFormFactory(ProductId=5))
    client.patch(f"{FLOWS}/{flow_id}/payment", json={"paymentMethod": "upi"})

    resp = client.post(f"{FLOWS}/{flow_id}/payment", json={})

    body = resp.get_json()
    assert body["data"]["paymentState"] == "form_open"
    assert notice_messages(body) == ["Please enter UPI ID"]
    assert "employer-register-paid" not in backend.ops()


def test_close_payment(client, registry) -> None:
    flow_id = _open_flow(client)["flowId"]
    client.post(f"{FLOWS}/{flow_id}/registration", json=PaidEmployerFormFactory(ProductId=5))

    resp = client.delete(f"{FLOWS}/{flow_id}/payment")

    data = resp.get_json()["data"]
    assert data["state"] == "form"
    assert data["paymentState"] == "idle"


def test_pay_outside_payment_state_is_409(client, registry) -> None:
    flow_id = _open_flow(client)["flowId"]

    resp = client.post(f"{FLOWS}/{flow_id}/payment", json={})

    assert_problem(resp.get_json(), status=409, code="conflict")


def test_resume_without_session_is_401(client, registry) -> None:
    resp = client.post(FLOWS, json={"resume": True})

    assert_problem(resp.get_json(), status=401, code="unauthorized")
    assert len(registry) == 0


def test_resume_pending_in_same_session(client, registry) -> None:
    first = _open_flow(client)
    client.post(f"{FLOWS}/{first['flowId']}/registration", json=EmployerFormFactory())
    client.delete(f"{FLOWS}/{first['flowId']}")

    data = _open_flow(client, sessionId=first["sessionId"], resume=True)

    assert data["state"] == "pending"
    assert data["route"] == "/employer/pending"


def test_closed_flow_is_404(client, registry) -> None:
    flow_id = _open_flow(client)["flowId"]

    assert client.delete(f"{FLOWS}/{flow_id}").status_code == 204
    resp = client.get(f"{FLOWS}/{flow_id}")

    assert_problem(resp.get_json(), status=404, code="not_found")


def test_logout(client, registry, session_stores) -> None:
    flow = _open_flow(client)
    client.post(f"{FLOWS}/{flow['flowId']}/registration", json=EmployerFormFactory())

    resp = client.post(f"{FLOWS}/{flow['flowId']}/logout")

    assert resp.get_json()["data"]["route"] == "/login"
    assert session_stores[flow["sessionId"]].read() is None
    assert len(registry) == 0
