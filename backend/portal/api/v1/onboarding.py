"""Employer onboarding endpoints backing the registration screens."""

from __future__ import annotations

from flask import Blueprint

from portal.api.deps import (
    get_backend,
    get_registry,
    json_body,
    json_response,
    service_errors,
    timing,
)
from portal.schemas import (
    FlowCreateSchema,
    FlowSnapshotSchema,
    NoticeSchema,
    PaymentRequestSchema,
    ProductSchema,
)
from portal.services._shared.errors import SessionRequiredError
from portal.services._shared.ports import CollectingNotifier
from portal.services.catalog.service import ProductCatalogService
from portal.services.onboarding.registry import FlowEntry
from portal.services.payment.dto import PaymentMethod

bp = Blueprint("onboarding", __name__)

flow_create_schema = FlowCreateSchema()
payment_schema = PaymentRequestSchema()
product_schema = ProductSchema(many=True)
notice_schema = NoticeSchema(many=True)
snapshot_schema = FlowSnapshotSchema()


def _snapshot_body(entry: FlowEntry) -> dict:
    body = snapshot_schema.dump(entry.snapshot())
    body["sessionId"] = entry.session_id
    return {"data": body}


@bp.get("/products")
@timing
def list_products():
    """Return the public product catalog; an upstream failure yields ``[]``."""

    notifier = CollectingNotifier()
    products = ProductCatalogService(get_backend(), notifier).products_or_empty()
    return json_response(
        {"data": product_schema.dump(products), "notices": notice_schema.dump(notifier.drain())}
    )


@bp.post("/flows")
@timing
@service_errors
def create_flow():
    """Open a registration flow, or resume the pending-status view when ``resume`` is set."""

    data = flow_create_schema.load(json_body())
    registry = get_registry()
    entry = registry.create(session_id=data["session_id"])
    try:
        if data["resume"]:
            entry.flow.resume_pending()
        else:
            entry.flow.load_catalog()
    except SessionRequiredError:
        registry.close(entry.flow_id)
        raise
    return json_response(_snapshot_body(entry), status=201)


@bp.get("/flows/<flow_id>")
@timing
@service_errors
def get_flow(flow_id: str):
    """Return the flow snapshot (the pending-status view refreshes with this)."""

    return json_response(_snapshot_body(get_registry().get(flow_id)))


@bp.post("/flows/<flow_id>/registration")
@timing
@service_errors
def submit_registration(flow_id: str):
    """Submit the registration form and take the pending or pay-now branch."""

    entry = get_registry().get(flow_id)
    form = json_body()
    raw_method = form.get("paymentMethod") or PaymentMethod.CREDIT_CARD.value
    try:
        method = PaymentMethod(raw_method)
    except ValueError:
        method = PaymentMethod.CREDIT_CARD
    entry.flow.submit(form, method=method)
    return json_response(_snapshot_body(entry))


@bp.patch("/flows/<flow_id>/payment")
@timing
@service_errors
def update_payment(flow_id: str):
    """Change the payment method or the typed payment details."""

    entry = get_registry().get(flow_id)
    data = payment_schema.load(json_body())
    if data["method"] is not None:
        entry.flow.select_payment_method(data["method"])
    if data["details"]:
        entry.flow.update_payment_details(**data["details"])
    return json_response(_snapshot_body(entry))


@bp.post("/flows/<flow_id>/payment")
@timing
@service_errors
def pay(flow_id: str):
    """Apply the submitted payment form and settle it."""

    entry = get_registry().get(flow_id)
    data = payment_schema.load(json_body())
    if data["method"] is not None:
        entry.flow.select_payment_method(data["method"])
    if data["details"]:
        entry.flow.update_payment_details(**data["details"])
    entry.flow.pay()
    return json_response(_snapshot_body(entry))


@bp.delete("/flows/<flow_id>/payment")
@timing
@service_errors
def close_payment(flow_id: str):
    """Close the payment modal, cancelling any settlement in flight."""

    entry = get_registry().get(flow_id)
    entry.flow.close_payment()
    return json_response(_snapshot_body(entry))


@bp.post("/flows/<flow_id>/logout")
@timing
@service_errors
def logout(flow_id: str):
    """Clear the session user and close the flow."""

    registry = get_registry()
    entry = registry.get(flow_id)
    entry.flow.logout()
    body = _snapshot_body(entry)
    registry.close(flow_id)
    return json_response(body)


@bp.delete("/flows/<flow_id>")
@timing
@service_errors
def close_flow(flow_id: str):
    """Abandon the flow: stops polling and pending redirects."""

    get_registry().close(flow_id)
    return "", 204
