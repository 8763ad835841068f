"""Onboarding flow request and response schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, validate

from portal.services.payment.dto import PaymentMethod

_METHODS = [m.value for m in PaymentMethod]


class FlowCreateSchema(Schema):
    """Input payload for opening an onboarding flow."""

    class Meta:
        unknown = EXCLUDE

    session_id = fields.String(data_key="sessionId", load_default=None, allow_none=True)
    resume = fields.Boolean(load_default=False)


class PaymentRequestSchema(Schema):
    """
    Payment modal input: the selected method and the typed details.

    Blank details are allowed here; the payment step itself decides which
    fields the chosen method needs.
    """

    class Meta:
        unknown = EXCLUDE

    method = fields.String(
        data_key="paymentMethod",
        load_default=None,
        allow_none=True,
        validate=validate.OneOf(_METHODS),
    )
    card_number = fields.String(data_key="cardNumber", load_default=None)
    card_name = fields.String(data_key="cardName", load_default=None)
    expiry_date = fields.String(data_key="expiryDate", load_default=None)
    cvv = fields.String(load_default=None)
    upi_id = fields.String(data_key="upiId", load_default=None)

    @post_load
    def to_request(self, data: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        method = data.pop("method")
        details = {k: v.strip() for k, v in data.items() if v is not None}
        return {"method": PaymentMethod(method) if method else None, "details": details}


class ProductSchema(Schema):
    """Catalog entry as shown on the registration form."""

    product_id = fields.Integer(data_key="ProductId")
    name = fields.String(data_key="Name")
    description = fields.String(data_key="Description")
    price_per_user_monthly = fields.Float(data_key="PricePerUserMonthly")
    is_active = fields.Boolean(data_key="IsActive")


class NoticeSchema(Schema):
    level = fields.String()
    message = fields.String()


class FlowSnapshotSchema(Schema):
    """Response payload describing where an onboarding flow stands."""

    flow_id = fields.String(data_key="flowId")
    state = fields.Function(lambda s: s.state.value)
    step = fields.Function(lambda s: s.step.value)
    route = fields.String(allow_none=True)
    products = fields.List(fields.Nested(ProductSchema))
    payment_state = fields.Function(lambda s: s.payment_state.value, data_key="paymentState")
    payment_method = fields.Function(lambda s: s.payment_method.value, data_key="paymentMethod")
    emp_id = fields.Raw(data_key="empId", allow_none=True)
    account_status = fields.String(data_key="accountStatus", allow_none=True)
    rejection_reason = fields.String(data_key="rejectionReason", allow_none=True)
    support_email = fields.String(data_key="supportEmail", allow_none=True)
    errors = fields.Dict(keys=fields.String(), values=fields.List(fields.String()))
    notices = fields.List(fields.Nested(NoticeSchema))
