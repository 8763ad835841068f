"""Employer registration form schema."""

from __future__ import annotations

import re
from datetime import date
from typing import Any

from marshmallow import (
    EXCLUDE,
    Schema,
    ValidationError,
    fields,
    post_load,
    pre_load,
    validate,
    validates_schema,
)

from portal.services.registration.dto import RegistrationDraft

MOBILE_PATTERN = re.compile(r"^[6-9]\d{9}$")
AADHAR_PATTERN = re.compile(r"^\d{12}$")
MIN_ESTABLISHED_YEAR = 1900
EMPLOYEE_RANGES = ("1-50", "51-200", "201-500", "501+")
LICENSE_OPTIONS = (50, 100, 200, 300, 500)

_TEXT_FIELDS = ("Name", "CompanyName", "MobileNo", "EmailId", "AadharNo", "Ticket", "employeeRange")


def _not_blank(message: str):
    def validator(value: str) -> None:
        if not value or not value.strip():
            raise ValidationError(message)

    return validator


def _required(message: str) -> dict[str, str]:
    return {"required": message, "null": message}


class EmployerRegistrationSchema(Schema):
    """
    Input payload for employer self-registration.

    Field names follow the form (``Name``, ``MobileNo``, ...). ``ProductId`` is
    only mandatory when the user chose to pay for instant approval.
    """

    class Meta:
        unknown = EXCLUDE

    name = fields.String(
        data_key="Name",
        required=True,
        error_messages=_required("Company name is required"),
        validate=_not_blank("Company name is required"),
    )
    company_name = fields.String(data_key="CompanyName", load_default=None, allow_none=True)
    mobile_no = fields.String(
        data_key="MobileNo",
        required=True,
        error_messages=_required("Mobile number is required"),
        validate=validate.Regexp(MOBILE_PATTERN, error="Invalid mobile number"),
    )
    email_id = fields.Email(
        data_key="EmailId",
        required=True,
        error_messages={**_required("Email is required"), "invalid": "Invalid email"},
    )
    aadhar_no = fields.String(
        data_key="AadharNo",
        required=True,
        error_messages=_required("Aadhaar number is required"),
        validate=validate.Regexp(AADHAR_PATTERN, error="Invalid Aadhaar number"),
    )
    password = fields.String(
        data_key="Password",
        required=True,
        load_only=True,
        error_messages=_required("Password is required"),
        validate=validate.Length(min=6, error="Password must be at least 6 characters"),
    )
    ticket = fields.String(
        data_key="Ticket",
        required=True,
        error_messages=_required("Ticket is required"),
        validate=_not_blank("Ticket is required"),
    )
    product_id = fields.Integer(
        data_key="ProductId",
        load_default=None,
        allow_none=True,
        error_messages={"invalid": "Product selection is required"},
    )
    licenses = fields.Integer(
        data_key="licenses",
        load_default=None,
        allow_none=True,
        validate=validate.OneOf(LICENSE_OPTIONS, error="Invalid number of licenses"),
    )
    is_paying = fields.Boolean(data_key="isPaying", load_default=False)
    established_year = fields.Integer(
        data_key="establishedYear",
        load_default=None,
        allow_none=True,
        validate=validate.Range(min=MIN_ESTABLISHED_YEAR, error="Too old"),
        error_messages={"invalid": "Invalid year"},
    )
    employee_range = fields.String(
        data_key="employeeRange",
        load_default=None,
        allow_none=True,
        validate=validate.OneOf(EMPLOYEE_RANGES, error="Invalid employee range"),
    )

    @pre_load
    def _strip_and_blank_to_none(self, data: Any, **kwargs: Any) -> Any:
        """Trim text inputs; empty optional selects arrive as ``""`` from the form."""
        if not isinstance(data, dict):
            return data
        cleaned = dict(data)
        for key in _TEXT_FIELDS:
            if isinstance(cleaned.get(key), str):
                cleaned[key] = cleaned[key].strip()
        for key in ("CompanyName", "ProductId", "licenses", "establishedYear", "employeeRange"):
            if cleaned.get(key) == "":
                cleaned[key] = None
        return cleaned

    @validates_schema(skip_on_field_errors=False)
    def _check_cross_field_rules(self, data: dict[str, Any], **kwargs: Any) -> None:
        errors: dict[str, list[str]] = {}
        if data.get("is_paying") and data.get("product_id") is None:
            errors["ProductId"] = ["Product selection is required"]
        year = data.get("established_year")
        if year is not None and year > date.today().year:
            errors["establishedYear"] = ["Future year not allowed"]
        if errors:
            raise ValidationError(errors)

    @post_load
    def _make_draft(self, data: dict[str, Any], **kwargs: Any) -> RegistrationDraft:
        return RegistrationDraft(
            name=data["name"],
            company_name=data.get("company_name") or data["name"],
            mobile_no=data["mobile_no"],
            email_id=data["email_id"],
            aadhar_no=data["aadhar_no"],
            password=data["password"],
            ticket=data["ticket"],
            product_id=data.get("product_id"),
            licenses=data.get("licenses"),
            is_paying=bool(data.get("is_paying")),
            established_year=data.get("established_year"),
            employee_range=data.get("employee_range"),
        )


__all__ = ["EmployerRegistrationSchema", "EMPLOYEE_RANGES", "LICENSE_OPTIONS"]
