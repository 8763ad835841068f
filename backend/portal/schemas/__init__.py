"""Convenience exports for application schemas."""

from __future__ import annotations

from .onboarding import (
    FlowCreateSchema,
    FlowSnapshotSchema,
    NoticeSchema,
    PaymentRequestSchema,
    ProductSchema,
)
from .registration import EmployerRegistrationSchema

__all__ = [
    "EmployerRegistrationSchema",
    "FlowCreateSchema",
    "FlowSnapshotSchema",
    "NoticeSchema",
    "PaymentRequestSchema",
    "ProductSchema",
]
