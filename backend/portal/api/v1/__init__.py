"""Version 1 of the onboarding API."""

from __future__ import annotations

from flask import Blueprint

API_VERSION = "v1"

from .health import bp as health_bp  # noqa: E402
from .onboarding import bp as onboarding_bp  # noqa: E402

REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),
    (onboarding_bp, "/onboarding"),
]
