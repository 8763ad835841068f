"""Employer onboarding backend-for-frontend for the workforce portal."""

from __future__ import annotations

from portal.factory import create_app

__all__ = ["create_app"]
