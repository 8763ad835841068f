"""Client routes the onboarding flow navigates to."""

from __future__ import annotations

import logging
from typing import Final

from portal.services.session.dto import SessionUser

log = logging.getLogger(__name__)

LOGIN: Final[str] = "/login"
EMPLOYER_REGISTER: Final[str] = "/employer/register"
EMPLOYER_PENDING: Final[str] = "/employer/pending"
EMPLOYER_DASHBOARD: Final[str] = "/employer/dashboard"
ADMIN_DASHBOARD: Final[str] = "/dashboard"

ROLE_DASHBOARDS: Final[dict[str, str]] = {
    "SubAdmin": "/subadmin/dashboard",
    "Supervisor": "/supervisor/dashboard",
    "Agent": "/agent/dashboard",
    "OfficerMaster": "/officermaster/dashboard",
    "Admin": ADMIN_DASHBOARD,
    "SAdmin": ADMIN_DASHBOARD,
    "Citizen": "/citizen/dashboard",
}


def dashboard_route_for(user: SessionUser | None) -> str:
    """
    Resolve the landing route for a session user.

    Employers land on the status view while pending or rejected and on their
    dashboard otherwise. Unknown roles fall back to login.
    """
    if user is None:
        return LOGIN
    if user.role == "Employer":
        if user.status in {"pending", "rejected"}:
            return EMPLOYER_PENDING
        if user.status not in {"approved", "active"}:
            log.warning("Employer with unexpected status %r", user.status)
        return EMPLOYER_DASHBOARD
    route = ROLE_DASHBOARDS.get(user.role)
    if route is None:
        log.warning("Unknown role %r", user.role)
        return LOGIN
    return route


__all__ = [
    "ADMIN_DASHBOARD",
    "EMPLOYER_DASHBOARD",
    "EMPLOYER_PENDING",
    "EMPLOYER_REGISTER",
    "LOGIN",
    "dashboard_route_for",
]
