"""
DTOs for the session context.

:class:`SessionUser` mirrors the subset of the upstream account cached on the
client at login/registration time. It may go stale relative to the upstream
status, which is why pending employers are polled.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, replace
from typing import Any

# Upstream numeric role codes.
ROLE_CODES: dict[int, str] = {
    1: "Admin",
    2: "Employer",
    3: "SubAdmin",
    4: "Supervisor",
    5: "Agent",
}


def normalize_role(raw: Any) -> str:
    """Map numeric role codes (``1``..``5``) to role names; pass names through."""
    if isinstance(raw, int) or (isinstance(raw, str) and raw.strip().isdigit()):
        return ROLE_CODES.get(int(raw), str(raw))
    return str(raw or "")


def normalize_status(raw: Any) -> str:
    """Map ``1``/``0`` to ``active``/``inactive``; default to ``active`` when unset."""
    if raw is None or raw == "":
        return "active"
    if str(raw) == "1":
        return "active"
    if str(raw) == "0":
        return "inactive"
    return str(raw).strip().lower()


@dataclass(frozen=True, slots=True)
class SessionUser:
    """
    Locally persisted identity record (``user`` in browser storage).

    :param user_id: Upstream user/employer id.
    :param role: Role name (``Employer``, ``Admin``, ...).
    :param name: Display name.
    :param status: Account status (``pending``, ``approved``, ``active``, ...).
    :param email_id: Contact email.
    :param rejection_reason: Reason when the account was rejected.
    :param company_name: Employer company name.
    """

    user_id: int | str
    role: str
    name: str
    status: str
    email_id: str | None = None
    rejection_reason: str | None = None
    company_name: str | None = None

    def with_status(self, status: str, *, rejection_reason: str | None = None) -> SessionUser:
        """Return a copy with a new status (whole-value replacement)."""
        return replace(self, status=status, rejection_reason=rejection_reason)

    def to_record(self) -> dict[str, Any]:
        """Serialize to the persisted record shape."""
        data = asdict(self)
        return {
            "UserId": data["user_id"],
            "Role": data["role"],
            "Name": data["name"],
            "Status": data["status"],
            "EmailId": data["email_id"],
            "RejectionReason": data["rejection_reason"],
            "CompanyName": data["company_name"],
        }

    @classmethod
    def from_record(cls, raw: Mapping[str, Any]) -> SessionUser:
        """
        Parse a persisted record or an upstream login payload.

        :raises ValueError: When no ``UserId``/``EmpId`` is present.
        """
        user_id = raw.get("UserId") or raw.get("EmpId")
        if user_id in (None, ""):
            raise ValueError("Session record without UserId")
        return cls(
            user_id=user_id,
            role=normalize_role(raw.get("Role")),
            name=str(raw.get("Name") or ""),
            status=normalize_status(raw.get("Status")),
            email_id=raw.get("EmailId"),
            rejection_reason=raw.get("RejectionReason"),
            company_name=raw.get("CompanyName") or raw.get("Name"),
        )


__all__ = ["ROLE_CODES", "SessionUser", "normalize_role", "normalize_status"]
