# comments in English; reST docstrings
from __future__ import annotations

import json
import logging

import redis  # type: ignore[import-untyped]

from portal.services._shared.ports import SessionStore
from portal.services.session.dto import SessionUser

log = logging.getLogger(__name__)


class RedisSessionStore(SessionStore):
    """
    Redis-backed ``user`` record for one client session.

    The record is stored whole as JSON under ``portal:user:{session_id}`` and
    expires ``ttl`` seconds after the last write.

    :param r: A Redis client (already connected).
    :param session_id: Client session the record belongs to.
    :param ttl: Lifetime in seconds.
    """

    def __init__(self, r: redis.Redis, session_id: str, *, ttl: int = 1800):
        self.r = r
        self.session_id = session_id
        self.ttl = ttl

    @property
    def key(self) -> str:
        return f"portal:user:{self.session_id}"

    def read(self) -> SessionUser | None:
        raw = self.r.get(self.key)
        if not raw:
            return None
        try:
            return SessionUser.from_record(json.loads(raw))
        except (ValueError, AttributeError):
            # unreadable record counts as logged out
            log.warning("session.corrupt_record", extra={"endpoint": self.key})
            self.r.delete(self.key)
            return None

    def write(self, user: SessionUser) -> None:
        self.r.set(self.key, json.dumps(user.to_record()), ex=max(1, self.ttl))

    def clear(self) -> None:
        self.r.delete(self.key)
