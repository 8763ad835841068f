"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

import atexit

import redis  # type: ignore[import-untyped]
from flask import Flask
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from portal.infra.http.backend_client import PortalBackendClient
from portal.infra.payments.simulated_processor import SimulatedPaymentProcessor
from portal.infra.redis.redis_session_store import RedisSessionStore
from portal.infra.scheduling.threading_scheduler import ThreadingScheduler
from portal.services._shared.ports import InMemorySessionStore, SessionStore
from portal.services.onboarding.registry import FlowRegistry, SessionStoreFactory

REGISTRY_KEY = "onboarding_registry"
BACKEND_KEY = "portal_backend"

# Global singletons (import-safe)
redis_client: redis.Redis | None = None


def init_app(app: Flask) -> None:
    """Initialize Redis, the upstream client and the onboarding registry.

    Parameters
    ----------
    app: flask.Flask
        Application whose config supplies ``REDIS_URL``, ``PORTAL_API_URL``,
        ``PORTAL_HTTP_TIMEOUT`` and the onboarding timings.

    Raises
    ------
    RuntimeError
        When ``REDIS_URL`` is set but Redis does not answer.
    """
    global redis_client
    redis_url = app.config.get("REDIS_URL")
    if redis_url:
        redis_client = redis.Redis.from_url(redis_url)
        try:
            redis_client.ping()
        except RedisError as exc:
            raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
        app.extensions["redis_client"] = redis_client
    else:
        redis_client = None
        app.extensions.pop("redis_client", None)

    backend = PortalBackendClient(
        base_url=app.config["PORTAL_API_URL"],
        timeout=float(app.config.get("PORTAL_HTTP_TIMEOUT", 10.0)),
    )
    registry = FlowRegistry(
        backend=backend,
        scheduler=ThreadingScheduler(),
        processor=SimulatedPaymentProcessor(delay=float(app.config["PAYMENT_SETTLEMENT_DELAY"])),
        session_store_factory=session_store_factory(app),
        poll_interval=float(app.config["STATUS_POLL_INTERVAL"]),
        redirect_delay=float(app.config["DASHBOARD_REDIRECT_DELAY"]),
        support_email=app.config["SUPPORT_EMAIL"],
    )
    app.extensions[BACKEND_KEY] = backend
    app.extensions[REGISTRY_KEY] = registry
    atexit.register(registry.close_all)


def session_store_factory(app: Flask) -> SessionStoreFactory:
    """Build the per-session store factory: Redis when configured, else memory."""
    if redis_client is not None:
        r = redis_client
        ttl = int(app.config.get("SESSION_TTL_SECONDS", 1800))
        return lambda session_id: RedisSessionStore(r, session_id, ttl=ttl)

    stores: dict[str, SessionStore] = {}

    def in_memory(session_id: str) -> SessionStore:
        return stores.setdefault(session_id, InMemorySessionStore())

    return in_memory


def get_redis() -> redis.Redis:
    """Return the initialized Redis client."""
    if redis_client is None:
        raise RuntimeError("Redis client is not initialized. Call init_app() first.")
    return redis_client
