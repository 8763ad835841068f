"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from portal.api.deps import get_registry, json_response, timing
from portal.core import extensions

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Return application, session store and live-flow information."""

    redis_status = "disabled"
    if extensions.redis_client is not None:
        try:
            extensions.redis_client.ping()
            redis_status = "ok"
        except RedisError:  # pragma: no cover - depends on Redis availability
            current_app.logger.exception("healthcheck.redis_error")
            redis_status = "fail"
    version = current_app.config.get("APP_VERSION", "dev")
    payload = {
        "status": "ok",
        "redis": redis_status,
        "flows": len(get_registry()),
        "version": version,
    }
    return json_response(payload)
