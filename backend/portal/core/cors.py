"""Cross-origin access for the portal UI."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def _origins(raw: str) -> list[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


def init_app(app: Flask) -> None:
    """Let the portal UI call the onboarding API from its own origin.

    Parameters
    ----------
    app: flask.Flask
        Application whose ``CORS_ORIGINS`` lists the UI origins. A blank value
        or ``"*"`` opens the API to any origin, without credentials.

    ``X-Request-ID`` is exposed to the UI.
    """
    origins = _origins(app.config.get("CORS_ORIGINS", ""))
    open_to_all = not origins or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if open_to_all else origins}},
        supports_credentials=not open_to_all,
        expose_headers=["X-Request-ID"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
