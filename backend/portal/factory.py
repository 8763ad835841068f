"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from portal.core.config import BaseConfig, get_config
from portal.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    ``config`` may be a config class/object or one of the ``APP_ENV`` names
    (``"development"``, ``"testing"``, ``"production"``).
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    if isinstance(config, str):
        from portal.core.config import CONFIG_MAP

        config = CONFIG_MAP[config]
    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from portal.core import proxy

    proxy.init_app(app)

    from portal.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from portal.core import cors

    cors.init_app(app)

    from portal.api import init_app as init_api

    init_api(app)

    from portal.core import errors

    errors.init_app(app)

    return app
