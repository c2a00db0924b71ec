"""Application factory wiring Flask extensions and core collaborators."""

from __future__ import annotations

from flask import Flask

from shortlink.core.config import BaseConfig, get_config
from shortlink.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :param config: Config object, class or import string; ``APP_ENV`` decides when omitted.
    :param instance_relative_config: Load overrides from the instance folder.
    :param instance_config_filename: Instance file with overrides.
    :returns: Configured application. Routes are mounted by the host.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from shortlink.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from shortlink.core import components

    components.init_app(app)

    from shortlink.core import errors

    errors.init_app(app)

    return app
