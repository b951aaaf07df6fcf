import os

from flask import Flask

from .config import load_config
from .errors import register_error_handlers
from .extensions import build_app_context, init_extensions
from .logging_config import configure_logging
from .web import register_request_hooks


def create_app(config=None, app_ctx=None):
    """App factory entrypoint.

    Pass `app_ctx` to run against prepared collaborators (tests do this);
    otherwise Firestore, Flask-Mail, Stripe and Sentry are wired from config.
    """
    config = config or load_config()
    configure_logging(config.log_level)

    app = Flask(__name__)
    app.secret_key = config.flask_secret_key or os.urandom(32).hex()
    if app_ctx is None:
        app_ctx = build_app_context(app, config)
    init_extensions(app, app_ctx)
    register_error_handlers(app)
    register_request_hooks(app)

    from .blueprints import ALL_BLUEPRINTS

    for blueprint in ALL_BLUEPRINTS:
        app.register_blueprint(blueprint)
    return app
