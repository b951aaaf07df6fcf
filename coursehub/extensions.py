"""Runtime services wiring for the app factory.

Every collaborator a handler needs (Firestore, Firebase auth, mail, Stripe)
lives on one `AppContext` stored in `app.extensions['coursehub']`, so tests
can hand the factory a context built from fakes.
"""

import json
import logging
import os
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable

import firebase_admin
import sentry_sdk
import stripe
from firebase_admin import auth, credentials, firestore
from flask import current_app
from flask_mail import Mail
from sentry_sdk.integrations.flask import FlaskIntegration

from .config import AppConfig
from .errors import ServiceUnavailableError
from .logging_config import get_logger

EXTENSION_KEY = 'coursehub'
RATE_LIMIT_COUNTER_COLLECTION = 'rate_limit_counters'


@dataclass
class AppContext:
    config: AppConfig
    db: Any
    firestore: Any
    auth: Any
    mailer: Any
    stripe: Any
    logger: logging.Logger
    clock: Callable[[], float] = time.time
    rate_limit_events: dict = field(default_factory=dict)
    rate_limit_lock: Any = field(default_factory=threading.Lock)
    sentry: Any = None

    def require_db(self):
        if self.db is None:
            raise ServiceUnavailableError('Database is not configured')
        return self.db


def init_firestore(config: AppConfig, logger):
    try:
        if os.path.exists('firebase-credentials.json'):
            cred = credentials.Certificate('firebase-credentials.json')
        else:
            if not config.firebase_credentials:
                raise ValueError("FIREBASE_CREDENTIALS is not set and firebase-credentials.json was not found.")
            cred = credentials.Certificate(json.loads(config.firebase_credentials))
        if not firebase_admin._apps:
            firebase_admin.initialize_app(cred)
        return firestore.client()
    except Exception as e:
        logger.warning(f"Firebase initialization skipped: {e}")
        return None


def init_mail(app, config: AppConfig):
    app.config['MAIL_SERVER'] = config.mail_server
    app.config['MAIL_PORT'] = config.mail_port
    app.config['MAIL_USE_TLS'] = config.mail_use_tls
    app.config['MAIL_USERNAME'] = config.mail_username or None
    app.config['MAIL_PASSWORD'] = config.mail_password or None
    app.config['MAIL_DEFAULT_SENDER'] = config.mail_default_sender
    return Mail(app)


def init_sentry(config: AppConfig):
    if not config.sentry_dsn:
        return None
    sentry_sdk.init(
        dsn=config.sentry_dsn,
        integrations=[FlaskIntegration()],
        traces_sample_rate=config.sentry_traces_sample_rate,
        send_default_pii=False,
        environment=config.sentry_environment,
        release=config.sentry_release,
    )
    return sentry_sdk


def build_app_context(app, config: AppConfig) -> AppContext:
    logger = get_logger()
    stripe.api_key = config.stripe_secret_key or None
    return AppContext(
        config=config,
        db=init_firestore(config, logger),
        firestore=firestore,
        auth=auth,
        mailer=init_mail(app, config),
        stripe=stripe,
        logger=logger,
        sentry=init_sentry(config),
    )


def init_extensions(app, app_ctx: AppContext) -> None:
    app.extensions[EXTENSION_KEY] = app_ctx


def get_app_context() -> AppContext:
    return current_app.extensions[EXTENSION_KEY]
