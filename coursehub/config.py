import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEV_ENV_NAMES = {'development', 'dev', 'local', 'test'}
TRUTHY = {'1', 'true', 'yes', 'on'}


def safe_int_env(source, name, default=0, minimum=1, maximum=100000):
    raw = str(source.get(name, str(default)) or '').strip()
    try:
        value = int(raw)
    except Exception:
        value = int(default)
    return min(max(value, minimum), maximum)


def safe_float_env(source, name, default=0.0):
    raw = str(source.get(name, str(default)) or '').strip()
    try:
        value = float(raw)
    except Exception:
        return default
    return min(max(value, 0.0), 1.0)


def _str_env(source, name, default=''):
    return (source.get(name, default) or default).strip()


@dataclass(frozen=True)
class AppConfig:
    """Central runtime config for the coursehub API."""

    flask_secret_key: str = ''
    firebase_credentials: str = ''
    log_level: str = 'INFO'
    runtime_env: str = 'development'
    sentry_dsn: str = ''
    sentry_environment: str = 'production'
    sentry_release: str = 'coursehub'
    sentry_traces_sample_rate: float = 0.0
    stripe_secret_key: str = ''
    stripe_webhook_secret: str = ''
    public_base_url: str = 'http://localhost:5000'
    mail_server: str = 'smtp.gmail.com'
    mail_port: int = 587
    mail_use_tls: bool = True
    mail_username: str = ''
    mail_password: str = ''
    mail_default_sender: str = 'no-reply@coursehub.local'
    verify_code_ttl_seconds: int = 600
    verify_code_max_attempts: int = 5
    verify_code_rate_limit_max_requests: int = 5
    verify_code_rate_limit_window_seconds: int = 600
    rate_limit_firestore_enabled: bool = True

    @property
    def is_dev_like(self):
        return self.runtime_env in DEV_ENV_NAMES

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'AppConfig':
        source = os.environ if env is None else env
        runtime_env = (
            source.get('SENTRY_ENVIRONMENT')
            or source.get('FLASK_ENV')
            or source.get('ENV')
            or ('production' if source.get('RENDER') else 'development')
        ).strip().lower()
        mail_username = _str_env(source, 'MAIL_USERNAME')
        return cls(
            flask_secret_key=_str_env(source, 'FLASK_SECRET_KEY'),
            firebase_credentials=_str_env(source, 'FIREBASE_CREDENTIALS'),
            log_level=(_str_env(source, 'LOG_LEVEL', 'INFO') or 'INFO').upper(),
            runtime_env=runtime_env,
            sentry_dsn=_str_env(source, 'SENTRY_DSN_BACKEND'),
            sentry_environment=_str_env(source, 'SENTRY_ENVIRONMENT', source.get('FLASK_ENV', 'production') or 'production'),
            sentry_release=_str_env(source, 'SENTRY_RELEASE', 'coursehub'),
            sentry_traces_sample_rate=safe_float_env(source, 'SENTRY_TRACES_SAMPLE_RATE', 0.0),
            stripe_secret_key=_str_env(source, 'STRIPE_SECRET_KEY'),
            stripe_webhook_secret=_str_env(source, 'STRIPE_WEBHOOK_SECRET'),
            public_base_url=_str_env(source, 'PUBLIC_BASE_URL', 'http://localhost:5000').rstrip('/'),
            mail_server=_str_env(source, 'MAIL_SERVER', 'smtp.gmail.com'),
            mail_port=safe_int_env(source, 'MAIL_PORT', 587, minimum=1, maximum=65535),
            mail_use_tls=_str_env(source, 'MAIL_USE_TLS', 'true').lower() in TRUTHY,
            mail_username=mail_username,
            mail_password=_str_env(source, 'MAIL_PASSWORD'),
            mail_default_sender=_str_env(source, 'MAIL_DEFAULT_SENDER') or mail_username or 'no-reply@coursehub.local',
            verify_code_ttl_seconds=safe_int_env(source, 'VERIFY_CODE_TTL_SECONDS', 600, minimum=60, maximum=86400),
            verify_code_max_attempts=safe_int_env(source, 'VERIFY_CODE_MAX_ATTEMPTS', 5, minimum=1, maximum=20),
            verify_code_rate_limit_max_requests=safe_int_env(source, 'VERIFY_CODE_RATE_LIMIT_MAX_REQUESTS', 5, minimum=1, maximum=100),
            verify_code_rate_limit_window_seconds=safe_int_env(source, 'VERIFY_CODE_RATE_LIMIT_WINDOW_SECONDS', 600, minimum=10, maximum=86400),
            rate_limit_firestore_enabled=_str_env(source, 'RATE_LIMIT_FIRESTORE_ENABLED', '1').lower() in TRUTHY,
        )


def load_config(env=None) -> AppConfig:
    config = AppConfig.from_env(env)
    if not config.is_dev_like and not config.flask_secret_key:
        raise RuntimeError('FLASK_SECRET_KEY must be set in non-development environments.')
    return config
