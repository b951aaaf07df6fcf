import pytest

from coursehub.config import AppConfig, load_config


def test_load_config_requires_secret_key_in_non_dev(monkeypatch):
    monkeypatch.setenv("RENDER", "true")
    monkeypatch.delenv("FLASK_ENV", raising=False)
    monkeypatch.delenv("SENTRY_ENVIRONMENT", raising=False)
    monkeypatch.delenv("ENV", raising=False)
    monkeypatch.delenv("FLASK_SECRET_KEY", raising=False)

    with pytest.raises(RuntimeError):
        load_config()


def test_load_config_allows_missing_secret_in_dev(monkeypatch):
    monkeypatch.delenv("RENDER", raising=False)
    monkeypatch.delenv("SENTRY_ENVIRONMENT", raising=False)
    monkeypatch.setenv("FLASK_ENV", "development")
    monkeypatch.delenv("FLASK_SECRET_KEY", raising=False)

    cfg = load_config()
    assert cfg.flask_secret_key == ""


def test_verify_code_settings_are_clamped():
    cfg = AppConfig.from_env({
        "VERIFY_CODE_TTL_SECONDS": "5",
        "VERIFY_CODE_MAX_ATTEMPTS": "not-a-number",
        "VERIFY_CODE_RATE_LIMIT_MAX_REQUESTS": "100000",
    })

    assert cfg.verify_code_ttl_seconds == 60
    assert cfg.verify_code_max_attempts == 5
    assert cfg.verify_code_rate_limit_max_requests == 100


def test_defaults_match_documented_values():
    cfg = AppConfig.from_env({})

    assert cfg.runtime_env == "development"
    assert cfg.verify_code_ttl_seconds == 600
    assert cfg.verify_code_max_attempts == 5
    assert cfg.rate_limit_firestore_enabled is True
    assert cfg.mail_use_tls is True


def test_mail_sender_falls_back_to_username():
    cfg = AppConfig.from_env({"MAIL_USERNAME": "bot@coursehub.test", "PUBLIC_BASE_URL": "https://coursehub.test/"})

    assert cfg.mail_default_sender == "bot@coursehub.test"
    assert cfg.public_base_url == "https://coursehub.test"
