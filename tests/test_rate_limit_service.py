from dataclasses import replace

import pytest

from coursehub.errors import RateLimitedError
from coursehub.extensions import RATE_LIMIT_COUNTER_COLLECTION
from coursehub.services import rate_limit_service


def test_firestore_counter_allows_up_to_limit(app_ctx, db):
    for _ in range(3):
        assert rate_limit_service.check_rate_limit(app_ctx, 'verify_code:u1', 3, 600) == (True, 0)

    allowed, retry_after = rate_limit_service.check_rate_limit(app_ctx, 'verify_code:u1', 3, 600)

    assert allowed is False
    assert 1 <= retry_after <= 600
    assert db.count(RATE_LIMIT_COUNTER_COLLECTION) == 1


def test_firestore_window_rolls_over(app_ctx, clock):
    rate_limit_service.check_rate_limit(app_ctx, 'k', 1, 60)
    assert rate_limit_service.check_rate_limit(app_ctx, 'k', 1, 60)[0] is False

    clock.advance(60)

    assert rate_limit_service.check_rate_limit(app_ctx, 'k', 1, 60) == (True, 0)


def test_in_memory_fallback_when_firestore_disabled(app_ctx, db):
    app_ctx.config = replace(app_ctx.config, rate_limit_firestore_enabled=False)

    assert rate_limit_service.check_rate_limit(app_ctx, 'k', 1, 60) == (True, 0)
    allowed, retry_after = rate_limit_service.check_rate_limit(app_ctx, 'k', 1, 60)

    assert allowed is False
    assert retry_after == 60
    assert db.count(RATE_LIMIT_COUNTER_COLLECTION) == 0


def test_in_memory_fallback_when_firestore_fails(app_ctx, db):
    def _broken_transaction():
        raise RuntimeError('firestore offline')

    db.transaction = _broken_transaction

    assert rate_limit_service.check_rate_limit(app_ctx, 'k', 1, 60) == (True, 0)
    assert rate_limit_service.check_rate_limit(app_ctx, 'k', 1, 60)[0] is False
    assert app_ctx.rate_limit_events['k'] == [app_ctx.clock()]


def test_window_counter_id_is_stable_and_opaque():
    first = rate_limit_service.window_counter_id('verify_code:u1', 600, 1200)

    assert first == rate_limit_service.window_counter_id('verify_code:u1', 600, 1200)
    assert first != rate_limit_service.window_counter_id('verify_code:u2', 600, 1200)
    assert 'u1' not in first


def test_enforce_raises_with_retry_after(app_ctx):
    rate_limit_service.enforce_rate_limit(app_ctx, 'k', 1, 60, 'slow down')

    with pytest.raises(RateLimitedError) as exc_info:
        rate_limit_service.enforce_rate_limit(app_ctx, 'k', 1, 60, 'slow down')

    assert exc_info.value.message == 'slow down'
    assert exc_info.value.headers() == {'Retry-After': str(exc_info.value.retry_after)}
