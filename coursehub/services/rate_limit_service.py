"""Rate limiting helpers with Firestore-first fallback strategy."""

import hashlib

from coursehub.errors import RateLimitedError
from coursehub.extensions import RATE_LIMIT_COUNTER_COLLECTION
from coursehub.repositories import rate_limit_repo


def window_counter_id(key, window_seconds, window_start):
    raw = f"{key}|{window_seconds}|{int(window_start)}".encode('utf-8')
    return hashlib.sha256(raw).hexdigest()


def check_rate_limit_firestore(app_ctx, key, limit, window_seconds, now_ts):
    if not app_ctx.config.rate_limit_firestore_enabled or app_ctx.db is None:
        return None
    db = app_ctx.db
    try:
        window_start = int(now_ts // window_seconds) * int(window_seconds)
        retry_after = max(1, int((window_start + window_seconds) - now_ts))
        counter_id = window_counter_id(key, window_seconds, window_start)
        counter_ref = rate_limit_repo.counter_doc_ref(db, RATE_LIMIT_COUNTER_COLLECTION, counter_id)
        transaction = db.transaction()

        @app_ctx.firestore.transactional
        def _txn(txn):
            snapshot = counter_ref.get(transaction=txn)
            count = 0
            if snapshot.exists:
                count = int((snapshot.to_dict() or {}).get('count', 0) or 0)
            if count >= limit:
                return False, retry_after
            txn.set(counter_ref, {
                'key': key,
                'count': count + 1,
                'window_start': window_start,
                'window_seconds': int(window_seconds),
                'updated_at': now_ts,
                'expires_at': window_start + (window_seconds * 3),
            }, merge=True)
            return True, 0

        return _txn(transaction)
    except Exception as e:
        app_ctx.logger.warning(f"Firestore rate limit unavailable, using in-memory counters: {e}")
        return None


def check_rate_limit(app_ctx, key, limit, window_seconds):
    now_ts = app_ctx.clock()
    firestore_result = check_rate_limit_firestore(app_ctx, key, limit, window_seconds, now_ts)
    if firestore_result is not None:
        return firestore_result

    with app_ctx.rate_limit_lock:
        timestamps = app_ctx.rate_limit_events.get(key, [])
        cutoff = now_ts - window_seconds
        kept = [ts for ts in timestamps if ts >= cutoff]
        if len(kept) >= limit:
            oldest = kept[0]
            retry_after = max(1, int((oldest + window_seconds) - now_ts))
            app_ctx.rate_limit_events[key] = kept
            return False, retry_after
        kept.append(now_ts)
        app_ctx.rate_limit_events[key] = kept

    return True, 0


def enforce_rate_limit(app_ctx, key, limit, window_seconds, message):
    allowed, retry_after = check_rate_limit(app_ctx, key, limit, window_seconds)
    if not allowed:
        app_ctx.logger.info(f"Rate limit hit for {key.split(':', 1)[0]} (retry after {retry_after}s)")
        raise RateLimitedError(message, retry_after=retry_after)
