"""Verification codes that gate destructive actions.

A code is bound to (uid, reason, target id). Codes live in one Firestore
document per tuple, so issuing a new code overwrites, and therefore
invalidates, the previous one. Only a hash of the code is stored.

Confirmation runs in a transaction together with the protected action:
the code is marked consumed in the same commit that performs the action,
so a code can authorize at most one action.
"""

import hashlib
import hmac
import logging
import re
import secrets

from coursehub.domain import IssuedCode
from coursehub.errors import BadRequestError, ExpiredCodeError, InvalidCodeError, MailDeliveryError
from coursehub.logging_config import log_event
from coursehub.repositories import verify_codes_repo
from coursehub.services import mail_service, rate_limit_service

CODE_RE = re.compile(r'^\d{6}$')


def generate_code():
    return f"{secrets.randbelow(1000000):06d}"


def hash_code(code):
    return hashlib.sha256(str(code).encode('utf-8')).hexdigest()


def issue_verify_code(app_ctx, principal, reason, target_id, subject, code_factory=generate_code):
    """Store a fresh code for (principal, reason, target) and email it."""
    if not principal.email:
        raise BadRequestError('Your account has no email address to send the verification code to')

    config = app_ctx.config
    rate_limit_service.enforce_rate_limit(
        app_ctx,
        key=f"verify_code:{principal.uid}",
        limit=config.verify_code_rate_limit_max_requests,
        window_seconds=config.verify_code_rate_limit_window_seconds,
        message='Too many verification codes requested. Please wait before trying again.',
    )

    db = app_ctx.require_db()
    now_ts = app_ctx.clock()
    expires_at = now_ts + config.verify_code_ttl_seconds
    code = code_factory()
    verify_codes_repo.doc_ref(db, principal.uid, reason.value, target_id).set({
        'uid': principal.uid,
        'reason': reason.value,
        'target_id': target_id,
        'code_hash': hash_code(code),
        'attempts': 0,
        'created_at': now_ts,
        'expires_at': expires_at,
        'consumed_at': None,
    })

    try:
        mail_service.send_verify_code_email(app_ctx, principal, subject, code)
    except Exception as e:
        app_ctx.logger.error(f"Verification email to user {principal.uid} failed: {e}")
        verify_codes_repo.delete_doc(db, principal.uid, reason.value, target_id)
        raise MailDeliveryError() from e

    log_event(app_ctx.logger, logging.INFO, 'verify_code_issued', uid=principal.uid, reason=reason.value, target_id=target_id, expires_at=expires_at)
    return IssuedCode(reason=reason, target_id=target_id, expires_at=expires_at)


def confirm_verify_code(app_ctx, principal, reason, target_id, code, on_confirmed):
    """Consume a matching code and run `on_confirmed(txn)` in the same transaction.

    `on_confirmed` must do all of its reads before its first write.
    Returns whatever `on_confirmed` returns.
    """
    code = str(code or '').strip()
    if not CODE_RE.match(code):
        raise InvalidCodeError('Verification code must be exactly 6 digits.')

    db = app_ctx.require_db()
    now_ts = app_ctx.clock()
    max_attempts = app_ctx.config.verify_code_max_attempts
    code_ref = verify_codes_repo.doc_ref(db, principal.uid, reason.value, target_id)
    transaction = db.transaction()

    @app_ctx.firestore.transactional
    def _txn(txn):
        snapshot = code_ref.get(transaction=txn)
        if not snapshot.exists:
            return 'missing', None
        data = snapshot.to_dict() or {}
        if data.get('consumed_at'):
            return 'consumed', None
        if (
            data.get('uid') != principal.uid
            or data.get('reason') != reason.value
            or data.get('target_id') != target_id
        ):
            return 'mismatch', None
        if float(data.get('expires_at', 0) or 0) <= now_ts:
            txn.delete(code_ref)
            return 'expired', None
        attempts = int(data.get('attempts', 0) or 0)
        if attempts >= max_attempts:
            txn.delete(code_ref)
            return 'locked', None
        if not hmac.compare_digest(str(data.get('code_hash', '')), hash_code(code)):
            txn.update(code_ref, {'attempts': attempts + 1})
            return 'invalid', None
        result = on_confirmed(txn)
        txn.update(code_ref, {'consumed_at': now_ts})
        return 'confirmed', result

    status, result = _txn(transaction)
    log_event(app_ctx.logger, logging.INFO, 'verify_code_checked', uid=principal.uid, reason=reason.value, target_id=target_id, status=status)

    if status == 'expired':
        raise ExpiredCodeError()
    if status == 'locked':
        raise InvalidCodeError('Too many invalid attempts. Please request a new code.')
    if status == 'missing' or status == 'consumed':
        raise InvalidCodeError('No pending verification code. Please request a new code.')
    if status != 'confirmed':
        raise InvalidCodeError()
    return result
