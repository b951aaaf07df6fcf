"""Business logic handlers for payment APIs."""

import logging

from coursehub.domain import PrincipalRole
from coursehub.errors import AppError, BadRequestError, ConflictError, NotAllowedError, NotFoundError
from coursehub.logging_config import log_event
from coursehub.repositories import courses_repo, enrollments_repo, purchases_repo, users_repo
from coursehub.repositories.query_utils import snapshot_to_dict


def create_checkout_session(app_ctx, principal, course_id):
    if principal.role is not PrincipalRole.LEARNER:
        raise NotAllowedError('Only learners can purchase courses')
    db = app_ctx.require_db()
    course_snapshot = courses_repo.get_doc(db, course_id)
    if not course_snapshot.exists:
        raise NotFoundError('Course not found')
    course = course_snapshot.to_dict() or {}
    price_cents = int(course.get('price_cents', 0) or 0)
    if price_cents <= 0:
        raise BadRequestError('This course is not available for purchase')
    if enrollments_repo.exists(db, principal.uid, course_id):
        raise ConflictError('You are already enrolled in this course')

    base_url = app_ctx.config.public_base_url
    try:
        checkout_session = app_ctx.stripe.checkout.Session.create(
            payment_method_types=['card'],
            line_items=[{
                'price_data': {
                    'currency': course.get('currency', 'eur') or 'eur',
                    'product_data': {
                        'name': str(course.get('title', 'Course') or 'Course')[:120],
                    },
                    'unit_amount': price_cents,
                },
                'quantity': 1,
            }],
            mode='payment',
            success_url=f"{base_url}/courses/{course_id}?payment=success&session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{base_url}/courses/{course_id}?payment=cancelled",
            customer_email=principal.email or None,
            metadata={
                'uid': principal.uid,
                'course_id': course_id,
            },
        )
    except Exception as e:
        app_ctx.logger.error(f"Stripe checkout error: {e}")
        raise AppError('Could not create checkout session. Please try again.') from e
    return {'checkout_url': checkout_session.url, 'session_id': checkout_session.id}


def process_checkout_session_enrollment(app_ctx, stripe_session):
    """Enroll the paying learner. Returns (ok, status); replays are no-ops."""
    metadata = stripe_session.get('metadata', {}) or {}
    uid = str(metadata.get('uid', '') or '').strip()
    course_id = str(metadata.get('course_id', '') or '').strip()
    stripe_session_id = str(stripe_session.get('id', '') or '').strip()
    payment_status = (stripe_session.get('payment_status') or '').lower()
    session_status = (stripe_session.get('status') or '').lower()

    if not uid or not course_id or not stripe_session_id:
        return False, 'Missing checkout metadata.'
    if payment_status != 'paid' and session_status != 'complete':
        return False, 'Checkout session is not paid yet.'

    db = app_ctx.require_db()
    now_ts = app_ctx.clock()
    purchase_ref = purchases_repo.doc_ref(db, stripe_session_id)
    course_ref = courses_repo.doc_ref(db, course_id)
    enrollment_ref = enrollments_repo.doc_ref(db, uid, course_id)
    user_ref = users_repo.doc_ref(db, uid)
    transaction = db.transaction()

    @app_ctx.firestore.transactional
    def _txn(txn):
        if purchase_ref.get(transaction=txn).exists:
            return True, 'already_processed'
        course_snapshot = course_ref.get(transaction=txn)
        if not course_snapshot.exists:
            return False, 'Unknown course.'
        course = course_snapshot.to_dict() or {}
        user_snapshot = user_ref.get(transaction=txn)
        user = snapshot_to_dict(user_snapshot)
        if user is None or PrincipalRole.from_raw(user.get('role')) is not PrincipalRole.LEARNER:
            return False, 'Unknown learner.'
        enrollment_snapshot = enrollment_ref.get(transaction=txn)
        txn.set(purchase_ref, {
            'uid': uid,
            'course_id': course_id,
            'stripe_session_id': stripe_session_id,
            'price_cents': int(stripe_session.get('amount_total') or course.get('price_cents', 0) or 0),
            'currency': stripe_session.get('currency') or course.get('currency', 'eur'),
            'created_at': now_ts,
        })
        if not enrollment_snapshot.exists:
            txn.set(enrollment_ref, {
                'uid': uid,
                'course_id': course_id,
                'source': 'stripe',
                'stripe_session_id': stripe_session_id,
                'created_at': now_ts,
            })
        return True, 'granted'

    return _txn(transaction)


def handle_stripe_event(app_ctx, event):
    event_type = event.get('type', '')
    if event_type == 'checkout.session.completed':
        session = event['data']['object']
        ok, status = process_checkout_session_enrollment(app_ctx, session)
        metadata = session.get('metadata', {}) or {}
        if ok and status == 'granted':
            log_event(app_ctx.logger, logging.INFO, 'course_purchase_granted', uid=metadata.get('uid', ''), course_id=metadata.get('course_id', ''), session_id=session.get('id', ''))
        elif ok and status == 'already_processed':
            app_ctx.logger.info(f"Checkout session {session.get('id', '')} already processed.")
        else:
            app_ctx.logger.warning(f"Webhook checkout session {session.get('id', '')} not processed: {status}")
        return status
    app_ctx.logger.info(f"Stripe webhook: ignoring event type {event_type!r}")
    return 'ignored'


def stripe_webhook(app_ctx, request):
    payload = request.get_data()
    sig_header = request.headers.get('Stripe-Signature', '')
    if not sig_header:
        raise BadRequestError('Missing Stripe signature')

    webhook_secret = app_ctx.config.stripe_webhook_secret
    if not webhook_secret:
        app_ctx.logger.warning("Stripe webhook rejected: STRIPE_WEBHOOK_SECRET is not configured")
        raise AppError('Webhook not configured')

    try:
        event = app_ctx.stripe.Webhook.construct_event(payload, sig_header, webhook_secret)
    except ValueError as e:
        app_ctx.logger.warning("Stripe webhook: Invalid payload")
        raise BadRequestError('Webhook Error: invalid payload') from e
    except app_ctx.stripe.SignatureVerificationError as e:
        app_ctx.logger.warning(f"Stripe webhook signature verification failed: {e}")
        raise BadRequestError(f'Webhook Error: {e}') from e

    try:
        return handle_stripe_event(app_ctx, event)
    except Exception:
        app_ctx.logger.error(f"Error in stripe webhook handling event {event.get('id', '')}")
        raise
