from flask import Blueprint, request

from coursehub.extensions import get_app_context
from coursehub.services import payments_api_service
from coursehub.web import require_principal, success_response

payments_bp = Blueprint('payments_api', __name__)


@payments_bp.route('/api/courses/<course_id>/checkout', methods=['POST'])
@require_principal
def create_checkout_session(app_ctx, principal, course_id):
    session = payments_api_service.create_checkout_session(app_ctx, principal, course_id)
    return success_response('Checkout session created', session)


@payments_bp.route('/api/stripe-webhook', methods=['POST'])
def stripe_webhook():
    payments_api_service.stripe_webhook(get_app_context(), request)
    return '', 200
