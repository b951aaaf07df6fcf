"""Request plumbing shared by all blueprints."""

import uuid
from functools import wraps

from flask import g, jsonify, request

from .errors import BadRequestError, UnauthorizedError
from .extensions import get_app_context
from .services import auth_service


def success_response(message, data=None, status_code=200):
    return jsonify({'status': True, 'message': message, 'data': data}), status_code


def json_payload():
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise BadRequestError('Invalid payload')
    return payload


def require_principal(view):
    """Authenticate the caller and pass (app_ctx, principal) to the view."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        app_ctx = get_app_context()
        decoded_token = auth_service.verify_firebase_token(request, app_ctx.auth, app_ctx.logger)
        if not decoded_token:
            raise UnauthorizedError()
        principal = auth_service.load_principal(app_ctx, decoded_token)
        return view(app_ctx, principal, *args, **kwargs)
    return wrapper


def register_request_hooks(app):
    @app.before_request
    def attach_request_context():
        request_id = str(request.headers.get('X-Request-ID', '') or '').strip()[:120] or uuid.uuid4().hex
        g.request_id = request_id
        sentry = get_app_context().sentry
        if not sentry:
            return
        scope = sentry.get_current_scope()
        scope.set_tag('request.id', request_id)
        scope.set_tag('route.path', request.path)
        scope.set_tag('route.method', request.method)
        scope.set_tag('route.endpoint', request.endpoint or '')

    @app.after_request
    def attach_request_id(response):
        request_id = str(getattr(g, 'request_id', '') or '').strip()
        if request_id:
            response.headers['X-Request-ID'] = request_id
        return response
