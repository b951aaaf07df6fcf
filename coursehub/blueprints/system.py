from flask import Blueprint, jsonify

from coursehub.extensions import get_app_context

system_bp = Blueprint('system', __name__)


@system_bp.route('/healthz')
def healthz():
    return jsonify({'status': 'ok', 'firestore_ready': get_app_context().db is not None}), 200
