from flask import Blueprint

from coursehub.domain import ResourceKind
from coursehub.services import certificates_api_service, deletion_service
from coursehub.web import json_payload, require_principal, success_response

certificates_bp = Blueprint('certificates_api', __name__)


@certificates_bp.route('/api/certificates/<certificate_id>', methods=['GET'])
@require_principal
def get_certificate(app_ctx, principal, certificate_id):
    certificate = certificates_api_service.get_certificate(app_ctx, principal, certificate_id)
    return success_response('data retrieved successfully', certificate)


@certificates_bp.route('/api/certificates/<certificate_id>', methods=['DELETE'])
@require_principal
def delete_certificate(app_ctx, principal, certificate_id):
    issued = deletion_service.request_deletion(app_ctx, principal, ResourceKind.CERTIFICATE, certificate_id)
    return success_response('Check your email to confirm certificate deletion', {'expires_at': issued.expires_at})


@certificates_bp.route('/api/certificates/<certificate_id>/confirm-delete', methods=['POST'])
@require_principal
def confirm_delete_certificate(app_ctx, principal, certificate_id):
    code = json_payload().get('code', '')
    deletion_service.confirm_deletion(app_ctx, principal, ResourceKind.CERTIFICATE, certificate_id, code)
    return success_response('Certificate deleted successfully', {'id': certificate_id})
