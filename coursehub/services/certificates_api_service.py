"""Business logic handlers for certificate APIs."""

from coursehub.domain import ResourceKind
from coursehub.services import entitlement_service


def get_certificate(app_ctx, principal, certificate_id):
    """Course instructors and learners enrolled in the course may read it."""
    resolved = entitlement_service.authorize_resource(
        app_ctx,
        principal,
        ResourceKind.CERTIFICATE,
        certificate_id,
        denied_message='You are not allowed to access this certificate',
    )
    return resolved.to_payload()
