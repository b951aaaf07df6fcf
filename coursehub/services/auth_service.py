"""Authentication utility helpers."""

from coursehub.domain import Principal
from coursehub.errors import NotFoundError
from coursehub.repositories import users_repo


def extract_bearer_token(request):
    auth_header = request.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return ''
    return auth_header.split('Bearer ', 1)[1].strip()


def verify_firebase_token(request, auth_module, logger):
    """Return decoded Firebase token dict, or None when invalid/missing."""
    token = extract_bearer_token(request)
    if not token:
        return None
    try:
        return auth_module.verify_id_token(token)
    except Exception as exc:
        if logger is not None:
            logger.info(f"Token verification failed: {exc}")
        return None


def load_principal(app_ctx, decoded_token):
    """Build the acting principal from the users collection.

    The stored profile is authoritative for the role; the token only
    contributes the uid and, when the profile has none, the email.
    """
    uid = str(decoded_token.get('uid', '') or '').strip()
    if not uid:
        raise NotFoundError('User not found')
    snapshot = users_repo.get_doc(app_ctx.require_db(), uid)
    if not snapshot.exists:
        raise NotFoundError('User not found')
    data = dict(snapshot.to_dict() or {})
    if not data.get('email'):
        data['email'] = decoded_token.get('email', '')
    return Principal.from_user_doc(uid, data)
