"""
Authentication utilities: requester identity from the Flask session

The login flow that fills the session (user_id, user_name, tenant_id) belongs
to the deployment; this module only reads it.
"""
from functools import wraps
from flask import session, jsonify
from asset_inventory.app.models import RequesterContext


def get_requester() -> RequesterContext:
    """Build the requester context from the current session"""
    return RequesterContext(
        tenant_id=session.get('tenant_id'),
        user_id=session.get('user_id'),
        user_name=session.get('user_name'),
    )


def login_required(f):
    """Decorator to require a session with tenant and user"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not get_requester().is_authenticated:
            return jsonify({'error': 'Not authenticated', 'code': 'access_denied', 'reason': 'unauthenticated'}), 401
        return f(*args, **kwargs)
    return decorated_function
