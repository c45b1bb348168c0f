"""
Session status routes
"""
from flask import Blueprint, session, redirect, jsonify
from asset_inventory.app.utils.auth import get_requester

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


@auth_bp.route('/logout')
def logout():
    """Logout user"""
    session.clear()
    return redirect('/')


@auth_bp.route('/status')
def status():
    """Check authentication status"""
    requester = get_requester()
    if not requester.is_authenticated:
        return jsonify({'authenticated': False}), 200

    return jsonify({
        'authenticated': True,
        'user': {
            'id': requester.user_id,
            'name': requester.user_name,
            'tenant_id': requester.tenant_id,
        }
    }), 200
