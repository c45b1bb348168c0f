"""
Asset API routes for inventory, assignment and QR codes
"""
from io import BytesIO
from flask import Blueprint, jsonify, request, current_app, send_file
import logging
from asset_inventory.app.errors import InventoryError, ValidationError
from asset_inventory.app.models import AssetFilter, AssetStatus
from asset_inventory.app.services import InventoryService
from asset_inventory.app.utils.auth import login_required, get_requester

logger = logging.getLogger(__name__)

asset_bp = Blueprint('assets', __name__, url_prefix='/api/assets')


def get_inventory() -> InventoryService:
    """Inventory service wired into the current app"""
    return current_app.extensions['inventory_service']


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


@asset_bp.errorhandler(InventoryError)
def handle_inventory_error(e: InventoryError):
    if e.status_code >= 500:
        logger.error(f"Inventory error on {request.path}: {e.message}")
    return jsonify(e.to_dict()), e.status_code


@asset_bp.route('', methods=['GET'])
@login_required
def list_assets():
    """List assets with optional status, category and search filters"""
    status = request.args.get('status')
    if status and status != 'all':
        try:
            status = AssetStatus(status)
        except ValueError:
            raise ValidationError(f'Invalid status: {status}') from None
    else:
        status = None

    asset_filter = AssetFilter(
        status=status,
        category=request.args.get('category'),
        search=request.args.get('search'),
        newest_first=request.args.get('order', 'desc').lower() != 'asc',
    )
    assets = get_inventory().list_assets(get_requester(), asset_filter)
    return jsonify([asset.to_dict() for asset in assets]), 200


@asset_bp.route('', methods=['POST'])
@login_required
def create_asset():
    """Register a new asset"""
    asset = get_inventory().create_asset(get_requester(), _json_body())
    return jsonify(asset.to_dict()), 201


@asset_bp.route('/stats', methods=['GET'])
@login_required
def get_stats():
    """Dashboard counts per status"""
    return jsonify(get_inventory().get_stats(get_requester())), 200


@asset_bp.route('/resolve', methods=['POST'])
def resolve_qr_payload():
    """Resolve a scanned QR payload to an asset

    Not behind login_required: an anonymous scan gets the same generic denial
    as any other refused scan.
    """
    payload = _json_body().get('payload')
    asset = get_inventory().resolve_by_qr_payload(payload, get_requester())
    return jsonify(asset.to_dict()), 200


@asset_bp.route('/<asset_id>', methods=['GET'])
@login_required
def get_asset(asset_id):
    """Get a specific asset"""
    asset = get_inventory().get_asset(get_requester(), asset_id)
    return jsonify(asset.to_dict()), 200


@asset_bp.route('/<asset_id>', methods=['PATCH'])
@login_required
def update_asset(asset_id):
    """Edit tag, type or descriptive fields"""
    asset = get_inventory().update_details(get_requester(), asset_id, _json_body())
    return jsonify(asset.to_dict()), 200


@asset_bp.route('/<asset_id>/assign', methods=['POST'])
@login_required
def assign_asset(asset_id):
    """Assign an available asset to a user"""
    data = _json_body()
    asset = get_inventory().assign_asset(
        get_requester(),
        asset_id,
        user_id=data.get('user_id'),
        user_name=data.get('user_name'),
    )
    return jsonify(asset.to_dict()), 200


@asset_bp.route('/<asset_id>/unassign', methods=['POST'])
@login_required
def unassign_asset(asset_id):
    """Return an assigned asset to the available pool"""
    data = _json_body()
    asset = get_inventory().unassign_asset(get_requester(), asset_id, data.get('acting_user_name'))
    return jsonify(asset.to_dict()), 200


@asset_bp.route('/<asset_id>/status', methods=['POST'])
@login_required
def set_status(asset_id):
    """Move an asset to available, in_repair or retired"""
    data = _json_body()
    if not data.get('status'):
        raise ValidationError('status is required')
    asset = get_inventory().set_status(get_requester(), asset_id, data['status'])
    return jsonify(asset.to_dict()), 200


@asset_bp.route('/<asset_id>/dispose', methods=['POST'])
@login_required
def dispose_asset(asset_id):
    """Dispose of an asset permanently"""
    asset = get_inventory().dispose_asset(get_requester(), asset_id)
    return jsonify(asset.to_dict()), 200


@asset_bp.route('/<asset_id>/history', methods=['GET'])
@login_required
def get_history(asset_id):
    """Get assignment history for a specific asset"""
    history = get_inventory().get_history(get_requester(), asset_id)
    return jsonify([event.to_dict() for event in history]), 200


@asset_bp.route('/<asset_id>/qr', methods=['GET'])
@login_required
def get_qr_payload(asset_id):
    """Get the payload to print in an asset's QR code"""
    payload = get_inventory().get_qr_payload(get_requester(), asset_id)
    return jsonify({'asset_id': asset_id, 'payload': payload}), 200


@asset_bp.route('/<asset_id>/qr.png', methods=['GET'])
@login_required
def get_qr_image(asset_id):
    """Download an asset's QR code as PNG"""
    inventory = get_inventory()
    asset = inventory.get_asset(get_requester(), asset_id)
    png = inventory.render_qr_png(asset)
    return send_file(
        BytesIO(png),
        mimetype='image/png',
        as_attachment=True,
        download_name=f'{asset.asset_tag}-qr.png',
    )
