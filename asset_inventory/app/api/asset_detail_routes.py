"""
Standalone asset-detail resolver

This is the target of printed QR locators: a generic scanner opens
/asset-detail?id=<asset id> and gets a read-only HTML summary.
"""
from flask import Blueprint, request, current_app, render_template_string
import logging
from asset_inventory.app.errors import NotFoundError, AccessDeniedError
from asset_inventory.app.utils.auth import get_requester

logger = logging.getLogger(__name__)

asset_detail_bp = Blueprint('asset_detail', __name__)

# render_template_string autoescapes every interpolated value
ASSET_DETAIL_TEMPLATE = """<!doctype html>
<html>
<head>
<meta charset="utf-8"/>
<title>Asset {{ asset.asset_tag or asset.asset_id }}</title>
<meta name="viewport" content="width=device-width,initial-scale=1"/>
<style>
  body{font-family:system-ui,-apple-system,Segoe UI,Roboto,Arial;margin:0;padding:24px;background:#f7fafc;color:#111}
  .card{background:#fff;border-radius:8px;padding:18px;box-shadow:0 4px 14px rgba(0,0,0,0.08);max-width:720px;margin:24px auto}
  h1{margin:0 0 8px 0;font-size:20px}
  dt{font-weight:600;color:#4b5563}
  dd{margin:4px 0 12px 0}
</style>
</head>
<body>
  <div class="card">
    <h1>{{ asset.name or 'Asset' }} - {{ asset.asset_tag or asset.asset_id }}</h1>
    <dl>
      {% for label, value in rows %}
      <dt>{{ label }}</dt><dd>{{ value or '-' }}</dd>
      {% endfor %}
    </dl>
  </div>
</body>
</html>"""


def _requested_id():
    asset_id = request.args.get('id') or request.form.get('id')
    if not asset_id:
        body = request.get_json(silent=True)
        if isinstance(body, dict):
            asset_id = body.get('id')
    return asset_id if isinstance(asset_id, str) and asset_id.strip() else None


def _text(body: str, status: int):
    return body, status, {'Content-Type': 'text/plain; charset=utf-8'}


@asset_detail_bp.route('/asset-detail', methods=['GET', 'POST'])
def asset_detail():
    """Render a read-only asset summary"""
    asset_id = _requested_id()
    if not asset_id:
        return _text('Missing id query param', 400)

    inventory = current_app.extensions['inventory_service']
    try:
        if current_app.config['ASSET_DETAIL_PUBLIC']:
            asset = inventory.get_public_summary(asset_id)
        else:
            asset = inventory.resolve_by_id(asset_id, get_requester())
    except NotFoundError:
        return _text('Asset not found', 404)
    except AccessDeniedError:
        return _text('Access denied', 403)
    except Exception:
        logger.exception(f"Failed to render asset detail for {asset_id}")
        return _text('Internal error', 500)

    rows = [
        ('Asset Tag', asset.asset_tag),
        ('Name', asset.name),
        ('Serial Number', asset.serial_number),
        ('Category', asset.category_name),
        ('Location', asset.location_name),
        ('Assigned To', asset.assigned_user_name),
        ('Status', asset.status.value),
        ('Created At', asset.created_at.isoformat() if asset.created_at else None),
    ]
    html = render_template_string(ASSET_DETAIL_TEMPLATE, asset=asset, rows=rows)
    return html, 200, {
        'Content-Type': 'text/html; charset=utf-8',
        'Cache-Control': current_app.config['ASSET_DETAIL_CACHE_CONTROL'],
    }
