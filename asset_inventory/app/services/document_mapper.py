"""
Mapping between Asset objects and their persisted Firestore document shape

Documents use the camelCase keys written by the web client. Each document
carries a schemaVersion; documents without one were written before versioning
and are upgraded on read.
"""
from datetime import datetime
from typing import Dict, Any, Optional
from asset_inventory.app.errors import DocumentSchemaError
from asset_inventory.app.models import Asset, AssetType, AssetStatus, AssignmentEvent, AssignmentAction
from asset_inventory.app.models.assignment_event import parse_timestamp
from asset_inventory.config.settings import DEFAULT_TENANT_ID

SCHEMA_VERSION = 1

# Python attribute -> document key
FIELD_KEYS = {
    'tenant_id': 'tenantId',
    'asset_tag': 'assetTag',
    'name': 'name',
    'serial_number': 'serialNumber',
    'category_id': 'categoryId',
    'category_name': 'categoryName',
    'department_id': 'departmentId',
    'department_name': 'departmentName',
    'location_id': 'locationId',
    'location_name': 'locationName',
    'assigned_user_id': 'assignedUserId',
    'assigned_user_name': 'assignedUserName',
    'purchase_date': 'purchaseDate',
    'warranty_expiry': 'warrantyExpiry',
}


def event_to_document(event: AssignmentEvent) -> Dict[str, Any]:
    """History entries keep ISO strings, as the web client stores them"""
    return {
        'action': event.action.value,
        'userName': event.user_name,
        'timestamp': event.timestamp.isoformat(),
    }


def event_from_document(data: Dict[str, Any]) -> AssignmentEvent:
    if not isinstance(data, dict):
        raise DocumentSchemaError(f'History entry must be a map, got {type(data).__name__}')
    try:
        return AssignmentEvent(
            action=AssignmentAction(data['action']),
            user_name=data.get('userName') or 'Unknown',
            timestamp=parse_timestamp(data['timestamp']),
        )
    except (KeyError, ValueError, TypeError) as e:
        raise DocumentSchemaError(f'Malformed history entry {data!r}: {e}') from e


def asset_to_document(asset: Asset) -> Dict[str, Any]:
    """Convert to dictionary for Firestore"""
    document = {key: getattr(asset, attr) for attr, key in FIELD_KEYS.items()}
    document.update({
        'schemaVersion': SCHEMA_VERSION,
        'type': asset.asset_type.value,
        'status': asset.status.value,
        'createdAt': asset.created_at,
        'assignmentHistory': [event_to_document(e) for e in asset.assignment_history],
        'revision': asset.revision,
    })
    return document


def _upgrade_legacy(data: Dict[str, Any], default_tenant: str) -> Dict[str, Any]:
    """Version 0: documents written directly by the original web client"""
    data = dict(data)
    data.setdefault('tenantId', default_tenant)
    data['assignmentHistory'] = data.get('assignmentHistory') or []
    data.setdefault('revision', 1)
    data.setdefault('type', AssetType.OTHER.value)
    if data.get('status') != AssetStatus.ASSIGNED.value:
        # The web client changed status without clearing the assignee
        data['assignedUserId'] = None
        data['assignedUserName'] = None
    data['schemaVersion'] = SCHEMA_VERSION
    return data


def asset_from_document(
    asset_id: str,
    data: Optional[Dict[str, Any]],
    default_tenant: str = DEFAULT_TENANT_ID,
) -> Asset:
    """Create from Firestore dictionary, validating the stored shape"""
    if not isinstance(data, dict):
        raise DocumentSchemaError(f'Asset {asset_id} has no document data')

    version = data.get('schemaVersion', 0)
    if version == 0:
        data = _upgrade_legacy(data, default_tenant)
    elif version != SCHEMA_VERSION:
        raise DocumentSchemaError(f'Asset {asset_id} has unsupported schemaVersion {version}')

    history = data.get('assignmentHistory')
    if not isinstance(history, list):
        raise DocumentSchemaError(f'Asset {asset_id} assignmentHistory must be a list')

    created_at = data.get('createdAt')
    if created_at is not None and not isinstance(created_at, datetime):
        try:
            created_at = parse_timestamp(created_at)
        except (ValueError, TypeError) as e:
            raise DocumentSchemaError(f'Asset {asset_id} has malformed createdAt: {e}') from e

    try:
        asset_type = AssetType(data.get('type'))
        status = AssetStatus(data.get('status'))
    except ValueError as e:
        raise DocumentSchemaError(f'Asset {asset_id}: {e}') from e

    if not data.get('assetTag'):
        raise DocumentSchemaError(f'Asset {asset_id} has no assetTag')

    fields = {attr: data.get(key) for attr, key in FIELD_KEYS.items()}
    return Asset(
        asset_id=asset_id,
        asset_type=asset_type,
        status=status,
        created_at=created_at,
        assignment_history=[event_from_document(e) for e in history],
        revision=int(data.get('revision') or 0),
        **fields,
    )
