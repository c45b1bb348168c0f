"""
Asset model for tracking hardware, software and other inventory items
"""
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from enum import Enum
from asset_inventory.app.errors import ValidationError
from asset_inventory.app.models.assignment_event import AssignmentEvent


class AssetType(str, Enum):
    """Type of asset"""
    HARDWARE = 'hardware'
    SOFTWARE = 'software'
    OTHER = 'other'


class AssetStatus(str, Enum):
    """Lifecycle status of asset"""
    AVAILABLE = 'available'
    ASSIGNED = 'assigned'
    IN_REPAIR = 'in_repair'
    RETIRED = 'retired'
    DISPOSED = 'disposed'


# Statuses a new asset may start in
INITIAL_STATUSES = (AssetStatus.AVAILABLE, AssetStatus.IN_REPAIR, AssetStatus.RETIRED)

# Free-form attributes that only change through an explicit edit
DESCRIPTIVE_FIELDS = (
    'name',
    'serial_number',
    'category_id',
    'category_name',
    'department_id',
    'department_name',
    'location_id',
    'location_name',
    'purchase_date',
    'warranty_expiry',
)

EDITABLE_FIELDS = ('asset_tag', 'asset_type') + DESCRIPTIVE_FIELDS

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _optional_str(data: Dict[str, Any], field: str) -> Optional[str]:
    value = data.get(field)
    if value is None or value == '':
        return None
    if not isinstance(value, str):
        raise ValidationError(f'{field} must be a string')
    return value.strip()


def _required_str(data: Dict[str, Any], field: str) -> str:
    value = _optional_str(data, field)
    if not value:
        raise ValidationError(f'{field} is required')
    return value


def _parse_type(value: Any) -> AssetType:
    try:
        return AssetType(value)
    except ValueError:
        raise ValidationError(
            f'Invalid type. Must be one of: {", ".join(t.value for t in AssetType)}'
        ) from None


class Asset:
    """An inventory item with lifecycle status and assignment history"""

    def __init__(
        self,
        asset_tag: str,
        name: str,
        asset_type: AssetType = AssetType.HARDWARE,
        status: AssetStatus = AssetStatus.AVAILABLE,
        tenant_id: Optional[str] = None,
        serial_number: Optional[str] = None,
        category_id: Optional[str] = None,
        category_name: Optional[str] = None,
        department_id: Optional[str] = None,
        department_name: Optional[str] = None,
        location_id: Optional[str] = None,
        location_name: Optional[str] = None,
        assigned_user_id: Optional[str] = None,
        assigned_user_name: Optional[str] = None,
        purchase_date: Optional[str] = None,
        warranty_expiry: Optional[str] = None,
        created_at: Optional[datetime] = None,
        assignment_history: Optional[List[AssignmentEvent]] = None,
        revision: int = 0,
        asset_id: Optional[str] = None,
    ):
        self.asset_id = asset_id
        self.tenant_id = tenant_id
        self.asset_tag = asset_tag
        self.name = name
        self.asset_type = AssetType(asset_type) if isinstance(asset_type, str) else asset_type
        self.status = AssetStatus(status) if isinstance(status, str) else status
        self.serial_number = serial_number
        self.category_id = category_id
        self.category_name = category_name
        self.department_id = department_id
        self.department_name = department_name
        self.location_id = location_id
        self.location_name = location_name
        self.assigned_user_id = assigned_user_id
        self.assigned_user_name = assigned_user_name
        self.purchase_date = purchase_date
        self.warranty_expiry = warranty_expiry
        self.created_at = created_at
        self.assignment_history = list(assignment_history or [])
        self.revision = revision

    def __repr__(self) -> str:
        return f'Asset({self.asset_id!r}, tag={self.asset_tag!r}, status={self.status.value!r})'

    @property
    def is_assigned(self) -> bool:
        """Check if asset is currently assigned to someone"""
        return self.status == AssetStatus.ASSIGNED

    @property
    def is_terminal(self) -> bool:
        """Check if asset has been disposed"""
        return self.status == AssetStatus.DISPOSED

    def check_invariants(self) -> None:
        """Raise if status and assignee fields disagree"""
        if self.is_assigned != bool(self.assigned_user_id):
            raise ValidationError(
                f'Asset {self.asset_id} has status {self.status.value} '
                f'but assigned_user_id={self.assigned_user_id!r}'
            )
        if not self.is_assigned and self.assigned_user_name:
            raise ValidationError(f'Asset {self.asset_id} is not assigned but names an assignee')

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON responses"""
        return {
            'asset_id': self.asset_id,
            'tenant_id': self.tenant_id,
            'asset_tag': self.asset_tag,
            'name': self.name,
            'type': self.asset_type.value,
            'status': self.status.value,
            'serial_number': self.serial_number,
            'category_id': self.category_id,
            'category_name': self.category_name,
            'department_id': self.department_id,
            'department_name': self.department_name,
            'location_id': self.location_id,
            'location_name': self.location_name,
            'assigned_user_id': self.assigned_user_id,
            'assigned_user_name': self.assigned_user_name,
            'purchase_date': self.purchase_date,
            'warranty_expiry': self.warranty_expiry,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'assignment_history': [event.to_dict() for event in self.assignment_history],
            'revision': self.revision,
        }

    @classmethod
    def from_draft(cls, data: Dict[str, Any], tenant_id: str) -> 'Asset':
        """Build a not-yet-stored asset from client input

        Lifecycle fields (id, assignee, history, creation time) are never taken
        from the draft; the store and the lifecycle engine own them.
        """
        if not isinstance(data, dict):
            raise ValidationError('Asset draft must be an object')

        status = data.get('status') or AssetStatus.AVAILABLE.value
        try:
            status = AssetStatus(status)
        except ValueError:
            raise ValidationError(f'Invalid status: {status}') from None
        if status not in INITIAL_STATUSES:
            raise ValidationError(
                f'New assets must start as one of: {", ".join(s.value for s in INITIAL_STATUSES)}'
            )

        fields = {field: _optional_str(data, field) for field in DESCRIPTIVE_FIELDS}
        fields['name'] = _required_str(data, 'name')

        return cls(
            asset_tag=_required_str(data, 'asset_tag'),
            asset_type=_parse_type(data.get('type', AssetType.HARDWARE.value)),
            status=status,
            tenant_id=tenant_id,
            **fields,
        )

    @staticmethod
    def parse_details_patch(data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate an explicit edit of tag, type or descriptive fields"""
        if not isinstance(data, dict):
            raise ValidationError('Patch must be an object')

        data = dict(data)
        if 'type' in data:
            data['asset_type'] = data.pop('type')
        unknown = set(data) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f'Fields cannot be edited: {", ".join(sorted(unknown))}')

        changes = {}
        for field in data:
            if field == 'asset_type':
                changes[field] = _parse_type(data[field])
            elif field in ('asset_tag', 'name'):
                changes[field] = _required_str(data, field)
            else:
                changes[field] = _optional_str(data, field)
        return changes


class AssetFilter:
    """Listing filter: status, category and free-text search"""

    def __init__(
        self,
        status: Optional[AssetStatus] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
        newest_first: bool = True,
    ):
        self.status = AssetStatus(status) if isinstance(status, str) else status
        self.category = category.strip().lower() if category else None
        self.search = search.strip().lower() if search and search.strip() else None
        self.newest_first = newest_first

    def matches(self, asset: Asset) -> bool:
        """Check if asset passes every configured criterion"""
        if self.status and asset.status != self.status:
            return False

        if self.category:
            categories = [c.lower() for c in (asset.category_id, asset.category_name) if c]
            if self.category not in categories:
                return False

        if self.search:
            haystacks = [asset.name, asset.asset_tag, asset.serial_number]
            if not any(h and self.search in h.lower() for h in haystacks):
                return False

        return True

    def sort(self, assets: List[Asset]) -> List[Asset]:
        """Order by creation time, newest first unless configured otherwise"""
        return sorted(
            assets,
            key=lambda a: (a.created_at or _EPOCH, a.asset_id or ''),
            reverse=self.newest_first,
        )
