"""
Asset store interface and in-memory implementation

Every store keeps two mappings: asset id -> asset record, and
(tenant, asset tag) -> asset id. Updates are conditional on the record's
revision (optimistic concurrency).
"""
import copy
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, List, Callable
from urllib.parse import quote
from datetime import datetime
from asset_inventory.app.errors import NotFoundError, DuplicateTagError, ConflictError, ValidationError
from asset_inventory.app.models import Asset, AssetFilter, AssetStatus, AssetType
from asset_inventory.app.models.asset import EDITABLE_FIELDS
from asset_inventory.app.models.assignment_event import utc_now
from asset_inventory.app.services.document_mapper import asset_to_document, asset_from_document

logger = logging.getLogger(__name__)

# Fields apply_update may touch; identity, tenant, creation time and revision are store-owned
UPDATABLE_FIELDS = frozenset(EDITABLE_FIELDS + (
    'status',
    'assigned_user_id',
    'assigned_user_name',
    'assignment_history',
))


def tag_key(tenant_id: str, asset_tag: str) -> str:
    """Uniqueness key for a tag within a tenant (case-insensitive, path-safe)"""
    return f"{quote(tenant_id, safe='')}:{quote(asset_tag.strip().casefold(), safe='')}"


class AssetStore(ABC):
    """Persistence interface for asset records"""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.clock = clock

    @abstractmethod
    def get(self, asset_id: str) -> Asset:
        """Get asset by id, raising NotFoundError"""

    @abstractmethod
    def find_by_tag(self, tenant_id: str, asset_tag: str) -> Optional[Asset]:
        """Get asset by tag within a tenant"""

    @abstractmethod
    def list(self, tenant_id: str, asset_filter: Optional[AssetFilter] = None) -> List[Asset]:
        """List a tenant's assets matching the filter"""

    @abstractmethod
    def create(self, asset: Asset) -> Asset:
        """Store a new asset, raising DuplicateTagError on a tag collision"""

    @abstractmethod
    def apply_update(self, asset_id: str, expected_revision: int, changes: Dict[str, Any]) -> Asset:
        """Commit changes if the stored revision still equals expected_revision"""

    def prepare_new(self, asset: Asset, asset_id: str) -> Asset:
        """Stamp identity, creation time and initial revision onto a draft"""
        stored = copy.copy(asset)
        stored.asset_id = asset_id
        stored.created_at = self.clock()
        stored.assignment_history = []
        stored.revision = 1
        stored.check_invariants()
        return stored

    @staticmethod
    def merge_changes(current: Asset, changes: Dict[str, Any]) -> Asset:
        """Return the next version of current, refusing invariant-breaking changes"""
        illegal = set(changes) - UPDATABLE_FIELDS
        if illegal:
            raise ValidationError(f'Fields cannot be updated: {", ".join(sorted(illegal))}')

        updated = copy.copy(current)
        for field, value in changes.items():
            setattr(updated, field, value)
        try:
            updated.status = AssetStatus(updated.status)
            updated.asset_type = AssetType(updated.asset_type)
        except ValueError as e:
            raise ValidationError(str(e)) from None

        if 'assignment_history' in changes:
            old = current.assignment_history
            new = list(changes['assignment_history'])
            if len(new) < len(old) or new[:len(old)] != old:
                raise ValidationError(f'Assignment history of asset {current.asset_id} is append-only')
            # Only appended entries are checked; stored entries are kept as they are
            start = max(len(old) - 1, 0)
            for before, after in zip(new[start:], new[start + 1:]):
                if after.timestamp < before.timestamp:
                    raise ValidationError(f'Assignment history of asset {current.asset_id} must stay ordered')
            updated.assignment_history = new
        else:
            updated.assignment_history = list(current.assignment_history)

        updated.revision = current.revision + 1
        updated.check_invariants()
        return updated

    @staticmethod
    def check_revision(current: Asset, expected_revision: int) -> None:
        if current.revision != expected_revision:
            logger.warning(f"Revision conflict on asset {current.asset_id}: expected {expected_revision}, found {current.revision}")
            raise ConflictError(
                f'Asset {current.asset_id} was modified concurrently '
                f'(expected revision {expected_revision}, found {current.revision})'
            )


class InMemoryAssetStore(AssetStore):
    """Process-local store for development and tests

    Records are held as serialized documents so every read returns a fresh
    Asset and callers cannot mutate stored state.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        super().__init__(clock)
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._tags: Dict[str, str] = {}
        self._lock = threading.Lock()

    def _load(self, asset_id: str) -> Asset:
        document = self._documents.get(asset_id)
        if document is None:
            raise NotFoundError(asset_id)
        return asset_from_document(asset_id, document)

    def get(self, asset_id: str) -> Asset:
        with self._lock:
            return self._load(asset_id)

    def find_by_tag(self, tenant_id: str, asset_tag: str) -> Optional[Asset]:
        with self._lock:
            asset_id = self._tags.get(tag_key(tenant_id, asset_tag))
            return self._load(asset_id) if asset_id else None

    def list(self, tenant_id: str, asset_filter: Optional[AssetFilter] = None) -> List[Asset]:
        asset_filter = asset_filter or AssetFilter()
        with self._lock:
            assets = [
                asset_from_document(asset_id, document)
                for asset_id, document in self._documents.items()
                if document.get('tenantId') == tenant_id
            ]
        return asset_filter.sort([a for a in assets if asset_filter.matches(a)])

    def create(self, asset: Asset) -> Asset:
        stored = self.prepare_new(asset, uuid.uuid4().hex)
        key = tag_key(stored.tenant_id, stored.asset_tag)
        with self._lock:
            if key in self._tags:
                raise DuplicateTagError(stored.asset_tag)
            self._tags[key] = stored.asset_id
            self._documents[stored.asset_id] = asset_to_document(stored)
        return stored

    def apply_update(self, asset_id: str, expected_revision: int, changes: Dict[str, Any]) -> Asset:
        with self._lock:
            current = self._load(asset_id)
            self.check_revision(current, expected_revision)
            updated = self.merge_changes(current, changes)

            old_key = tag_key(current.tenant_id, current.asset_tag)
            new_key = tag_key(updated.tenant_id, updated.asset_tag)
            if new_key != old_key:
                if new_key in self._tags:
                    raise DuplicateTagError(updated.asset_tag)
                self._tags.pop(old_key, None)
                self._tags[new_key] = asset_id

            self._documents[asset_id] = asset_to_document(updated)
            return updated
