"""
Asset lifecycle state machine and transition validation
"""
from typing import Dict, FrozenSet, Optional
import logging
from asset_inventory.app.errors import InvalidTransitionError, ValidationError
from asset_inventory.app.models import Asset, AssetStatus, AssignmentEvent
from asset_inventory.app.models.assignment_event import utc_now
from asset_inventory.app.services.asset_store import AssetStore
from asset_inventory.app.services.assignment_ledger import AssignmentLedger

logger = logging.getLogger(__name__)

VALID_TRANSITIONS: Dict[AssetStatus, FrozenSet[AssetStatus]] = {
    AssetStatus.AVAILABLE: frozenset({AssetStatus.ASSIGNED, AssetStatus.IN_REPAIR, AssetStatus.RETIRED}),
    AssetStatus.ASSIGNED: frozenset({AssetStatus.AVAILABLE, AssetStatus.IN_REPAIR, AssetStatus.RETIRED}),
    AssetStatus.IN_REPAIR: frozenset({AssetStatus.AVAILABLE, AssetStatus.RETIRED}),
    AssetStatus.RETIRED: frozenset({AssetStatus.AVAILABLE}),
    AssetStatus.DISPOSED: frozenset(),
}

# Disposal is a separate, explicit operation reachable from every live state
DISPOSABLE_STATUSES = frozenset({
    AssetStatus.AVAILABLE,
    AssetStatus.ASSIGNED,
    AssetStatus.IN_REPAIR,
    AssetStatus.RETIRED,
})


def can_transition(source: AssetStatus, target: AssetStatus) -> bool:
    """Check the transition table"""
    return target in VALID_TRANSITIONS.get(source, frozenset())


class LifecycleEngine:
    """Applies status changes to stored assets

    Each operation reads the current record, validates the move against the
    transition table and commits conditionally on the revision it read.
    Assignment changes go through the ledger so the history entry and the
    field change land in the same write.
    """

    def __init__(self, store: AssetStore, ledger: Optional[AssignmentLedger] = None, clock=utc_now):
        self.store = store
        self.ledger = ledger or AssignmentLedger(store)
        self.clock = clock

    def assign(self, asset_id: str, user_id: str, user_name: str) -> Asset:
        """Assign an available asset to a user"""
        if not user_id or not user_name:
            raise ValidationError('user_id and user_name are required')

        asset = self.store.get(asset_id)
        self._check(asset, AssetStatus.ASSIGNED)

        updated = self.ledger.append(
            asset,
            AssignmentEvent.assigned(user_name, self.clock()),
            {
                'status': AssetStatus.ASSIGNED,
                'assigned_user_id': user_id,
                'assigned_user_name': user_name,
            },
        )
        logger.info(f"Asset {asset_id} assigned to {user_name} ({user_id})")
        return updated

    def unassign(self, asset_id: str, acting_user_name: str) -> Asset:
        """Return an assigned asset to the available pool"""
        asset = self.store.get(asset_id)
        if asset.status != AssetStatus.ASSIGNED:
            self._reject(asset, AssetStatus.AVAILABLE)
        if not asset.assigned_user_id:
            logger.warning(f"Asset {asset_id} is marked assigned but has no recorded assignee")
            raise InvalidTransitionError(
                asset.status.value,
                AssetStatus.AVAILABLE.value,
                f'Asset {asset_id} has no recorded assignee to unassign',
            )

        updated = self.ledger.append(
            asset,
            AssignmentEvent.unassigned(asset.assigned_user_name or acting_user_name, self.clock()),
            {
                'status': AssetStatus.AVAILABLE,
                'assigned_user_id': None,
                'assigned_user_name': None,
            },
        )
        logger.info(f"Asset {asset_id} unassigned from {asset.assigned_user_name} by {acting_user_name}")
        return updated

    def mark_in_repair(self, asset_id: str) -> Asset:
        return self._set_status(asset_id, AssetStatus.IN_REPAIR)

    def mark_retired(self, asset_id: str) -> Asset:
        return self._set_status(asset_id, AssetStatus.RETIRED)

    def mark_available(self, asset_id: str) -> Asset:
        """Bring an asset back from repair or retirement

        Leaving 'assigned' is an assignment action and must use unassign.
        """
        asset = self.store.get(asset_id)
        if asset.status == AssetStatus.ASSIGNED:
            raise InvalidTransitionError(
                asset.status.value,
                AssetStatus.AVAILABLE.value,
                f'Asset {asset_id} is assigned; unassign it to make it available',
            )
        return self._commit_status(asset, AssetStatus.AVAILABLE)

    def dispose(self, asset_id: str) -> Asset:
        """Move an asset into the terminal disposed state"""
        asset = self.store.get(asset_id)
        if asset.status not in DISPOSABLE_STATUSES:
            self._reject(asset, AssetStatus.DISPOSED)
        return self._write_status(asset, AssetStatus.DISPOSED)

    def transition(self, asset_id: str, target: AssetStatus, acting_user_name: Optional[str] = None) -> Asset:
        """Move an asset to target, routing to the matching operation"""
        target = AssetStatus(target)
        if target == AssetStatus.ASSIGNED:
            raise ValidationError('Assigning an asset requires a user; use assign')
        if target == AssetStatus.DISPOSED:
            return self.dispose(asset_id)
        if target == AssetStatus.AVAILABLE:
            asset = self.store.get(asset_id)
            if asset.status == AssetStatus.ASSIGNED:
                return self.unassign(asset_id, acting_user_name or 'Unknown')
            return self._commit_status(asset, AssetStatus.AVAILABLE)
        return self._set_status(asset_id, target)

    def _set_status(self, asset_id: str, target: AssetStatus) -> Asset:
        return self._commit_status(self.store.get(asset_id), target)

    def _commit_status(self, asset: Asset, target: AssetStatus) -> Asset:
        self._check(asset, target)
        return self._write_status(asset, target)

    def _write_status(self, asset: Asset, target: AssetStatus) -> Asset:
        changes = {'status': target}
        if asset.status == AssetStatus.ASSIGNED:
            # Status-only moves out of 'assigned' drop the assignee without a ledger entry
            changes['assigned_user_id'] = None
            changes['assigned_user_name'] = None

        updated = self.store.apply_update(asset.asset_id, asset.revision, changes)
        logger.info(f"Asset {asset.asset_id} status {asset.status.value} -> {target.value}")
        return updated

    def _check(self, asset: Asset, target: AssetStatus) -> None:
        if not can_transition(asset.status, target):
            self._reject(asset, target)

    def _reject(self, asset: Asset, target: AssetStatus) -> None:
        logger.warning(f"Rejected transition of asset {asset.asset_id}: {asset.status.value} -> {target.value}")
        raise InvalidTransitionError(asset.status.value, target.value)
