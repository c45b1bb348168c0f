"""
Assignment ledger: append-only per-asset assignment history
"""
from typing import Dict, Any, List, Optional
import logging
from asset_inventory.app.models import Asset, AssignmentEvent
from asset_inventory.app.services.asset_store import AssetStore

logger = logging.getLogger(__name__)


class AssignmentLedger:
    """Reads and appends assignment history; there is no edit or delete"""

    def __init__(self, store: AssetStore):
        self.store = store

    def read(self, asset_id: str) -> List[AssignmentEvent]:
        """Get an asset's history, oldest first"""
        return list(self.store.get(asset_id).assignment_history)

    def append(
        self,
        asset: Asset,
        event: AssignmentEvent,
        changes: Optional[Dict[str, Any]] = None,
    ) -> Asset:
        """Append event and commit changes in one conditional write

        asset is the state the caller read; the write fails with ConflictError
        if the stored revision has moved on since.
        """
        history = asset.assignment_history
        if history and event.timestamp < history[-1].timestamp:
            # Clock skew between writers must not reorder the history
            event = AssignmentEvent(event.action, event.user_name, history[-1].timestamp)

        update = dict(changes or {})
        update['assignment_history'] = list(history) + [event]
        updated = self.store.apply_update(asset.asset_id, asset.revision, update)

        logger.info(f"Ledger: asset {asset.asset_id} {event.action.value} {event.user_name}")
        return updated
