"""
Inventory service: the operations exposed to the UI and API boundary

Every operation checks access first, then delegates to the store, the
lifecycle engine or the QR codec.
"""
from typing import Dict, Any, List, Optional
import logging
from asset_inventory.app.errors import AccessDeniedError, NotFoundError, ValidationError
from asset_inventory.app.models import Asset, AssetStatus, AssetFilter, AssignmentEvent, RequesterContext
from asset_inventory.app.services.asset_store import AssetStore
from asset_inventory.app.services.assignment_ledger import AssignmentLedger
from asset_inventory.app.services.lifecycle_engine import LifecycleEngine
from asset_inventory.app.services.qr_codec import QRCodec
from asset_inventory.app.services.access_guard import AccessGuard

logger = logging.getLogger(__name__)

# Targets reachable through the generic status control
SETTABLE_STATUSES = (AssetStatus.AVAILABLE, AssetStatus.IN_REPAIR, AssetStatus.RETIRED)


class InventoryService:
    """Facade over store, ledger, lifecycle engine, codec and access guard"""

    def __init__(
        self,
        store: AssetStore,
        codec: Optional[QRCodec] = None,
        guard: Optional[AccessGuard] = None,
    ):
        self.store = store
        self.ledger = AssignmentLedger(store)
        self.engine = LifecycleEngine(store, self.ledger, clock=store.clock)
        self.codec = codec or QRCodec()
        self.guard = guard or AccessGuard()

    def _load_authorized(self, requester: RequesterContext, asset_id: str) -> Asset:
        self.guard.require_authenticated(requester)
        asset = self.store.get(asset_id)
        self.guard.authorize(requester, asset)
        return asset

    # Reads
    def list_assets(self, requester: RequesterContext, asset_filter: Optional[AssetFilter] = None) -> List[Asset]:
        """List the requester's tenant's assets"""
        self.guard.require_authenticated(requester)
        return self.store.list(requester.tenant_id, asset_filter)

    def get_asset(self, requester: RequesterContext, asset_id: str) -> Asset:
        """Get a single asset"""
        return self._load_authorized(requester, asset_id)

    def get_history(self, requester: RequesterContext, asset_id: str) -> List[AssignmentEvent]:
        """Get an asset's assignment history, oldest first"""
        self._load_authorized(requester, asset_id)
        return self.ledger.read(asset_id)

    def get_stats(self, requester: RequesterContext) -> Dict[str, int]:
        """Dashboard counts per status for the requester's tenant"""
        assets = self.list_assets(requester)
        stats = {'total': len(assets)}
        for status in AssetStatus:
            stats[status.value] = sum(1 for a in assets if a.status == status)
        return stats

    # Writes
    def create_asset(self, requester: RequesterContext, draft: Dict[str, Any]) -> Asset:
        """Register a new asset in the requester's tenant"""
        self.guard.require_authenticated(requester)
        asset = self.store.create(Asset.from_draft(draft, requester.tenant_id))
        logger.info(f"{requester.display_name} created asset {asset.asset_id} ({asset.asset_tag})")
        return asset

    def update_details(self, requester: RequesterContext, asset_id: str, patch: Dict[str, Any]) -> Asset:
        """Explicit edit of tag, type or descriptive attributes"""
        changes = Asset.parse_details_patch(patch)
        asset = self._load_authorized(requester, asset_id)
        if not changes:
            return asset
        updated = self.store.apply_update(asset_id, asset.revision, changes)
        logger.info(f"{requester.display_name} edited asset {asset_id}: {', '.join(sorted(changes))}")
        return updated

    def assign_asset(self, requester: RequesterContext, asset_id: str, user_id: str, user_name: str) -> Asset:
        self._load_authorized(requester, asset_id)
        return self.engine.assign(asset_id, user_id, user_name)

    def unassign_asset(self, requester: RequesterContext, asset_id: str, acting_user_name: Optional[str] = None) -> Asset:
        self._load_authorized(requester, asset_id)
        return self.engine.unassign(asset_id, acting_user_name or requester.display_name)

    def set_status(self, requester: RequesterContext, asset_id: str, target: str) -> Asset:
        """Move to available, in_repair or retired"""
        try:
            target = AssetStatus(target)
        except ValueError:
            raise ValidationError(f'Invalid status: {target}') from None
        if target not in SETTABLE_STATUSES:
            raise ValidationError(
                f'Status must be one of: {", ".join(s.value for s in SETTABLE_STATUSES)}'
            )

        self._load_authorized(requester, asset_id)
        return self.engine.transition(asset_id, target, requester.display_name)

    def dispose_asset(self, requester: RequesterContext, asset_id: str) -> Asset:
        """Terminal disposal; not part of the standard status control"""
        self._load_authorized(requester, asset_id)
        return self.engine.dispose(asset_id)

    # QR codes
    def get_qr_payload(self, requester: RequesterContext, asset_id: str) -> str:
        return self.codec.encode(self._load_authorized(requester, asset_id))

    def render_qr_png(self, asset: Asset) -> bytes:
        """Render the QR image of an asset the caller has already authorized"""
        return self.codec.render_png(self.codec.encode(asset))

    def resolve_by_qr_payload(self, payload: str, requester: RequesterContext) -> Asset:
        """Resolve a scanned payload to an asset the requester may see

        Unauthenticated scans, scans of another tenant's asset and scans of
        unknown ids all raise the same generic AccessDeniedError.
        """
        return self.resolve_by_id(self.codec.decode(payload), requester)

    def resolve_by_id(self, asset_id: str, requester: RequesterContext) -> Asset:
        """Look up a scanned id with the enumeration-safe generic denial"""
        if not requester.is_authenticated:
            raise AccessDeniedError()
        try:
            asset = self.store.get(asset_id)
        except NotFoundError:
            logger.warning(f"QR resolution of unknown asset id by {requester}")
            raise AccessDeniedError() from None

        if self.guard.check(requester, asset).reason is not None:
            logger.warning(f"QR resolution of asset {asset_id} denied for {requester}")
            raise AccessDeniedError()
        return asset

    def get_public_summary(self, asset_id: str) -> Asset:
        """Read-only lookup for the public asset-detail resolver

        Only used when the deployment publishes asset summaries
        (ASSET_DETAIL_PUBLIC); raises NotFoundError for unknown ids.
        """
        return self.store.get(asset_id)
