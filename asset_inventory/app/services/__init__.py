from asset_inventory.config.settings import ASSET_STORE_BACKEND
from .asset_store import AssetStore, InMemoryAssetStore
from .assignment_ledger import AssignmentLedger
from .lifecycle_engine import LifecycleEngine
from .qr_codec import QRCodec
from .access_guard import AccessGuard, AccessDecision
from .inventory_service import InventoryService


def build_asset_store(backend: str = ASSET_STORE_BACKEND) -> AssetStore:
    """Create the configured asset store"""
    if backend == 'memory':
        return InMemoryAssetStore()
    if backend == 'firestore':
        # Imported lazily so the memory backend needs no Google credentials
        from .firestore_service import FirestoreAssetStore
        return FirestoreAssetStore()
    raise ValueError(f'Unknown ASSET_STORE_BACKEND: {backend}')


__all__ = [
    'AssetStore',
    'InMemoryAssetStore',
    'AssignmentLedger',
    'LifecycleEngine',
    'QRCodec',
    'AccessGuard',
    'AccessDecision',
    'InventoryService',
    'build_asset_store',
]
