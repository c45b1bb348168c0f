"""
Firestore database service for asset records
"""
from google.api_core.exceptions import AlreadyExists
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from typing import Optional, List, Dict, Any, Callable
from datetime import datetime
import logging
from asset_inventory.config.settings import (
    GCP_PROJECT_ID,
    ASSETS_COLLECTION,
    ASSET_TAGS_COLLECTION,
)
from asset_inventory.app.errors import NotFoundError, DuplicateTagError
from asset_inventory.app.models import Asset, AssetFilter
from asset_inventory.app.models.assignment_event import utc_now
from asset_inventory.app.services.asset_store import AssetStore, tag_key
from asset_inventory.app.services.document_mapper import asset_to_document, asset_from_document

logger = logging.getLogger(__name__)


def _tag_document(asset: Asset) -> Dict[str, Any]:
    return {
        'assetId': asset.asset_id,
        'tenantId': asset.tenant_id,
        'assetTag': asset.asset_tag,
    }


class FirestoreAssetStore(AssetStore):
    """Asset store backed by Firestore

    Tag uniqueness is enforced with one reservation document per
    (tenant, tag) in the tags collection, written in the same transaction as
    the asset document.
    """

    def __init__(
        self,
        client: Optional[firestore.Client] = None,
        assets_collection: str = ASSETS_COLLECTION,
        tags_collection: str = ASSET_TAGS_COLLECTION,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(clock)
        self.db = client or firestore.Client(project=GCP_PROJECT_ID)
        self.assets_ref = self.db.collection(assets_collection)
        self.tags_ref = self.db.collection(tags_collection)

    # Reads
    def get(self, asset_id: str) -> Asset:
        """Get asset by id"""
        doc = self.assets_ref.document(asset_id).get()
        if not doc.exists:
            raise NotFoundError(asset_id)
        return asset_from_document(doc.id, doc.to_dict())

    def find_by_tag(self, tenant_id: str, asset_tag: str) -> Optional[Asset]:
        """Get asset by tag through its reservation document"""
        doc = self.tags_ref.document(tag_key(tenant_id, asset_tag)).get()
        if not doc.exists:
            return None
        return self.get(doc.to_dict()['assetId'])

    def list(self, tenant_id: str, asset_filter: Optional[AssetFilter] = None) -> List[Asset]:
        """List a tenant's assets

        Status is filtered by the query; category and free-text matching run
        client-side since Firestore has no substring search.
        """
        asset_filter = asset_filter or AssetFilter()
        query = self.assets_ref.where(filter=FieldFilter('tenantId', '==', tenant_id))
        if asset_filter.status:
            query = query.where(filter=FieldFilter('status', '==', asset_filter.status.value))

        assets = [asset_from_document(doc.id, doc.to_dict()) for doc in query.stream()]
        return asset_filter.sort([a for a in assets if asset_filter.matches(a)])

    def _tag_owner(self, tenant_id: str, asset_tag: str, transaction=None) -> Optional[str]:
        """Find an asset document already using a tag, reserved or not

        Legacy documents written by the web client have no reservation, so the
        assets collection itself is queried for the tag.
        """
        key = tag_key(tenant_id, asset_tag)
        query = self.assets_ref.where(filter=FieldFilter('assetTag', '==', asset_tag.strip()))
        for doc in query.stream(transaction=transaction):
            owner = asset_from_document(doc.id, doc.to_dict())
            if tag_key(owner.tenant_id, owner.asset_tag) == key:
                return owner.asset_id
        return None

    # Writes
    def create(self, asset: Asset) -> Asset:
        """Create asset and reserve its tag atomically"""
        asset_ref = self.assets_ref.document()
        stored = self.prepare_new(asset, asset_ref.id)
        tag_ref = self.tags_ref.document(tag_key(stored.tenant_id, stored.asset_tag))

        @firestore.transactional
        def create_in_transaction(transaction):
            if tag_ref.get(transaction=transaction).exists:
                raise DuplicateTagError(stored.asset_tag)
            if self._tag_owner(stored.tenant_id, stored.asset_tag, transaction) is not None:
                raise DuplicateTagError(stored.asset_tag)
            transaction.create(tag_ref, _tag_document(stored))
            transaction.create(asset_ref, asset_to_document(stored))

        try:
            create_in_transaction(self.db.transaction())
        except AlreadyExists:
            raise DuplicateTagError(stored.asset_tag) from None

        logger.info(f"Created asset document {stored.asset_id} ({stored.asset_tag})")
        return stored

    def apply_update(self, asset_id: str, expected_revision: int, changes: Dict[str, Any]) -> Asset:
        """Commit changes only if the stored revision matches expected_revision"""
        asset_ref = self.assets_ref.document(asset_id)

        @firestore.transactional
        def update_in_transaction(transaction):
            snapshot = asset_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise NotFoundError(asset_id)

            current = asset_from_document(asset_id, snapshot.to_dict())
            self.check_revision(current, expected_revision)
            updated = self.merge_changes(current, changes)

            old_tag_ref = self.tags_ref.document(tag_key(current.tenant_id, current.asset_tag))
            new_tag_ref = self.tags_ref.document(tag_key(updated.tenant_id, updated.asset_tag))
            tag_moved = new_tag_ref.id != old_tag_ref.id

            # Firestore transactions require every read before the first write
            if tag_moved:
                if new_tag_ref.get(transaction=transaction).exists:
                    raise DuplicateTagError(updated.asset_tag)
                if self._tag_owner(updated.tenant_id, updated.asset_tag, transaction) not in (None, asset_id):
                    raise DuplicateTagError(updated.asset_tag)

            if tag_moved:
                transaction.delete(old_tag_ref)
                transaction.create(new_tag_ref, _tag_document(updated))
            else:
                # Also backfills the reservation of a legacy document
                transaction.set(old_tag_ref, _tag_document(updated))

            transaction.set(asset_ref, asset_to_document(updated))
            return updated

        try:
            return update_in_transaction(self.db.transaction())
        except AlreadyExists:
            raise DuplicateTagError(changes.get('asset_tag', '')) from None
