"""
Tests for the append-only assignment ledger
"""
from datetime import timedelta
import pytest
from asset_inventory.app.errors import ConflictError, ValidationError
from asset_inventory.app.models import AssetStatus, AssignmentAction, AssignmentEvent
from asset_inventory.app.services import AssignmentLedger, LifecycleEngine


class TestLedgerAppend:
    """History only ever grows at the end"""

    def test_history_is_a_prefix_of_every_later_history(self, service, requester, laptop):
        snapshots = [service.get_history(requester, laptop.asset_id)]
        for i in range(3):
            service.assign_asset(requester, laptop.asset_id, f'u-{i}', f'User {i}')
            snapshots.append(service.get_history(requester, laptop.asset_id))
            service.unassign_asset(requester, laptop.asset_id)
            snapshots.append(service.get_history(requester, laptop.asset_id))

        for earlier, later in zip(snapshots, snapshots[1:]):
            assert later[:len(earlier)] == earlier
            assert len(later) == len(earlier) + 1

    def test_actions_alternate(self, service, requester, laptop):
        for i in range(2):
            service.assign_asset(requester, laptop.asset_id, f'u-{i}', f'User {i}')
            service.unassign_asset(requester, laptop.asset_id)

        actions = [e.action for e in service.get_history(requester, laptop.asset_id)]
        assert actions == [AssignmentAction.ASSIGNED, AssignmentAction.UNASSIGNED] * 2

    def test_read_returns_a_copy(self, service, store, laptop):
        ledger = AssignmentLedger(store)
        history = ledger.read(laptop.asset_id)
        history.append(AssignmentEvent.assigned('Mallory'))

        assert ledger.read(laptop.asset_id) == []

    def test_append_with_stale_revision_conflicts(self, store, laptop):
        ledger = AssignmentLedger(store)
        ledger.append(laptop, AssignmentEvent.assigned('Ansh'), {
            'status': AssetStatus.ASSIGNED,
            'assigned_user_id': 'u-ansh',
            'assigned_user_name': 'Ansh',
        })

        with pytest.raises(ConflictError):
            ledger.append(laptop, AssignmentEvent.assigned('Mara'), {
                'status': AssetStatus.ASSIGNED,
                'assigned_user_id': 'u-mara',
                'assigned_user_name': 'Mara',
            })
        assert len(store.get(laptop.asset_id).assignment_history) == 1


class TestLedgerOrdering:
    """Timestamps never decrease along the history"""

    def test_timestamps_are_non_decreasing(self, service, requester, laptop):
        for i in range(3):
            service.assign_asset(requester, laptop.asset_id, f'u-{i}', f'User {i}')
            service.unassign_asset(requester, laptop.asset_id)

        history = service.get_history(requester, laptop.asset_id)
        for before, after in zip(history, history[1:]):
            assert before.timestamp <= after.timestamp

    def test_clock_going_backwards_is_clamped(self, store, clock, laptop):
        engine = LifecycleEngine(store, clock=clock)
        engine.assign(laptop.asset_id, 'u-ansh', 'Ansh')
        first = store.get(laptop.asset_id).assignment_history[0].timestamp

        clock.rewind(3600)
        engine.unassign(laptop.asset_id, 'Admin')

        history = store.get(laptop.asset_id).assignment_history
        assert history[1].timestamp == first
        assert history[1].action == AssignmentAction.UNASSIGNED


class TestStoreGuardsHistory:
    """The store refuses any update that rewrites existing entries"""

    def _assigned(self, store, laptop):
        ledger = AssignmentLedger(store)
        return ledger.append(laptop, AssignmentEvent.assigned('Ansh', laptop.created_at), {
            'status': AssetStatus.ASSIGNED,
            'assigned_user_id': 'u-ansh',
            'assigned_user_name': 'Ansh',
        })

    def test_truncation_is_refused(self, store, laptop):
        asset = self._assigned(store, laptop)
        with pytest.raises(ValidationError):
            store.apply_update(asset.asset_id, asset.revision, {'assignment_history': []})

    def test_rewriting_an_entry_is_refused(self, store, laptop):
        asset = self._assigned(store, laptop)
        forged = [AssignmentEvent.assigned('Mallory', asset.assignment_history[0].timestamp)]
        with pytest.raises(ValidationError):
            store.apply_update(asset.asset_id, asset.revision, {'assignment_history': forged})

    def test_out_of_order_entry_is_refused(self, store, laptop):
        asset = self._assigned(store, laptop)
        earlier = asset.assignment_history[0].timestamp - timedelta(days=1)
        history = asset.assignment_history + [AssignmentEvent.unassigned('Ansh', earlier)]
        with pytest.raises(ValidationError):
            store.apply_update(asset.asset_id, asset.revision, {
                'status': AssetStatus.AVAILABLE,
                'assigned_user_id': None,
                'assigned_user_name': None,
                'assignment_history': history,
            })
        assert store.get(asset.asset_id).revision == asset.revision
