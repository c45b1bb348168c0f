"""
Unit tests for asset inventory models
"""
from datetime import datetime, timezone
import pytest
from asset_inventory.app.errors import ValidationError
from asset_inventory.app.models import (
    Asset,
    AssetFilter,
    AssetStatus,
    AssetType,
    AssignmentAction,
    AssignmentEvent,
    RequesterContext,
)
from asset_inventory.app.models.assignment_event import parse_timestamp
from conftest import laptop_draft


class TestAssetDraft:
    """Tests for Asset.from_draft"""

    def test_create_from_draft(self):
        """Test building an asset from client input"""
        asset = Asset.from_draft(laptop_draft(), 'acme')

        assert asset.asset_id is None
        assert asset.tenant_id == 'acme'
        assert asset.asset_tag == 'LAPTOP-001'
        assert asset.asset_type == AssetType.HARDWARE
        assert asset.status == AssetStatus.AVAILABLE
        assert asset.location_name == 'Building A - Floor 3'
        assert asset.assignment_history == []
        assert not asset.is_assigned
        assert not asset.is_terminal

    def test_draft_strips_whitespace(self):
        """Test surrounding whitespace is dropped"""
        asset = Asset.from_draft(laptop_draft(asset_tag='  LAPTOP-001 ', name=' Dell '), 'acme')
        assert asset.asset_tag == 'LAPTOP-001'
        assert asset.name == 'Dell'

    def test_draft_initial_status(self):
        """Test new assets may start in repair or retired"""
        assert Asset.from_draft(laptop_draft(status='in_repair'), 'acme').status == AssetStatus.IN_REPAIR
        assert Asset.from_draft(laptop_draft(status='retired'), 'acme').status == AssetStatus.RETIRED

    @pytest.mark.parametrize('overrides', [
        {'asset_tag': ''},
        {'asset_tag': None},
        {'name': '   '},
        {'type': 'furniture'},
        {'status': 'assigned'},
        {'status': 'disposed'},
        {'status': 'broken'},
        {'serial_number': 12345},
    ])
    def test_invalid_drafts(self, overrides):
        """Test malformed drafts are rejected"""
        with pytest.raises(ValidationError):
            Asset.from_draft(laptop_draft(**overrides), 'acme')

    def test_draft_must_be_a_mapping(self):
        with pytest.raises(ValidationError):
            Asset.from_draft(['LAPTOP-001'], 'acme')

    def test_lifecycle_fields_are_ignored(self):
        """Test a draft cannot pre-assign or seed history"""
        asset = Asset.from_draft(laptop_draft(
            assigned_user_id='u-1',
            assigned_user_name='Ansh',
            assignment_history=[{'action': 'assigned'}],
            asset_id='chosen-id',
            revision=99,
        ), 'acme')

        assert asset.assigned_user_id is None
        assert asset.assigned_user_name is None
        assert asset.assignment_history == []
        assert asset.asset_id is None
        assert asset.revision == 0


class TestAssetDetailsPatch:
    """Tests for Asset.parse_details_patch"""

    def test_type_alias(self):
        assert Asset.parse_details_patch({'type': 'software'}) == {'asset_type': AssetType.SOFTWARE}

    def test_optional_fields_can_be_cleared(self):
        assert Asset.parse_details_patch({'warranty_expiry': ''}) == {'warranty_expiry': None}

    @pytest.mark.parametrize('patch', [
        {'status': 'retired'},
        {'assigned_user_id': 'u-1'},
        {'assignment_history': []},
        {'tenant_id': 'globex'},
        {'asset_tag': ''},
        {'name': None},
        {'type': 'furniture'},
    ])
    def test_rejected_patches(self, patch):
        """Test only tag, type and descriptive fields are editable"""
        with pytest.raises(ValidationError):
            Asset.parse_details_patch(patch)


class TestAssetInvariants:
    """Tests for Asset.check_invariants"""

    def test_assigned_needs_assignee(self):
        asset = Asset(asset_tag='T-1', name='x', status=AssetStatus.ASSIGNED)
        with pytest.raises(ValidationError):
            asset.check_invariants()

    def test_assignee_needs_assigned_status(self):
        asset = Asset(asset_tag='T-1', name='x', assigned_user_id='u-1')
        with pytest.raises(ValidationError):
            asset.check_invariants()

    def test_consistent_asset_passes(self):
        Asset(asset_tag='T-1', name='x', status='assigned', assigned_user_id='u-1').check_invariants()
        Asset(asset_tag='T-2', name='y').check_invariants()


class TestAssetToDict:
    def test_to_dict(self):
        """Test converting asset to dict"""
        created = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
        asset = Asset(
            asset_id='a1',
            tenant_id='acme',
            asset_tag='LAPTOP-001',
            name='Dell XPS 15',
            status=AssetStatus.ASSIGNED,
            assigned_user_id='u-1',
            assigned_user_name='Ansh',
            created_at=created,
            assignment_history=[AssignmentEvent.assigned('Ansh', created)],
            revision=2,
        )

        data = asset.to_dict()

        assert data['asset_id'] == 'a1'
        assert data['type'] == 'hardware'
        assert data['status'] == 'assigned'
        assert data['created_at'] == '2026-01-05T09:00:00+00:00'
        assert data['assignment_history'] == [
            {'action': 'assigned', 'user_name': 'Ansh', 'timestamp': '2026-01-05T09:00:00+00:00'},
        ]
        assert data['revision'] == 2


class TestAssignmentEvent:
    """Tests for AssignmentEvent"""

    def test_string_action_and_timestamp(self):
        event = AssignmentEvent('unassigned', 'Ansh', '2024-03-01T12:30:00.000Z')

        assert event.action == AssignmentAction.UNASSIGNED
        assert event.timestamp == datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)

    def test_naive_timestamp_is_utc(self):
        assert parse_timestamp(datetime(2024, 3, 1)).tzinfo == timezone.utc

    def test_unsupported_timestamp(self):
        with pytest.raises(TypeError):
            parse_timestamp(1709296200)

    def test_equality(self):
        ts = datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert AssignmentEvent.assigned('Ansh', ts) == AssignmentEvent('assigned', 'Ansh', ts)
        assert AssignmentEvent.assigned('Ansh', ts) != AssignmentEvent.unassigned('Ansh', ts)


class TestAssetFilter:
    """Tests for AssetFilter.matches"""

    def _asset(self, **kwargs):
        defaults = {'asset_tag': 'LAPTOP-001', 'name': 'Dell XPS 15', 'serial_number': 'DXP15'}
        defaults.update(kwargs)
        return Asset(**defaults)

    def test_empty_filter_matches_everything(self):
        assert AssetFilter().matches(self._asset())

    def test_blank_search_is_ignored(self):
        assert AssetFilter(search='   ').search is None

    def test_status(self):
        asset = self._asset(status=AssetStatus.IN_REPAIR)
        assert AssetFilter(status='in_repair').matches(asset)
        assert not AssetFilter(status=AssetStatus.AVAILABLE).matches(asset)

    def test_search_is_case_insensitive(self):
        asset = self._asset()
        assert AssetFilter(search='XPS').matches(asset)
        assert AssetFilter(search='laptop').matches(asset)
        assert AssetFilter(search='dxp15').matches(asset)
        assert not AssetFilter(search='macbook').matches(asset)

    def test_missing_serial_does_not_break_search(self):
        assert not AssetFilter(search='zzz').matches(self._asset(serial_number=None))


class TestRequesterContext:
    """Tests for RequesterContext"""

    def test_authenticated_needs_tenant_and_user(self):
        assert RequesterContext('acme', 'u-1').is_authenticated
        assert not RequesterContext('acme', None).is_authenticated
        assert not RequesterContext.anonymous().is_authenticated

    def test_display_name_fallbacks(self):
        assert RequesterContext('acme', 'u-1', 'Ansh').display_name == 'Ansh'
        assert RequesterContext('acme', 'u-1').display_name == 'u-1'
        assert RequesterContext.anonymous().display_name == 'Unknown'

    def test_to_dict(self):
        assert RequesterContext('acme', 'u-1', 'Ansh').to_dict() == {
            'tenant_id': 'acme',
            'user_id': 'u-1',
            'user_name': 'Ansh',
            'is_authenticated': True,
        }
