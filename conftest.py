"""
Shared pytest fixtures: in-memory store, inventory service and Flask client
"""
from datetime import datetime, timedelta, timezone
import pytest
from asset_inventory.app.main import create_app
from asset_inventory.app.models import RequesterContext
from asset_inventory.app.services import InMemoryAssetStore, InventoryService, QRCodec

BASE_URL = 'https://assets.example.com'


class FakeClock:
    """Deterministic clock; each call returns the current time then advances one second"""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current

    def rewind(self, seconds):
        self.now = self.now - timedelta(seconds=seconds)


def laptop_draft(**overrides):
    draft = {
        'asset_tag': 'LAPTOP-001',
        'name': 'Dell XPS 15',
        'type': 'hardware',
        'serial_number': 'DXP15-2024-001',
        'category_name': 'Laptops',
        'department_name': 'Engineering',
        'location_name': 'Building A - Floor 3',
        'purchase_date': '2024-01-15',
        'warranty_expiry': '2027-01-15',
    }
    draft.update(overrides)
    return draft


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryAssetStore(clock=clock)


@pytest.fixture
def service(store):
    return InventoryService(store, codec=QRCodec(BASE_URL))


@pytest.fixture
def requester():
    return RequesterContext(tenant_id='acme', user_id='u-admin', user_name='Admin')


@pytest.fixture
def other_tenant():
    return RequesterContext(tenant_id='globex', user_id='u-intruder', user_name='Intruder')


@pytest.fixture
def laptop(service, requester):
    return service.create_asset(requester, laptop_draft())


@pytest.fixture
def app(store):
    app = create_app(store=store, public_base_url=BASE_URL)
    app.config['TESTING'] = True
    app.config['SESSION_COOKIE_SECURE'] = False
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, tenant_id='acme', user_id='u-admin', user_name='Admin'):
    """Seed the session the deployment's login flow would create"""
    with client.session_transaction() as session:
        session['tenant_id'] = tenant_id
        session['user_id'] = user_id
        session['user_name'] = user_name
