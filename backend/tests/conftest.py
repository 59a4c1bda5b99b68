import os
import sys
# ensure backend package is on path for tests
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
from fastapi.testclient import TestClient

from fundraiser import errors
from fundraiser.main import create_app
from fundraiser.storage import MemoryStore, SqlStore


@pytest.fixture(params=['memory', 'sql'])
def store(request):
    if request.param == 'memory':
        return MemoryStore()
    return SqlStore.from_url('sqlite://')


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def client(memory_store):
    return TestClient(create_app(memory_store))


@pytest.fixture
def campaign(memory_store):
    return memory_store.upsert_campaign({
        'campaign_title': 'School supplies drive',
        'target_amount': '1000.00',
        'end_date': None,
        'is_active': True,
    })


class BrokenStore(MemoryStore):
    """Every read and write fails like a lost database connection"""

    def list_all(self, entity):
        raise errors.StoreError('connection refused')

    def insert(self, entity, fields):
        raise errors.StoreError('connection refused')

    def count(self, entity):
        raise errors.StoreError('connection refused')

    def get_active_campaign(self):
        raise errors.StoreError('connection refused')

    def upsert_campaign(self, fields):
        raise errors.StoreError('connection refused')


@pytest.fixture
def broken_client():
    return TestClient(create_app(BrokenStore()))


class ConflictingStore(MemoryStore):
    """Writes collide with an existing row, as on a unique index violation"""

    def list_all(self, entity):
        raise errors.ConflictError('duplicate key value')

    def insert(self, entity, fields):
        raise errors.ConflictError('duplicate key value')

    def upsert_campaign(self, fields):
        raise errors.ConflictError('duplicate key value')


@pytest.fixture
def conflicting_client():
    return TestClient(create_app(ConflictingStore()))
