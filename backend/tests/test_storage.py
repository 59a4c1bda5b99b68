import time
from decimal import Decimal

import pytest

from fundraiser import errors
from fundraiser.storage import (
    CAMPAIGN_SETTINGS, DONATIONS, NEWSLETTER_SUBSCRIBERS, MemoryStore, create_store, seed_default_campaign,
)


def test_insert_donation_sets_id_and_timestamps(store):
    d = store.insert(DONATIONS, {'donor_name': 'Tendai', 'amount': '25', 'email': 'tendai@gmail.com'})
    assert d.id
    assert d.amount == Decimal('25.00')
    assert d.created_at is not None
    assert d.updated_at is not None
    assert d.is_anonymous is False


def test_insert_accepts_camel_case_fields(store):
    d = store.insert(DONATIONS, {'donorName': 'Rudo', 'amount': 10, 'isAnonymous': False})
    assert d.donor_name == 'Rudo'


def test_anonymous_donation_drops_name(store):
    d = store.insert(DONATIONS, {'donor_name': 'Hidden', 'amount': '5.00', 'is_anonymous': True})
    assert d.donor_name is None
    assert d.is_anonymous is True


@pytest.mark.parametrize('fields', [
    {'amount': '0'},
    {'amount': '-3.50'},
    {'amount': '1.234'},
    {'donor_name': 'No amount'},
    {'amount': '10', 'email': 'not-an-email'},
])
def test_insert_rejects_malformed_donation(store, fields):
    with pytest.raises(errors.ValidationError) as exc:
        store.insert(DONATIONS, fields)
    assert exc.value.errors
    assert store.list_all(DONATIONS) == []


def test_unknown_entity(store):
    with pytest.raises(ValueError):
        store.list_all('payments')


def test_lists_newest_first(store):
    for amount in ('25', '50', '100'):
        store.insert(DONATIONS, {'amount': amount})
        # keep timestamps distinct, sql ties are unordered
        time.sleep(0.002)
    assert [d.amount for d in store.list_all(DONATIONS)] == [
        Decimal('100.00'), Decimal('50.00'), Decimal('25.00'),
    ]


def test_list_returns_a_new_list(store):
    store.insert(DONATIONS, {'amount': '1'})
    first = store.list_all(DONATIONS)
    first.clear()
    assert len(store.list_all(DONATIONS)) == 1


def test_listed_records_are_copies(store):
    store.insert(DONATIONS, {'donor_name': 'Farai', 'amount': '20'})
    listed = store.list_all(DONATIONS)[0]
    listed.amount = Decimal('9999.00')
    listed.donor_name = 'Someone else'
    again = store.list_all(DONATIONS)[0]
    assert again.amount == Decimal('20.00')
    assert again.donor_name == 'Farai'


def test_inserted_record_is_a_copy(store):
    d = store.insert(DONATIONS, {'amount': '20'})
    d.amount = Decimal('1.00')
    assert store.list_all(DONATIONS)[0].amount == Decimal('20.00')


def test_duplicate_subscriber_conflicts(store):
    first = store.insert(NEWSLETTER_SUBSCRIBERS, {'email': 'Chipo@Gmail.com'})
    with pytest.raises(errors.ConflictError):
        store.insert(NEWSLETTER_SUBSCRIBERS, {'email': ' chipo@gmail.com '})
    subscribers = store.list_all(NEWSLETTER_SUBSCRIBERS)
    assert [s.id for s in subscribers] == [first.id]
    assert subscribers[0].email == 'chipo@gmail.com'
    assert store.count(NEWSLETTER_SUBSCRIBERS) == 1


def test_no_active_campaign(store):
    assert store.get_active_campaign() is None


def test_upsert_inserts_then_updates(store):
    created = store.upsert_campaign({'campaign_title': 'Uniforms', 'target_amount': '500', 'is_active': True})
    updated = store.upsert_campaign({'campaign_title': 'Uniforms and shoes', 'target_amount': '750.00'})
    assert updated.id == created.id
    assert updated.campaign_title == 'Uniforms and shoes'
    assert updated.target_amount == Decimal('750.00')
    assert store.count(CAMPAIGN_SETTINGS) == 1
    assert store.get_active_campaign().campaign_title == 'Uniforms and shoes'


def test_upsert_leaves_held_campaign_untouched(store):
    held = store.upsert_campaign({'campaign_title': 'Uniforms', 'target_amount': '500'})
    active = store.get_active_campaign()
    store.upsert_campaign({'campaign_title': 'Books', 'target_amount': '800'})
    assert held.campaign_title == 'Uniforms'
    assert active.target_amount == Decimal('500.00')
    assert store.get_active_campaign().campaign_title == 'Books'


def test_upsert_rejects_empty_title(store):
    with pytest.raises(errors.ValidationError):
        store.upsert_campaign({'campaign_title': '  ', 'target_amount': '500'})


def test_only_one_campaign_active(store):
    store.insert(CAMPAIGN_SETTINGS, {'campaign_title': 'Old', 'target_amount': '100'})
    store.insert(CAMPAIGN_SETTINGS, {'campaign_title': 'New', 'target_amount': '200'})
    active = [c for c in store.list_all(CAMPAIGN_SETTINGS) if c.is_active]
    assert [c.campaign_title for c in active] == ['New']
    assert store.get_active_campaign().campaign_title == 'New'


def test_deactivated_campaign_is_replaced_on_next_upsert(store):
    first = store.upsert_campaign({'campaign_title': 'Spring', 'target_amount': '100', 'is_active': False})
    assert store.get_active_campaign() is None
    second = store.upsert_campaign({'campaign_title': 'Autumn', 'target_amount': '300'})
    assert second.id != first.id
    assert store.get_active_campaign().id == second.id


def test_seed_default_campaign(store, monkeypatch):
    monkeypatch.setenv('DEFAULT_CAMPAIGN_TITLE', 'Back to school')
    monkeypatch.setenv('DEFAULT_TARGET_AMOUNT', '2500.00')
    monkeypatch.setenv('DEFAULT_CAMPAIGN_END_DATE', '2030-01-31T16:00:00Z')
    campaign = seed_default_campaign(store)
    assert campaign.campaign_title == 'Back to school'
    assert campaign.target_amount == Decimal('2500.00')
    assert campaign.end_date.isoformat() == '2030-01-31T16:00:00'
    # seeding again keeps the existing record
    assert seed_default_campaign(store).id == campaign.id
    assert store.count(CAMPAIGN_SETTINGS) == 1


def test_create_store_from_environment(monkeypatch):
    monkeypatch.setenv('STORE_BACKEND', 'memory')
    assert isinstance(create_store(), MemoryStore)
    monkeypatch.setenv('STORE_BACKEND', 'redis')
    with pytest.raises(ValueError):
        create_store()
