import datetime
from decimal import Decimal

from fastapi.testclient import TestClient

from fundraiser.main import create_app


def test_campaign_not_configured(client):
    assert client.get('/api/campaign').status_code == 404
    assert client.get('/api/campaign/progress').status_code == 404


def test_get_active_campaign(client, campaign):
    resp = client.get('/api/campaign')
    assert resp.status_code == 200
    body = resp.json()
    assert body['id'] == campaign.id
    assert body['campaignTitle'] == 'School supplies drive'
    assert Decimal(body['targetAmount']) == Decimal('1000')
    assert body['isActive'] is True
    assert body['endDate'] is None


def test_progress_quarter_raised(client, campaign):
    client.post('/api/donations', json={'amount': 250})
    body = client.get('/api/campaign/progress').json()
    assert Decimal(body['progressPercentage']) == Decimal('25')
    assert Decimal(body['remainingAmount']) == Decimal('750')
    assert Decimal(body['totalRaised']) == Decimal('250')
    assert body['countdown'] == {'days': 0, 'hours': 0, 'minutes': 0, 'seconds': 0}


def test_progress_countdown_to_future_end_date(client):
    end = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(days=3, hours=5, minutes=30)
    resp = client.put('/api/admin/campaign', json={
        'campaignTitle': 'Clinic roof',
        'targetAmount': '4000.00',
        'endDate': end.isoformat(),
        'isActive': True,
    })
    assert resp.status_code == 201
    countdown = client.get('/api/campaign/progress').json()['countdown']
    assert countdown['days'] == 3
    assert countdown['hours'] == 5


def test_admin_campaign_update_in_place(client, campaign):
    resp = client.put('/api/admin/campaign', json={
        'campaignTitle': 'School supplies drive 2',
        'targetAmount': '1500',
        'endDate': '2030-06-30T12:00:00Z',
        'isActive': True,
    })
    assert resp.status_code == 201
    body = resp.json()
    assert body['id'] == campaign.id
    assert Decimal(body['targetAmount']) == Decimal('1500')
    assert body['endDate'] == '2030-06-30T12:00:00'
    assert client.get('/api/campaign').json()['campaignTitle'] == 'School supplies drive 2'


def test_admin_campaign_created_when_missing(client):
    resp = client.put('/api/admin/campaign', json={'campaignTitle': 'First', 'targetAmount': 100})
    assert resp.status_code == 201
    assert client.get('/api/campaign').json()['id'] == resp.json()['id']


def test_admin_campaign_validation(client):
    resp = client.put('/api/admin/campaign', json={'campaignTitle': '', 'targetAmount': 0})
    assert resp.status_code == 400
    body = resp.json()
    assert body['detail'] == 'Invalid campaign settings'
    assert {e['field'] for e in body['errors']} == {'campaignTitle', 'targetAmount'}


def test_admin_stats(client, campaign):
    for amount in (25, 50, 100):
        client.post('/api/admin/donations', json={'amount': amount})
    client.post('/api/newsletter/subscribe', json={'email': 'one@gmail.com'})
    client.post('/api/newsletter/subscribe', json={'email': 'two@gmail.com'})
    body = client.get('/api/admin/stats').json()
    assert Decimal(body['totalRaised']) == Decimal('175')
    assert body['donorCount'] == 3
    assert Decimal(body['averageDonation']) == Decimal('58.33')
    assert body['newsletterCount'] == 2
    assert Decimal(body['campaign']['progressPercentage']) == Decimal('17.5')
    assert Decimal(body['campaign']['remainingAmount']) == Decimal('825')


def test_admin_stats_without_campaign(client):
    body = client.get('/api/admin/stats').json()
    assert body['campaign'] is None
    assert body['newsletterCount'] == 0


def test_campaign_store_failure(broken_client):
    assert broken_client.get('/api/campaign').status_code == 500
    assert broken_client.get('/api/campaign/progress').status_code == 500
    assert broken_client.get('/api/admin/stats').status_code == 500
    resp = broken_client.put('/api/admin/campaign', json={'campaignTitle': 'x', 'targetAmount': 1})
    assert resp.status_code == 500


def test_app_from_environment_seeds_campaign(monkeypatch):
    monkeypatch.setenv('STORE_BACKEND', 'memory')
    monkeypatch.setenv('DEFAULT_CAMPAIGN_TITLE', 'Seeded drive')
    client = TestClient(create_app())
    body = client.get('/api/campaign').json()
    assert body['campaignTitle'] == 'Seeded drive'
    assert Decimal(body['targetAmount']) == Decimal('4000')
