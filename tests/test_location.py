import json

import pytest
import requests

from nextdoor.models import Community

RESIDENTIAL = {
    'BLK_NO': '406',
    'ROAD_NAME': 'ANG MO KIO AVENUE 10',
    'BUILDING': 'NIL',
    'ADDRESS': '406 ANG MO KIO AVENUE 10 SINGAPORE 560406',
    'POSTAL': '560406',
    'LATITUDE': '1.36249',
    'LONGITUDE': '103.85471',
}

COMMERCIAL = {
    'BLK_NO': '2',
    'ROAD_NAME': 'ORCHARD TURN',
    'BUILDING': 'ION ORCHARD',
    'ADDRESS': '2 ORCHARD TURN ION ORCHARD SINGAPORE 238801',
    'POSTAL': '238801',
    'LATITUDE': '1.30401',
    'LONGITUDE': '103.83196',
}


class FakeResponse:

    def __init__(self, payload=None, status_code=200, reason='OK', text=''):
        self._payload = payload
        self.status_code = status_code
        self.reason = reason
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError('No JSON object could be decoded')
        return self._payload


@pytest.fixture
def onemap(monkeypatch):
    """Replace the OneMap HTTP call; tests set ``onemap.response``."""
    class _Stub:
        response = FakeResponse({'found': 0, 'totalNumPages': 0, 'pageNum': 1, 'results': []})
        calls = []

    def _fake_get(url, params=None, headers=None, timeout=None):
        _Stub.calls.append({'url': url, 'params': params, 'headers': headers})
        if isinstance(_Stub.response, Exception):
            raise _Stub.response
        return _Stub.response

    _Stub.calls = []
    monkeypatch.setattr('nextdoor.services.onemap_service.requests.get', _fake_get)
    return _Stub


def _found(result):
    return FakeResponse({'found': 1, 'totalNumPages': 1, 'pageNum': 1, 'results': [result]})


class TestLookup:
    """Test postal code lookup."""

    def test_residential_creates_community(self, client, sectors, onemap):
        onemap.response = _found(RESIDENTIAL)

        response = client.get('/api/v1/lookup?postalCode=560406')

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['community'] == 'ANG MO KIO  10 Blk 400–409'
        assert data['community_slug'] == 'ang-mo-kio-10-blk-400409'
        assert data['area'] == 'Bishan'
        assert data['region'] == 'Central'
        assert data['block'] == '406'
        assert data['latitude'] == pytest.approx(1.36249)
        assert data['can_join'] is True
        assert data['address_classification']['is_residential'] is True
        assert data['postal_sector']['sector_code'] == '56'

        community = Community.query.filter_by(slug='ang-mo-kio-10-blk-400409').one()
        assert data['community_id'] == str(community.id)

    def test_repeat_lookup_reuses_community(self, client, sectors, onemap):
        onemap.response = _found(RESIDENTIAL)

        client.get('/api/v1/lookup?postalCode=560406')
        client.get('/api/v1/lookup?postalCode=560406')

        assert Community.query.count() == 1

    def test_sends_token_and_params(self, client, sectors, onemap):
        onemap.response = _found(RESIDENTIAL)

        client.get('/api/v1/lookup?postalCode=560406')

        call = onemap.calls[0]
        assert call['params']['searchVal'] == '560406'
        assert call['params']['getAddrDetails'] == 'Y'
        assert call['headers']['Authorization'] == 'Bearer test-onemap-token'

    def test_commercial_cannot_join(self, client, sectors, onemap):
        onemap.response = _found(COMMERCIAL)

        response = client.get('/api/v1/lookup?postalCode=238801')

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['community'] == 'Orchard Commercial'
        assert data['can_join'] is False
        assert data['community_id'] is None
        assert Community.query.count() == 0

    def test_missing_road_name(self, client, sectors, onemap):
        result = dict(RESIDENTIAL, ROAD_NAME='', ADDRESS='')
        onemap.response = _found(result)

        response = client.get('/api/v1/lookup?postalCode=560406')

        data = json.loads(response.data)
        assert data['street'] == 'Unknown Street'
        assert data['full_address'] == 'Unknown Address'
        assert data['community'] == 'Bishan Community'

    def test_invalid_format(self, client, sectors, onemap):
        response = client.get('/api/v1/lookup?postalCode=12ab')

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data['message'] == 'Please enter a valid 6-digit Singapore postal code'
        assert onemap.calls == []

    def test_unknown_sector(self, client, sectors, onemap):
        response = client.get('/api/v1/lookup?postalCode=990000')

        assert response.status_code == 404
        assert json.loads(response.data)['message'] == 'Invalid postal code. Please check and try again.'
        assert onemap.calls == []

    def test_no_results(self, client, sectors, onemap):
        response = client.get('/api/v1/lookup?postalCode=560999')

        assert response.status_code == 404
        assert json.loads(response.data)['message'].startswith("We couldn't find detailed information")

    def test_upstream_error(self, client, sectors, onemap):
        onemap.response = FakeResponse(status_code=401, reason='Unauthorized', text='bad token')

        response = client.get('/api/v1/lookup?postalCode=560406')

        assert response.status_code == 401
        data = json.loads(response.data)
        assert data['message'] == 'OneMap API error: 401 Unauthorized'
        assert data['details'] == 'bad token'

    def test_unreachable(self, client, sectors, onemap):
        onemap.response = requests.ConnectionError('connection refused')

        response = client.get('/api/v1/lookup?postalCode=560406')

        assert response.status_code == 502
        assert json.loads(response.data)['message'] == 'Unable to reach OneMap. Please try again later.'

    def test_missing_token(self, app, client, sectors, onemap):
        app.config['ONEMAP_API_TOKEN'] = None

        response = client.get('/api/v1/lookup?postalCode=560406')

        assert response.status_code == 500
        assert json.loads(response.data)['error'] == 'service_misconfigured'


class TestOneMapSearch:

    def test_requires_postal_code(self, client, onemap):
        response = client.get('/api/onemap-search')

        assert response.status_code == 400
        assert json.loads(response.data)['error'] == 'Postal code is required'

    def test_passes_body_through(self, client, onemap):
        onemap.response = _found(RESIDENTIAL)

        response = client.get('/api/onemap-search?postalCode=560406')

        assert response.status_code == 200
        assert json.loads(response.data)['results'][0]['BLK_NO'] == '406'

    def test_upstream_failure(self, client, onemap):
        onemap.response = FakeResponse(status_code=503, reason='Service Unavailable', text='down')

        response = client.get('/api/onemap-search?postalCode=560406')

        assert response.status_code == 503
        data = json.loads(response.data)
        assert data['error'] == 'OneMap API error: 503 Service Unavailable'
        assert data['details'] == 'down'


class TestRegions:

    def test_regions(self, client, sectors):
        response = client.get('/api/v1/regions')

        assert response.status_code == 200
        regions = json.loads(response.data)['regions']
        assert [r['name'] for r in regions] == ['Central', 'East', 'North', 'Northeast', 'West']
        assert 'Punggol' in regions[3]['areas']

    def test_region_sectors(self, client, sectors):
        response = client.get('/api/v1/regions/North/sectors')

        assert response.status_code == 200
        codes = [s['sector_code'] for s in json.loads(response.data)['sectors']]
        assert codes[:3] == ['69', '70', '71']

    def test_unknown_region(self, client, sectors):
        response = client.get('/api/v1/regions/Atlantis/sectors')
        assert response.status_code == 404
