import json
import logging
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from flask import request
from werkzeug.exceptions import TooManyRequests

from nextdoor.models import User
from nextdoor.models.User import MAX_FAILED_ATTEMPTS
from nextdoor import security_utils
from nextdoor.security_utils import coerce_uuid, password_strong
from nextdoor.utils.logging_utils import env_level_overrides


class TestSecurity:
    """Test security features."""

    def test_password_strength(self, client):
        response = client.post('/api/v1/auth/register',
                               data=json.dumps({
                                   'email': 'test@example.com',
                                   'password': 'weak',
                                   'display_name': 'Tester'
                               }),
                               content_type='application/json')

        assert response.status_code == 400
        assert json.loads(response.data)['title'] == 'Weak Password'

    def test_password_strong_uses_config(self, app):
        assert password_strong('abcdef') is True
        assert password_strong('abcde') is False
        assert password_strong(None) is False

    def test_account_lockout(self, client, create_user):
        create_user(email='test@example.com', password='correctpassword')

        for _ in range(MAX_FAILED_ATTEMPTS + 1):
            response = client.post('/api/v1/auth/login',
                                   data=json.dumps({
                                       'email': 'test@example.com',
                                       'password': 'wrongpassword'
                                   }),
                                   content_type='application/json')

        assert response.status_code == 401

        # Correct password is still refused while locked
        response = client.post('/api/v1/auth/login',
                               data=json.dumps({
                                   'email': 'test@example.com',
                                   'password': 'correctpassword'
                               }),
                               content_type='application/json')

        assert response.status_code == 401
        user = User.find_by_email('test@example.com')
        assert user.is_locked() is True

    def test_lock_expires(self, app, create_user):
        user = create_user(password='correctpassword')
        user.lock_until = datetime.now(timezone.utc) - timedelta(minutes=1)

        assert user.is_locked() is False
        assert User.authenticate('test@example.com', 'correctpassword') is not None

    def test_expired_lock_restarts_count(self, app, create_user):
        user = create_user(password='correctpassword')
        for _ in range(MAX_FAILED_ATTEMPTS):
            assert User.authenticate('test@example.com', 'wrongpassword') is None
        assert user.is_locked() is True

        user.lock_until = datetime.now(timezone.utc) - timedelta(minutes=1)
        assert User.authenticate('test@example.com', 'wrongpassword') is None

        assert user.failed_login_attempts == 1
        assert user.is_locked() is False

    def test_security_headers(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert response.headers['X-Frame-Options'] == 'DENY'

    def test_coerce_uuid(self):
        assert coerce_uuid('not-a-uuid') is None
        assert coerce_uuid(None) is None
        assert str(coerce_uuid('12345678-1234-5678-1234-567812345678')) == '12345678-1234-5678-1234-567812345678'

    def test_unknown_route_is_json(self, client):
        response = client.get('/api/v1/does-not-exist')

        assert response.status_code == 404
        assert json.loads(response.data)['error'] == 'not_found'

    def test_request_id_is_echoed(self, client):
        response = client.get('/health', headers={'X-Request-ID': 'abc123'})

        assert response.headers['X-Request-ID'] == 'abc123'

    def test_request_id_is_generated(self, client):
        response = client.get('/health')

        assert len(response.headers['X-Request-ID']) == 32

    def test_missing_token_prompts_login(self, client):
        response = client.get('/api/v1/auth/me')
        body = json.loads(response.data)

        assert response.status_code == 401
        assert body['error'] == 'auth_required'
        assert body['redirect'] == '/login'


class TestLogLevels:

    def test_env_level_overrides(self):
        overrides = env_level_overrides({
            'APP_LOG_LEVEL_FORUM': 'debug',
            'APP_LOG_LEVEL_MAIL': 'not-a-level',
            'LOG_LEVEL': 'ERROR',
        })

        assert overrides == {'forum': logging.DEBUG}


class TestRateLimit:

    @pytest.fixture
    def limited(self, app, monkeypatch):
        monkeypatch.setitem(app.config, 'RATELIMIT_ENABLED', True)
        monkeypatch.setattr(security_utils, '_hits', {})
        clock = {'now': 1000.0}
        monkeypatch.setattr(security_utils, 'time', SimpleNamespace(monotonic=lambda: clock['now']))

        @security_utils.rate_limit(lambda: request.remote_addr, limit=2, window_sec=60)
        def ping():
            return 'ok'

        return ping, clock

    def test_limit_is_enforced(self, app, limited):
        ping, _ = limited
        with app.test_request_context('/ping', environ_base={'REMOTE_ADDR': '10.0.0.1'}):
            assert ping() == 'ok'
            assert ping() == 'ok'
            with pytest.raises(TooManyRequests):
                ping()

    def test_idle_callers_are_forgotten(self, app, limited):
        ping, clock = limited
        with app.test_request_context('/ping', environ_base={'REMOTE_ADDR': '10.0.0.1'}):
            ping()
        assert list(security_utils._hits) == ['ping:10.0.0.1']

        clock['now'] += 120
        with app.test_request_context('/ping', environ_base={'REMOTE_ADDR': '10.0.0.2'}):
            ping()

        assert list(security_utils._hits) == ['ping:10.0.0.2']
