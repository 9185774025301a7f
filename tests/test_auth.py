from urllib.parse import parse_qs, urlparse

import pytest

from app import create_app
from auth import resolve_session_user
from config import TestingConfig
from errors import InvalidToken, Unauthenticated, UserNotFound
from tokens import TokenService
from conftest import GOOGLE_PROFILE, FakeOAuthClient


def _set_cookies(resp):
    return resp.headers.getlist('Set-Cookie')


def _session_cookie(resp):
    for header in _set_cookies(resp):
        if header.startswith('authorization='):
            return header
    return None


def _start_sign_in(client):
    resp = client.get('/api/google')
    assert resp.status_code == 302
    return parse_qs(urlparse(resp.headers['Location']).query)['state'][0]


# --- OAuth redirect ---

def test_google_redirects_to_provider_with_state_cookie(client):
    resp = client.get('/api/google')
    assert resp.status_code == 302
    location = resp.headers['Location']
    assert location.startswith('https://accounts.google.com/')
    state = parse_qs(urlparse(location).query)['state'][0]
    assert any(h.startswith(f'oauth_state={state}') for h in _set_cookies(resp))
    assert _session_cookie(resp) is None


def test_google_without_client_id_returns_501(user_store):
    class Unconfigured(FakeOAuthClient):
        configured = False

    app = create_app(TestingConfig, user_store=user_store, oauth_client=Unconfigured())
    resp = app.test_client().get('/api/google')
    assert resp.status_code == 501
    assert 'error' in resp.get_json()


# --- OAuth callback ---

def test_callback_creates_user_and_sets_session_cookie(client, user_store, oauth_client):
    state = _start_sign_in(client)
    resp = client.get(f'/api/callback?state={state}&code=auth-code')

    assert resp.status_code == 302
    assert resp.headers['Location'] == TestingConfig.CLIENT_ORIGIN
    cookie = _session_cookie(resp)
    assert cookie is not None
    assert 'HttpOnly' in cookie
    assert oauth_client.codes == ['auth-code']
    assert len(user_store) == 1

    profile = client.get('/api/user-profile')
    assert profile.status_code == 200
    assert profile.get_json() == {
        'id': 1,
        'googleId': 'google-123',
        'displayName': 'Ash Ketchum',
        'firstName': 'Ash',
        'lastName': 'Ketchum',
        'image': 'https://example.com/ash.png',
        'email': 'ash@example.com',
    }


def test_second_callback_for_same_account_reuses_user(client, user_store):
    for code in ('first-code', 'second-code'):
        state = _start_sign_in(client)
        resp = client.get(f'/api/callback?state={state}&code={code}')
        assert resp.status_code == 302

    assert len(user_store) == 1
    assert client.get('/api/user-profile').get_json()['id'] == 1


def test_provider_error_redirects_to_failure_without_cookie(client, user_store):
    _start_sign_in(client)
    resp = client.get('/api/callback?error=access_denied')
    assert resp.status_code == 302
    assert resp.headers['Location'] == TestingConfig.AUTH_FAILURE_REDIRECT
    assert _session_cookie(resp) is None
    assert len(user_store) == 0


def test_mismatched_state_is_rejected(client, oauth_client):
    _start_sign_in(client)
    resp = client.get('/api/callback?state=forged&code=auth-code')
    assert resp.headers['Location'] == TestingConfig.AUTH_FAILURE_REDIRECT
    assert _session_cookie(resp) is None
    assert oauth_client.codes == []


def test_callback_without_prior_redirect_is_rejected(client):
    resp = client.get('/api/callback?state=abc&code=auth-code')
    assert resp.headers['Location'] == TestingConfig.AUTH_FAILURE_REDIRECT


def test_missing_code_is_rejected(client):
    state = _start_sign_in(client)
    resp = client.get(f'/api/callback?state={state}')
    assert resp.headers['Location'] == TestingConfig.AUTH_FAILURE_REDIRECT
    assert _session_cookie(resp) is None


def test_exchange_failure_redirects_to_failure(user_store):
    app = create_app(TestingConfig, user_store=user_store, oauth_client=FakeOAuthClient(fail=True))
    client = app.test_client()
    state = _start_sign_in(client)
    resp = client.get(f'/api/callback?state={state}&code=auth-code')
    assert resp.headers['Location'] == TestingConfig.AUTH_FAILURE_REDIRECT
    assert _session_cookie(resp) is None
    assert len(user_store) == 0


# --- Session guard ---

def test_profile_without_cookie_is_unauthenticated(client):
    resp = client.get('/api/user-profile')
    assert resp.status_code == 401
    assert resp.get_json() == {'error': 'Not authenticated'}


def test_profile_with_tampered_token_is_rejected(client, user_store):
    user = user_store.create(GOOGLE_PROFILE)
    forged = TokenService('some-other-secret-with-enough-length-for-hs256').issue(user.id)
    client.set_cookie('authorization', forged)
    resp = client.get('/api/user-profile')
    assert resp.status_code == 401
    assert resp.get_json() == {'error': 'Invalid token'}


def test_profile_for_unknown_user_is_rejected(client, token_service):
    client.set_cookie('authorization', token_service.issue(42))
    resp = client.get('/api/user-profile')
    assert resp.status_code == 401
    assert resp.get_json() == {'error': 'User not found'}


def test_resolve_session_user_distinguishes_failures(user_store, token_service):
    user = user_store.create(GOOGLE_PROFILE)
    assert resolve_session_user(token_service.issue(user.id), user_store, token_service) is user
    with pytest.raises(Unauthenticated):
        resolve_session_user(None, user_store, token_service)
    with pytest.raises(InvalidToken):
        resolve_session_user('garbage', user_store, token_service)
    with pytest.raises(UserNotFound):
        resolve_session_user(token_service.issue(user.id + 1), user_store, token_service)


def test_token_from_previous_store_is_user_not_found(app, token_service):
    # A restart discards users but a cookie signed with the same secret survives
    token = token_service.issue(1)
    fresh = create_app(TestingConfig).test_client()
    fresh.set_cookie('authorization', token)
    assert fresh.get('/api/user-profile').get_json() == {'error': 'User not found'}


# --- Logout ---

def test_logout_clears_session_cookie(signed_in_client):
    assert signed_in_client.get('/api/user-profile').status_code == 200

    resp = signed_in_client.post('/api/logout')
    assert resp.status_code == 200
    cookie = _session_cookie(resp)
    assert cookie is not None
    assert 'Expires=Thu, 01 Jan 1970' in cookie

    assert signed_in_client.get('/api/user-profile').status_code == 401


def test_logout_without_session_succeeds(client):
    assert client.post('/api/logout').status_code == 200


# --- CORS ---

def test_cors_allows_client_origin_with_credentials(client):
    resp = client.get('/api/user-profile', headers={'Origin': TestingConfig.CLIENT_ORIGIN})
    assert resp.headers.get('Access-Control-Allow-Origin') == TestingConfig.CLIENT_ORIGIN
    assert resp.headers.get('Access-Control-Allow-Credentials') == 'true'
