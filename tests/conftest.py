import pytest

from app import create_app
from config import TestingConfig
from errors import GenerationFailed, OAuthExchangeError
from ai_service import ImageResult
from user_store import UserStore

FAKE_IMAGE_URL = 'data:image/png;base64,iVBORw0KGgo='

GOOGLE_PROFILE = {
    'google_id': 'google-123',
    'display_name': 'Ash Ketchum',
    'first_name': 'Ash',
    'last_name': 'Ketchum',
    'image': 'https://example.com/ash.png',
    'email': 'ash@example.com',
}


class FakeImageClient:
    def __init__(self, fail=False):
        self.fail = fail
        self.requests = []

    def generate(self, generation_request):
        self.requests.append(generation_request)
        if self.fail:
            raise GenerationFailed('Stable Diffusion API error: 500')
        return ImageResult(FAKE_IMAGE_URL, generation_request.prompt())


class FakeOAuthClient:
    configured = True

    def __init__(self, profile=None, fail=False):
        self.profile = profile or GOOGLE_PROFILE
        self.fail = fail
        self.codes = []

    def authorization_url(self, state, redirect_uri):
        return f'https://accounts.google.com/o/oauth2/v2/auth?state={state}&redirect_uri={redirect_uri}'

    def fetch_profile(self, code, redirect_uri):
        self.codes.append(code)
        if self.fail:
            raise OAuthExchangeError('Google did not return an access token')
        return dict(self.profile)


@pytest.fixture
def user_store():
    return UserStore()


@pytest.fixture
def image_client():
    return FakeImageClient()


@pytest.fixture
def oauth_client():
    return FakeOAuthClient()


@pytest.fixture
def app(user_store, image_client, oauth_client):
    return create_app(
        TestingConfig,
        user_store=user_store,
        image_client=image_client,
        oauth_client=oauth_client,
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def token_service(app):
    return app.extensions['token_service']


@pytest.fixture
def signed_in_client(client, user_store, token_service):
    user = user_store.create(GOOGLE_PROFILE)
    client.set_cookie('authorization', token_service.issue(user.id))
    return client
