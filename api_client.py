"""HTTP client for the Pokémon creator backend.

The session cookie set by the Google callback is kept in the underlying
requests.Session, so a client that has been through sign-in stays signed in.
"""

import base64
import logging

import requests

from errors import ApiError, NetworkError

logger = logging.getLogger(__name__)


class PokemonApiClient:
    def __init__(self, base_url, session=None, timeout=None):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def _url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method, path, **kwargs):
        try:
            return self.session.request(method, self._url(path), timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f'{method} {path} failed: {e}') from e

    @staticmethod
    def _error_message(resp):
        try:
            body = resp.json()
        except ValueError:
            return None
        return body.get('error') if isinstance(body, dict) else None

    def login_url(self):
        """URL the browser should open to start Google sign-in."""
        return self._url('google')

    def user_profile(self):
        """Return the signed-in user's profile, or None without a session."""
        resp = self._request('GET', 'user-profile')
        if resp.status_code == 401:
            return None
        if not resp.ok:
            raise ApiError(resp.status_code, self._error_message(resp))
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(resp.status_code, 'Invalid JSON in profile response') from e

    def is_authenticated(self):
        try:
            return self.user_profile() is not None
        except (NetworkError, ApiError) as e:
            logger.warning('Session check failed: %s', e)
            return False

    def pokemon_options(self):
        resp = self._request('GET', 'pokemon-options')
        if not resp.ok:
            raise ApiError(resp.status_code, self._error_message(resp))
        return resp.json()

    def generate_pokemon(self, name, animal_types, abilities, description=None):
        payload = {
            'name': name,
            'description': description,
            'animalTypes': list(animal_types),
            'abilities': list(abilities),
        }
        resp = self._request('POST', 'generate-pokemon', json=payload)
        if not resp.ok:
            raise ApiError(resp.status_code, self._error_message(resp))
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(resp.status_code, 'Invalid JSON in generation response') from e

    def logout(self):
        resp = self._request('POST', 'logout')
        return resp.ok

    def fetch_image(self, image_url):
        """Return the bytes behind an image reference.

        data: URIs are decoded locally, anything else is downloaded.
        """
        if image_url.startswith('data:'):
            header, _, data = image_url.partition(',')
            if not header.endswith(';base64'):
                raise ValueError('Only base64 data URLs are supported')
            return base64.b64decode(data)
        try:
            resp = self.session.get(image_url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f'GET {image_url} failed: {e}') from e
        if not resp.ok:
            raise ApiError(resp.status_code)
        return resp.content
