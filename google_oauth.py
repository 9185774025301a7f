"""Google OAuth2 (authorization code flow) helpers.

Only the provider side lives here: building the consent URL, exchanging the
authorization code and fetching the OpenID profile. Session handling is in
auth.py.
"""

import urllib.parse

import requests

from errors import OAuthExchangeError

AUTH_URI = 'https://accounts.google.com/o/oauth2/v2/auth'
TOKEN_URI = 'https://oauth2.googleapis.com/token'
USERINFO_URI = 'https://openidconnect.googleapis.com/v1/userinfo'
SCOPE = 'openid email profile'


class GoogleOAuthClient:
    def __init__(self, client_id, client_secret, timeout=10, session=None):
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def configured(self):
        return bool(self.client_id and self.client_secret)

    def authorization_url(self, state, redirect_uri):
        params = {
            'client_id': self.client_id,
            'response_type': 'code',
            'scope': SCOPE,
            'redirect_uri': redirect_uri,
            'prompt': 'select_account',
            'state': state,
        }
        return AUTH_URI + '?' + urllib.parse.urlencode(params)

    def fetch_profile(self, code, redirect_uri):
        """Exchange an authorization code and return the user's profile.

        The returned dict uses the keys UserStore.create expects.
        """
        data = {
            'code': code,
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'redirect_uri': redirect_uri,
            'grant_type': 'authorization_code',
        }
        try:
            r = self._session.post(TOKEN_URI, data=data, timeout=self.timeout)
            r.raise_for_status()
            tok = r.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise OAuthExchangeError(f'Failed to exchange authorization code with Google: {e}') from e

        access_token = tok.get('access_token') if isinstance(tok, dict) else None
        if not access_token:
            raise OAuthExchangeError('Google did not return an access token')

        try:
            ui = self._session.get(
                USERINFO_URI,
                headers={'Authorization': f'Bearer {access_token}'},
                timeout=self.timeout,
            )
            ui.raise_for_status()
            userinfo = ui.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise OAuthExchangeError(f'Failed to fetch user information from Google: {e}') from e

        if not isinstance(userinfo, dict) or not userinfo.get('sub'):
            raise OAuthExchangeError('Google did not return an account id')

        return profile_from_userinfo(userinfo)


def profile_from_userinfo(userinfo):
    """Map an OpenID Connect userinfo document to a user profile."""
    return {
        'google_id': str(userinfo['sub']),
        'display_name': userinfo.get('name') or '',
        'first_name': userinfo.get('given_name') or '',
        'last_name': userinfo.get('family_name') or '',
        'image': userinfo.get('picture') or '',
        'email': userinfo.get('email') or '',
    }
