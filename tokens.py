from datetime import datetime, timedelta, timezone

import jwt

from errors import InvalidToken


class TokenService:
    """Issues and verifies signed session tokens carrying a user id."""

    def __init__(self, secret: str, algorithm: str = 'HS256', expires_in: int | None = None):
        if not secret:
            raise ValueError('A token signing secret is required')
        self._secret = secret
        self._algorithm = algorithm
        self._expires_in = expires_in

    def issue(self, user_id: int) -> str:
        payload = {'id': user_id}
        if self._expires_in:
            payload['exp'] = datetime.now(timezone.utc) + timedelta(seconds=self._expires_in)
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token) -> int:
        """Return the user id embedded in token.

        Raises InvalidToken on any failure, including malformed input.
        """
        if not isinstance(token, str) or not token:
            raise InvalidToken()
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise InvalidToken('Token expired')
        except jwt.InvalidTokenError:
            raise InvalidToken()

        user_id = payload.get('id') if isinstance(payload, dict) else None
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise InvalidToken()
        return user_id
