"""Error types shared by the backend and the client workflow.

Every error is request scoped: views turn them into JSON responses or
redirects and the client workflow turns them into notifications.
"""


class PokemonAppError(Exception):
    """Base class for application errors."""


# --- Validation ---

class ValidationError(PokemonAppError):
    pass


class InvalidRequest(ValidationError):
    """A generation request is missing or has malformed fields."""


# --- Authentication ---

class AuthError(PokemonAppError):
    kind = 'auth_error'


class Unauthenticated(AuthError):
    kind = 'unauthenticated'

    def __init__(self, message='Not authenticated'):
        super().__init__(message)


class InvalidToken(AuthError):
    kind = 'invalid_token'

    def __init__(self, message='Invalid token'):
        super().__init__(message)


class UserNotFound(AuthError):
    kind = 'user_not_found'

    def __init__(self, message='User not found'):
        super().__init__(message)


# --- Upstream services ---

class UpstreamError(PokemonAppError):
    pass


class GenerationFailed(UpstreamError):
    """The image service failed or returned no image."""


class OAuthExchangeError(UpstreamError):
    """Google rejected or failed the authorization code exchange."""


# --- Client side ---

class NetworkError(PokemonAppError):
    """The backend could not be reached."""


class ApiError(PokemonAppError):
    """The backend answered with a non-success status."""

    def __init__(self, status_code, message=None):
        self.status_code = status_code
        super().__init__(message or f'API request failed with status {status_code}')
