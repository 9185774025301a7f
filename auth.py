"""Google sign-in and cookie based sessions.

The OAuth callback creates (or finds) the local user, signs a session token
for it and stores the token in an HttpOnly cookie shared with the frontend.
Protected views use the session_required decorator, which resolves the
cookie back to a user.
"""

import secrets
from functools import wraps
from flask import Blueprint, request, jsonify, current_app, redirect, url_for, make_response

from errors import AuthError, Unauthenticated, UserNotFound, OAuthExchangeError

auth_bp = Blueprint('auth', __name__, url_prefix='/api')


def _user_store():
    return current_app.extensions['user_store']


def _token_service():
    return current_app.extensions['token_service']


def _oauth_client():
    return current_app.extensions['google_oauth']


def _redirect_uri():
    return current_app.config.get('GOOGLE_OAUTH_REDIRECT') or url_for('auth.google_callback', _external=True)


def resolve_session_user(cookie_value, store, tokens):
    """Resolve a session cookie value to a User.

    Raises Unauthenticated, InvalidToken or UserNotFound.
    """
    if not cookie_value:
        raise Unauthenticated()
    user_id = tokens.verify(cookie_value)
    user = store.find_by_id(user_id)
    if user is None:
        raise UserNotFound()
    return user


def session_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        cookie_value = request.cookies.get(current_app.config['COOKIE_NAME'])
        try:
            user = resolve_session_user(cookie_value, _user_store(), _token_service())
        except AuthError as e:
            current_app.logger.info('Rejected %s %s: %s', request.method, request.path, e.kind)
            return jsonify({'error': str(e)}), 401
        # Pass the user as the first arg to handlers
        return f(user, *args, **kwargs)
    return decorated


def _failure_redirect(reason):
    cfg = current_app.config
    current_app.logger.warning('Google sign-in failed: %s', reason)
    resp = redirect(cfg['AUTH_FAILURE_REDIRECT'])
    resp.delete_cookie(cfg['OAUTH_STATE_COOKIE'], path='/api')
    return resp


@auth_bp.route('/google', methods=['GET'])
def google_auth_start():
    """Start the OAuth2 flow with Google."""
    cfg = current_app.config
    oauth = _oauth_client()
    if not oauth.configured:
        return jsonify({'error': 'Google OAuth not configured on server.'}), 501

    # The CSRF state lives in a short-lived cookie, so nothing is kept server side
    state = secrets.token_urlsafe(16)
    resp = redirect(oauth.authorization_url(state, _redirect_uri()))
    resp.set_cookie(
        cfg['OAUTH_STATE_COOKIE'],
        state,
        max_age=cfg['OAUTH_STATE_TTL'],
        httponly=True,
        secure=cfg['COOKIE_SECURE'],
        samesite='Lax',
        path='/api',
    )
    return resp


@auth_bp.route('/callback', methods=['GET'])
def google_callback():
    cfg = current_app.config

    error = request.args.get('error')
    if error:
        return _failure_redirect(f'provider returned {error}')

    state = request.args.get('state')
    expected_state = request.cookies.get(cfg['OAUTH_STATE_COOKIE'])
    if not state or not expected_state or not secrets.compare_digest(state, expected_state):
        return _failure_redirect('invalid or expired OAuth state')

    code = request.args.get('code')
    if not code:
        return _failure_redirect('missing authorization code')

    try:
        profile = _oauth_client().fetch_profile(code, _redirect_uri())
    except OAuthExchangeError as e:
        return _failure_redirect(str(e))

    user, created = _user_store().get_or_create(profile)
    if created:
        current_app.logger.info('New Google user registered: id=%s', user.id)
    else:
        current_app.logger.info('Google user logged in: id=%s', user.id)

    token = _token_service().issue(user.id)
    resp = redirect(cfg['CLIENT_ORIGIN'])
    resp.set_cookie(
        cfg['COOKIE_NAME'],
        token,
        max_age=cfg.get('JWT_EXPIRES_SECONDS'),
        httponly=True,
        secure=cfg['COOKIE_SECURE'],
        samesite=cfg['COOKIE_SAMESITE'],
        domain=cfg['COOKIE_DOMAIN'],
    )
    resp.delete_cookie(cfg['OAUTH_STATE_COOKIE'], path='/api')
    return resp


@auth_bp.route('/user-profile', methods=['GET'])
@session_required
def user_profile(user):
    return jsonify(user.to_dict()), 200


@auth_bp.route('/logout', methods=['POST'])
def logout():
    cfg = current_app.config
    resp = make_response(jsonify({'message': 'Logged out successfully'}), 200)
    resp.delete_cookie(
        cfg['COOKIE_NAME'],
        domain=cfg['COOKIE_DOMAIN'],
        secure=cfg['COOKIE_SECURE'],
        httponly=True,
        samesite=cfg['COOKIE_SAMESITE'],
    )
    return resp
