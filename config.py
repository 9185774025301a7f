# config.py

import os
from dotenv import load_dotenv, find_dotenv

# Load environment variables from .env file (install python-dotenv: pip install python-dotenv)
dotenv_path = find_dotenv()
if dotenv_path:
    load_dotenv(dotenv_path)
else:
    # fallback: try loading default .env in cwd
    load_dotenv()


def _env_int(name, default):
    value = os.environ.get(name)
    if value is None or value.strip() == '':
        return default
    return int(value)


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    # --- CORE FLASK CONFIG ---
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'a_very_secret_and_complex_key_replace_me'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # --- SESSION TOKEN CONFIG ---
    # The signing secret must be set per environment. Rotating it invalidates
    # every issued session cookie.
    JWT_SECRET = os.environ.get('JWT_SECRET') or SECRET_KEY
    JWT_ALGORITHM = os.environ.get('JWT_ALGORITHM', 'HS256')
    # Unset (or 0) means tokens carry no expiry claim
    JWT_EXPIRES_SECONDS = _env_int('JWT_EXPIRES_SECONDS', 0) or None

    # --- COOKIE CONFIG ---
    COOKIE_NAME = 'authorization'
    # Parent domain shared by the frontend and backend (e.g. 'localhost' or
    # '.example.com'). None keeps the cookie host-only.
    COOKIE_DOMAIN = os.environ.get('COOKIE_DOMAIN') or None
    COOKIE_SECURE = _env_bool('COOKIE_SECURE', False)
    COOKIE_SAMESITE = os.environ.get('COOKIE_SAMESITE', 'Lax')
    OAUTH_STATE_COOKIE = 'oauth_state'
    OAUTH_STATE_TTL = 600  # OAuth state valid for 10 minutes

    # --- FRONTEND ---
    CLIENT_ORIGIN = os.environ.get('CLIENT_ORIGIN') or 'http://localhost:8080'
    AUTH_FAILURE_REDIRECT = os.environ.get('AUTH_FAILURE_REDIRECT') or (CLIENT_ORIGIN + '/?auth=failed')

    # --- Google OAuth2 configuration ---
    # The redirect URI should point to /api/callback
    # (e.g., http://localhost:3000/api/callback)
    GOOGLE_CLIENT_ID = os.environ.get('GOOGLE_CLIENT_ID') or None
    GOOGLE_CLIENT_SECRET = os.environ.get('GOOGLE_CLIENT_SECRET') or None
    GOOGLE_OAUTH_REDIRECT = os.environ.get('GOOGLE_OAUTH_REDIRECT') or None
    OAUTH_TIMEOUT_SECONDS = _env_int('OAUTH_TIMEOUT_SECONDS', 10)

    # --- Stable Diffusion (AUTOMATIC1111 compatible) CONFIG ---
    STABLE_DIFFUSION_URL = os.environ.get('STABLE_DIFFUSION_URL') or 'http://127.0.0.1:7860'
    # Seconds to wait for txt2img; 0 waits indefinitely
    STABLE_DIFFUSION_TIMEOUT = _env_int('STABLE_DIFFUSION_TIMEOUT', 120)

    # --- CREATOR LIMITS ---
    MAX_ANIMAL_TYPES = 2
    MAX_ABILITIES = 3
    NAME_MAX_LENGTH = 20
    DESCRIPTION_MAX_LENGTH = 200


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing-secret-key-not-for-production-use'
    JWT_SECRET = 'testing-jwt-secret-key-not-for-production-use'
    JWT_EXPIRES_SECONDS = None
    COOKIE_DOMAIN = None
    COOKIE_SECURE = False
    CLIENT_ORIGIN = 'http://localhost:8080'
    AUTH_FAILURE_REDIRECT = 'http://localhost:8080/?auth=failed'
    GOOGLE_CLIENT_ID = 'test-client-id'
    GOOGLE_CLIENT_SECRET = 'test-client-secret'
    GOOGLE_OAUTH_REDIRECT = 'http://localhost:3000/api/callback'
    STABLE_DIFFUSION_URL = 'http://sd.test:7860'
    STABLE_DIFFUSION_TIMEOUT = 5
