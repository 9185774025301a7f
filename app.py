# app.py

import logging

from flask import Flask, jsonify
from flask_cors import CORS

from config import Config
from auth import auth_bp
from ai_service import ai_bp, StableDiffusionClient
from google_oauth import GoogleOAuthClient
from tokens import TokenService
from user_store import UserStore


# --- FLASK APP FACTORY ---
def create_app(config_class=Config, user_store=None, token_service=None,
               image_client=None, oauth_client=None):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    # The frontend runs on its own origin and sends the session cookie
    CORS(app, resources={r"/api/*": {"origins": app.config['CLIENT_ORIGIN']}}, supports_credentials=True)

    # --- SERVICES (one instance per app) ---
    # Users live in memory only; a restart discards them and every session.
    app.extensions['user_store'] = user_store if user_store is not None else UserStore()
    app.extensions['token_service'] = token_service if token_service is not None else TokenService(
        app.config['JWT_SECRET'],
        algorithm=app.config['JWT_ALGORITHM'],
        expires_in=app.config['JWT_EXPIRES_SECONDS'],
    )
    app.extensions['google_oauth'] = oauth_client if oauth_client is not None else GoogleOAuthClient(
        app.config['GOOGLE_CLIENT_ID'],
        app.config['GOOGLE_CLIENT_SECRET'],
        timeout=app.config['OAUTH_TIMEOUT_SECONDS'],
    )
    app.extensions['image_client'] = image_client if image_client is not None else StableDiffusionClient(
        app.config['STABLE_DIFFUSION_URL'],
        timeout=app.config['STABLE_DIFFUSION_TIMEOUT'],
    )

    # --- REGISTER BLUEPRINTS ---
    app.register_blueprint(auth_bp)
    app.register_blueprint(ai_bp)

    @app.route('/api/')
    def api_index():
        return jsonify({'status': 'ok'}), 200

    return app


# --- MAIN EXECUTION ---
if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    app = create_app()
    # The debug flag must be False in production
    app.run(debug=True, port=3000, use_reloader=False)
