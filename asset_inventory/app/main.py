"""
Main Flask application for the asset inventory
"""
from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix
import logging
from asset_inventory.config.settings import (
    FLASK_SECRET_KEY,
    FLASK_ENV,
    PORT,
    LOG_LEVEL,
    CORS_ORIGINS,
    PUBLIC_BASE_URL,
    ASSET_DETAIL_PUBLIC,
    ASSET_DETAIL_CACHE_CONTROL,
)
from asset_inventory.app.api import auth_bp, asset_bp, asset_detail_bp
from asset_inventory.app.services import AssetStore, InventoryService, QRCodec, build_asset_store

logger = logging.getLogger(__name__)


def create_app(store: AssetStore = None, public_base_url: str = PUBLIC_BASE_URL):
    """Create and configure Flask application

    store selects the persistence backend; when omitted it is built from
    ASSET_STORE_BACKEND.
    """
    logging.basicConfig(level=LOG_LEVEL)

    app = Flask(__name__)

    # Configure proxy fix for Cloud Run load balancer
    app.wsgi_app = ProxyFix(
        app.wsgi_app,
        x_proto=1,  # Trust X-Forwarded-Proto header for scheme (http/https)
        x_host=1    # Trust X-Forwarded-Host header for hostname
    )

    # Configuration
    app.secret_key = FLASK_SECRET_KEY
    app.config['SESSION_COOKIE_SECURE'] = FLASK_ENV != 'development'
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'
    app.config['PERMANENT_SESSION_LIFETIME'] = 3600  # 1 hour session lifetime
    app.config['ASSET_DETAIL_PUBLIC'] = ASSET_DETAIL_PUBLIC
    app.config['ASSET_DETAIL_CACHE_CONTROL'] = ASSET_DETAIL_CACHE_CONTROL

    # Enable CORS
    CORS(app, supports_credentials=True, origins=CORS_ORIGINS)

    # Wire services
    if store is None:
        store = build_asset_store()
    app.extensions['inventory_service'] = InventoryService(store, codec=QRCodec(public_base_url))
    logger.info(f"Asset store: {type(store).__name__}; QR locator base: {public_base_url or '(fallback payload)'}")

    # Register blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(asset_bp)
    app.register_blueprint(asset_detail_bp)

    # Health check endpoint
    @app.route('/health')
    def health_check():
        return jsonify({'status': 'healthy'}), 200

    # Error handlers
    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({'error': 'Internal server error'}), 500

    return app


if __name__ == '__main__':
    create_app().run(host='0.0.0.0', port=PORT, debug=FLASK_ENV == 'development')
