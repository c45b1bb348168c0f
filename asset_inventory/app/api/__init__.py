from .auth_routes import auth_bp
from .asset_routes import asset_bp
from .asset_detail_routes import asset_detail_bp

__all__ = ['auth_bp', 'asset_bp', 'asset_detail_bp']
