"""
Application configuration settings
"""
import os
from dotenv import load_dotenv

load_dotenv()

# Google Cloud Configuration
GCP_PROJECT_ID = os.getenv('GCP_PROJECT_ID')

# Application Configuration
FLASK_SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-me')
FLASK_ENV = os.getenv('FLASK_ENV', 'development')
PORT = int(os.getenv('PORT', 8080))
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

# CORS origins - strip whitespace and filter empty strings
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv('CORS_ORIGINS', 'http://localhost:3000,http://localhost:8080').split(',')
    if origin.strip()
]

# Asset store backend: 'firestore' or 'memory'
ASSET_STORE_BACKEND = os.getenv('ASSET_STORE_BACKEND', 'firestore').lower()

# Firestore Collections
ASSETS_COLLECTION = os.getenv('ASSETS_COLLECTION', 'assets')
ASSET_TAGS_COLLECTION = os.getenv('ASSET_TAGS_COLLECTION', 'asset_tags')

# Tenant assigned to documents written before tenants existed
DEFAULT_TENANT_ID = os.getenv('DEFAULT_TENANT_ID', 'default')

# Public origin embedded in QR locators. Empty means the self-describing fallback payload.
PUBLIC_BASE_URL = os.getenv('PUBLIC_BASE_URL', '').rstrip('/')

# Standalone asset-detail resolver
ASSET_DETAIL_PUBLIC = os.getenv('ASSET_DETAIL_PUBLIC', 'true').lower() == 'true'
ASSET_DETAIL_CACHE_CONTROL = os.getenv('ASSET_DETAIL_CACHE_CONTROL', 'public, max-age=300, s-maxage=600')

# QR image rendering
QR_BOX_SIZE = int(os.getenv('QR_BOX_SIZE', '8'))
QR_BORDER = int(os.getenv('QR_BORDER', '2'))
