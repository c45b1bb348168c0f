"""
Error taxonomy for the asset inventory core

Every error carries the HTTP status the API layer answers with and a short
machine-readable code.
"""
from typing import Optional, Dict, Any
from enum import Enum


class AccessDenialReason(str, Enum):
    """Why a requester was refused"""
    UNAUTHENTICATED = 'unauthenticated'
    CROSS_TENANT = 'cross_tenant'


class InventoryError(Exception):
    """Base class for all asset inventory errors"""
    status_code = 400
    code = 'inventory_error'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON responses"""
        return {'error': self.message, 'code': self.code}


class ValidationError(InventoryError):
    """A draft or patch is malformed"""
    code = 'validation_error'


class NotFoundError(InventoryError):
    """Unknown asset id or tag"""
    status_code = 404
    code = 'not_found'

    def __init__(self, asset_id: str):
        super().__init__(f'Asset not found: {asset_id}')
        self.asset_id = asset_id


class DuplicateTagError(InventoryError):
    """Asset tag already used within the tenant"""
    status_code = 409
    code = 'duplicate_tag'

    def __init__(self, asset_tag: str):
        super().__init__(f'Asset tag already exists: {asset_tag}')
        self.asset_tag = asset_tag


class InvalidTransitionError(InventoryError):
    """Status change not allowed by the lifecycle table"""
    status_code = 409
    code = 'invalid_transition'

    def __init__(self, source: str, target: str, message: Optional[str] = None):
        super().__init__(message or f'Cannot transition asset from {source} to {target}')
        self.source = source
        self.target = target

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['source'] = self.source
        data['target'] = self.target
        return data


class ConflictError(InventoryError):
    """The record changed between read and commit; re-read and retry"""
    status_code = 409
    code = 'conflict'


class AccessDeniedError(InventoryError):
    """Requester may not see or change the asset

    reason is None for the generic denial used by QR resolution, which must not
    reveal whether the asset exists.
    """
    code = 'access_denied'

    def __init__(self, reason: Optional[AccessDenialReason] = None):
        super().__init__('Access denied')
        self.reason = reason

    @property
    def status_code(self) -> int:
        return 401 if self.reason == AccessDenialReason.UNAUTHENTICATED else 403

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.reason is not None:
            data['reason'] = self.reason.value
        return data


class DecodeError(InventoryError):
    """A scanned payload could not be turned into an asset id"""
    status_code = 422
    code = 'decode_error'


class InvalidPayloadError(DecodeError):
    """Payload is neither a locator nor a fallback record"""
    code = 'invalid_payload'


class WrongResourceTypeError(DecodeError):
    """Locator points at something other than an asset-detail resource"""
    code = 'wrong_resource_type'


class DocumentSchemaError(InventoryError):
    """A stored document does not match a known schema version"""
    status_code = 500
    code = 'document_schema_error'
