"""
Requester context: who is calling, on behalf of which tenant
"""
from typing import Optional, Dict, Any


class RequesterContext:
    """Identity of the caller as seen by the access guard"""

    def __init__(
        self,
        tenant_id: Optional[str] = None,
        user_id: Optional[str] = None,
        user_name: Optional[str] = None,
    ):
        self.tenant_id = tenant_id
        self.user_id = user_id
        self.user_name = user_name

    def __repr__(self) -> str:
        return f'RequesterContext(tenant={self.tenant_id!r}, user={self.user_id!r})'

    @property
    def is_authenticated(self) -> bool:
        """Check if the caller has both a tenant and a user identity"""
        return bool(self.tenant_id and self.user_id)

    @property
    def display_name(self) -> str:
        """Name recorded when this requester acts on an asset"""
        return self.user_name or self.user_id or 'Unknown'

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON responses"""
        return {
            'tenant_id': self.tenant_id,
            'user_id': self.user_id,
            'user_name': self.user_name,
            'is_authenticated': self.is_authenticated,
        }

    @classmethod
    def anonymous(cls) -> 'RequesterContext':
        """A caller with no session"""
        return cls()
