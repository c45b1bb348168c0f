"""
Access guard: tenant isolation for asset reads and writes
"""
from enum import Enum
import logging
from asset_inventory.app.errors import AccessDeniedError, AccessDenialReason
from asset_inventory.app.models import Asset, RequesterContext

logger = logging.getLogger(__name__)


class AccessDecision(str, Enum):
    """Outcome of an access check"""
    PERMIT = 'permit'
    DENY_UNAUTHENTICATED = 'deny_unauthenticated'
    DENY_CROSS_TENANT = 'deny_cross_tenant'

    @property
    def reason(self):
        return {
            AccessDecision.DENY_UNAUTHENTICATED: AccessDenialReason.UNAUTHENTICATED,
            AccessDecision.DENY_CROSS_TENANT: AccessDenialReason.CROSS_TENANT,
        }.get(self)


class AccessGuard:
    """Decides whether a requester may see or change an asset"""

    def check(self, requester: RequesterContext, asset: Asset) -> AccessDecision:
        if not requester.is_authenticated:
            return AccessDecision.DENY_UNAUTHENTICATED
        if asset.tenant_id != requester.tenant_id:
            return AccessDecision.DENY_CROSS_TENANT
        return AccessDecision.PERMIT

    def require_authenticated(self, requester: RequesterContext) -> None:
        """For operations that are not about an existing asset (list, create)"""
        if not requester.is_authenticated:
            raise AccessDeniedError(AccessDenialReason.UNAUTHENTICATED)

    def authorize(self, requester: RequesterContext, asset: Asset) -> None:
        """Raise AccessDeniedError naming the reason unless permitted"""
        decision = self.check(requester, asset)
        if decision != AccessDecision.PERMIT:
            logger.warning(f"Access to asset {asset.asset_id} denied for {requester}: {decision.value}")
            raise AccessDeniedError(decision.reason)
