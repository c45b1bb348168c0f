from .assignment_event import AssignmentEvent, AssignmentAction
from .asset import Asset, AssetType, AssetStatus, AssetFilter
from .requester import RequesterContext

__all__ = ['Asset', 'AssetType', 'AssetStatus', 'AssetFilter', 'AssignmentEvent', 'AssignmentAction', 'RequesterContext']
