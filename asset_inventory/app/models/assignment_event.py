"""
Assignment event model for the per-asset assignment history
"""
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from enum import Enum


class AssignmentAction(str, Enum):
    """Kind of assignment event"""
    ASSIGNED = 'assigned'
    UNASSIGNED = 'unassigned'


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Accept a datetime or ISO-8601 string and return an aware UTC datetime"""
    if isinstance(value, str):
        # Browsers write a trailing 'Z'
        value = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if not isinstance(value, datetime):
        raise TypeError(f'Unsupported timestamp value: {value!r}')
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class AssignmentEvent:
    """One entry of an asset's assignment history"""

    def __init__(
        self,
        action: AssignmentAction,
        user_name: str,
        timestamp: Optional[datetime] = None,
    ):
        self.action = AssignmentAction(action) if isinstance(action, str) else action
        self.user_name = user_name
        self.timestamp = parse_timestamp(timestamp) if timestamp is not None else utc_now()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AssignmentEvent):
            return NotImplemented
        return (self.action, self.user_name, self.timestamp) == (other.action, other.user_name, other.timestamp)

    def __repr__(self) -> str:
        return f'AssignmentEvent({self.action.value!r}, {self.user_name!r}, {self.timestamp.isoformat()!r})'

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON responses"""
        return {
            'action': self.action.value,
            'user_name': self.user_name,
            'timestamp': self.timestamp.isoformat(),
        }

    @staticmethod
    def assigned(user_name: str, timestamp: Optional[datetime] = None) -> 'AssignmentEvent':
        """Factory for an 'assigned' entry"""
        return AssignmentEvent(AssignmentAction.ASSIGNED, user_name, timestamp)

    @staticmethod
    def unassigned(user_name: str, timestamp: Optional[datetime] = None) -> 'AssignmentEvent':
        """Factory for an 'unassigned' entry"""
        return AssignmentEvent(AssignmentAction.UNASSIGNED, user_name, timestamp)
