"""
Common type definitions, enums, and type aliases used across the application.
"""

from enum import Enum

UserId = str
HistoryId = str


class Urgency(str, Enum):
    """How quickly the client expects an answer"""
    IMMEDIATE = "immediate"
    STANDARD = "standard"
    NON_URGENT = "non_urgent"


class MessageType(str, Enum):
    """What the client's message is about"""
    UPDATE = "update"
    QUESTION = "question"
    CONCERN = "concern"
    DELIVERABLE = "deliverable"
    PAYMENT = "payment"
    SCOPE_CHANGE = "scope_change"


class RelationshipStage(str, Enum):
    """Maturity of the freelancer/client relationship"""
    NEW = "new"
    ESTABLISHED = "established"
    DIFFICULT = "difficult"
    LONG_TERM = "long_term"


class ProjectPhase(str, Enum):
    """Where the project currently stands"""
    DISCOVERY = "discovery"
    ACTIVE = "active"
    COMPLETION = "completion"
    MAINTENANCE = "maintenance"
    ON_HOLD = "on_hold"


class SubscriptionTier(str, Enum):
    """Billing tiers"""
    FREE = "free"
    PROFESSIONAL = "professional"
    PREMIUM = "premium"


class StreamEventType(str, Enum):
    """Discriminator values written on the wire"""
    START = "start"
    CONTENT = "content"
    COMPLETE = "complete"
    DONE = "done"
    ERROR = "error"
