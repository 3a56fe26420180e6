"""
Row models for the store tables.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class FeedbackCategory(str, Enum):
    """Kinds of feedback a user can send."""

    BUG = "bug"
    FEATURE = "feature"
    OTHER = "other"


@dataclass(frozen=True)
class AlertSubscription:
    """An email subscribed to one rule (row of ``alert_rules``)."""

    email: str
    symbol_code: str
    direction: str
    threshold: float
    severity: str
    enabled: bool = True
    user_id: Optional[str] = None  # unused; email is the partition key

    def to_row(self) -> dict[str, Any]:
        """Column mapping for insertion."""
        return {
            "user_id": self.user_id,
            "email": self.email,
            "symbol_code": self.symbol_code,
            "direction": self.direction,
            "threshold": self.threshold,
            "severity": self.severity,
            "enabled": self.enabled,
        }


@dataclass(frozen=True)
class FeedbackEntry:
    """A feedback message (row of ``vol_feedback``)."""

    category: FeedbackCategory
    message: str
    contact: Optional[str] = None
    user_agent: Optional[str] = None
    page_path: Optional[str] = None

    def to_row(self) -> dict[str, Any]:
        """Column mapping for insertion."""
        return {
            "category": self.category.value,
            "message": self.message,
            "contact": self.contact,
            "user_agent": self.user_agent,
            "page_path": self.page_path,
        }
