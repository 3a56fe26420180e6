"""
Feedback form submission.
"""

import logging
from typing import Optional, Union

from voldash.database.models import FeedbackCategory, FeedbackEntry
from voldash.database.repository import FeedbackRepository
from voldash.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = FeedbackCategory.FEATURE

THANK_YOU_MESSAGE = (
    "Thank you for your feedback! It will help us improve the dashboard."
)


def build_feedback_entry(
    category: Union[str, FeedbackCategory],
    message: str,
    contact: Optional[str] = None,
    agent: Optional[str] = None,
    path: Optional[str] = None,
) -> FeedbackEntry:
    """
    Validate and package a feedback entry.

    The message is stored as typed; only its trimmed form is checked.
    An empty contact is stored as None.

    Raises:
        ValidationError: If message is blank or category is unknown
    """
    if not (message or "").strip():
        raise ValidationError("Please enter a message.")

    try:
        kind = FeedbackCategory(category)
    except ValueError:
        raise ValidationError(f"Unknown feedback category: {category!r}") from None

    return FeedbackEntry(
        category=kind,
        message=message,
        contact=contact or None,
        user_agent=agent,
        page_path=path,
    )


class FeedbackService:
    """Builds and stores feedback entries."""

    def __init__(self, repo: FeedbackRepository):
        self.repo = repo

    def submit(
        self,
        category: Union[str, FeedbackCategory],
        message: str,
        contact: Optional[str] = None,
        agent: Optional[str] = None,
        path: Optional[str] = None,
    ) -> FeedbackEntry:
        """
        Validate and store one feedback entry.

        Raises:
            ValidationError: If the entry is invalid
            RemoteStoreError: If the store rejects the insert
        """
        entry = build_feedback_entry(category, message, contact, agent, path)
        self.repo.create(entry)
        logger.info(f"Stored {entry.category.value} feedback")
        return entry
