"""
Application wiring and user-facing actions.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from voldash.alerts.subscriptions import SubscriptionManager
from voldash.config import AppConfig
from voldash.dashboard import DashboardLoader, DashboardView
from voldash.data.timerange import TimeRange
from voldash.database.connection import Database, RestStore, Store
from voldash.database.models import AlertSubscription
from voldash.database.repository import (
    AlertRuleRepository,
    FeedbackRepository,
    PriceRepository,
)
from voldash.errors import (
    InvalidArgument,
    NotFound,
    RemoteStoreError,
    ValidationError,
)
from voldash.feedback import THANK_YOU_MESSAGE, FeedbackService
from voldash.rules.catalog import RuleId

logger = logging.getLogger(__name__)

RETRY_MESSAGE = "Something went wrong. Please try again later."


@dataclass
class ActionResult:
    """Outcome of a user action."""

    success: bool
    message: str
    view: Optional[DashboardView] = None


def create_store(config: AppConfig) -> Store:
    """Build the store selected in configuration."""
    if config.store.backend == "sqlite":
        db = Database(config.store.sqlite_path)
        db.initialize()
        return db
    return RestStore(
        url=config.store.url,
        anon_key=config.store.anon_key,
        timeout=config.store.timeout,
    )


class VolDashApp:
    """Main voldash application."""

    def __init__(self, store: Store, config: Optional[AppConfig] = None):
        """
        Initialize the app.

        Args:
            store: Backing store
            config: Application configuration; defaults when omitted
        """
        self.store = store
        self.config = config or AppConfig()

        # Initialize repositories
        self.price_repo = PriceRepository(store)
        self.alert_repo = AlertRuleRepository(store)
        self.feedback_repo = FeedbackRepository(store)

        # Initialize services
        self.loader = DashboardLoader(
            self.price_repo, row_limit=self.config.dashboard.row_limit
        )
        self.subscriptions = SubscriptionManager(self.alert_repo)
        self.feedback = FeedbackService(self.feedback_repo)

    def load_dashboard(
        self, time_range: Union[str, TimeRange, None] = None
    ) -> ActionResult:
        """Load chart data for a range."""
        time_range = time_range or self.config.dashboard.default_range
        try:
            view = self.loader.load(time_range)
        except InvalidArgument as e:
            return ActionResult(success=False, message=str(e))
        except RemoteStoreError as e:
            logger.error(f"Error loading volatility data: {e}")
            return ActionResult(success=False, message=RETRY_MESSAGE)

        if view is None or view.is_empty:
            return ActionResult(
                success=True, message="No data available.", view=view
            )
        return ActionResult(success=True, message="", view=view)

    def save_alerts(
        self, email: str, enabled_rule_ids: Iterable[Union[str, RuleId]]
    ) -> ActionResult:
        """Replace the alert subscriptions for an email."""
        try:
            result = self.subscriptions.save(email, enabled_rule_ids)
        except (ValidationError, NotFound) as e:
            return ActionResult(success=False, message=str(e))
        except RemoteStoreError as e:
            logger.error(f"Error saving alert subscriptions: {e}")
            return ActionResult(success=False, message=RETRY_MESSAGE)
        return ActionResult(success=True, message=result.message)

    def list_alerts(self, email: str) -> list[AlertSubscription]:
        """Stored subscriptions for an email."""
        return self.subscriptions.list_subscriptions(email)

    def submit_feedback(
        self,
        category: str,
        message: str,
        contact: Optional[str] = None,
        agent: Optional[str] = None,
        path: Optional[str] = None,
    ) -> ActionResult:
        """Validate and store a feedback entry."""
        try:
            self.feedback.submit(category, message, contact, agent, path)
        except ValidationError as e:
            return ActionResult(success=False, message=str(e))
        except RemoteStoreError as e:
            logger.error(f"Error storing feedback: {e}")
            return ActionResult(success=False, message=RETRY_MESSAGE)
        return ActionResult(success=True, message=THANK_YOU_MESSAGE)

    def close(self) -> None:
        self.store.close()
