"""
Repository classes for the store tables.
"""

from typing import Optional, Sequence

from voldash.data.series import VolatilityObservation
from voldash.data.timerange import Window
from voldash.errors import RemoteStoreError
from voldash.rules.catalog import SYMBOLS
from .connection import Store, Order, eq, gte, in_, lte
from .models import AlertSubscription, FeedbackEntry

PRICES_TABLE = "volatility_prices"
ALERT_RULES_TABLE = "alert_rules"
FEEDBACK_TABLE = "vol_feedback"

DEFAULT_ROW_LIMIT = 5000


class PriceRepository:
    """Read access to ``volatility_prices``."""

    def __init__(self, store: Store, symbols: Sequence[str] = ()):
        self.store = store
        self.symbols = tuple(symbols) or tuple(s.value for s in SYMBOLS)

    def get_latest_date(self) -> Optional[str]:
        """Most recent date with data for any tracked symbol."""
        rows = self.store.select(
            PRICES_TABLE,
            columns=("date",),
            filters=[in_("symbol", self.symbols)],
            order=Order("date", ascending=False),
            limit=1,
        )
        if not rows:
            return None
        return str(rows[0]["date"])

    def get_window(
        self, window: Window, limit: int = DEFAULT_ROW_LIMIT
    ) -> list[VolatilityObservation]:
        """
        Observations inside an inclusive window, ascending by date.

        Args:
            window: Inclusive date range
            limit: Maximum number of rows returned by the store

        Returns:
            List of VolatilityObservation

        Raises:
            RemoteStoreError: If the store query fails or a row is malformed
        """
        rows = self.store.select(
            PRICES_TABLE,
            columns=("date", "symbol", "close"),
            filters=[
                gte("date", window.start_iso),
                lte("date", window.end_iso),
                in_("symbol", self.symbols),
            ],
            order=Order("date", ascending=True),
            limit=limit,
        )
        try:
            return [self._row_to_observation(row) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            raise RemoteStoreError(
                f"Malformed {PRICES_TABLE} row", detail=repr(e)
            ) from e

    def _row_to_observation(self, row) -> VolatilityObservation:
        """Convert store row to VolatilityObservation."""
        return VolatilityObservation(
            date=str(row["date"]),
            symbol=row["symbol"],
            close=float(row["close"]),
        )


class AlertRuleRepository:
    """Read, delete and insert access to ``alert_rules``."""

    def __init__(self, store: Store):
        self.store = store

    def list_for_email(self, email: str) -> list[AlertSubscription]:
        """Subscriptions stored for an email."""
        rows = self.store.select(
            ALERT_RULES_TABLE,
            columns=(
                "user_id",
                "email",
                "symbol_code",
                "direction",
                "threshold",
                "severity",
                "enabled",
            ),
            filters=[eq("email", email)],
        )
        return [self._row_to_subscription(row) for row in rows]

    def delete_for_email(self, email: str) -> None:
        """Delete every subscription for an email."""
        self.store.delete(ALERT_RULES_TABLE, [eq("email", email)])

    def insert_many(self, subscriptions: Sequence[AlertSubscription]) -> None:
        """Insert subscriptions; a no-op for an empty sequence."""
        if not subscriptions:
            return
        self.store.insert(ALERT_RULES_TABLE, [s.to_row() for s in subscriptions])

    def _row_to_subscription(self, row) -> AlertSubscription:
        """Convert store row to AlertSubscription."""
        return AlertSubscription(
            user_id=row["user_id"],
            email=row["email"],
            symbol_code=row["symbol_code"],
            direction=row["direction"],
            threshold=float(row["threshold"]),
            severity=row["severity"],
            enabled=bool(row["enabled"]),
        )


class FeedbackRepository:
    """Insert-only access to ``vol_feedback``."""

    def __init__(self, store: Store):
        self.store = store

    def create(self, entry: FeedbackEntry) -> None:
        """Store a feedback entry."""
        self.store.insert(FEEDBACK_TABLE, [entry.to_row()])
