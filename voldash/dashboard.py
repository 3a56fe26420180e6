"""
Read path for the volatility chart.

The latest known date is fetched first because it anchors the window. Each
window fetch is tagged with a request number and its result is applied only
if no newer request was issued in the meantime.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from voldash.data.series import (
    ChartRow,
    VolatilityObservation,
    latest_per_symbol,
    to_chart_rows,
)
from voldash.data.timerange import (
    DEFAULT_TIME_RANGE,
    TimeRange,
    Window,
    parse_time_range,
    resolve_window,
)
from voldash.database.repository import DEFAULT_ROW_LIMIT, PriceRepository
from voldash.rules.catalog import AlertRuleDefinition, breached_rules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowRequest:
    """A window fetch that has been issued."""

    seq: int
    time_range: TimeRange
    window: Window


@dataclass
class DashboardView:
    """Everything needed to render the dashboard for one range."""

    time_range: TimeRange
    window: Window
    latest_date: str
    chart_rows: list[ChartRow] = field(default_factory=list)
    latest: dict[str, VolatilityObservation] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.chart_rows

    def breached_rules(self) -> list[AlertRuleDefinition]:
        """Catalog rules whose condition holds for the latest values."""
        return breached_rules({s: obs.close for s, obs in self.latest.items()})


class DashboardLoader:
    """Loads windows of observations and keeps the newest result."""

    def __init__(self, prices: PriceRepository, row_limit: int = DEFAULT_ROW_LIMIT):
        self.prices = prices
        self.row_limit = row_limit
        self.latest_date: Optional[str] = None
        self.view: Optional[DashboardView] = None
        self._last_seq = 0

    def load_latest_date(self) -> Optional[str]:
        """Fetch and remember the most recent date in the store."""
        self.latest_date = self.prices.get_latest_date()
        logger.debug(f"Latest volatility date: {self.latest_date}")
        return self.latest_date

    def begin(self, time_range: Union[str, TimeRange]) -> Optional[WindowRequest]:
        """
        Issue a window request for a range.

        Returns:
            The request, or None when no latest date is known yet
        """
        if self.latest_date is None:
            return None
        self._last_seq += 1
        return WindowRequest(
            seq=self._last_seq,
            time_range=parse_time_range(time_range),
            window=resolve_window(time_range, self.latest_date),
        )

    def fetch(self, request: WindowRequest) -> list[VolatilityObservation]:
        """Run the store query for a request."""
        return self.prices.get_window(request.window, limit=self.row_limit)

    def is_current(self, request: WindowRequest) -> bool:
        """Whether request is the most recently issued one."""
        return request.seq == self._last_seq

    def complete(
        self,
        request: WindowRequest,
        observations: list[VolatilityObservation],
    ) -> Optional[DashboardView]:
        """
        Apply the result of a request.

        Results for superseded requests are discarded and None is returned.
        """
        if not self.is_current(request):
            logger.debug(
                f"Discarding stale {request.time_range.value} result "
                f"(request {request.seq}, latest {self._last_seq})"
            )
            return None

        self.view = DashboardView(
            time_range=request.time_range,
            window=request.window,
            latest_date=request.window.end_iso,
            chart_rows=to_chart_rows(observations),
            latest=latest_per_symbol(observations),
        )
        return self.view

    def load(
        self, time_range: Union[str, TimeRange] = DEFAULT_TIME_RANGE
    ) -> Optional[DashboardView]:
        """
        Load the dashboard for a range, fetching the latest date if needed.

        Returns:
            The new view, or None when the store holds no observations

        Raises:
            InvalidArgument: If the range is unknown
            RemoteStoreError: If a store query fails
        """
        parse_time_range(time_range)
        if self.latest_date is None and self.load_latest_date() is None:
            return None

        request = self.begin(time_range)
        observations = self.fetch(request)
        return self.complete(request, observations)
