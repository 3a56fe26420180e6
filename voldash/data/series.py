"""
Reshaping of volatility observations for charting.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import pandas as pd

from voldash.rules.catalog import SYMBOLS


@dataclass(frozen=True)
class VolatilityObservation:
    """One daily close of a volatility index."""

    date: str  # YYYY-MM-DD
    symbol: str  # "VIX" or "NIKKEI_VI"
    close: float


@dataclass
class ChartRow:
    """All symbol values observed on one date."""

    date: str
    values: dict[str, float] = field(default_factory=dict)

    def get(self, symbol: str) -> Optional[float]:
        """Value for a symbol, or None when there is no data that day."""
        return self.values.get(symbol)

    def to_dict(self) -> dict[str, Any]:
        """Flat mapping with the date and only the symbols present."""
        return {"date": self.date, **self.values}


def latest_per_symbol(
    observations: Iterable[VolatilityObservation],
) -> dict[str, VolatilityObservation]:
    """
    Most recent observation for each symbol.

    ISO dates compare correctly as strings. When two observations share the
    latest date the one seen last wins.
    """
    latest: dict[str, VolatilityObservation] = {}
    for obs in observations:
        existing = latest.get(obs.symbol)
        if existing is None or existing.date <= obs.date:
            latest[obs.symbol] = obs
    return latest


def to_chart_rows(observations: Iterable[VolatilityObservation]) -> list[ChartRow]:
    """
    Group observations into one row per date, sorted ascending.

    A symbol missing on a date is left out of that row rather than set to
    zero. Duplicate (date, symbol) pairs keep the last close seen.
    """
    by_date: dict[str, ChartRow] = {}
    for obs in observations:
        row = by_date.get(obs.date)
        if row is None:
            row = by_date[obs.date] = ChartRow(date=obs.date)
        row.values[obs.symbol] = obs.close
    return sorted(by_date.values(), key=lambda r: r.date)


def chart_frame(
    rows: Iterable[ChartRow],
    symbols: Iterable[str] = tuple(s.value for s in SYMBOLS),
    connect_gaps: bool = False,
) -> pd.DataFrame:
    """
    Build a date-indexed DataFrame with one column per symbol.

    Missing values stay NaN. With connect_gaps, interior gaps are filled
    linearly between real points; leading and trailing gaps stay NaN.
    """
    rows = list(rows)
    columns = list(symbols)
    frame = pd.DataFrame(
        [{c: row.get(c) for c in columns} for row in rows],
        index=pd.Index([row.date for row in rows], name="date"),
        columns=columns,
        dtype="float64",
    )
    if connect_gaps and not frame.empty:
        frame = frame.interpolate(limit_area="inside")
    return frame


def format_vol(value: Optional[float]) -> str:
    """Format an index value with two decimals, or "-" when missing."""
    if value is None:
        return "-"
    if isinstance(value, float) and math.isnan(value):
        return "-"
    return f"{value:.2f}"
