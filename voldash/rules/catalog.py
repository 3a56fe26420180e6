"""
Fixed catalog of volatility alert rules.
"""

import operator
from dataclasses import dataclass
from enum import Enum
from typing import Union

from voldash.errors import NotFound


class SymbolCode(str, Enum):
    """Tracked volatility indices."""

    VIX = "VIX"
    NIKKEI_VI = "NIKKEI_VI"


SYMBOLS = (SymbolCode.VIX, SymbolCode.NIKKEI_VI)

SYMBOL_NAMES = {
    SymbolCode.VIX: "VIX (CBOE Volatility Index)",
    SymbolCode.NIKKEI_VI: "Nikkei Stock Average Volatility Index",
}


class Severity(str, Enum):
    """Alert severity levels."""

    NOTICE = "notice"
    WARNING = "warning"


class RuleId(str, Enum):
    """Identifiers of the shipped rules."""

    VIX_25 = "VIX_25"
    VIX_40 = "VIX_40"
    NIKKEI_30 = "NIKKEI_30"
    NIKKEI_45 = "NIKKEI_45"


_COMPARATORS = {
    ">=": operator.ge,
    "<=": operator.le,
}


@dataclass(frozen=True)
class AlertRuleDefinition:
    """A threshold condition on one index."""

    id: RuleId
    symbol_code: SymbolCode
    direction: str  # ">=" or "<="
    threshold: float
    severity: Severity
    title: str
    description: str

    def matches(self, value: float) -> bool:
        """Check whether a value satisfies this rule's condition."""
        return _COMPARATORS[self.direction](value, self.threshold)

    @property
    def condition(self) -> str:
        return f"{self.symbol_code.value} {self.direction} {self.threshold:g}"


RULE_DEFINITIONS: tuple[AlertRuleDefinition, ...] = (
    AlertRuleDefinition(
        id=RuleId.VIX_25,
        symbol_code=SymbolCode.VIX,
        direction=">=",
        threshold=25,
        severity=Severity.NOTICE,
        title="VIX at or above 25: notice",
        description=(
            "Above 25 volatility is elevated compared with calm markets and "
            "the market is starting to get nervous. A zone to review risk "
            "assets and leverage ahead of a correction."
        ),
    ),
    AlertRuleDefinition(
        id=RuleId.VIX_40,
        symbol_code=SymbolCode.VIX,
        direction=">=",
        threshold=40,
        severity=Severity.WARNING,
        title="VIX at or above 40: warning",
        description=(
            "Levels above 40 were seen in crisis periods such as the 2008 "
            "financial crisis and the 2020 COVID crash. Large swings and "
            "panic trading are likely; money management and a defensive "
            "stance matter most here."
        ),
    ),
    AlertRuleDefinition(
        id=RuleId.NIKKEI_30,
        symbol_code=SymbolCode.NIKKEI_VI,
        direction=">=",
        threshold=30,
        severity=Severity.NOTICE,
        title="Nikkei VI at or above 30: notice",
        description=(
            "Above 30 rising volatility becomes clearly visible in the "
            "Japanese equity market, possibly driven by Japan-specific news "
            "or events. A level to review Japanese equity positions."
        ),
    ),
    AlertRuleDefinition(
        id=RuleId.NIKKEI_45,
        symbol_code=SymbolCode.NIKKEI_VI,
        direction=">=",
        threshold=45,
        severity=Severity.WARNING,
        title="Nikkei VI at or above 45: warning",
        description=(
            "Above 45 the Japanese market is very turbulent. Sharp drops and "
            "rebounds are common and margin calls become likely; holding "
            "cash is a reasonable option."
        ),
    ),
)

_RULES_BY_ID = {rule.id: rule for rule in RULE_DEFINITIONS}


def list_rules() -> tuple[AlertRuleDefinition, ...]:
    """Return the shipped rules in catalog order."""
    return RULE_DEFINITIONS


def get_rule(rule_id: Union[str, RuleId]) -> AlertRuleDefinition:
    """
    Look up a rule by id.

    Args:
        rule_id: RuleId or its string value

    Returns:
        The matching AlertRuleDefinition

    Raises:
        NotFound: If rule_id is not in the catalog
    """
    try:
        return _RULES_BY_ID[RuleId(rule_id)]
    except ValueError:
        raise NotFound(f"Unknown alert rule: {rule_id!r}") from None


def rules_for_symbol(symbol: Union[str, SymbolCode]) -> list[AlertRuleDefinition]:
    """Return the rules watching one symbol, in catalog order."""
    code = SymbolCode(symbol)
    return [rule for rule in RULE_DEFINITIONS if rule.symbol_code == code]


def breached_rules(latest_values: dict[str, float]) -> list[AlertRuleDefinition]:
    """
    Rules whose condition holds for the given latest values.

    Args:
        latest_values: Mapping of symbol code to its most recent close.
            Symbols without a value are skipped.

    Returns:
        Matching rules in catalog order
    """
    breached = []
    for rule in RULE_DEFINITIONS:
        value = latest_values.get(rule.symbol_code.value)
        if value is not None and rule.matches(value):
            breached.append(rule)
    return breached
