"""
Email alert subscriptions with replace-on-save semantics.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence, Union

from voldash.database.models import AlertSubscription
from voldash.database.repository import AlertRuleRepository
from voldash.errors import ValidationError
from voldash.rules.catalog import RuleId, get_rule, list_rules

logger = logging.getLogger(__name__)

RuleToggles = dict[RuleId, bool]


def default_toggles() -> RuleToggles:
    """Toggle state for a fresh form: every rule on."""
    return {rule.id: True for rule in list_rules()}


def set_all(toggles: RuleToggles, value: bool) -> RuleToggles:
    """Return a copy of toggles with every rule set to value."""
    updated = dict(toggles)
    for rule in list_rules():
        updated[rule.id] = value
    return updated


def toggle(toggles: RuleToggles, rule_id: Union[str, RuleId]) -> RuleToggles:
    """Return a copy of toggles with one rule flipped."""
    rule = get_rule(rule_id)
    updated = dict(toggles)
    updated[rule.id] = not updated.get(rule.id, False)
    return updated


def enabled_ids(toggles: RuleToggles) -> set[RuleId]:
    """Ids switched on in a toggle state."""
    return {rule_id for rule_id, on in toggles.items() if on}


def normalize_email(email: str) -> str:
    """
    Trim an email address.

    Raises:
        ValidationError: If nothing is left after trimming
    """
    trimmed = (email or "").strip()
    if not trimmed:
        raise ValidationError("Please enter an email address.")
    return trimmed


def mask_email(address: str) -> str:
    """Hide all but the first character of the local part, for logs."""
    local, sep, domain = address.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"


def compute_write_set(
    email: str, enabled_rule_ids: Iterable[Union[str, RuleId]]
) -> list[AlertSubscription]:
    """
    Subscriptions to store for an email.

    Rows follow catalog order regardless of the order of enabled_rule_ids.
    No enabled ids yields an empty list, which means unsubscribe-all.

    Args:
        email: Subscriber email, trimmed before use
        enabled_rule_ids: Ids of rules switched on

    Returns:
        One enabled AlertSubscription per enabled rule

    Raises:
        ValidationError: If email is empty after trimming
        NotFound: If an id is not in the catalog
    """
    address = normalize_email(email)
    wanted = {get_rule(rule_id).id for rule_id in enabled_rule_ids}

    return [
        AlertSubscription(
            email=address,
            symbol_code=rule.symbol_code.value,
            direction=rule.direction,
            threshold=rule.threshold,
            severity=rule.severity.value,
            enabled=True,
        )
        for rule in list_rules()
        if rule.id in wanted
    ]


@dataclass
class SaveResult:
    """Outcome of saving a subscription set."""

    email: str
    subscriptions: list[AlertSubscription]

    @property
    def unsubscribed(self) -> bool:
        return not self.subscriptions

    @property
    def message(self) -> str:
        if self.unsubscribed:
            return (
                "All alerts have been removed. You can subscribe again "
                "at any time."
            )
        return (
            "Alert settings saved. To stop alerts, save again with the same "
            "email and every rule switched off."
        )


class SubscriptionManager:
    """Persists alert subscriptions as delete-then-insert."""

    def __init__(self, repo: AlertRuleRepository):
        self.repo = repo

    def list_subscriptions(self, email: str) -> list[AlertSubscription]:
        """Stored subscriptions for an email."""
        return self.repo.list_for_email(normalize_email(email))

    def clear_subscriptions(self, email: str) -> None:
        """Delete every stored subscription for an email."""
        self.repo.delete_for_email(normalize_email(email))

    def insert_subscriptions(self, rows: Sequence[AlertSubscription]) -> None:
        """Insert a previously computed write-set."""
        self.repo.insert_many(rows)

    def save(
        self, email: str, enabled_rule_ids: Iterable[Union[str, RuleId]]
    ) -> SaveResult:
        """
        Replace the stored subscriptions for an email.

        The two store calls are not atomic: if the insert fails after the
        delete succeeded, the email is left with no subscriptions and the
        error propagates.

        Raises:
            ValidationError: If email is empty after trimming
            RemoteStoreError: If either store call fails
        """
        rows = compute_write_set(email, enabled_rule_ids)
        address = normalize_email(email)
        masked = mask_email(address)

        self.clear_subscriptions(address)
        if rows:
            try:
                self.insert_subscriptions(rows)
            except Exception:
                logger.error(
                    f"Insert failed after clearing subscriptions for {masked}; "
                    "no subscriptions remain"
                )
                raise

        logger.info(f"Saved {len(rows)} alert subscription(s) for {masked}")
        return SaveResult(email=address, subscriptions=rows)
