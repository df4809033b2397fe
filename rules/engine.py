"""
Rules Engine - Keyword rule table for the support chat
======================================================

This module implements the fixed rule table that answers common
scooter questions before the knowledge base is consulted. Rules are
evaluated in table order and the first match wins.
"""

from dataclasses import dataclass
from typing import Optional, List, Tuple

from . import templates


@dataclass(frozen=True)
class Rule:
    """
    A single keyword rule.

    A message matches when it contains every keyword in ``all_of`` and
    at least one keyword in ``any_of``. An empty ``any_of`` places no
    constraint. Containment is a plain substring test on the
    lower-cased message, so "app" also matches "happy".

    Attributes:
        name (str): Unique rule name
        all_of (tuple): Keywords that must all be present
        any_of (tuple): Keywords of which one must be present
        response (str): Canned answer returned on match
    """
    name: str
    response: str
    all_of: Tuple[str, ...] = ()
    any_of: Tuple[str, ...] = ()

    def __post_init__(self):
        if not self.all_of and not self.any_of:
            raise ValueError(f"Rule '{self.name}' needs at least one keyword")
        if not self.response:
            raise ValueError(f"Rule '{self.name}' needs a response")

    def matches(self, message: str) -> bool:
        """
        Check whether this rule's predicate holds for a message.

        Args:
            message: Message text (any case)

        Returns:
            True if the predicate holds
        """
        message_lower = message.lower()

        if not all(keyword in message_lower for keyword in self.all_of):
            return False

        if self.any_of and not any(keyword in message_lower for keyword in self.any_of):
            return False

        return True


@dataclass(frozen=True)
class RuleMatch:
    """
    Result of a rule matching a message.

    Attributes:
        rule (Rule): The matching rule
        message (str): The matched message
    """
    rule: Rule
    message: str

    @property
    def response(self) -> str:
        return self.rule.response


# Order is significant: a message satisfying several rules gets the first.
DEFAULT_RULES: Tuple[Rule, ...] = (
    Rule(
        name="battery_charging",
        all_of=("battery", "charge"),
        response=templates.CHARGING_PROCEDURE,
    ),
    Rule(
        name="scooter_wont_start",
        all_of=("scooter",),
        any_of=("start", "turn on"),
        response=templates.WONT_START_TROUBLESHOOTING,
    ),
    Rule(
        name="maintenance",
        any_of=("maintenance", "care"),
        response=templates.MAINTENANCE_CHECKLIST,
    ),
    Rule(
        name="safety",
        any_of=("safety", "helmet"),
        response=templates.SAFETY_GUIDELINES,
    ),
    Rule(
        name="range",
        any_of=("range", "distance"),
        response=templates.RANGE_FACTORS,
    ),
    Rule(
        name="speed",
        any_of=("speed", "fast"),
        response=templates.SPEED_MODES,
    ),
    Rule(
        name="app_connection",
        any_of=("app", "connect"),
        response=templates.APP_PAIRING,
    ),
)


class RulesEngine:
    """
    Evaluates an ordered, immutable rule table.

    Example:
        engine = RulesEngine()

        match = engine.match("How do I charge the battery?")
        if match:
            print(match.response)
    """

    def __init__(self, rules: Optional[Tuple[Rule, ...]] = None):
        """
        Initialize rules engine.

        Args:
            rules: Rule table to use (defaults to DEFAULT_RULES)
        """
        self.rules: Tuple[Rule, ...] = tuple(rules) if rules is not None else DEFAULT_RULES

        names = [rule.name for rule in self.rules]
        if len(names) != len(set(names)):
            raise ValueError("Rule names must be unique")

    def match(self, message: str) -> Optional[RuleMatch]:
        """
        Find the first rule whose predicate holds.

        Args:
            message: Message to match

        Returns:
            RuleMatch if found, None otherwise
        """
        for rule in self.rules:
            if rule.matches(message):
                return RuleMatch(rule=rule, message=message)
        return None

    def match_all(self, message: str) -> List[RuleMatch]:
        """
        Find every matching rule, in table order.

        Args:
            message: Message to match

        Returns:
            List of all matches
        """
        return [
            RuleMatch(rule=rule, message=message)
            for rule in self.rules
            if rule.matches(message)
        ]

    def get_rule(self, name: str) -> Optional[Rule]:
        """
        Get a rule by name.

        Args:
            name: Rule name

        Returns:
            Rule if found, None otherwise
        """
        for rule in self.rules:
            if rule.name == name:
                return rule
        return None

    def get_all_rules(self) -> List[Rule]:
        """Get all rules in evaluation order."""
        return list(self.rules)
