"""
Test Rules Engine Module
=======================

Unit tests for the keyword rule table and first-match evaluation.
"""

import pytest
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from rules.engine import RulesEngine, Rule, RuleMatch, DEFAULT_RULES
from rules import templates


class TestRule:
    """Tests for Rule class."""

    def test_all_of_requires_every_keyword(self):
        """Test all_of keywords must all be present."""
        rule = Rule(name="test", all_of=("battery", "charge"), response="ok")

        assert rule.matches("charge the battery")
        assert not rule.matches("battery is flat")
        assert not rule.matches("charge it")

    def test_any_of_requires_one_keyword(self):
        """Test any_of needs at least one keyword."""
        rule = Rule(name="test", any_of=("speed", "fast"), response="ok")

        assert rule.matches("how fast")
        assert rule.matches("top speed?")
        assert not rule.matches("how quick")

    def test_combined_predicate(self):
        """Test all_of and any_of together."""
        rule = Rule(name="test", all_of=("scooter",), any_of=("start", "turn on"), response="ok")

        assert rule.matches("scooter won't start")
        assert rule.matches("can't turn on my scooter")
        assert not rule.matches("won't start")
        assert not rule.matches("my scooter is blue")

    def test_case_insensitive(self):
        """Test matching ignores case."""
        rule = Rule(name="test", any_of=("helmet",), response="ok")
        assert rule.matches("Do I need a HELMET?")

    def test_substring_containment(self):
        """Test keywords match inside longer words."""
        rule = Rule(name="test", any_of=("app",), response="ok")
        assert rule.matches("I'm happy with it")

    def test_rule_needs_keywords(self):
        """Test a rule with no keywords is rejected."""
        with pytest.raises(ValueError):
            Rule(name="empty", response="ok")

    def test_rule_needs_response(self):
        """Test a rule with no response is rejected."""
        with pytest.raises(ValueError):
            Rule(name="silent", any_of=("x",), response="")

    def test_rule_is_immutable(self):
        """Test rules cannot be modified after creation."""
        rule = Rule(name="test", any_of=("x",), response="ok")
        with pytest.raises(AttributeError):
            rule.response = "changed"


class TestRulesEngine:
    """Tests for RulesEngine class."""

    @pytest.fixture
    def engine(self):
        return RulesEngine()

    def test_default_rule_order(self, engine):
        """Test the built-in table is evaluated in a fixed order."""
        names = [rule.name for rule in engine.get_all_rules()]
        assert names == [
            "battery_charging",
            "scooter_wont_start",
            "maintenance",
            "safety",
            "range",
            "speed",
            "app_connection",
        ]

    @pytest.mark.parametrize("message,expected", [
        ("how do i charge my scooter battery?", templates.CHARGING_PROCEDURE),
        ("my scooter won't start", templates.WONT_START_TROUBLESHOOTING),
        ("the scooter will not turn on", templates.WONT_START_TROUBLESHOOTING),
        ("any maintenance tips?", templates.MAINTENANCE_CHECKLIST),
        ("how should i take care of it", templates.MAINTENANCE_CHECKLIST),
        ("do i need a helmet?", templates.SAFETY_GUIDELINES),
        ("what is the range?", templates.RANGE_FACTORS),
        ("what distance can i travel", templates.RANGE_FACTORS),
        ("how fast does it go", templates.SPEED_MODES),
        ("my phone won't connect", templates.APP_PAIRING),
    ])
    def test_canned_answers(self, engine, message, expected):
        """Test each rule returns its canned answer."""
        match = engine.match(message)
        assert match is not None
        assert match.response == expected

    def test_first_match_wins(self, engine):
        """Test earlier rules take precedence."""
        match = engine.match("battery charge safety and speed")
        assert match.rule.name == "battery_charging"

        match = engine.match("helmet safety and top speed")
        assert match.rule.name == "safety"

    def test_start_rule_beats_maintenance(self, engine):
        """Test a startup question that mentions care still gets startup steps."""
        match = engine.match("i take care of my scooter but it won't start")
        assert match.rule.name == "scooter_wont_start"

    def test_charging_without_charge_keyword(self, engine):
        """Test 'charging' does not contain the keyword 'charge'."""
        assert engine.match("my scooter battery is not charging") is None

    def test_happy_matches_app_rule(self, engine):
        """Test the app rule fires on words containing 'app'."""
        match = engine.match("i am happy with my purchase")
        assert match.rule.name == "app_connection"

    def test_no_match(self, engine):
        """Test unrelated messages do not match."""
        assert engine.match("hello there") is None

    def test_match_all(self, engine):
        """Test all matching rules are returned in order."""
        matches = engine.match_all("helmet safety and top speed")
        assert [m.rule.name for m in matches] == ["safety", "speed"]

    def test_match_result(self, engine):
        """Test RuleMatch carries the rule and message."""
        match = engine.match("how fast")
        assert isinstance(match, RuleMatch)
        assert match.message == "how fast"
        assert match.rule is engine.get_rule("speed")

    def test_get_rule(self, engine):
        """Test lookup by name."""
        assert engine.get_rule("range").response == templates.RANGE_FACTORS
        assert engine.get_rule("missing") is None

    def test_custom_rules(self):
        """Test a custom rule table."""
        engine = RulesEngine(rules=(
            Rule(name="greeting", any_of=("hello",), response="Hi!"),
        ))
        assert engine.match("hello").response == "Hi!"
        assert engine.match("how fast") is None

    def test_duplicate_rule_names_rejected(self):
        """Test rule names must be unique."""
        rule = Rule(name="dup", any_of=("x",), response="ok")
        with pytest.raises(ValueError):
            RulesEngine(rules=(rule, rule))

    def test_default_table_is_immutable(self):
        """Test the built-in table is a tuple."""
        assert isinstance(DEFAULT_RULES, tuple)
        assert len(DEFAULT_RULES) == 7
