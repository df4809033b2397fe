"""
Rules Module - Keyword rule table
=================================

This module provides the fixed, ordered table of keyword rules that
answers common scooter questions before the knowledge base is used:
- All-of / any-of substring predicates
- First match wins
- Canned answer texts
"""

from .engine import RulesEngine, Rule, RuleMatch, DEFAULT_RULES

__all__ = [
    "RulesEngine",
    "Rule",
    "RuleMatch",
    "DEFAULT_RULES",
]
