"""
tb_platform/classifier.py
=========================
Maps (account code, account name) to a statement category.

Cascade: code prefix -> ordered name keywords -> bare-caption fallback -> unmapped.
Pure and deterministic; safe to call from any thread.
"""
from __future__ import annotations
import re
from typing import List, Optional

from .types import Category, Classification, TrialBalanceRow
from .vocabulary import (
    EQUITY_COMPONENTS, KEYWORD_RULES, KNOWN_PATTERNS, LITERAL_FALLBACKS, PREFIX_RULES_BY_SPECIFICITY,
    KeywordRule, normalize_text,
)

_CODE_SEPARATORS = re.compile(r"[.\-/\s]")


def _prefix_match(code: str) -> Optional[Classification]:
    digits = _CODE_SEPARATORS.sub("", code or "")
    if not digits or not digits[0].isdigit():
        return None
    for rule in PREFIX_RULES_BY_SPECIFICITY:
        if digits.startswith(rule.prefix):
            return Classification(rule.category, "prefix", rule.label)
    return None


def first_keyword_rule(name: str) -> Optional[KeywordRule]:
    """First rule in the ordered keyword table whose keyword occurs in ``name``."""
    name_norm = normalize_text(name)
    if not name_norm:
        return None
    for rule in KEYWORD_RULES:
        if rule.matches(name_norm):
            return rule
    return None


def known_pattern_for(name: str) -> Optional[KeywordRule]:
    """The rule a name resolves to when that rule is a high-confidence one."""
    rule = first_keyword_rule(name)
    return rule if rule is not None and rule in KNOWN_PATTERNS else None


def classify_account(code: str, name: str) -> Classification:
    """Classify and report which layer matched (prefix / keyword / fallback / none)."""
    by_prefix = _prefix_match(code)
    if by_prefix is not None:
        return by_prefix

    rule = first_keyword_rule(name)
    if rule is not None:
        return Classification(rule.category, "keyword", rule.label)

    literal = LITERAL_FALLBACKS.get(normalize_text(name))
    if literal is not None:
        return Classification(literal, "fallback", "Bare category caption")

    return Classification("unmapped", "none", None)


def classify(code: str, name: str) -> Category:
    return classify_account(code, name).category


def classify_rows(rows: List[TrialBalanceRow]) -> List[TrialBalanceRow]:
    """Assign ``mapped_category``/``is_auto_mapped`` on each row in place."""
    for row in rows:
        result = classify_account(row.code, row.name)
        row.mapped_category = result.category
        row.is_auto_mapped = result.is_auto_mapped
    return rows


# ─── Equity Components ────────────────────────────────────────────────────────

def equity_component(code: str, name: str) -> str:
    """Which equity column an equity account rolls into: capital, statutory_reserve or retained_earnings."""
    digits = _CODE_SEPARATORS.sub("", code or "")
    for component, prefix, _terms in EQUITY_COMPONENTS:
        if digits.startswith(prefix):
            return component
    name_norm = normalize_text(name)
    for component, _prefix, terms in EQUITY_COMPONENTS:
        if terms.matches(name_norm):
            return component
    return "retained_earnings"


def is_capital_account(code: str, name: str) -> bool:
    return equity_component(code, name) == "capital"
