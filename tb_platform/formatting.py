"""
tb_platform/formatting.py
=========================
Amount / percent formatting and Arabic-English display labels
for categories, severities and audit check groups.
"""
from __future__ import annotations
from typing import Optional

from .vocabulary import CATEGORY_LABELS

SEVERITY_LABELS = {
    "info": ("معلومة", "Info"),
    "warning": ("تحذير", "Warning"),
    "error": ("خطأ", "Error"),
    "critical": ("حرج", "Critical"),
}

SCENARIO_CATEGORY_LABELS = {
    "balance_validation": ("التحقق من التوازن", "Balance validation"),
    "mapping_coverage": ("تغطية التصنيف", "Mapping coverage"),
    "missing_accounts": ("الحسابات المفقودة", "Missing accounts"),
    "duplicate_detection": ("كشف التكرار", "Duplicate detection"),
    "amount_anomaly": ("شذوذ المبالغ", "Amount anomaly"),
    "classification_conflict": ("تعارض التصنيف", "Classification conflict"),
    "zakat_compliance": ("توافق الزكاة", "Zakat compliance"),
    "ifrs_compliance": ("توافق المعايير الدولية", "IFRS compliance"),
    "cross_statement_integrity": ("سلامة القوائم المتقاطعة", "Cross-statement integrity"),
    "hierarchy_validation": ("التسلسل الهرمي", "Hierarchy validation"),
}


def format_amount(value: Optional[float], decimals: int = 2) -> str:
    """
    Accounting notation: thousands separators, negatives in parentheses.
    e.g. -1234.5 → (1,234.50)
    """
    if value is None:
        return "—"
    if value < 0:
        return f"({abs(value):,.{decimals}f})"
    return f"{value:,.{decimals}f}"


def format_percent(value: Optional[float], decimals: int = 1) -> str:
    if value is None:
        return "—"
    return f"{value:.{decimals}f}%"


def _label(table: dict, key: str, lang: str) -> str:
    pair = table.get(key)
    if pair is None:
        return key
    return pair[1] if lang == "en" else pair[0]


def category_label(category: str, lang: str = "ar") -> str:
    return _label(CATEGORY_LABELS, category, lang)


def severity_label(severity: str, lang: str = "ar") -> str:
    return _label(SEVERITY_LABELS, severity, lang)


def scenario_category_label(category: str, lang: str = "ar") -> str:
    return _label(SCENARIO_CATEGORY_LABELS, category, lang)
