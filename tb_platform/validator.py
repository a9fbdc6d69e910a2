"""
tb_platform/validator.py
========================
Debit/credit totals, balance check and mapping warnings for an extracted row set.
Findings are reported in the result; nothing here raises.
"""
from __future__ import annotations
from typing import List

from .classifier import classify_account
from .formatting import category_label, format_amount
from .types import TrialBalanceRow, ValidationResult

MANDATORY_CATEGORIES = ["current_assets", "equity", "revenue"]


def low_confidence_rows(rows: List[TrialBalanceRow]) -> List[TrialBalanceRow]:
    """Rows whose category came from a bare-caption fallback rather than a rule."""
    out = []
    for row in rows:
        result = classify_account(row.code, row.name)
        if result.source == "fallback" and result.category == row.mapped_category:
            out.append(row)
    return out


def validate(rows: List[TrialBalanceRow], tolerance: float = 0.01) -> ValidationResult:
    total_debit = sum(r.debit for r in rows)
    total_credit = sum(r.credit for r in rows)
    difference = abs(total_debit - total_credit)
    is_balanced = difference < tolerance

    warnings: List[str] = []
    errors: List[str] = []

    if not is_balanced:
        errors.append(
            f"Trial balance is not balanced: total debit {format_amount(total_debit)}, "
            f"total credit {format_amount(total_credit)}, difference {format_amount(difference)}"
        )

    unmapped = [r for r in rows if r.mapped_category == "unmapped"]
    if unmapped:
        warnings.append(
            f"{len(unmapped)} account(s) could not be classified automatically and need manual mapping: "
            + ", ".join(r.code for r in unmapped[:10])
        )

    guessed = low_confidence_rows(rows)
    if guessed:
        warnings.append(
            f"{len(guessed)} account(s) were classified from a bare category caption only; "
            "please review: " + ", ".join(f"{r.code} {r.name}" for r in guessed[:10])
        )

    present = {r.mapped_category for r in rows}
    missing = [c for c in MANDATORY_CATEGORIES if c not in present]
    for cat in missing:
        warnings.append(f"No accounts classified as {category_label(cat, 'en')}")

    return ValidationResult(
        is_balanced=is_balanced,
        total_debit=total_debit,
        total_credit=total_credit,
        difference=difference,
        warnings=warnings,
        errors=errors,
        missing_categories=missing,
    )
