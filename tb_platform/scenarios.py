"""
tb_platform/scenarios.py
========================
Audit engine: runs independent check groups over a classified row set and
scores the findings 0-100.

Every check is advisory. Results may carry an ``auto_fix`` callable that
returns a corrected copy of the rows; the rows passed in are never mutated.
"""
from __future__ import annotations
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from .classifier import is_capital_account, known_pattern_for
from .formatting import category_label, format_amount, format_percent
from .types import AuditOptions, RowsFix, ScenarioResult, ScenarioSummary, TrialBalanceRow
from .validator import low_confidence_rows
from .vocabulary import (
    CREDIT_NATURE, DEBIT_NATURE, DEFAULT_ACCOUNTS, REQUIRED_CATEGORIES,
    is_placeholder_code, normalize_text,
)

CheckGroup = Callable[[List[TrialBalanceRow], AuditOptions, List[ScenarioResult]], int]

ASSETS = ("current_assets", "non_current_assets")
LIABILITIES = ("current_liabilities", "non_current_liabilities")


# ─── Helpers ──────────────────────────────────────────────────────────────────

def _net(rows: List[TrialBalanceRow], categories: Tuple[str, ...]) -> float:
    """Net balance on the natural side of the given categories."""
    total = 0.0
    for r in rows:
        if r.mapped_category not in categories:
            continue
        if r.mapped_category in CREDIT_NATURE:
            total += r.credit - r.debit
        else:
            total += r.debit - r.credit
    return total


def _median(values: List[float]) -> Optional[float]:
    if not values:
        return None
    sorted_v = sorted(values)
    n = len(sorted_v)
    mid = n // 2
    if n % 2:
        return sorted_v[mid]
    return (sorted_v[mid - 1] + sorted_v[mid]) / 2


def _copy(rows: List[TrialBalanceRow]) -> List[TrialBalanceRow]:
    return [replace(r) for r in rows]


# ─── Auto-fixes ───────────────────────────────────────────────────────────────

def _reclassify_fix(code: str, category: str) -> RowsFix:
    def fix(rows: List[TrialBalanceRow]) -> List[TrialBalanceRow]:
        return [
            replace(r, mapped_category=category, is_auto_mapped=True) if r.code == code else replace(r)
            for r in rows
        ]
    return fix


def _net_both_sides(rows: List[TrialBalanceRow]) -> List[TrialBalanceRow]:
    out = []
    for r in rows:
        if r.debit > 0 and r.credit > 0:
            net = r.debit - r.credit
            out.append(replace(r, debit=max(net, 0.0), credit=max(-net, 0.0)))
        else:
            out.append(replace(r))
    return out


def _merge_duplicate_codes(rows: List[TrialBalanceRow]) -> List[TrialBalanceRow]:
    """Fold rows sharing a real account code into the first occurrence."""
    merged: List[TrialBalanceRow] = []
    by_code: Dict[str, TrialBalanceRow] = {}
    for r in rows:
        if is_placeholder_code(r.code):
            merged.append(replace(r))
            continue
        first = by_code.get(r.code)
        if first is None:
            first = replace(r)
            by_code[r.code] = first
            merged.append(first)
        else:
            first.debit += r.debit
            first.credit += r.credit
    return merged


def generate_missing_accounts(rows: List[TrialBalanceRow]) -> List[TrialBalanceRow]:
    """Zero-balance placeholder accounts for every statement category with no rows."""
    existing_categories = {r.mapped_category for r in rows}
    existing_codes = {r.code for r in rows}
    return [
        TrialBalanceRow(code=code, name=name, debit=0.0, credit=0.0,
                        mapped_category=category, is_auto_mapped=True)
        for code, name, category in DEFAULT_ACCOUNTS
        if category not in existing_categories and code not in existing_codes
    ]


def _add_missing_accounts(rows: List[TrialBalanceRow]) -> List[TrialBalanceRow]:
    return _copy(rows) + generate_missing_accounts(rows)


def apply_auto_fix(rows: List[TrialBalanceRow], result: ScenarioResult) -> List[TrialBalanceRow]:
    """Apply a result's fix to a copy of ``rows``; rows come back unchanged when none exists."""
    if not result.auto_fix_available or result.auto_fix is None:
        return _copy(rows)
    return result.auto_fix(_copy(rows))


# ─── 1. Balance Validation ────────────────────────────────────────────────────

def check_balance(rows: List[TrialBalanceRow], options: AuditOptions, results: List[ScenarioResult]) -> int:
    count = 1
    total_debit = sum(r.debit for r in rows)
    total_credit = sum(r.credit for r in rows)
    diff = abs(total_debit - total_credit)
    if diff > 0.01:
        results.append(ScenarioResult(
            id="BAL-001", category="balance_validation",
            severity="critical" if diff > options.critical_imbalance else "error",
            title="Trial balance is not balanced",
            description=f"Debit and credit totals differ by {format_amount(diff)}",
        ))

    count += 1
    zero_rows = [r for r in rows if r.debit == 0 and r.credit == 0]
    if zero_rows:
        results.append(ScenarioResult(
            id="BAL-002", category="balance_validation", severity="info",
            title=f"{len(zero_rows)} account(s) with a zero balance",
            description="These accounts do not affect the financial statements",
            affected_account_codes=[r.code for r in zero_rows],
        ))

    count += 1
    negative = [r for r in rows if r.debit < 0 or r.credit < 0]
    if negative:
        results.append(ScenarioResult(
            id="BAL-003", category="balance_validation", severity="warning",
            title="Accounts with negative amounts",
            description=f"{len(negative)} row(s) carry a negative debit or credit",
            affected_account_codes=[r.code for r in negative],
        ))

    count += 1
    both_sides = [r for r in rows if r.debit > 0 and r.credit > 0]
    if both_sides:
        results.append(ScenarioResult(
            id="BAL-004", category="balance_validation", severity="warning",
            title=f"{len(both_sides)} account(s) with both debit and credit balances",
            description="The balance may need to be netted to one side",
            affected_account_codes=[r.code for r in both_sides],
            auto_fix_available=True, auto_fix_label="Net each account to a single side",
            auto_fix=_net_both_sides,
        ))

    for category in DEBIT_NATURE:
        count += 1
        cat_rows = [r for r in rows if r.mapped_category == category]
        if not cat_rows:
            continue
        cat_debit = sum(r.debit for r in cat_rows)
        cat_credit = sum(r.credit for r in cat_rows)
        if cat_credit > cat_debit * 2:
            results.append(ScenarioResult(
                id=f"BAL-TYPE-{category}", category="balance_validation", severity="warning",
                title=f"{category_label(category, 'en')} carry a larger credit balance than expected",
                description=f"Debit {format_amount(cat_debit)}, credit {format_amount(cat_credit)}",
                affected_account_codes=[r.code for r in cat_rows],
            ))
    return count


# ─── 2. Mapping Coverage ──────────────────────────────────────────────────────

def check_mapping_coverage(rows: List[TrialBalanceRow], options: AuditOptions, results: List[ScenarioResult]) -> int:
    count = 1
    unmapped = [r for r in rows if r.mapped_category == "unmapped"]
    coverage = (len(rows) - len(unmapped)) / len(rows) * 100 if rows else 0.0
    if unmapped:
        if coverage < options.coverage_critical_pct:
            severity = "critical"
        elif coverage < options.coverage_error_pct:
            severity = "error"
        else:
            severity = "warning"
        results.append(ScenarioResult(
            id="MAP-001", category="mapping_coverage", severity=severity,
            title=f"{len(unmapped)} unclassified account(s) (coverage {format_percent(coverage, 0)})",
            description="Unclassified accounts are left out of the financial statements",
            affected_account_codes=[r.code for r in unmapped],
        ))

    present = {r.mapped_category for r in rows}
    required = REQUIRED_CATEGORIES["balance_sheet"] + REQUIRED_CATEGORIES["income_statement"]
    for category in required:
        count += 1
        if category in present:
            continue
        # Without equity the balance sheet has no closing side at all
        severity = "error" if category == "equity" else "warning"
        results.append(ScenarioResult(
            id=f"MAP-REQ-{category}", category="mapping_coverage", severity=severity,
            title=f'No accounts classified as "{category_label(category, "en")}"',
            description="Required to generate the financial statements",
            auto_fix_available=True, auto_fix_label="Add zero-balance placeholder accounts",
            auto_fix=_add_missing_accounts,
        ))
    return count


# ─── 3. Missing Accounts ──────────────────────────────────────────────────────

def check_missing_accounts(rows: List[TrialBalanceRow], options: AuditOptions, results: List[ScenarioResult]) -> int:
    numeric_codes = sorted({int(r.code) for r in rows if r.code.isdigit()})
    gaps: List[int] = []
    for prev, curr in zip(numeric_codes, numeric_codes[1:]):
        # Gaps only count inside the same thousand-group
        if curr - prev > 1 and prev // 1000 == curr // 1000:
            gaps.append(prev + 1)
    if 0 < len(gaps) < 20:
        results.append(ScenarioResult(
            id="MISS-001", category="missing_accounts", severity="info",
            title=f"{len(gaps)} gap(s) in the account code sequence",
            description="These may be deleted or unused accounts",
            affected_account_codes=[str(g) for g in gaps],
        ))
    return 1


# ─── 4. Duplicate Detection ───────────────────────────────────────────────────

def check_duplicates(rows: List[TrialBalanceRow], options: AuditOptions, results: List[ScenarioResult]) -> int:
    by_code: Dict[str, int] = {}
    for r in rows:
        if not is_placeholder_code(r.code):
            by_code[r.code] = by_code.get(r.code, 0) + 1
    duplicate_codes = [code for code, n in by_code.items() if n > 1]
    if duplicate_codes:
        results.append(ScenarioResult(
            id="DUP-001", category="duplicate_detection", severity="warning",
            title=f"{len(duplicate_codes)} duplicated account code(s)",
            description="Duplicated codes may be counted twice",
            affected_account_codes=duplicate_codes,
            auto_fix_available=True, auto_fix_label="Merge rows sharing a code",
            auto_fix=_merge_duplicate_codes,
        ))

    by_name: Dict[str, List[str]] = {}
    for r in rows:
        key = normalize_text(r.name)
        if key:
            by_name.setdefault(key, [])
            if r.code not in by_name[key]:
                by_name[key].append(r.code)
    duplicate_names = {name: codes for name, codes in by_name.items() if len(codes) > 1}
    if duplicate_names:
        results.append(ScenarioResult(
            id="DUP-002", category="duplicate_detection", severity="info",
            title=f"{len(duplicate_names)} account name(s) used under different codes",
            description="These may be different accounts sharing a name",
            affected_account_codes=[c for codes in duplicate_names.values() for c in codes],
        ))
    return 2


# ─── 5. Amount Anomalies ──────────────────────────────────────────────────────

def check_amount_anomalies(rows: List[TrialBalanceRow], options: AuditOptions, results: List[ScenarioResult]) -> int:
    amounts = [a for r in rows for a in (r.debit, r.credit) if a > 0]
    median = _median(amounts)
    if median:
        limit = median * options.anomaly_multiple
        outliers = [r for r in rows if r.debit > limit or r.credit > limit]
        if outliers:
            results.append(ScenarioResult(
                id="ANOM-001", category="amount_anomaly", severity="info",
                title=f"{len(outliers)} account(s) with an unusually large amount",
                description=f"Amounts above {format_amount(limit)} ({options.anomaly_multiple:g}x the median)",
                affected_account_codes=[r.code for r in outliers],
            ))

    expenses_with_credit = [r for r in rows if r.mapped_category in ("expenses", "cogs") and r.credit > r.debit]
    if expenses_with_credit:
        results.append(ScenarioResult(
            id="ANOM-002", category="amount_anomaly", severity="warning",
            title=f"{len(expenses_with_credit)} expense account(s) with a credit balance",
            description="Expenses normally carry debit balances",
            affected_account_codes=[r.code for r in expenses_with_credit],
        ))

    revenue_with_debit = [r for r in rows if r.mapped_category == "revenue" and r.debit > r.credit]
    if revenue_with_debit:
        results.append(ScenarioResult(
            id="ANOM-003", category="amount_anomaly", severity="warning",
            title=f"{len(revenue_with_debit)} revenue account(s) with a debit balance",
            description="Revenue normally carries credit balances",
            affected_account_codes=[r.code for r in revenue_with_debit],
        ))
    return 3


# ─── 6. Classification Conflicts ──────────────────────────────────────────────

def check_classification_conflicts(
    rows: List[TrialBalanceRow], options: AuditOptions, results: List[ScenarioResult],
) -> int:
    count = 0
    for r in rows:
        if r.mapped_category == "unmapped":
            continue
        count += 1
        rule = known_pattern_for(r.name)
        if rule is None or rule.category == r.mapped_category:
            continue
        results.append(ScenarioResult(
            id=f"CONF-{r.code}", category="classification_conflict", severity="warning",
            title=f"Classification conflict: {r.name}",
            description=(
                f'Classified as "{category_label(r.mapped_category, "en")}" but the name points to '
                f'"{rule.label}" ({category_label(rule.category, "en")})'
            ),
            affected_account_codes=[r.code],
            auto_fix_available=True,
            auto_fix_label=f"Reclassify as {category_label(rule.category, 'en')}",
            auto_fix=_reclassify_fix(r.code, rule.category),
        ))

    count += 1
    guessed = low_confidence_rows(rows)
    if guessed:
        results.append(ScenarioResult(
            id="CONF-LOW", category="classification_conflict", severity="info",
            title=f"{len(guessed)} account(s) classified from a bare category caption",
            description="The category was guessed from a generic caption; please confirm it",
            affected_account_codes=[r.code for r in guessed],
        ))
    return max(count, len(rows))


# ─── 7. Zakat Compliance ──────────────────────────────────────────────────────

def check_zakat(rows: List[TrialBalanceRow], options: AuditOptions, results: List[ScenarioResult]) -> int:
    capital = [r for r in rows if r.mapped_category == "equity" and is_capital_account(r.code, r.name)]
    if not capital:
        results.append(ScenarioResult(
            id="ZAKAT-001", category="zakat_compliance", severity="error",
            title="No capital account",
            description="Capital is required to compute the zakat base",
        ))

    fixed_assets = [r for r in rows if r.mapped_category == "non_current_assets"]
    if not fixed_assets:
        results.append(ScenarioResult(
            id="ZAKAT-002", category="zakat_compliance", severity="warning",
            title="No non-current assets",
            description="Non-current assets are deducted from the zakat base",
        ))

    profit = _net(rows, ("revenue",)) - _net(rows, ("expenses", "cogs"))
    zakat_base = _net(rows, ("equity",)) + profit - _net(rows, ("non_current_assets",))
    if zakat_base < 0:
        results.append(ScenarioResult(
            id="ZAKAT-003", category="zakat_compliance", severity="info",
            title="Negative zakat base",
            description=f"Approximate zakat base is {format_amount(zakat_base)}; no zakat will be charged",
        ))
    return 3


# ─── 8. IFRS Presentation ─────────────────────────────────────────────────────

def check_ifrs(rows: List[TrialBalanceRow], options: AuditOptions, results: List[ScenarioResult]) -> int:
    present = {r.mapped_category for r in rows}
    if not present.intersection(ASSETS):
        results.append(ScenarioResult(
            id="IFRS-001", category="ifrs_compliance", severity="error",
            title="No classified assets",
            description="Current and non-current assets must be presented separately",
        ))
    if not present.intersection(LIABILITIES):
        results.append(ScenarioResult(
            id="IFRS-002", category="ifrs_compliance", severity="info",
            title="No classified liabilities",
            description="Make sure no obligations are left unrecorded",
        ))
    return 2


# ─── 9. Cross-statement Integrity ─────────────────────────────────────────────

def check_cross_statement(rows: List[TrialBalanceRow], options: AuditOptions, results: List[ScenarioResult]) -> int:
    total_assets = _net(rows, ASSETS)
    total_liabilities = _net(rows, LIABILITIES)
    total_equity = _net(rows, ("equity",))
    net_income = _net(rows, ("revenue",)) - _net(rows, ("expenses", "cogs"))
    gap = abs(total_assets - (total_liabilities + total_equity + net_income))
    if gap > options.equation_tolerance:
        results.append(ScenarioResult(
            id="CROSS-001", category="cross_statement_integrity",
            severity="error" if gap > options.critical_imbalance else "warning",
            title="Accounting equation does not hold",
            description=(
                f"Assets {format_amount(total_assets)} vs liabilities {format_amount(total_liabilities)} "
                f"+ equity {format_amount(total_equity)} + profit {format_amount(net_income)}; "
                f"difference {format_amount(gap)}"
            ),
        ))

    current_assets = _net(rows, ("current_assets",))
    current_liabilities = _net(rows, ("current_liabilities",))
    if current_liabilities > 0:
        ratio = current_assets / current_liabilities
        if ratio < 1:
            results.append(ScenarioResult(
                id="CROSS-002", category="cross_statement_integrity", severity="info",
                title=f"Low current ratio: {ratio:.2f}",
                description="Current assets are below current liabilities",
            ))
    return 2


# ─── 10. Hierarchy ────────────────────────────────────────────────────────────

def check_hierarchy(rows: List[TrialBalanceRow], options: AuditOptions, results: List[ScenarioResult]) -> int:
    count = 1
    groups: Dict[str, List[TrialBalanceRow]] = {}
    for r in rows:
        if r.code[:1].isdigit():
            groups.setdefault(r.code[0], []).append(r)

    for prefix, group in groups.items():
        count += 1
        categories = sorted({r.mapped_category for r in group if r.mapped_category != "unmapped"})
        if len(categories) > 2:
            results.append(ScenarioResult(
                id=f"HIER-{prefix}", category="hierarchy_validation", severity="info",
                title=f"Code group {prefix}xxx spans {len(categories)} categories",
                description="Categories: " + ", ".join(category_label(c, "en") for c in categories),
                affected_account_codes=[r.code for r in group],
            ))
    return count


CHECK_GROUPS: Tuple[CheckGroup, ...] = (
    check_balance,
    check_mapping_coverage,
    check_missing_accounts,
    check_duplicates,
    check_amount_anomalies,
    check_classification_conflicts,
    check_zakat,
    check_ifrs,
    check_cross_statement,
    check_hierarchy,
)


# ─── Runner ───────────────────────────────────────────────────────────────────

def score(results: List[ScenarioResult], options: Optional[AuditOptions] = None) -> float:
    """100 minus the severity weight of every finding, floored at 0."""
    options = options or AuditOptions()
    penalty = sum(options.severity_weights.get(r.severity, 0.0) for r in results)
    return max(0.0, min(100.0, 100.0 - penalty))


def run_scenarios(rows: List[TrialBalanceRow], options: Optional[AuditOptions] = None) -> ScenarioSummary:
    options = options or AuditOptions()
    snapshot = _copy(rows)
    results: List[ScenarioResult] = []
    tested = 0
    for check in CHECK_GROUPS:
        tested += check(snapshot, options, results)

    def _n(severity: str) -> int:
        return sum(1 for r in results if r.severity == severity)

    return ScenarioSummary(
        total_scenarios_tested=tested,
        passed=max(0, tested - len(results)),
        infos=_n("info"),
        warnings=_n("warning"),
        errors=_n("error"),
        critical=_n("critical"),
        overall_score=score(results, options),
        timestamp=datetime.now(timezone.utc).isoformat(),
        results=results,
    )
