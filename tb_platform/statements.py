"""
tb_platform/statements.py
=========================
Builds the statement set from a classified trial balance:
  - Balance sheet (current / non-current split, zakat provision)
  - Income statement down to total comprehensive income
  - Changes in equity (capital / statutory reserve / retained earnings)
  - Cash-flow skeleton
  - Notes: cash & bank, cost of revenue, G&A, creditors, capital, zakat

Zakat uses the net-assets method:
  zakat_base = max(0, equity accounts + profit before zakat − non-current assets)
  zakat      = zakat_base × rate (2.5%)

The zakat charge reduces the year's profit and is carried as a current
liability, so a balanced trial balance yields total assets equal to total
liabilities and equity.
"""
from __future__ import annotations
import re
from typing import List, Optional

from .classifier import equity_component
from .types import (
    BalanceSheet, CapitalNote, CashFlowStatement, EquityChanges, EquityChangesPeriod,
    EquityMovement, FinancialStatements, IncomeStatement, OperatingActivities,
    ScheduleNote, StatementLine, StatementNotes, StatementOptions, TrialBalanceRow, ZakatNote,
)
from .vocabulary import (
    CASH_ACCOUNT_PREFIX, CASH_TERMS, CREDIT_NATURE, EMPLOYEE_BENEFIT_TERMS, INTANGIBLE_TERMS,
    PARTNER_CURRENT_TERMS, normalize_text,
)

ZAKAT_PROVISION_LABEL = "Zakat provision"
NET_PROFIT_LABEL = "Net profit for the year"

_CODE_SEPARATORS = re.compile(r"[.\-/\s]")


def net_balance(row: TrialBalanceRow) -> float:
    """Balance on the account's natural side: credit − debit for liabilities/equity/revenue."""
    if row.mapped_category in CREDIT_NATURE:
        return row.credit - row.debit
    return row.debit - row.credit


def _of(rows: List[TrialBalanceRow], category: str) -> List[TrialBalanceRow]:
    return [r for r in rows if r.mapped_category == category]


def _lines(rows: List[TrialBalanceRow]) -> List[StatementLine]:
    """Statement lines, dropping accounts that net to exactly zero."""
    lines = [StatementLine(name=r.name, amount=net_balance(r), code=r.code) for r in rows]
    return [ln for ln in lines if ln.amount != 0]


def _total(lines: List[StatementLine]) -> float:
    return sum(ln.amount for ln in lines)


def _is_cash_account(row: TrialBalanceRow) -> bool:
    digits = _CODE_SEPARATORS.sub("", row.code)
    return digits.startswith(CASH_ACCOUNT_PREFIX) or CASH_TERMS.matches(normalize_text(row.name))


def _matching(rows: List[TrialBalanceRow], terms) -> float:
    return sum(net_balance(r) for r in rows if terms.matches(normalize_text(r.name)))


# ─── Main Entry Point ─────────────────────────────────────────────────────────

def generate(
    rows: List[TrialBalanceRow],
    company_name: str,
    report_date: str,
    options: Optional[StatementOptions] = None,
) -> FinancialStatements:
    options = options or StatementOptions()

    current_assets = _of(rows, "current_assets")
    non_current_assets = _of(rows, "non_current_assets")
    current_liabilities = _of(rows, "current_liabilities")
    non_current_liabilities = _of(rows, "non_current_liabilities")
    equity_rows = _of(rows, "equity")
    revenue_rows = _of(rows, "revenue")
    cogs_rows = _of(rows, "cogs")
    expense_rows = _of(rows, "expenses")

    ca_lines = _lines(current_assets)
    nca_lines = _lines(non_current_assets)
    cl_lines = _lines(current_liabilities)
    ncl_lines = _lines(non_current_liabilities)
    equity_lines = _lines(equity_rows)
    cogs_lines = _lines(cogs_rows)
    expense_lines = _lines(expense_rows)

    total_current_assets = _total(ca_lines)
    total_non_current_assets = _total(nca_lines)
    total_assets = total_current_assets + total_non_current_assets

    # ── Income statement ───────────────────────────────────────────────────
    revenue = sum(net_balance(r) for r in revenue_rows)
    cost_of_revenue = _total(cogs_lines)
    gross_profit = revenue - cost_of_revenue
    general_and_admin = _total(expense_lines)
    operating_profit = gross_profit - general_and_admin
    profit_before_zakat = operating_profit

    # ── Zakat (net-assets method) ──────────────────────────────────────────
    total_equity_accounts = _total(equity_lines)
    zakat_base_subtotal = total_equity_accounts + profit_before_zakat
    zakat_base = max(0.0, zakat_base_subtotal - total_non_current_assets)
    zakat = zakat_base * options.zakat_rate
    net_profit = profit_before_zakat - zakat

    income = IncomeStatement(
        revenue=revenue,
        cost_of_revenue=cost_of_revenue,
        gross_profit=gross_profit,
        general_and_admin_expenses=general_and_admin,
        operating_profit=operating_profit,
        profit_before_zakat=profit_before_zakat,
        zakat=zakat,
        net_profit=net_profit,
        total_comprehensive_income=net_profit,
    )

    # ── Balance sheet ──────────────────────────────────────────────────────
    if zakat:
        cl_lines = cl_lines + [StatementLine(name=ZAKAT_PROVISION_LABEL, amount=zakat)]
    total_current_liabilities = _total(cl_lines)
    total_non_current_liabilities = _total(ncl_lines)
    total_liabilities = total_current_liabilities + total_non_current_liabilities

    total_equity = total_equity_accounts + net_profit
    bs_equity = equity_lines + ([StatementLine(name=NET_PROFIT_LABEL, amount=net_profit)] if net_profit else [])

    balance_sheet = BalanceSheet(
        current_assets=ca_lines,
        total_current_assets=total_current_assets,
        non_current_assets=nca_lines,
        total_non_current_assets=total_non_current_assets,
        total_assets=total_assets,
        current_liabilities=cl_lines,
        total_current_liabilities=total_current_liabilities,
        non_current_liabilities=ncl_lines,
        total_non_current_liabilities=total_non_current_liabilities,
        total_liabilities=total_liabilities,
        equity=bs_equity,
        total_equity=total_equity,
        total_liabilities_and_equity=total_liabilities + total_equity,
    )

    # ── Changes in equity ──────────────────────────────────────────────────
    components = {"capital": 0.0, "statutory_reserve": 0.0, "retained_earnings": 0.0}
    for r in equity_rows:
        components[equity_component(r.code, r.name)] += net_balance(r)
    capital = components["capital"]
    reserve = components["statutory_reserve"]
    retained = components["retained_earnings"]

    equity_changes = EquityChanges(periods=[EquityChangesPeriod(
        label="Current year",
        rows=[
            EquityMovement("Balance at beginning of year", capital, reserve, retained, total_equity_accounts),
            EquityMovement("Net profit for the year", 0.0, 0.0, net_profit, net_profit),
            EquityMovement("Balance at end of year", capital, reserve, retained + net_profit, total_equity),
        ],
    )])

    # ── Cash flow ──────────────────────────────────────────────────────────
    cash_rows = [r for r in current_assets if _is_cash_account(r)]
    cash_lines = _lines(cash_rows)
    closing_cash = _total(cash_lines)
    cash_flow = CashFlowStatement(
        operating_activities=OperatingActivities(
            profit_before_zakat=profit_before_zakat,
            net_operating_cash_flow=net_profit,
        ),
        net_change_in_cash=net_profit,
        closing_cash_balance=closing_cash,
    )

    # ── Notes ──────────────────────────────────────────────────────────────
    capital_rows = [r for r in equity_rows if equity_component(r.code, r.name) == "capital"]
    capital_note = None
    if capital_rows:
        capital_note = CapitalNote(
            description="Company capital",
            partners=[
                {"name": r.name, "shares_count": 1, "share_value": net_balance(r), "total_value": net_balance(r)}
                for r in capital_rows
            ],
            total_shares=len(capital_rows),
            total_value=capital,
        )

    intangibles = _matching(non_current_assets, INTANGIBLE_TERMS)
    zakat_note = ZakatNote(
        profit_before_zakat=profit_before_zakat,
        adjusted_net_profit=profit_before_zakat,
        zakat_on_adjusted_profit=profit_before_zakat * options.zakat_rate,
        capital=capital,
        partners_current_account=_matching(equity_rows, PARTNER_CURRENT_TERMS),
        statutory_reserve=reserve,
        employee_benefits_liabilities=_matching(non_current_liabilities, EMPLOYEE_BENEFIT_TERMS),
        zakat_base_subtotal=zakat_base_subtotal,
        fixed_assets_net=total_non_current_assets - intangibles,
        intangible_assets_net=intangibles,
        total_deductions=total_non_current_assets,
        zakat_base=zakat_base,
        zakat_on_base=zakat,
        total_zakat_provision=zakat,
        provision_for_year=zakat,
        closing_balance=zakat,
    )

    notes = StatementNotes(
        cash_and_bank=ScheduleNote(items=cash_lines, total=closing_cash),
        cost_of_revenue=ScheduleNote(items=cogs_lines, total=cost_of_revenue),
        general_and_admin_expenses=ScheduleNote(items=expense_lines, total=general_and_admin),
        creditors=ScheduleNote(items=cl_lines + ncl_lines, total=total_liabilities),
        capital=capital_note,
        zakat=zakat_note,
    )

    return FinancialStatements(
        company_name=company_name,
        report_date=report_date,
        currency=options.currency,
        company_type=options.company_type,
        balance_sheet=balance_sheet,
        income_statement=income,
        equity_changes=equity_changes,
        cash_flow=cash_flow,
        notes=notes,
    )
