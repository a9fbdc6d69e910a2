"""
tests/test_statements.py
========================
Unit tests for financial statement generation.
Tests cover: income statement subtotals, zakat (net-assets method),
balance sheet equality, changes in equity, cash flow and notes.

Run:  pytest tests/ -v
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from tb_platform.statements import NET_PROFIT_LABEL, ZAKAT_PROVISION_LABEL, generate, net_balance
from tb_platform.types import StatementOptions, TrialBalanceRow


def _row(code, name, debit, credit, category):
    return TrialBalanceRow(code, name, float(debit), float(credit), category, True)


# ─── Shared Fixtures ──────────────────────────────────────────────────────────

@pytest.fixture
def trading_rows():
    """Trading company: sales 800, cost 200, salaries 100, no fixed assets."""
    return [
        _row("1101", "Cash", 1000, 0, "current_assets"),
        _row("3101", "Capital", 0, 500, "equity"),
        _row("4101", "Sales", 0, 800, "revenue"),
        _row("5101", "Cost of sales", 200, 0, "cogs"),
        _row("5201", "Salaries", 100, 0, "expenses"),
    ]


@pytest.fixture
def trading_statements(trading_rows):
    return generate(trading_rows, "Al Noor Trading", "2024-12-31")


# ═══════════════════════════════════════════════════════════════════════════════
# 1. INCOME STATEMENT TESTS
# ═══════════════════════════════════════════════════════════════════════════════

class TestIncomeStatement:
    def test_revenue(self, trading_statements):
        assert trading_statements.income_statement.revenue == pytest.approx(800.0)

    def test_gross_profit(self, trading_statements):
        income = trading_statements.income_statement
        assert income.cost_of_revenue == pytest.approx(200.0)
        assert income.gross_profit == pytest.approx(600.0)

    def test_operating_profit(self, trading_statements):
        income = trading_statements.income_statement
        assert income.general_and_admin_expenses == pytest.approx(100.0)
        assert income.operating_profit == pytest.approx(500.0)
        assert income.profit_before_zakat == pytest.approx(500.0)

    def test_net_profit_after_zakat(self, trading_statements):
        income = trading_statements.income_statement
        assert income.zakat == pytest.approx(25.0)
        assert income.net_profit == pytest.approx(475.0)
        assert income.total_comprehensive_income == pytest.approx(475.0)

    def test_net_balance_sides(self):
        assert net_balance(_row("4101", "Sales", 10, 80, "revenue")) == 70.0
        assert net_balance(_row("5201", "Rent", 80, 10, "expenses")) == 70.0


# ═══════════════════════════════════════════════════════════════════════════════
# 2. ZAKAT TESTS
# ═══════════════════════════════════════════════════════════════════════════════

class TestZakat:
    def test_base_includes_profit(self, trading_statements):
        note = trading_statements.notes.zakat
        assert note.zakat_base_subtotal == pytest.approx(1000.0)
        assert note.zakat_base == pytest.approx(1000.0)
        assert note.zakat_on_base == pytest.approx(25.0)

    def test_non_current_assets_deducted(self):
        rows = [
            _row("1101", "Cash", 1000, 0, "current_assets"),
            _row("1501", "Equipment", 1500, 0, "non_current_assets"),
            _row("3101", "Capital", 0, 2500, "equity"),
        ]
        st = generate(rows, "Co", "2024-12-31")
        assert st.notes.zakat.total_deductions == pytest.approx(1500.0)
        assert st.notes.zakat.fixed_assets_net == pytest.approx(1500.0)
        assert st.income_statement.zakat == pytest.approx(25.0)

    def test_negative_base_clamped(self):
        rows = [
            _row("1501", "Equipment", 3000, 0, "non_current_assets"),
            _row("2301", "Long-term loan", 0, 2000, "non_current_liabilities"),
            _row("3101", "Capital", 0, 1000, "equity"),
        ]
        st = generate(rows, "Co", "2024-12-31")
        assert st.notes.zakat.zakat_base == 0.0
        assert st.income_statement.zakat == 0.0
        assert st.balance_sheet.current_liabilities == []

    def test_custom_rate(self, trading_rows):
        st = generate(trading_rows, "Co", "2024-12-31", StatementOptions(zakat_rate=0.1))
        assert st.income_statement.zakat == pytest.approx(100.0)

    def test_intangibles_split_from_fixed_assets(self):
        rows = [
            _row("1501", "Equipment", 400, 0, "non_current_assets"),
            _row("1701", "Accounting software", 100, 0, "non_current_assets"),
            _row("3101", "Capital", 0, 500, "equity"),
        ]
        note = generate(rows, "Co", "2024-12-31").notes.zakat
        assert note.intangible_assets_net == pytest.approx(100.0)
        assert note.fixed_assets_net == pytest.approx(400.0)


# ═══════════════════════════════════════════════════════════════════════════════
# 3. BALANCE SHEET TESTS
# ═══════════════════════════════════════════════════════════════════════════════

class TestBalanceSheet:
    def test_assets_equal_liabilities_and_equity(self, trading_statements):
        bs = trading_statements.balance_sheet
        assert bs.total_assets == pytest.approx(1000.0)
        assert bs.total_liabilities_and_equity == pytest.approx(bs.total_assets)

    def test_zakat_provision_line(self, trading_statements):
        lines = trading_statements.balance_sheet.current_liabilities
        assert [(ln.name, ln.amount) for ln in lines] == [(ZAKAT_PROVISION_LABEL, 25.0)]

    def test_net_profit_in_equity(self, trading_statements):
        bs = trading_statements.balance_sheet
        assert bs.equity[-1].name == NET_PROFIT_LABEL
        assert bs.total_equity == pytest.approx(975.0)

    def test_loss_year_balances(self):
        rows = [
            _row("1101", "Cash", 1000, 0, "current_assets"),
            _row("2101", "Suppliers", 0, 600, "current_liabilities"),
            _row("3101", "Capital", 0, 400, "equity"),
        ]
        bs = generate(rows, "Co", "2024-12-31").balance_sheet
        assert bs.total_liabilities == pytest.approx(610.0)
        assert bs.total_equity == pytest.approx(390.0)
        assert bs.total_liabilities_and_equity == pytest.approx(1000.0)

    def test_zero_net_accounts_dropped(self, trading_rows):
        trading_rows.append(_row("1201", "Customers", 100, 100, "current_assets"))
        bs = generate(trading_rows, "Co", "2024-12-31").balance_sheet
        assert [ln.code for ln in bs.current_assets] == ["1101"]

    def test_unmapped_rows_excluded(self, trading_rows):
        trading_rows.append(_row("AUTO-9", "Xanadu Trust", 100, 0, "unmapped"))
        bs = generate(trading_rows, "Co", "2024-12-31").balance_sheet
        assert bs.total_assets == pytest.approx(1000.0)

    def test_metadata(self, trading_statements):
        assert trading_statements.company_name == "Al Noor Trading"
        assert trading_statements.report_date == "2024-12-31"
        assert trading_statements.currency == "SAR"


# ═══════════════════════════════════════════════════════════════════════════════
# 4. CHANGES IN EQUITY & CASH FLOW TESTS
# ═══════════════════════════════════════════════════════════════════════════════

class TestEquityChanges:
    @pytest.fixture
    def equity_rows(self):
        return [
            _row("1101", "Cash", 480, 0, "current_assets"),
            _row("3101", "Capital", 0, 400, "equity"),
            _row("3201", "Statutory reserve", 0, 50, "equity"),
            _row("3301", "Retained earnings", 0, 30, "equity"),
        ]

    def test_opening_components(self, equity_rows):
        opening = generate(equity_rows, "Co", "2024-12-31").equity_changes.periods[0].rows[0]
        assert (opening.capital, opening.statutory_reserve, opening.retained_earnings) == (400.0, 50.0, 30.0)
        assert opening.total == pytest.approx(480.0)

    def test_closing_matches_balance_sheet(self, equity_rows):
        st = generate(equity_rows, "Co", "2024-12-31")
        closing = st.equity_changes.periods[0].rows[-1]
        assert closing.description == "Balance at end of year"
        assert closing.retained_earnings == pytest.approx(18.0)
        assert closing.total == pytest.approx(st.balance_sheet.total_equity)

    def test_profit_row(self, trading_statements):
        movement = trading_statements.equity_changes.periods[0].rows[1]
        assert movement.retained_earnings == pytest.approx(475.0)


class TestCashFlow:
    def test_closing_cash(self, trading_statements):
        assert trading_statements.cash_flow.closing_cash_balance == pytest.approx(1000.0)

    def test_operating_profit_before_zakat(self, trading_statements):
        ops = trading_statements.cash_flow.operating_activities
        assert ops.profit_before_zakat == pytest.approx(500.0)


# ═══════════════════════════════════════════════════════════════════════════════
# 5. NOTES TESTS
# ═══════════════════════════════════════════════════════════════════════════════

class TestNotes:
    def test_cash_and_bank_note(self):
        rows = [
            _row("1101", "Cash", 300, 0, "current_assets"),
            _row("1201", "Bank Albilad", 200, 0, "current_assets"),
            _row("1202", "Customers", 500, 0, "current_assets"),
            _row("3101", "Capital", 0, 1000, "equity"),
        ]
        note = generate(rows, "Co", "2024-12-31").notes.cash_and_bank
        assert [ln.code for ln in note.items] == ["1101", "1201"]
        assert note.total == pytest.approx(500.0)

    def test_cost_and_expense_schedules(self, trading_statements):
        notes = trading_statements.notes
        assert notes.cost_of_revenue.total == pytest.approx(200.0)
        assert [ln.name for ln in notes.general_and_admin_expenses.items] == ["Salaries"]

    def test_creditors_include_zakat(self, trading_statements):
        creditors = trading_statements.notes.creditors
        assert creditors.total == pytest.approx(25.0)

    def test_capital_note(self, trading_statements):
        capital = trading_statements.notes.capital
        assert capital.total_value == pytest.approx(500.0)
        assert capital.partners[0]["name"] == "Capital"

    def test_no_capital_note_without_capital(self):
        rows = [_row("1101", "Cash", 30, 0, "current_assets"),
                _row("3301", "Retained earnings", 0, 30, "equity")]
        assert generate(rows, "Co", "2024-12-31").notes.capital is None

    def test_end_of_service_in_zakat_note(self):
        rows = [
            _row("1101", "Cash", 1000, 0, "current_assets"),
            _row("2302", "End of service benefits", 0, 200, "non_current_liabilities"),
            _row("3101", "Capital", 0, 800, "equity"),
        ]
        note = generate(rows, "Co", "2024-12-31").notes.zakat
        assert note.employee_benefits_liabilities == pytest.approx(200.0)
