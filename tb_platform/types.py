"""
tb_platform/types.py
====================
Dataclasses shared by the trial-balance import pipeline.
Grid -> mapping -> rows -> validation / scenarios -> statements.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Literal, Union

# ─── Core Data Types ──────────────────────────────────────────────────────────

# One spreadsheet cell as read from the source file
Cell = Union[str, int, float, None]

# RawGrid: rows of cells, zero-indexed
RawGrid = List[List[Cell]]

Category = Literal[
    "current_assets", "non_current_assets",
    "current_liabilities", "non_current_liabilities",
    "equity", "revenue", "expenses", "cogs",
    "unmapped",
]

CATEGORIES: List[str] = [
    "current_assets", "non_current_assets",
    "current_liabilities", "non_current_liabilities",
    "equity", "revenue", "expenses", "cogs",
    "unmapped",
]

MatchSource = Literal["prefix", "keyword", "fallback", "none"]
Severity = Literal["info", "warning", "error", "critical"]
ScenarioCategory = Literal[
    "balance_validation",
    "mapping_coverage",
    "missing_accounts",
    "duplicate_detection",
    "amount_anomaly",
    "classification_conflict",
    "zakat_compliance",
    "ifrs_compliance",
    "cross_statement_integrity",
    "hierarchy_validation",
]


# ─── Options ──────────────────────────────────────────────────────────────────

@dataclass
class ImportOptions:
    header_scan_rows: int = 15
    code_validation_rows: int = 10
    min_code_hits: int = 2
    pattern_lookahead_rows: int = 4
    pattern_min_repeats: int = 2
    balance_tolerance: float = 0.01
    skip_uncoded_zero_rows: bool = True


@dataclass
class AuditOptions:
    anomaly_multiple: float = 1000.0
    critical_imbalance: float = 1000.0
    equation_tolerance: float = 1.0
    coverage_error_pct: float = 80.0
    coverage_critical_pct: float = 50.0
    severity_weights: Dict[str, float] = field(default_factory=lambda: {
        "critical": 25.0, "error": 10.0, "warning": 3.0, "info": 1.0,
    })


@dataclass
class StatementOptions:
    zakat_rate: float = 0.025
    currency: str = "SAR"
    company_type: str = "Sole proprietorship"


# ─── Structure & Rows ─────────────────────────────────────────────────────────

@dataclass
class ColumnMapping:
    name_column: int
    debit_column: int
    credit_column: int
    first_data_row_index: int
    code_column: Optional[int] = None
    header_row_index: Optional[int] = None
    strategy: str = "header"
    # Every detected amount column (opening/movement/closing pairs), not only the chosen pair
    amount_columns: List[int] = field(default_factory=list)


@dataclass
class TrialBalanceRow:
    code: str
    name: str
    debit: float
    credit: float
    mapped_category: Category = "unmapped"
    is_auto_mapped: bool = False
    source_row: Optional[int] = None


@dataclass
class Classification:
    category: Category
    source: MatchSource
    rule_label: Optional[str] = None

    @property
    def is_auto_mapped(self) -> bool:
        return self.source in ("prefix", "keyword")


# ─── Validation & Audit ───────────────────────────────────────────────────────

@dataclass
class ValidationResult:
    is_balanced: bool
    total_debit: float
    total_credit: float
    difference: float
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    missing_categories: List[str] = field(default_factory=list)


RowsFix = Callable[[List[TrialBalanceRow]], List[TrialBalanceRow]]


@dataclass
class ScenarioResult:
    id: str
    category: ScenarioCategory
    severity: Severity
    title: str
    description: str
    affected_account_codes: List[str] = field(default_factory=list)
    auto_fix_available: bool = False
    auto_fix_label: Optional[str] = None
    auto_fix: Optional[RowsFix] = None


@dataclass
class ScenarioSummary:
    total_scenarios_tested: int
    passed: int
    infos: int
    warnings: int
    errors: int
    critical: int
    overall_score: float
    timestamp: str
    results: List[ScenarioResult] = field(default_factory=list)


@dataclass
class ImportedTrialBalance:
    rows: List[TrialBalanceRow]
    validation: ValidationResult
    file_name: str
    import_date: str
    sheet_name: Optional[str] = None
    mapping: Optional[ColumnMapping] = None


# ─── Financial Statements ─────────────────────────────────────────────────────

@dataclass
class StatementLine:
    name: str
    amount: float
    code: Optional[str] = None


@dataclass
class BalanceSheet:
    current_assets: List[StatementLine] = field(default_factory=list)
    total_current_assets: float = 0.0
    non_current_assets: List[StatementLine] = field(default_factory=list)
    total_non_current_assets: float = 0.0
    total_assets: float = 0.0
    current_liabilities: List[StatementLine] = field(default_factory=list)
    total_current_liabilities: float = 0.0
    non_current_liabilities: List[StatementLine] = field(default_factory=list)
    total_non_current_liabilities: float = 0.0
    total_liabilities: float = 0.0
    equity: List[StatementLine] = field(default_factory=list)
    total_equity: float = 0.0
    total_liabilities_and_equity: float = 0.0


@dataclass
class IncomeStatement:
    revenue: float = 0.0
    cost_of_revenue: float = 0.0
    gross_profit: float = 0.0
    general_and_admin_expenses: float = 0.0
    operating_profit: float = 0.0
    financing_cost: float = 0.0
    gains_losses_from_disposals: float = 0.0
    profit_before_zakat: float = 0.0
    zakat: float = 0.0
    net_profit: float = 0.0
    other_comprehensive_income: float = 0.0
    total_comprehensive_income: float = 0.0


@dataclass
class EquityMovement:
    description: str
    capital: float = 0.0
    statutory_reserve: float = 0.0
    retained_earnings: float = 0.0
    total: float = 0.0


@dataclass
class EquityChangesPeriod:
    label: str
    rows: List[EquityMovement] = field(default_factory=list)


@dataclass
class EquityChanges:
    periods: List[EquityChangesPeriod] = field(default_factory=list)


@dataclass
class OperatingActivities:
    profit_before_zakat: float = 0.0
    adjustments_to_reconcile: List[StatementLine] = field(default_factory=list)
    changes_in_working_capital: List[StatementLine] = field(default_factory=list)
    zakat_paid: float = 0.0
    employee_benefits_paid: float = 0.0
    net_operating_cash_flow: float = 0.0


@dataclass
class CashFlowStatement:
    operating_activities: OperatingActivities = field(default_factory=OperatingActivities)
    investing_activities: List[StatementLine] = field(default_factory=list)
    net_investing_cash_flow: float = 0.0
    financing_activities: List[StatementLine] = field(default_factory=list)
    net_financing_cash_flow: float = 0.0
    net_change_in_cash: float = 0.0
    opening_cash_balance: float = 0.0
    closing_cash_balance: float = 0.0


@dataclass
class ScheduleNote:
    items: List[StatementLine] = field(default_factory=list)
    total: float = 0.0


@dataclass
class CapitalNote:
    description: str
    partners: List[Dict[str, Union[str, float, int]]] = field(default_factory=list)
    total_shares: int = 0
    total_value: float = 0.0


@dataclass
class ZakatNote:
    profit_before_zakat: float = 0.0
    adjustments_on_net_income: float = 0.0
    adjusted_net_profit: float = 0.0
    zakat_on_adjusted_profit: float = 0.0
    capital: float = 0.0
    partners_current_account: float = 0.0
    statutory_reserve: float = 0.0
    employee_benefits_liabilities: float = 0.0
    zakat_base_subtotal: float = 0.0
    fixed_assets_net: float = 0.0
    intangible_assets_net: float = 0.0
    prepaid_rent_long_term: float = 0.0
    other: float = 0.0
    total_deductions: float = 0.0
    zakat_base: float = 0.0
    zakat_on_base: float = 0.0
    total_zakat_provision: float = 0.0
    opening_balance: float = 0.0
    provision_for_year: float = 0.0
    paid_during_year: float = 0.0
    closing_balance: float = 0.0
    zakat_status: str = "Zakat provision computed using the net-assets method"


@dataclass
class StatementNotes:
    cash_and_bank: ScheduleNote = field(default_factory=ScheduleNote)
    cost_of_revenue: ScheduleNote = field(default_factory=ScheduleNote)
    general_and_admin_expenses: ScheduleNote = field(default_factory=ScheduleNote)
    creditors: ScheduleNote = field(default_factory=ScheduleNote)
    capital: Optional[CapitalNote] = None
    zakat: ZakatNote = field(default_factory=ZakatNote)


@dataclass
class FinancialStatements:
    company_name: str
    report_date: str
    currency: str
    company_type: str
    balance_sheet: BalanceSheet
    income_statement: IncomeStatement
    equity_changes: EquityChanges
    cash_flow: CashFlowStatement
    notes: StatementNotes
