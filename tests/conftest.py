"""
tests/conftest.py
=================
Shared pytest fixtures for the TB Platform test suite.
"""
import sys
import os

# Ensure the project root is on the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from tb_platform.log import reset_logging
from tb_platform.types import TrialBalanceRow


@pytest.fixture(autouse=True)
def _fresh_logging():
    """Each test gets a logger bound to its own captured stdout."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def simple_grid():
    """Four-account trial balance with a plain single-row header."""
    return [
        ["Code", "Name", "Debit", "Credit"],
        ["1101", "Cash", 1000, 0],
        ["2101", "Suppliers", 0, 600],
        ["3101", "Capital", 0, 400],
        ["4101", "Sales", 0, 0],
    ]


@pytest.fixture
def balanced_rows():
    """Classified rows that trip no audit check at all."""
    return [
        TrialBalanceRow("1399", "Inventory", 1000.0, 0.0, "current_assets", True),
        TrialBalanceRow("1400", "Equipment", 500.0, 0.0, "non_current_assets", True),
        TrialBalanceRow("2101", "Suppliers", 0.0, 300.0, "current_liabilities", True),
        TrialBalanceRow("3101", "Capital", 0.0, 1000.0, "equity", True),
        TrialBalanceRow("4101", "Sales", 0.0, 600.0, "revenue", True),
        TrialBalanceRow("5101", "Cost of sales", 400.0, 0.0, "cogs", True),
    ]
