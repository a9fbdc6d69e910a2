"""
tests/test_formatting.py
========================
Unit tests for display formatting and the labelled logging setup.

Run:  pytest tests/ -v
"""

import logging
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tb_platform.formatting import (
    category_label,
    format_amount,
    format_percent,
    scenario_category_label,
    severity_label,
)
from tb_platform.log import LabeledFormatter, LOGGER_NAME, log_summary, reset_logging, setup_logging


# ═══════════════════════════════════════════════════════════════════════════════
# 1. FORMATTING TESTS
# ═══════════════════════════════════════════════════════════════════════════════

class TestFormatAmount:
    def test_thousands(self):
        assert format_amount(1234567.891) == "1,234,567.89"

    def test_negative_in_parentheses(self):
        assert format_amount(-1234.5) == "(1,234.50)"

    def test_zero_decimals(self):
        assert format_amount(1234.4, 0) == "1,234"

    def test_none(self):
        assert format_amount(None) == "—"


class TestFormatPercent:
    def test_one_decimal(self):
        assert format_percent(12.345) == "12.3%"

    def test_none(self):
        assert format_percent(None) == "—"


class TestLabels:
    def test_category_arabic(self):
        assert category_label("equity") == "حقوق ملكية"

    def test_category_english(self):
        assert category_label("equity", "en") == "Equity"

    def test_unknown_category(self):
        assert category_label("other") == "other"

    def test_severity(self):
        assert severity_label("critical") == "حرج"

    def test_scenario_category(self):
        assert scenario_category_label("zakat_compliance", "en") == "Zakat compliance"


# ═══════════════════════════════════════════════════════════════════════════════
# 2. LOGGING TESTS
# ═══════════════════════════════════════════════════════════════════════════════

class TestLogging:
    def test_formatter_labels(self):
        record = logging.LogRecord(LOGGER_NAME, logging.WARNING, __file__, 1, "careful %s", ("now",), None)
        assert LabeledFormatter().format(record) == "WARN careful now"

    def test_setup_is_idempotent(self):
        first = setup_logging()
        second = setup_logging()
        assert first is second
        assert len(first.handlers) == 1
        assert not first.propagate

    def test_labelled_prefixes(self, capsys):
        setup_logging()
        module_logger = logging.getLogger(f"{LOGGER_NAME}.importer")
        module_logger.info("reading sheet")
        module_logger.warning("3 unmapped accounts")
        module_logger.error("not balanced")
        log_summary("rows=4")
        out = capsys.readouterr().out.splitlines()
        assert out == ["INFO reading sheet", "WARN 3 unmapped accounts", "ERROR not balanced", "SUMMARY rows=4"]

    def test_debug_hidden_at_info(self, capsys):
        setup_logging()
        logging.getLogger(f"{LOGGER_NAME}.detector").debug("layout")
        assert capsys.readouterr().out == ""

    def test_reset_removes_handlers(self):
        setup_logging()
        reset_logging()
        assert logging.getLogger(LOGGER_NAME).handlers == []
