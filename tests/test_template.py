"""
tests/test_template.py
======================
Unit tests for the downloadable trial balance template and its
round trip through the importer.

Run:  pytest tests/ -v
"""

import io
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import openpyxl
import pytest

from tb_platform.template import (
    HEADERS,
    INSTRUCTIONS_SHEET,
    SAMPLE_ACCOUNTS,
    TEMPLATE_SHEET,
    build_template_workbook,
)
from tb_platform.importer import import_trial_balance
from tb_platform.errors import EmptyOrUnreadableFileError


@pytest.fixture(scope="module")
def template_bytes():
    return build_template_workbook()


class TestTemplateWorkbook:
    def test_sheets(self, template_bytes):
        wb = openpyxl.load_workbook(io.BytesIO(template_bytes))
        assert wb.sheetnames == [TEMPLATE_SHEET, INSTRUCTIONS_SHEET]

    def test_header_row(self, template_bytes):
        ws = openpyxl.load_workbook(io.BytesIO(template_bytes))[TEMPLATE_SHEET]
        assert [c.value for c in ws[3]] == HEADERS

    def test_right_to_left(self, template_bytes):
        wb = openpyxl.load_workbook(io.BytesIO(template_bytes))
        assert all(wb[name].sheet_view.rightToLeft for name in wb.sheetnames)

    def test_sample_codes_are_text(self, template_bytes):
        ws = openpyxl.load_workbook(io.BytesIO(template_bytes))[TEMPLATE_SHEET]
        assert ws["A4"].value == SAMPLE_ACCOUNTS[0][0]

    def test_totals_formula(self, template_bytes):
        ws = openpyxl.load_workbook(io.BytesIO(template_bytes))[TEMPLATE_SHEET]
        last = 3 + len(SAMPLE_ACCOUNTS) + 1
        assert ws[f"C{last}"].value == f"=SUM(C4:C{last - 1})"


class TestTemplateRoundTrip:
    def test_every_sample_imported(self, template_bytes):
        imported = import_trial_balance(template_bytes, "template.xlsx")
        assert [(r.code, r.name) for r in imported.rows] == SAMPLE_ACCOUNTS

    def test_template_sheet_selected(self, template_bytes):
        imported = import_trial_balance(template_bytes, "template.xlsx")
        assert imported.sheet_name == TEMPLATE_SHEET
        assert imported.mapping.header_row_index == 2

    def test_every_sample_classified(self, template_bytes):
        imported = import_trial_balance(template_bytes, "template.xlsx")
        assert all(r.mapped_category != "unmapped" for r in imported.rows)
        assert imported.validation.is_balanced

    def test_blank_template_has_no_accounts(self):
        with pytest.raises(EmptyOrUnreadableFileError):
            import_trial_balance(build_template_workbook(include_samples=False), "blank.xlsx")
