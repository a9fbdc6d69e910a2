"""
tb_platform/importer.py
=======================
Public pipeline: file bytes → grid → column mapping → rows → validation,
plus the statement builder over an imported trial balance.
"""
from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from . import statements
from .detector import detect
from .errors import EmptyOrUnreadableFileError, StructureNotDetectedError
from .extractor import extract
from .log import log_summary
from .parser import read_grid
from .types import (
    FinancialStatements, ImportOptions, ImportedTrialBalance, RawGrid,
    StatementOptions, TrialBalanceRow,
)
from .validator import validate

logger = logging.getLogger(__name__)


def import_grid(
    grid: RawGrid,
    file_name: str,
    options: Optional[ImportOptions] = None,
    sheet_name: Optional[str] = None,
) -> ImportedTrialBalance:
    """Detect, extract, classify and validate an already-read grid."""
    options = options or ImportOptions()

    mapping = detect(grid, options)
    if mapping is None:
        logger.error("No trial balance layout found in %s", file_name)
        raise StructureNotDetectedError(file_name)
    logger.info(
        "Layout (%s): code=%s name=%s debit=%s credit=%s header_row=%s first_data_row=%s",
        mapping.strategy, mapping.code_column, mapping.name_column, mapping.debit_column,
        mapping.credit_column, mapping.header_row_index, mapping.first_data_row_index,
    )

    rows = extract(grid, mapping, options)
    if not rows:
        raise EmptyOrUnreadableFileError(file_name)

    validation = validate(rows, options.balance_tolerance)
    for message in validation.errors:
        logger.error(message)
    for message in validation.warnings:
        logger.warning(message)

    unmapped = sum(1 for r in rows if r.mapped_category == "unmapped")
    log_summary(
        f"file={file_name} sheet={sheet_name or '-'} rows={len(rows)} unmapped={unmapped} "
        f"balanced={validation.is_balanced} difference={validation.difference:.2f}"
    )

    return ImportedTrialBalance(
        rows=rows,
        validation=validation,
        file_name=file_name,
        import_date=datetime.now(timezone.utc).isoformat(),
        sheet_name=sheet_name,
        mapping=mapping,
    )


def import_trial_balance(
    file_bytes: bytes,
    filename: str,
    options: Optional[ImportOptions] = None,
) -> ImportedTrialBalance:
    """Read an uploaded trial balance (xlsx / xls / csv / html) end to end."""
    grid, sheet_name = read_grid(file_bytes, filename)
    if sheet_name is not None:
        logger.info("Reading sheet '%s' of %s", sheet_name, filename)
    if not grid:
        raise EmptyOrUnreadableFileError(filename, reason="the file contains no cells")
    return import_grid(grid, filename, options, sheet_name=sheet_name)


def build_statements(
    imported_or_rows: Union[ImportedTrialBalance, List[TrialBalanceRow]],
    company_name: str,
    report_date: str,
    options: Optional[StatementOptions] = None,
) -> FinancialStatements:
    rows = imported_or_rows.rows if isinstance(imported_or_rows, ImportedTrialBalance) else imported_or_rows
    return statements.generate(rows, company_name, report_date, options)
