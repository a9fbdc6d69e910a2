"""
tb_platform/extractor.py
========================
Turns grid rows below the detected header into classified TrialBalanceRow records.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Sequence, Tuple

from .cells import cell_text, is_blank, looks_like_account_code, looks_like_account_name, normalize_code, parse_amount
from .classifier import classify_rows
from .types import Cell, ColumnMapping, ImportOptions, RawGrid, TrialBalanceRow
from .vocabulary import PLACEHOLDER_CODE_PREFIX, TOTAL_KEYWORDS, normalize_text

logger = logging.getLogger(__name__)


def _get(row: Sequence[Cell], col: Optional[int]) -> Cell:
    if col is None or col >= len(row):
        return None
    return row[col]


def resolve_signs(debit: float, credit: float) -> Tuple[float, float]:
    """Move negative amounts to the opposite side so both sides are >= 0."""
    d = c = 0.0
    if debit >= 0:
        d += debit
    else:
        c += -debit
    if credit >= 0:
        c += credit
    else:
        d += -credit
    return d, c


def _row_code(row: Sequence[Cell], mapping: ColumnMapping) -> str:
    value = _get(row, mapping.code_column)
    if looks_like_account_code(value):
        return normalize_code(value)

    skip = {mapping.name_column, mapping.debit_column, mapping.credit_column, mapping.code_column}
    skip.update(mapping.amount_columns)
    for j, cell in enumerate(row):
        if j in skip:
            continue
        # 1250.75 is an amount, not a code
        if isinstance(cell, float) and not cell.is_integer():
            continue
        if looks_like_account_code(cell):
            return normalize_code(cell)
    return ""


def is_totals_row(label: str, name: str) -> bool:
    """A total keyword in the name, or in the code cell's text."""
    return TOTAL_KEYWORDS.matches(normalize_text(name)) or TOTAL_KEYWORDS.matches(normalize_text(label))


def extract(grid: RawGrid, mapping: ColumnMapping, options: Optional[ImportOptions] = None) -> List[TrialBalanceRow]:
    options = options or ImportOptions()
    rows: List[TrialBalanceRow] = []
    skipped_totals = 0

    for idx in range(mapping.first_data_row_index, len(grid)):
        raw = grid[idx]
        if sum(1 for c in raw if not is_blank(c)) < 2:
            continue

        name = cell_text(_get(raw, mapping.name_column))
        code = _row_code(raw, mapping)
        if is_totals_row(cell_text(_get(raw, mapping.code_column)), name):
            skipped_totals += 1
            continue

        debit = parse_amount(_get(raw, mapping.debit_column))
        credit = parse_amount(_get(raw, mapping.credit_column))
        no_amounts = debit == 0 and credit == 0
        if no_amounts and not code and not looks_like_account_name(name):
            continue
        if no_amounts and not code and options.skip_uncoded_zero_rows:
            # Section heading such as "الأصول المتداولة" with nothing posted
            continue

        debit, credit = resolve_signs(debit, credit)
        rows.append(TrialBalanceRow(
            code=code or f"{PLACEHOLDER_CODE_PREFIX}{idx}",
            name=name,
            debit=debit,
            credit=credit,
            source_row=idx,
        ))

    logger.debug("Extracted %d rows (%d totals rows skipped)", len(rows), skipped_totals)
    return classify_rows(rows)
