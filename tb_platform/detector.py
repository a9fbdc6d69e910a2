"""
tb_platform/detector.py
=======================
Locates the code / name / debit / credit columns inside a raw grid.

Detection is an ordered list of pure strategies; the first one that yields a
mapping wins:
  1. header vocabulary (single-tier, then two-tier merged headers)
  2. row-pattern auto-detection for header-less exports
"""
from __future__ import annotations
import logging
from typing import Callable, List, Optional, Sequence, Set, Tuple

from .cells import cell_text, is_amount_cell, is_blank, looks_like_account_code, looks_like_account_name
from .types import Cell, ColumnMapping, ImportOptions, RawGrid
from .vocabulary import (
    CLOSING_HEADERS, CODE_HEADER, CREDIT_HEADER, DEBIT_HEADER, MOVEMENT_HEADERS,
    NAME_HEADER, OPENING_HEADERS, TITLE_HEADERS, normalize_text,
)

logger = logging.getLogger(__name__)

DetectionStrategy = Callable[[RawGrid, ImportOptions], Optional[ColumnMapping]]


def _row_norms(row: Sequence[Cell]) -> List[str]:
    return [normalize_text(cell_text(c)) for c in row]


def _cell(grid: RawGrid, r: int, c: int) -> Cell:
    if r >= len(grid) or c >= len(grid[r]):
        return None
    return grid[r][c]


# ─── Header Helpers ───────────────────────────────────────────────────────────

def _find_name_column(norms: List[str]) -> Optional[int]:
    for j, t in enumerate(norms):
        if NAME_HEADER.matches_exact(t) and not CODE_HEADER.matches_exact(t):
            return j
    for j, t in enumerate(norms):
        if not t or CODE_HEADER.matches(t):
            continue
        if NAME_HEADER.matches_partial(t, reverse=True):
            return j
    return None


def _amount_columns(norms: List[str], name_col: int) -> Tuple[List[int], List[int]]:
    """Every debit-labelled and credit-labelled column, left to right."""
    debits: List[int] = []
    credits: List[int] = []
    for j, t in enumerate(norms):
        if j == name_col or not t:
            continue
        is_debit = DEBIT_HEADER.matches(t)
        is_credit = CREDIT_HEADER.matches(t)
        if is_debit and is_credit:
            continue
        if is_debit:
            debits.append(j)
        elif is_credit:
            credits.append(j)
    return debits, credits


def _closing_start(grid: RawGrid, parent_row: int) -> Optional[int]:
    """Column of the closing/net-balance caption in a super-header row, if any."""
    if parent_row < 0 or parent_row >= len(grid):
        return None
    row = grid[parent_row]
    if sum(1 for c in row if not is_blank(c)) < 2:
        return None
    for j, t in enumerate(_row_norms(row)):
        if not t or not CLOSING_HEADERS.matches(t):
            continue
        if OPENING_HEADERS.matches(t) or MOVEMENT_HEADERS.matches(t) or TITLE_HEADERS.matches(t):
            continue
        return j
    return None


def _resolve_pair(debits: List[int], credits: List[int], closing_start: Optional[int]) -> Tuple[int, int]:
    if closing_start is not None:
        debit = next((j for j in debits if j >= closing_start), None)
        credit = next((j for j in credits if j >= closing_start), None)
        if debit is not None and credit is not None:
            return debit, credit
    if len(debits) >= 3 and len(credits) >= 3:
        return debits[-1], credits[-1]
    if len(debits) == 2 and len(credits) == 2:
        return debits[1], credits[1]
    return debits[0], credits[0]


def _count_codes(grid: RawGrid, col: int, first_row: int, window: int) -> int:
    return sum(
        1 for r in range(first_row, min(len(grid), first_row + window))
        if looks_like_account_code(_cell(grid, r, col))
    )


def _resolve_code_column(
    grid: RawGrid,
    header_rows: List[int],
    excluded: Set[int],
    first_data_row: int,
    options: ImportOptions,
) -> Optional[int]:
    window = options.code_validation_rows
    for r in header_rows:
        for j, t in enumerate(_row_norms(grid[r])):
            if j in excluded or not CODE_HEADER.matches(t):
                continue
            if _count_codes(grid, j, first_data_row, window) >= options.min_code_hits:
                return j

    # No usable header: the column holding the most code-shaped values
    width = max((len(grid[r]) for r in range(first_data_row, min(len(grid), first_data_row + window))),
                default=0)
    best, best_hits = None, 0
    for j in range(width):
        if j in excluded:
            continue
        hits = _count_codes(grid, j, first_data_row, window)
        if hits > best_hits:
            best, best_hits = j, hits
    return best if best_hits >= options.min_code_hits else None


def _layout_from_rows(
    grid: RawGrid,
    name_row: int,
    sub_row: int,
    name_col: int,
    options: ImportOptions,
    strategy: str,
) -> Optional[ColumnMapping]:
    if sub_row >= len(grid):
        return None
    debits, credits = _amount_columns(_row_norms(grid[sub_row]), name_col)
    if not debits or not credits:
        return None

    debit_col, credit_col = _resolve_pair(debits, credits, _closing_start(grid, sub_row - 1))
    if len({name_col, debit_col, credit_col}) < 3:
        return None

    first_data_row = sub_row + 1
    header_rows = [name_row] if sub_row == name_row else [name_row, sub_row]
    code_col = _resolve_code_column(
        grid, header_rows, {name_col, *debits, *credits}, first_data_row, options,
    )
    return ColumnMapping(
        name_column=name_col,
        debit_column=debit_col,
        credit_column=credit_col,
        first_data_row_index=first_data_row,
        code_column=code_col,
        header_row_index=name_row,
        strategy=strategy,
        amount_columns=sorted({*debits, *credits}),
    )


def _single_tier(grid: RawGrid, row: int, name_col: int, options: ImportOptions) -> Optional[ColumnMapping]:
    """Debit/credit labels on the same row as the name header."""
    return _layout_from_rows(grid, row, row, name_col, options, "header")


def _two_tier(grid: RawGrid, row: int, name_col: int, options: ImportOptions) -> Optional[ColumnMapping]:
    """Merged super-header row with debit/credit sub-labels on the row below."""
    if row + 1 < len(grid) and _find_name_column(_row_norms(grid[row + 1])) is not None:
        # The next row is a header row of its own; let the row scan reach it
        return None
    return _layout_from_rows(grid, row, row + 1, name_col, options, "header_two_tier")


HEADER_ROW_STRATEGIES = (_single_tier, _two_tier)


# ─── Strategies ───────────────────────────────────────────────────────────────

def detect_from_headers(grid: RawGrid, options: ImportOptions) -> Optional[ColumnMapping]:
    for r in range(min(len(grid), options.header_scan_rows)):
        name_col = _find_name_column(_row_norms(grid[r]))
        if name_col is None:
            continue
        for strategy in HEADER_ROW_STRATEGIES:
            mapping = strategy(grid, r, name_col, options)
            if mapping is not None:
                return mapping
    return None


def _repeats_shape(row: Sequence[Cell], code_col: int, name_col: int) -> bool:
    code = row[code_col] if code_col < len(row) else None
    name = row[name_col] if name_col < len(row) else None
    return looks_like_account_code(code) and looks_like_account_name(name)


def detect_from_row_pattern(grid: RawGrid, options: ImportOptions) -> Optional[ColumnMapping]:
    """Header-less layout: code, name and two trailing amount columns repeating row after row."""
    for start in range(min(len(grid), options.header_scan_rows)):
        row = grid[start]
        code_col = next((j for j, c in enumerate(row) if looks_like_account_code(c)), None)
        if code_col is None:
            continue
        name_col = next(
            (j for j, c in enumerate(row)
             if j != code_col and looks_like_account_name(c) and len(cell_text(c)) > 3),
            None,
        )
        if name_col is None:
            continue
        numeric = [j for j, c in enumerate(row) if j not in (code_col, name_col) and is_amount_cell(c)]
        if len(numeric) < 2:
            continue

        following = grid[start + 1:start + 1 + options.pattern_lookahead_rows]
        repeats = sum(1 for r in following if _repeats_shape(r, code_col, name_col))
        if repeats < options.pattern_min_repeats:
            continue

        return ColumnMapping(
            name_column=name_col,
            debit_column=numeric[-2],
            credit_column=numeric[-1],
            first_data_row_index=start,
            code_column=code_col,
            header_row_index=None,
            strategy="pattern",
            amount_columns=numeric,
        )
    return None


DETECTION_STRATEGIES: Tuple[DetectionStrategy, ...] = (detect_from_headers, detect_from_row_pattern)


def detect(grid: RawGrid, options: Optional[ImportOptions] = None) -> Optional[ColumnMapping]:
    """Return the column layout of a trial-balance grid, or None when nothing fits."""
    options = options or ImportOptions()
    for strategy in DETECTION_STRATEGIES:
        mapping = strategy(grid, options)
        if mapping is not None:
            logger.debug("Layout found by %s: %s", strategy.__name__, mapping)
            return mapping
    return None
