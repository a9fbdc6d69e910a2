"""
tb_platform/parser.py
=====================
Reads uploaded file bytes into a raw cell grid. Handles:
  - Excel (.xlsx via openpyxl, .xls via xlrd): picks the trial-balance sheet
  - CSV (.csv): encoding fallbacks, ragged rows
  - HTML tables (also when saved with an .xls extension)

The grid keeps the sheet's row/column positions; header detection happens later.
"""
from __future__ import annotations
import io
import logging
import math
from typing import Any, List, Optional, Tuple

import pandas as pd
from bs4 import BeautifulSoup

from .errors import EmptyOrUnreadableFileError, TrialBalanceImportError
from .types import Cell, RawGrid
from .vocabulary import SHEET_KEYWORDS, normalize_text

logger = logging.getLogger(__name__)


# ─── Cell Conversion ────────────────────────────────────────────────────────────

def _text_cell(value: Any) -> Cell:
    """CSV/HTML cell kept as trimmed text so "1.10" and "0101" survive as codes."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    s = str(value).strip()
    return s or None


def _to_cell(value: Any) -> Cell:
    """Workbook value → plain Python cell (NaN → None, numpy scalars unboxed)."""
    if value is None:
        return None
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (bool, int, float)):
        return value
    return str(value)


def _frame_to_grid(df: pd.DataFrame, text_cells: bool = False) -> RawGrid:
    convert = _text_cell if text_cells else _to_cell
    return [[convert(v) for v in row] for row in df.astype(object).values.tolist()]


# ─── HTML Table Parser ────────────────────────────────────────────────────────

def _parse_html(content: bytes) -> RawGrid:
    """Largest table of an HTML export; colspan cells keep their text in the first column only."""
    html = _decode_text(content)
    if not html:
        return []

    soup = BeautifulSoup(html, 'lxml')
    best: RawGrid = []
    for table in soup.find_all('table'):
        rows: RawGrid = []
        for tr in table.find_all('tr'):
            cells: List[Cell] = []
            for td in tr.find_all(['td', 'th']):
                try:
                    colspan = max(1, int(td.get('colspan', 1)))
                except (TypeError, ValueError):
                    colspan = 1
                text = ' '.join(td.get_text().split())
                cells.append(_text_cell(text))
                cells.extend([None] * (colspan - 1))
            rows.append(cells)
        if len(rows) > len(best):
            best = rows
    return best


def _decode_text(content: bytes) -> str:
    """Decode bytes with fallbacks for legacy exports (utf-16/cp1256/latin1/etc.)."""
    if content.startswith((b"\xff\xfe", b"\xfe\xff")):
        return content.decode("utf-16")
    for enc in ("utf-8-sig", "cp1256", "utf-16", "latin1"):
        try:
            text = content.decode(enc)
            if text:
                return text
        except UnicodeDecodeError:
            continue
    return content.decode("utf-8", errors="replace")


def _looks_like_html(content: bytes) -> bool:
    """Heuristic detection for HTML payloads saved with .xls extension."""
    head = content[:4096]
    low = head.lower().replace(b"\x00", b"")
    return any(tok in low for tok in (b"<html", b"<table", b"<!doctype html", b"<tr", b"<td"))


# ─── CSV ──────────────────────────────────────────────────────────────────────

def _parse_csv(content: bytes) -> RawGrid:
    text = _decode_text(content)
    lines = [ln for ln in text.splitlines() if ln.strip()]
    if not lines:
        return []
    sep = ";" if text.count(";") > text.count(",") else ","
    width = max(ln.count(sep) for ln in lines) + 1
    df = pd.read_csv(
        io.StringIO(text),
        header=None,
        names=list(range(width)),
        sep=sep,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
    )
    return _frame_to_grid(df, text_cells=True)


# ─── Excel ────────────────────────────────────────────────────────────────────

def select_sheet(sheet_names: List[str]) -> Optional[str]:
    """First sheet whose name carries a trial-balance keyword, else the first sheet."""
    if not sheet_names:
        return None
    for keyword in SHEET_KEYWORDS:
        kw = normalize_text(keyword)
        for name in sheet_names:
            if kw in normalize_text(name):
                return name
    return sheet_names[0]


def _parse_excel(file_bytes: bytes, engine: str) -> Tuple[RawGrid, Optional[str]]:
    xl = pd.ExcelFile(io.BytesIO(file_bytes), engine=engine)
    sheet = select_sheet([str(s) for s in xl.sheet_names])
    if sheet is None:
        return [], None
    df = xl.parse(sheet, header=None)
    return _frame_to_grid(df), sheet


# ─── Main Entry Point ─────────────────────────────────────────────────────────

def read_grid(file_bytes: bytes, filename: str) -> Tuple[RawGrid, Optional[str]]:
    """
    Parse uploaded file bytes into a raw grid.
    Returns (grid, selected_sheet_name); the sheet name is None for CSV/HTML.
    Supports xlsx, xls, csv, htm/html.
    """
    if not file_bytes:
        raise EmptyOrUnreadableFileError(filename, reason="the file is empty")

    fn_lower = filename.lower()
    try:
        if fn_lower.endswith(('.htm', '.html')):
            return _parse_html(file_bytes), None
        if fn_lower.endswith('.xls') and _looks_like_html(file_bytes):
            # Accounting packages commonly ship HTML tables with an .xls extension
            return _parse_html(file_bytes), None
        if fn_lower.endswith('.csv'):
            return _parse_csv(file_bytes), None
        if fn_lower.endswith(('.xlsx', '.xlsm')):
            return _parse_excel(file_bytes, 'openpyxl')
        if fn_lower.endswith('.xls'):
            return _parse_excel(file_bytes, 'xlrd')

        # Unknown extension: sniff the payload
        if _looks_like_html(file_bytes):
            return _parse_html(file_bytes), None
        if file_bytes[:2] == b"PK":
            return _parse_excel(file_bytes, 'openpyxl')
        return _parse_csv(file_bytes), None
    except TrialBalanceImportError:
        raise
    except Exception as exc:
        logger.error("Failed to read %s: %s", filename, exc)
        raise EmptyOrUnreadableFileError(filename, reason=f"the file could not be read ({exc})") from exc
