"""
tb_platform/cells.py
====================
Cell-level normalisation: amounts, account-code / account-name shape tests.
Every function here is total: malformed input yields a neutral value, never an exception.
"""
from __future__ import annotations
import math
import re
from typing import Any

# Arabic-Indic and Eastern Arabic-Indic digits, Arabic decimal/thousands separators
_DIGIT_MAP = str.maketrans({
    **{chr(0x0660 + i): str(i) for i in range(10)},
    **{chr(0x06F0 + i): str(i) for i in range(10)},
    "٫": ".",
    "٬": ",",
    "،": ",",
})

_CODE_RE = re.compile(r"^\d+(?:[.\-/]\d+)*$")
_ARABIC_RE = re.compile(r"[\u0600-\u06FF]")
_LATIN_PAIR_RE = re.compile(r"[A-Za-z]{2}")
_AMOUNT_STRIP_RE = re.compile(r"[^0-9.\-,]")
_AMOUNT_TEXT_RE = re.compile(r"^\(?-?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?\)?$")


def is_blank(cell: Any) -> bool:
    if cell is None:
        return True
    if isinstance(cell, float) and math.isnan(cell):
        return True
    return isinstance(cell, str) and not cell.strip()


def is_numeric_cell(cell: Any) -> bool:
    """True for numeric-typed cells only (bools and NaN excluded)."""
    if isinstance(cell, bool):
        return False
    if isinstance(cell, int):
        return True
    if isinstance(cell, float):
        return not math.isnan(cell)
    return False


def is_amount_cell(cell: Any) -> bool:
    """Numeric-typed cell, or text holding a plain amount such as "1,250.50" or "(300)"."""
    if is_numeric_cell(cell):
        return True
    if not isinstance(cell, str):
        return False
    return bool(_AMOUNT_TEXT_RE.match(cell.strip().translate(_DIGIT_MAP)))


def cell_text(cell: Any) -> str:
    """Render a cell as trimmed text; integral floats lose their ".0"."""
    if is_blank(cell):
        return ""
    if isinstance(cell, bool):
        return str(cell)
    if isinstance(cell, float):
        if math.isinf(cell):
            return ""
        if cell.is_integer():
            return str(int(cell))
        return repr(cell)
    return str(cell).strip()


# ─── Amounts ──────────────────────────────────────────────────────────────────

def parse_amount(cell: Any) -> float:
    """Convert a raw cell to a float amount, handling accounting notations.

    "(1,234.50)" -> -1234.5, "١٬٢٣٤٫٥" -> 1234.5, "" / None / "abc" -> 0.0
    """
    if is_blank(cell) or isinstance(cell, bool):
        return 0.0
    if isinstance(cell, (int, float)):
        return 0.0 if math.isinf(cell) else float(cell)
    s = str(cell).strip().translate(_DIGIT_MAP)
    negative = False
    # Parenthetical negatives: (1234) → -1234
    if s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1]
    s = _AMOUNT_STRIP_RE.sub("", s).replace(",", "")
    if s in ("", "-", ".", "-."):
        return 0.0
    try:
        value = float(s)
    except ValueError:
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return -abs(value) if negative else value


# ─── Shape Tests ──────────────────────────────────────────────────────────────

def looks_like_account_code(text: Any) -> bool:
    """Digits optionally separated by '.', '-' or '/': "1101", "1.1.2", "12-03"."""
    s = cell_text(text).translate(_DIGIT_MAP)
    return bool(s) and bool(_CODE_RE.match(s))


def looks_like_account_name(text: Any) -> bool:
    s = cell_text(text)
    if len(s) < 2:
        return False
    return bool(_ARABIC_RE.search(s) or _LATIN_PAIR_RE.search(s))


def normalize_code(cell: Any) -> str:
    """Account code as text, with Arabic-Indic digits folded to ASCII."""
    return cell_text(cell).translate(_DIGIT_MAP)
