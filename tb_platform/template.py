"""
tb_platform/template.py
=======================
Blank trial-balance workbook in the layout the importer expects:
title row, note row, header row (code / name / debit / credit), sample
accounts following the 11xx…55xx numbering, a SUM totals row and an
instructions sheet.
"""
from __future__ import annotations
import io
from typing import List, Tuple

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

TEMPLATE_SHEET = "ميزان المراجعة"
INSTRUCTIONS_SHEET = "تعليمات الاستخدام"
HEADERS = ["رمز الحساب", "اسم الحساب", "مدين", "دائن"]
FIRST_DATA_ROW = 4

SAMPLE_ACCOUNTS: List[Tuple[str, str]] = [
    # Current assets (11xx - 13xx)
    ("1101", "الصندوق (النقدية)"),
    ("1102", "البنك - الحساب الجاري"),
    ("1201", "العملاء (ذمم مدينة)"),
    ("1301", "المخزون"),
    ("1302", "مصاريف مدفوعة مقدماً"),
    # Non-current assets (14xx - 19xx)
    ("1501", "أثاث وتجهيزات"),
    ("1502", "معدات وآلات"),
    ("1503", "سيارات ومركبات"),
    ("1504", "مباني وعقارات"),
    ("1590", "مجمع الإهلاك"),
    # Current liabilities (21xx - 22xx)
    ("2101", "الموردون (ذمم دائنة)"),
    ("2102", "ضريبة القيمة المضافة المستحقة"),
    ("2103", "رواتب مستحقة"),
    ("2104", "مصروفات مستحقة"),
    # Non-current liabilities (23xx - 24xx)
    ("2301", "قروض طويلة الأجل"),
    ("2302", "مكافأة نهاية الخدمة"),
    # Equity (31xx - 33xx)
    ("3101", "رأس المال"),
    ("3201", "الاحتياطي النظامي"),
    ("3301", "الأرباح المحتجزة (المرحّلة)"),
    # Revenue (41xx - 42xx)
    ("4101", "إيرادات المبيعات"),
    ("4201", "إيرادات أخرى"),
    # Cost of revenue (51xx)
    ("5101", "تكلفة البضاعة المباعة"),
    # Expenses (52xx - 55xx)
    ("5201", "رواتب وأجور"),
    ("5202", "إيجارات"),
    ("5203", "كهرباء وماء واتصالات"),
    ("5204", "صيانة وإصلاحات"),
    ("5301", "مصاريف إدارية وعمومية"),
    ("5401", "مصاريف تسويق ودعاية"),
    ("5501", "مصاريف بنكية وفوائد"),
]

INSTRUCTIONS: List[Tuple[str, str]] = [
    ("", "تعليمات تعبئة ميزان المراجعة"),
    ("", ""),
    ("1", 'عمود "رمز الحساب": ضع الرمز الرقمي للحساب (مثال: 1101, 2101, 4101)'),
    ("2", 'عمود "اسم الحساب": ضع اسم الحساب (مثال: الصندوق، العملاء)'),
    ("3", 'عمود "مدين": ضع الرصيد المدين إذا كان الحساب مديناً، واتركه فارغاً إذا لم يكن'),
    ("4", 'عمود "دائن": ضع الرصيد الدائن إذا كان الحساب دائناً، واتركه فارغاً إذا لم يكن'),
    ("", ""),
    ("", "قواعد ترميز الحسابات (التصنيف التلقائي):"),
    ("", "1xxx = أصول (11xx نقد وبنوك، 12xx ذمم مدينة، 13xx مخزون، 15xx أصول ثابتة)"),
    ("", "2xxx = مطلوبات (21xx متداولة، 23xx غير متداولة)"),
    ("", "3xxx = حقوق ملكية (31xx رأس مال، 32xx احتياطي، 33xx أرباح محتجزة)"),
    ("", "4xxx = إيرادات (41xx مبيعات، 42xx إيرادات أخرى)"),
    ("", "5xxx = مصروفات (51xx تكلفة مبيعات، 52xx تشغيلية، 53xx إدارية)"),
    ("", ""),
    ("", "تنبيهات مهمة:"),
    ("", "• يجب أن يكون مجموع المدين مساوياً لمجموع الدائن"),
    ("", "• لا تضع حسابات رئيسية تجمع حسابات فرعية، ضع الفرعية فقط"),
    ("", "• يمكنك حذف النماذج وإضافة حساباتك الخاصة"),
    ("", "• الأعمدة الأربعة مطلوبة: رمز الحساب، اسم الحساب، مدين، دائن"),
]

# Row tint by first code digit
_GROUP_FILLS = {
    "1": "FFF0FFF4",
    "2": "FFFFF0F0",
    "3": "FFF0F0FF",
    "4": "FFFFFCE0",
    "5": "FFFFF5F0",
}

_AMOUNT_FORMAT = "#,##0.00"


def _fill(argb: str) -> PatternFill:
    return PatternFill(fill_type="solid", start_color=argb, end_color=argb)


def _border(style: str, argb: str) -> Border:
    side = Side(style=style, color=argb)
    return Border(top=side, bottom=side, left=side, right=side)


def build_template_workbook(include_samples: bool = True) -> bytes:
    """Return the template as .xlsx bytes."""
    wb = openpyxl.Workbook()

    # ── Sheet 1: trial balance ─────────────────────────────────────────────
    ws = wb.active
    ws.title = TEMPLATE_SHEET
    ws.sheet_view.rightToLeft = True

    ws.append([TEMPLATE_SHEET])
    ws.merge_cells("A1:D1")
    ws["A1"].font = Font(bold=True, size=16, color="FF1A365D")
    ws["A1"].alignment = Alignment(horizontal="center", vertical="center")
    ws["A1"].fill = _fill("FFF0F4FF")
    ws.row_dimensions[1].height = 35

    ws.append(["ضع كل رصيد في عمود واحد فقط ولا تكرر الرقم في العمودين. الصفوف أدناه نماذج يمكنك حذفها."])
    ws.merge_cells("A2:D2")
    ws["A2"].font = Font(size=10, italic=True, color="FF7C3AED")
    ws["A2"].alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
    ws.row_dimensions[2].height = 28

    ws.append(HEADERS)
    header_border = _border("thin", "FF1E40AF")
    for cell in ws[3]:
        cell.font = Font(bold=True, size=12, color="FFFFFFFF")
        cell.fill = _fill("FF2563EB")
        cell.alignment = Alignment(horizontal="center", vertical="center")
        cell.border = header_border
    ws.row_dimensions[3].height = 30

    for letter, width in zip("ABCD", (18, 40, 20, 20)):
        ws.column_dimensions[letter].width = width

    samples = SAMPLE_ACCOUNTS if include_samples else []
    row_border = _border("hair", "FFD0D0D0")
    for code, name in samples:
        ws.append([code, name, None, None])
        row = ws[ws.max_row]
        fill = _fill(_GROUP_FILLS.get(code[:1], "FFFFFFFF"))
        for cell in row:
            cell.fill = fill
            cell.border = row_border
        row[0].alignment = Alignment(horizontal="center")
        row[1].alignment = Alignment(horizontal="right")
        for cell in row[2:4]:
            cell.number_format = _AMOUNT_FORMAT
            cell.alignment = Alignment(horizontal="center")

    # ── Totals row ─────────────────────────────────────────────────────────
    last_data_row = FIRST_DATA_ROW + len(samples) - 1
    total_row_num = last_data_row + 1
    if samples:
        debit_total, credit_total = f"=SUM(C{FIRST_DATA_ROW}:C{last_data_row})", f"=SUM(D{FIRST_DATA_ROW}:D{last_data_row})"
    else:
        debit_total = credit_total = 0
    ws.append([None, "المجموع", debit_total, credit_total])
    total_border = Border(
        top=Side(style="medium", color="FF2563EB"),
        bottom=Side(style="medium", color="FF2563EB"),
        left=Side(style="thin", color="FF94A3B8"),
        right=Side(style="thin", color="FF94A3B8"),
    )
    for cell in ws[total_row_num]:
        cell.font = Font(bold=True, size=12)
        cell.fill = _fill("FFE2E8F0")
        cell.border = total_border
        cell.alignment = Alignment(horizontal="center")
    for cell in ws[total_row_num][2:4]:
        cell.number_format = _AMOUNT_FORMAT

    # ── Sheet 2: instructions ──────────────────────────────────────────────
    instr = wb.create_sheet(INSTRUCTIONS_SHEET)
    instr.sheet_view.rightToLeft = True
    instr.column_dimensions["A"].width = 5
    instr.column_dimensions["B"].width = 60
    for idx, (step, text) in enumerate(INSTRUCTIONS, start=1):
        instr.append([step or None, text or None])
        instr.cell(row=idx, column=1).font = Font(bold=True, size=11)
        instr.cell(row=idx, column=1).alignment = Alignment(horizontal="center")
        instr.cell(row=idx, column=2).font = (
            Font(bold=True, size=14, color="FF1A365D") if idx == 1 else Font(size=11)
        )
        instr.cell(row=idx, column=2).alignment = Alignment(horizontal="right", wrap_text=True)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
