"""
tb_platform/vocabulary.py
=========================
Static rule tables for trial-balance ingestion and classification:
header vocabularies, account-code prefix rules, ordered keyword rules,
literal fallbacks and category labels. Loaded and compiled once at import.
"""
from __future__ import annotations
import re
from typing import Dict, List, Optional, Tuple

from .types import Category

# ─── Text Normalisation ───────────────────────────────────────────────────────

_ARABIC_MARKS = re.compile(r"[\u064B-\u0652\u0670\u0640]")
_LETTER_FOLDS = str.maketrans({
    "أ": "ا", "إ": "ا", "آ": "ا", "ٱ": "ا",
    "ى": "ي", "ة": "ه",
})


def normalize_text(text: object) -> str:
    """Lowercase, strip Arabic diacritics/tatweel, fold alef/yaa/taa variants."""
    if text is None:
        return ""
    s = str(text).strip().lower()
    s = _ARABIC_MARKS.sub("", s)
    s = s.translate(_LETTER_FOLDS)
    s = re.sub(r"\s+", " ", s)
    return s


def _compile_term(term: str, whole_words: bool = False) -> re.Pattern:
    t = normalize_text(term)
    if t.isascii():
        # Latin terms match whole words (plural suffix allowed): "rent" must not hit "current"
        return re.compile(r"(?<![a-z])" + re.escape(t) + r"(?:s|es)?(?![a-z])")
    if whole_words:
        # "المجموع" must not hit "المجموعه" (the group)
        return re.compile(r"(?<![\u0621-\u064A])" + re.escape(t) + r"(?![\u0621-\u064A])")
    return re.compile(re.escape(t))


class TermSet:
    """A list of terms matched as substrings of normalised text.

    With whole_words=True, Arabic terms must also stand alone between
    non-letters; Latin terms always do.
    """
    __slots__ = ("terms", "_patterns")

    def __init__(self, terms: List[str], whole_words: bool = False):
        self.terms = [normalize_text(t) for t in terms]
        self._patterns = [_compile_term(t, whole_words) for t in terms]

    def find(self, text_norm: str) -> Optional[str]:
        for term, pat in zip(self.terms, self._patterns):
            if pat.search(text_norm):
                return term
        return None

    def matches(self, text_norm: str) -> bool:
        return self.find(text_norm) is not None


# ─── Header Vocabularies ──────────────────────────────────────────────────────

class HeaderField:
    """Exact labels plus partial terms for one logical column."""
    __slots__ = ("exact", "partial")

    def __init__(self, exact: List[str], partial: List[str]):
        self.exact = {normalize_text(t) for t in exact + partial}
        self.partial = TermSet(partial)

    def matches_exact(self, cell_norm: str) -> bool:
        return bool(cell_norm) and cell_norm in self.exact

    def matches_partial(self, cell_norm: str, reverse: bool = False) -> bool:
        if not cell_norm:
            return False
        if self.partial.matches(cell_norm):
            return True
        # "either direction": a short header cell that is part of a known label
        if reverse and len(cell_norm) >= 3:
            return any(cell_norm in term for term in self.partial.terms)
        return False

    def matches(self, cell_norm: str, reverse: bool = False) -> bool:
        return self.matches_exact(cell_norm) or self.matches_partial(cell_norm, reverse)


NAME_HEADER = HeaderField(
    exact=["اسم الحساب", "الحساب", "البيان", "الوصف", "اسم", "name", "account name",
           "account_name", "account", "description", "particulars", "account title", "ledger"],
    partial=["اسم الحساب", "اسم", "الحساب", "البيان", "الوصف", "account name", "account_name",
             "name", "description", "particulars", "account title"],
)

CODE_HEADER = HeaderField(
    exact=["رمز الحساب", "الرمز", "الكود", "رقم الحساب", "رقم", "الرقم", "كود", "رمز",
           "code", "account code", "account_code", "account no", "account no.",
           "account number", "acc no", "no", "no.", "#", "gl code"],
    partial=["رمز", "رقم", "كود", "code", "account no", "account number", "acct no"],
)

DEBIT_HEADER = HeaderField(
    exact=["مدين", "المدين", "debit", "dr", "dr."],
    partial=["مدين", "debit"],
)

CREDIT_HEADER = HeaderField(
    exact=["دائن", "الدائن", "credit", "cr", "cr."],
    partial=["دائن", "credit"],
)

# Merged super-header row above the debit/credit sub-labels
CLOSING_HEADERS = TermSet([
    "الرصيد النهائي", "الرصيد الصافي", "الصافي", "صافي", "الختامي", "رصيد اخر المده",
    "closing", "ending balance", "net balance", "net", "final", "balance",
])
MOVEMENT_HEADERS = TermSet(["الحركة", "حركة", "movement", "activity", "transactions"])
OPENING_HEADERS = TermSet([
    "الرصيد السابق", "رصيد سابق", "الافتتاحي", "افتتاحي", "رصيد اول المده",
    "رصيد مدور", "الرصيد المدور", "رصيد منقول",
    "opening", "beginning", "previous", "brought forward", "b/f", "b/fwd", "bfwd",
])
TITLE_HEADERS = TermSet(["ميزان", "trial"])

TOTAL_KEYWORDS = TermSet([
    "grand total", "sub total", "sub-total", "subtotal", "total",
    "الإجمالي", "إجمالي", "المجموع", "مجموع",
], whole_words=True)

# Checked in order across all sheet names: strongest signal first
SHEET_KEYWORDS: List[str] = ["ميزان المراجعة", "ميزان", "trial balance", "trial", "balance"]


# ─── Prefix Rules ─────────────────────────────────────────────────────────────

class PrefixRule:
    __slots__ = ("prefix", "category", "label")

    def __init__(self, prefix: str, category: Category, label: str):
        self.prefix = prefix
        self.category = category
        self.label = label


PREFIX_RULES: List[PrefixRule] = [
    PrefixRule("11", "current_assets", "Current assets - cash and banks"),
    PrefixRule("12", "current_assets", "Current assets - receivables"),
    PrefixRule("13", "current_assets", "Current assets - inventory"),
    PrefixRule("14", "non_current_assets", "Non-current assets"),
    PrefixRule("15", "non_current_assets", "Non-current assets - fixed assets"),
    PrefixRule("16", "non_current_assets", "Non-current assets"),
    PrefixRule("17", "non_current_assets", "Non-current assets - investments"),
    PrefixRule("18", "non_current_assets", "Non-current assets"),
    PrefixRule("19", "non_current_assets", "Non-current assets"),
    PrefixRule("1", "current_assets", "Assets"),
    PrefixRule("21", "current_liabilities", "Current liabilities"),
    PrefixRule("22", "current_liabilities", "Current liabilities"),
    PrefixRule("23", "non_current_liabilities", "Non-current liabilities"),
    PrefixRule("24", "non_current_liabilities", "Non-current liabilities"),
    PrefixRule("2", "current_liabilities", "Liabilities"),
    PrefixRule("31", "equity", "Equity - capital"),
    PrefixRule("32", "equity", "Equity - reserves"),
    PrefixRule("33", "equity", "Equity - retained earnings"),
    PrefixRule("3", "equity", "Equity"),
    PrefixRule("41", "revenue", "Main revenue"),
    PrefixRule("42", "revenue", "Other revenue"),
    PrefixRule("4", "revenue", "Revenue"),
    PrefixRule("51", "cogs", "Cost of goods sold"),
    PrefixRule("52", "expenses", "Operating expenses"),
    PrefixRule("53", "expenses", "Administrative expenses"),
    PrefixRule("54", "expenses", "General expenses"),
    PrefixRule("55", "expenses", "Other expenses"),
    PrefixRule("5", "expenses", "Expenses"),
    PrefixRule("6", "expenses", "Expenses"),
]

# Longest prefix first; sort is stable so table order breaks ties
PREFIX_RULES_BY_SPECIFICITY: List[PrefixRule] = sorted(PREFIX_RULES, key=lambda r: -len(r.prefix))


# ─── Keyword Rules ────────────────────────────────────────────────────────────

class KeywordRule:
    """One row of the ordered name-keyword table.

    ``known`` marks the high-confidence subset that the audit engine re-tests
    names against when looking for classification conflicts.
    """
    __slots__ = ("category", "label", "terms", "known")

    def __init__(self, category: Category, label: str, keywords: List[str], known: bool = False):
        self.category = category
        self.label = label
        self.terms = TermSet(keywords)
        self.known = known

    def matches(self, name_norm: str) -> bool:
        return self.terms.matches(name_norm)


KEYWORD_RULES: List[KeywordRule] = [
    # ── Explicit statement captions ─────────────────────────────────────────
    KeywordRule("non_current_assets", "Non-current assets",
                ["أصول غير متداولة", "موجودات غير متداولة", "non-current assets", "non current assets",
                 "noncurrent assets"]),
    KeywordRule("current_assets", "Current assets",
                ["أصول متداولة", "موجودات متداولة", "current assets"]),
    KeywordRule("non_current_liabilities", "Non-current liabilities",
                ["مطلوبات غير متداولة", "التزامات غير متداولة", "خصوم غير متداولة",
                 "non-current liabilities", "non current liabilities"]),
    KeywordRule("current_liabilities", "Current liabilities",
                ["مطلوبات متداولة", "التزامات متداولة", "خصوم متداولة", "current liabilities"]),
    # ── Narrow rules that contain broader words ─────────────────────────────
    KeywordRule("cogs", "Cost of revenue",
                ["تكلفة المبيعات", "تكلفة البضاعة", "تكلفة الإيرادات", "تكاليف الإيرادات",
                 "المشتريات", "مشتريات", "cost of sales", "cost of goods", "cost of revenue",
                 "cogs", "purchases"], known=True),
    KeywordRule("expenses", "Depreciation expense",
                ["مصروف الإهلاك", "مصروف إهلاك", "مصروفات الإهلاك", "مصاريف الإهلاك",
                 "مصروف الاستهلاك", "depreciation expense", "amortization expense"]),
    KeywordRule("current_liabilities", "Customer advances and unearned revenue",
                ["مقدمة من العملاء", "دفعات مقدمة من العملاء", "إيرادات مقدمة", "إيرادات مؤجلة",
                 "advances from customers", "customer advances", "unearned", "deferred revenue"]),
    KeywordRule("current_assets", "Accrued revenue",
                ["إيرادات مستحقة", "accrued revenue", "accrued income"]),
    KeywordRule("current_assets", "Prepaid expenses",
                ["مدفوعة مقدما", "مدفوع مقدما", "مقدما", "دفعات مقدمة", "prepaid", "prepayment",
                 "advance to supplier", "advances to supplier"]),
    KeywordRule("expenses", "Bank charges",
                ["مصاريف بنكية", "مصروفات بنكية", "مصاريف مصرفية", "عمولات بنكية", "رسوم بنكية",
                 "bank charge", "bank fee", "bank commission"]),
    KeywordRule("current_liabilities", "Accrued liabilities",
                ["مستحقة الدفع", "مستحق", "accrued", "payable"]),
    KeywordRule("non_current_liabilities", "End of service benefits",
                ["مكافأة نهاية الخدمة", "نهاية الخدمة", "end of service", "gratuity",
                 "employee benefits obligation"]),
    KeywordRule("non_current_liabilities", "Long-term loans",
                ["قروض طويلة", "قرض طويل", "long-term loan", "long term loan",
                 "long-term borrowing", "long term borrowing", "long-term debt"], known=True),
    KeywordRule("expenses", "Tax expense",
                ["مصروف ضريبة", "مصروف الضريبة", "مصروفات ضريبية", "مصروف الزكاة", "مصروف زكاة",
                 "tax expense", "zakat expense"]),
    KeywordRule("current_liabilities", "Taxes payable",
                ["ضريبة", "ضريبي", "زكاة مستحقة", "مخصص الزكاة", "vat", "tax"], known=True),
    # ── Revenue before expense items: "rental income" is revenue ─────────────
    KeywordRule("revenue", "Revenue",
                ["إيراد", "إيرادات", "دخل", "revenue", "income"], known=True),
    KeywordRule("expenses", "Operating expenses",
                ["رواتب", "أجور", "إيجار", "كهرباء", "مياه", "هاتف", "اتصالات", "صيانة", "وقود",
                 "محروقات", "تأمين", "دعاية", "إعلان", "تسويق", "ضيافة", "قرطاسية", "أتعاب",
                 "رسوم حكومية", "سفر", "فوائد", "مكافآت", "salaries", "salary", "wages", "rent",
                 "electricity", "water", "utilities", "telephone", "maintenance", "repairs", "fuel",
                 "insurance", "advertising", "marketing", "travel", "professional fee", "stationery",
                 "commission", "interest", "finance cost"], known=True),
    KeywordRule("non_current_assets", "Accumulated depreciation",
                ["مجمع الإهلاك", "مجمع إهلاك", "مجمع الاستهلاك", "مخصص الإهلاك", "إهلاك", "استهلاك",
                 "accumulated depreciation", "accumulated amortization", "depreciation"], known=True),
    KeywordRule("current_liabilities", "Loans and borrowings",
                ["قروض", "قرض", "تسهيلات بنكية", "سحب على المكشوف", "loan", "borrowing", "overdraft"]),
    KeywordRule("current_assets", "Allowance for doubtful debts",
                ["ديون مشكوك", "مشكوك في تحصيلها", "doubtful"]),
    # ── Assets ──────────────────────────────────────────────────────────────
    KeywordRule("current_assets", "Cash and banks",
                ["نقد", "صندوق", "كاش", "بنك", "البنوك", "مصرف", "cash", "bank", "petty cash"],
                known=True),
    KeywordRule("current_assets", "Receivables",
                ["عملاء", "ذمم مدينة", "مدينون", "مدينين", "أوراق قبض", "receivable", "debtors",
                 "customers"], known=True),
    KeywordRule("current_assets", "Inventory",
                ["مخزون", "بضاعة", "بضائع", "inventory", "inventories", "stock in trade",
                 "stock-in-trade", "merchandise", "raw materials", "finished goods",
                 "work in progress"], known=True),
    KeywordRule("current_liabilities", "Payables",
                ["موردين", "موردون", "دائنون", "دائنين", "ذمم دائنة", "أوراق دفع", "supplier",
                 "vendor", "creditors"], known=True),
    KeywordRule("non_current_assets", "Property and equipment",
                ["أصول ثابتة", "ممتلكات", "معدات", "آلات", "سيارات", "مركبات", "أثاث", "مباني",
                 "عقارات", "أراضي", "تجهيزات", "ديكورات", "أجهزة", "fixed asset", "property",
                 "plant", "equipment", "machinery", "vehicle", "furniture", "building", "land",
                 "computer", "leasehold improvement", "capital work in progress"], known=True),
    KeywordRule("non_current_assets", "Intangibles and investments",
                ["أصول غير ملموسة", "شهرة", "برامج", "استثمارات", "استثمار", "intangible",
                 "goodwill", "software", "investment"]),
    # ── Equity ──────────────────────────────────────────────────────────────
    KeywordRule("equity", "Capital",
                ["رأس المال", "رأسمال", "راس مال", "حقوق الملكية", "share capital",
                 "paid-up capital", "capital", "owner's equity", "owners equity", "equity"],
                known=True),
    KeywordRule("equity", "Reserves", ["احتياطي", "reserve"], known=True),
    KeywordRule("equity", "Retained earnings",
                ["أرباح محتجزة", "محتجزة", "أرباح مبقاة", "مبقاة", "مرحلة", "retained earnings",
                 "accumulated profit", "accumulated loss"], known=True),
    KeywordRule("equity", "Partners current accounts",
                ["جاري الشريك", "جاري الشركاء", "جاري المالك", "مسحوبات", "partner current",
                 "drawings"]),
    # ── Broad terms last ────────────────────────────────────────────────────
    KeywordRule("revenue", "Sales", ["مبيعات", "sales", "turnover"], known=True),
    KeywordRule("expenses", "Expenses",
                ["مصروف", "مصروفات", "مصاريف", "نفقات", "تكاليف", "expense", "expenditure",
                 "cost", "charges"], known=True),
    KeywordRule("current_liabilities", "Provisions and other liabilities",
                ["مخصص", "provision", "التزامات", "deposits received"]),
]

KNOWN_PATTERNS: List[KeywordRule] = [r for r in KEYWORD_RULES if r.known]


# ─── Literal Fallbacks ────────────────────────────────────────────────────────
# Bare captions with no detail; a coarse guess that review is expected to correct.

LITERAL_FALLBACKS: Dict[str, Category] = {
    normalize_text(k): v for k, v in {
        "الأصول": "current_assets",
        "أصول": "current_assets",
        "الموجودات": "current_assets",
        "موجودات": "current_assets",
        "assets": "current_assets",
        "asset": "current_assets",
        "المطلوبات": "current_liabilities",
        "مطلوبات": "current_liabilities",
        "الخصوم": "current_liabilities",
        "خصوم": "current_liabilities",
        "الالتزامات": "current_liabilities",
        "liabilities": "current_liabilities",
    }.items()
}


# ─── Equity Components & Cash Accounts (statement notes) ──────────────────────

EQUITY_COMPONENTS: List[Tuple[str, str, TermSet]] = [
    ("capital", "31", TermSet(["رأس المال", "رأسمال", "راس مال", "capital"])),
    ("statutory_reserve", "32", TermSet(["احتياطي", "reserve"])),
    ("retained_earnings", "33", TermSet(["محتجزة", "مبقاة", "مرحلة", "retained", "accumulated profit"])),
]

PARTNER_CURRENT_TERMS = TermSet(["جاري الشريك", "جاري الشركاء", "جاري المالك", "partner current"])

CASH_ACCOUNT_PREFIX = "11"
CASH_TERMS = TermSet(["نقد", "بنك", "صندوق", "مصرف", "cash", "bank"])

EMPLOYEE_BENEFIT_TERMS = TermSet(["نهاية الخدمة", "end of service", "gratuity"])
INTANGIBLE_TERMS = TermSet(["غير ملموسة", "شهرة", "برامج", "intangible", "goodwill", "software"])


# ─── Category Metadata ────────────────────────────────────────────────────────

CATEGORY_LABELS: Dict[str, Tuple[str, str]] = {
    "current_assets": ("أصول متداولة", "Current assets"),
    "non_current_assets": ("أصول غير متداولة", "Non-current assets"),
    "current_liabilities": ("مطلوبات متداولة", "Current liabilities"),
    "non_current_liabilities": ("مطلوبات غير متداولة", "Non-current liabilities"),
    "equity": ("حقوق ملكية", "Equity"),
    "revenue": ("إيرادات", "Revenue"),
    "expenses": ("مصروفات عمومية وإدارية", "General and administrative expenses"),
    "cogs": ("تكلفة الإيرادات", "Cost of revenue"),
    "unmapped": ("غير مصنف", "Unmapped"),
}

CREDIT_NATURE: Tuple[str, ...] = ("current_liabilities", "non_current_liabilities", "equity", "revenue")
DEBIT_NATURE: Tuple[str, ...] = ("current_assets", "non_current_assets", "expenses", "cogs")

REQUIRED_CATEGORIES: Dict[str, List[str]] = {
    "balance_sheet": ["current_assets", "equity"],
    "income_statement": ["revenue"],
}

# Zero-balance placeholders offered when a statement category has no accounts
DEFAULT_ACCOUNTS: List[Tuple[str, str, Category]] = [
    ("1100", "النقد والأرصدة لدى البنوك", "current_assets"),
    ("1200", "ذمم مدينة تجارية", "current_assets"),
    ("1300", "المخزون", "current_assets"),
    ("1500", "ممتلكات ومعدات", "non_current_assets"),
    ("2100", "ذمم دائنة تجارية", "current_liabilities"),
    ("2300", "مطلوبات غير متداولة", "non_current_liabilities"),
    ("3100", "رأس المال", "equity"),
    ("3300", "أرباح محتجزة", "equity"),
    ("4100", "الإيرادات", "revenue"),
    ("5100", "تكلفة الإيرادات", "cogs"),
    ("5200", "مصاريف عمومية وإدارية", "expenses"),
]

PLACEHOLDER_CODE_PREFIX = "AUTO-"
PLACEHOLDER_CODES = {"N/A", "NA", ""}


def is_placeholder_code(code: str) -> bool:
    c = (code or "").strip()
    return c.upper() in PLACEHOLDER_CODES or c.startswith(PLACEHOLDER_CODE_PREFIX)
