"""Terminal import failures. Data-quality findings are reported, not raised."""

REQUIRED_COLUMNS_HINT = "account code, account name, debit, credit"


class TrialBalanceImportError(Exception):
    """Base class for import failures that yield no partial result."""


class StructureNotDetectedError(TrialBalanceImportError):
    """Raised when no code/name/debit/credit layout can be located."""

    def __init__(self, file_name: str = ""):
        where = f" in '{file_name}'" if file_name else ""
        super().__init__(
            f"Could not detect the trial balance columns{where}. "
            f"Make sure the sheet contains at least these columns: {REQUIRED_COLUMNS_HINT}."
        )


class EmptyOrUnreadableFileError(TrialBalanceImportError):
    """Raised when the file cannot be read or no account rows survive filtering."""

    def __init__(self, file_name: str = "", reason: str = "no account rows were found"):
        where = f"'{file_name}': " if file_name else ""
        super().__init__(
            f"{where}{reason}. "
            f"Make sure the columns contain: {REQUIRED_COLUMNS_HINT}."
        )
