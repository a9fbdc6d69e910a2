"""TB Platform: trial-balance import, classification, audit and statement engine."""
from .types import *
from .formatting import *
from .errors import (
    TrialBalanceImportError,
    StructureNotDetectedError,
    EmptyOrUnreadableFileError,
)
from .classifier import classify, classify_account
from .detector import detect
from .extractor import extract
from .validator import validate
from .scenarios import run_scenarios, apply_auto_fix, generate_missing_accounts
from .statements import generate
from .parser import read_grid
from .importer import import_trial_balance, import_grid, build_statements
from .template import build_template_workbook
from .log import setup_logging
