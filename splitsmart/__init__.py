"""Group expense splitting: split allocation, validation and balances."""

from splitsmart.models.expense import SplitType
from splitsmart.services.balance_service import compute_balances
from splitsmart.services.currency_service import validate_amount
from splitsmart.services.errors import ErrorKind, Result
from splitsmart.services.split_service import resolve_split
from splitsmart.services.validation_service import validate_expense_submission

__version__ = "0.1.0"

__all__ = [
    "SplitType",
    "ErrorKind",
    "Result",
    "compute_balances",
    "resolve_split",
    "validate_amount",
    "validate_expense_submission",
]
