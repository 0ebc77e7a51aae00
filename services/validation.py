"""Form-level checks that run before any backend request.

Each function raises ValueError with a message fit for an inline error label,
or returns the cleaned fields ready to hand to the store.
"""
from models.budget import BUDGET_PERIODS
from models.transaction import TRANSACTION_TYPES
from utils.date_helpers import format_date, parse_date


def parse_amount(raw) -> float:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ValueError("Amount is required.")
    try:
        amount = float(str(raw).replace(",", "").strip())
    except ValueError:
        raise ValueError("Invalid amount.")
    if amount != amount or amount in (float("inf"), float("-inf")):
        raise ValueError("Invalid amount.")
    if amount <= 0:
        raise ValueError("Amount must be positive.")
    return amount


def validate_transaction(
    type_: str,
    amount,
    category: str,
    description: str,
    date: str,
) -> dict:
    if type_ not in TRANSACTION_TYPES:
        raise ValueError(f"Invalid type: {type_}")
    value = parse_amount(amount)
    category = (category or "").strip()
    if not category:
        raise ValueError("Please select a category.")
    description = (description or "").strip()
    if not description:
        raise ValueError("Description is required.")
    d = parse_date(date)
    if d is None:
        raise ValueError("Invalid date format. Use YYYY-MM-DD.")
    return {
        "type": type_,
        "amount": value,
        "category": category,
        "description": description,
        "date": format_date(d),
    }


def validate_budget(category: str, amount, period: str) -> dict:
    category = (category or "").strip()
    if not category:
        raise ValueError("Category is required.")
    value = parse_amount(amount)
    if period not in BUDGET_PERIODS:
        raise ValueError(f"Invalid period: {period}")
    return {"category": category, "amount": value, "period": period}


def validate_credentials(
    email: str,
    password: str,
    confirm_password: str | None = None,
    sign_up: bool = False,
) -> tuple[str, str]:
    email = (email or "").strip()
    if not email or not password:
        raise ValueError("Email and password are required.")
    if sign_up and password != confirm_password:
        raise ValueError("Passwords do not match")
    return email, password
