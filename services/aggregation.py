"""Pure reductions over the in-memory transaction list.

Everything here is a deterministic function of (transactions, now); callers
pass `now` explicitly so results are reproducible in tests.
"""
from datetime import date

from models.budget import Budget, BudgetStatus
from models.dashboard import CategoryTotal, DashboardData, MonthlySpending
from models.transaction import Transaction
from utils.constants import RECENT_TRANSACTION_COUNT, TRAILING_MONTHS
from utils.date_helpers import format_month, month_bounds, parse_date, short_month, today, trailing_months


def _sum(transactions, type_: str) -> float:
    return sum((t.amount for t in transactions if t.type == type_), 0.0)


def _within(tx: Transaction, start: date, end: date) -> bool:
    d = parse_date(tx.date)
    return d is not None and start <= d <= end


def expenses_by_category(transactions: list[Transaction]) -> list[CategoryTotal]:
    """Expense totals per category label, in order of first occurrence."""
    totals: dict[str, float] = {}
    for tx in transactions:
        if tx.type == "expense":
            totals[tx.category] = totals.get(tx.category, 0.0) + tx.amount
    return [CategoryTotal(category=c, amount=a) for c, a in totals.items()]


def monthly_spending(transactions: list[Transaction], now: date | None = None,
                     months: int = TRAILING_MONTHS) -> list[MonthlySpending]:
    """Expense totals for the `months` calendar months ending at now, oldest first.

    Always returns exactly `months` entries; empty months report 0.0.
    """
    result = []
    for first_day in trailing_months(now or today(), months):
        start, end = month_bounds(first_day)
        amount = sum((
            t.amount for t in transactions
            if t.type == "expense" and _within(t, start, end)
        ), 0.0)
        result.append(MonthlySpending(month=format_month(start), label=short_month(start), amount=amount))
    return result


def compute_dashboard(transactions: list[Transaction], now: date | None = None) -> DashboardData:
    """Summarise a date-descending transaction list as of `now`."""
    now = now or today()
    month_start, month_end = month_bounds(now)
    this_month = [t for t in transactions if _within(t, month_start, month_end)]

    by_category = expenses_by_category(transactions)
    total_income = _sum(transactions, "income")
    # category totals re-add to exactly total_expenses
    total_expenses = sum((c.amount for c in by_category), 0.0)
    return DashboardData(
        total_income=total_income,
        total_expenses=total_expenses,
        balance=total_income - total_expenses,
        monthly_income=_sum(this_month, "income"),
        monthly_expenses=_sum(this_month, "expense"),
        recent_transactions=list(transactions[:RECENT_TRANSACTION_COUNT]),
        expenses_by_category=by_category,
        monthly_spending=monthly_spending(transactions, now),
    )


# ── Budgets ───────────────────────────────────────────────────────────────────

def calculate_spent(budget: Budget, transactions: list[Transaction], now: date | None = None) -> float:
    """Expenses in the budget's category during the budget's current period."""
    now = now or today()
    spent = 0.0
    for tx in transactions:
        if tx.type != "expense" or tx.category != budget.category:
            continue
        d = parse_date(tx.date)
        if d is None or d.year != now.year:
            continue
        if budget.period == "monthly" and d.month != now.month:
            continue
        spent += tx.amount
    return spent


def budget_status(budget: Budget, transactions: list[Transaction], now: date | None = None) -> BudgetStatus:
    return BudgetStatus(budget=budget, spent=calculate_spent(budget, transactions, now))


# ── List view helpers ────────────────────────────────────────────────────────

def filter_transactions(transactions: list[Transaction], type_filter: str = "all") -> list[Transaction]:
    if type_filter in ("income", "expense"):
        return [t for t in transactions if t.type == type_filter]
    return list(transactions)


def sort_transactions(transactions: list[Transaction], sort_by: str = "date") -> list[Transaction]:
    """Newest first for 'date', largest first for 'amount'. Stable for ties."""
    if sort_by == "amount":
        return sorted(transactions, key=lambda t: t.amount, reverse=True)
    return sorted(transactions, key=lambda t: t.date, reverse=True)
