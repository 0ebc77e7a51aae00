import pytest

from conftest import NOW, make_budget, make_tx
from services.aggregation import (
    budget_status,
    calculate_spent,
    compute_dashboard,
    expenses_by_category,
    filter_transactions,
    monthly_spending,
    sort_transactions,
)


def test_dashboard_balance_and_category_breakdown():
    txs = [
        make_tx("t2", "expense", 2000.0, "Food", date_="2024-03-12"),
        make_tx("t1", "income", 5000.0, "Salary", date_="2024-03-01"),
    ]
    data = compute_dashboard(txs, NOW)

    assert data.total_income == 5000.0
    assert data.total_expenses == 2000.0
    assert data.balance == 3000.0
    assert data.monthly_income == 5000.0
    assert data.monthly_expenses == 2000.0
    assert data.monthly_net == 3000.0
    assert [(c.category, c.amount) for c in data.expenses_by_category] == [("Food", 2000.0)]


def test_empty_dashboard_is_all_zero():
    data = compute_dashboard([], NOW)
    assert data.balance == 0.0
    assert data.recent_transactions == []
    assert data.expenses_by_category == []
    assert len(data.monthly_spending) == 6
    assert all(m.amount == 0.0 for m in data.monthly_spending)


def test_monthly_figures_only_count_the_current_month():
    txs = [
        make_tx("t1", "income", 100.0, "Salary", date_="2024-03-31"),
        make_tx("t2", "income", 999.0, "Salary", date_="2024-02-29"),
        make_tx("t3", "expense", 50.0, "Food", date_="2024-03-01"),
        make_tx("t4", "expense", 70.0, "Food", date_="2023-03-15"),
    ]
    data = compute_dashboard(txs, NOW)
    assert data.monthly_income == 100.0
    assert data.monthly_expenses == 50.0
    assert data.balance == pytest.approx(100.0 + 999.0 - 50.0 - 70.0)


def test_recent_transactions_is_a_prefix_of_five():
    txs = [make_tx(f"t{i}", date_=f"2024-03-{10 - i:02d}") for i in range(8)]
    data = compute_dashboard(txs, NOW)
    assert [t.id for t in data.recent_transactions] == ["t0", "t1", "t2", "t3", "t4"]


def test_monthly_spending_has_six_entries_oldest_first():
    txs = [
        make_tx("t1", "expense", 40.0, date_="2024-03-02"),
        make_tx("t2", "expense", 25.0, date_="2024-01-31"),
        make_tx("t3", "expense", 10.0, date_="2024-01-01"),
        make_tx("t4", "income", 500.0, date_="2024-01-15"),
        make_tx("t5", "expense", 99.0, date_="2023-09-30"),
    ]
    series = monthly_spending(txs, NOW)

    assert [m.month for m in series] == [
        "2023-10", "2023-11", "2023-12", "2024-01", "2024-02", "2024-03",
    ]
    assert [m.label for m in series] == ["Oct", "Nov", "Dec", "Jan", "Feb", "Mar"]
    assert [m.amount for m in series] == [0.0, 0.0, 0.0, 35.0, 0.0, 40.0]


def test_expenses_by_category_sums_per_label_in_first_seen_order():
    txs = [
        make_tx("t1", "expense", 5.0, "Shopping"),
        make_tx("t2", "expense", 7.5, "Food"),
        make_tx("t3", "income", 100.0, "Salary"),
        make_tx("t4", "expense", 2.5, "Shopping"),
    ]
    totals = expenses_by_category(txs)
    assert [(c.category, c.amount) for c in totals] == [("Shopping", 7.5), ("Food", 7.5)]


# ── Budgets ───────────────────────────────────────────────────────────────────

def test_monthly_budget_over_limit():
    txs = [
        make_tx("t1", "expense", 2000.0, "Food", date_="2024-03-12"),
        make_tx("t2", "income", 5000.0, "Salary", date_="2024-03-01"),
    ]
    status = budget_status(make_budget(amount=1000.0), txs, NOW)

    assert status.spent == 2000.0
    assert status.percentage == 200.0
    assert status.bar_fraction == 1.0
    assert status.is_over_budget
    assert status.overage == 1000.0
    assert status.remaining == 0.0


def test_monthly_budget_ignores_other_months_and_categories():
    txs = [
        make_tx("t1", "expense", 100.0, "Food", date_="2024-03-01"),
        make_tx("t2", "expense", 300.0, "Food", date_="2024-02-28"),
        make_tx("t3", "expense", 50.0, "Bills", date_="2024-03-05"),
        make_tx("t4", "income", 80.0, "Food", date_="2024-03-05"),
    ]
    assert calculate_spent(make_budget(), txs, NOW) == 100.0


def test_yearly_budget_counts_the_whole_year():
    txs = [
        make_tx("t1", "expense", 100.0, "Food", date_="2024-01-03"),
        make_tx("t2", "expense", 200.0, "Food", date_="2024-03-01"),
        make_tx("t3", "expense", 400.0, "Food", date_="2023-12-31"),
    ]
    budget = make_budget(period="yearly", amount=1200.0)
    status = budget_status(budget, txs, NOW)
    assert status.spent == 300.0
    assert status.percentage == 25.0
    assert status.bar_fraction == 0.25
    assert not status.is_over_budget
    assert status.remaining == 900.0


def test_spending_exactly_at_limit_is_not_over_budget():
    txs = [make_tx("t1", "expense", 1000.0, "Food", date_="2024-03-10")]
    status = budget_status(make_budget(amount=1000.0), txs, NOW)
    assert not status.is_over_budget
    assert status.overage == 0.0


# ── List helpers ──────────────────────────────────────────────────────────────

def _list():
    return [
        make_tx("a", "expense", 20.0, date_="2024-03-01"),
        make_tx("b", "income", 900.0, date_="2024-03-05"),
        make_tx("c", "expense", 75.0, date_="2024-02-20"),
    ]


def test_filter_by_type():
    assert [t.id for t in filter_transactions(_list(), "income")] == ["b"]
    assert [t.id for t in filter_transactions(_list(), "expense")] == ["a", "c"]
    assert [t.id for t in filter_transactions(_list(), "all")] == ["a", "b", "c"]


def test_sort_by_date_and_amount_descending():
    assert [t.id for t in sort_transactions(_list(), "date")] == ["b", "a", "c"]
    assert [t.id for t in sort_transactions(_list(), "amount")] == ["b", "c", "a"]


def test_sort_does_not_mutate_input():
    txs = _list()
    sort_transactions(txs, "amount")
    assert [t.id for t in txs] == ["a", "b", "c"]


# ── Totals consistency ────────────────────────────────────────────────────────

def test_balance_is_exactly_income_minus_expenses_when_interleaved():
    txs = [
        make_tx("t1", "income", 0.1, "Salary", date_="2024-03-03"),
        make_tx("t2", "expense", 0.3, "Food", date_="2024-03-02"),
        make_tx("t3", "income", 0.2, "Gift", date_="2024-03-01"),
    ]
    data = compute_dashboard(txs, NOW)
    assert data.balance == data.total_income - data.total_expenses


def test_category_totals_add_back_to_total_expenses():
    txs = [
        make_tx("t1", "expense", 0.1, "Food"),
        make_tx("t2", "income", 1000.07, "Salary"),
        make_tx("t3", "expense", 0.7, "Bills"),
        make_tx("t4", "expense", 0.2, "Food"),
        make_tx("t5", "income", 0.3, "Gift"),
        make_tx("t6", "expense", 12.34, "Shopping"),
        make_tx("t7", "expense", 0.6, "Bills"),
        make_tx("t8", "expense", 0.15, "Food"),
    ]
    data = compute_dashboard(txs, NOW)

    assert [c.category for c in data.expenses_by_category] == ["Food", "Bills", "Shopping"]
    assert sum((c.amount for c in data.expenses_by_category), 0.0) == data.total_expenses
    assert data.total_expenses == pytest.approx(0.1 + 0.7 + 0.2 + 12.34 + 0.6 + 0.15)
    assert data.balance == data.total_income - data.total_expenses


def test_empty_months_and_totals_are_floats():
    data = compute_dashboard([], NOW)
    assert all(isinstance(m.amount, float) for m in data.monthly_spending)
    assert isinstance(data.total_income, float)
    assert isinstance(data.total_expenses, float)
    assert isinstance(data.monthly_expenses, float)
