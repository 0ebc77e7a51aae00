from dataclasses import dataclass, field

from models.transaction import Transaction


@dataclass
class CategoryTotal:
    category: str
    amount: float


@dataclass
class MonthlySpending:
    month: str              # 'YYYY-MM'
    label: str              # e.g. 'Jan'
    amount: float


@dataclass
class DashboardData:
    total_income: float = 0.0
    total_expenses: float = 0.0
    balance: float = 0.0
    monthly_income: float = 0.0
    monthly_expenses: float = 0.0
    recent_transactions: list[Transaction] = field(default_factory=list)
    expenses_by_category: list[CategoryTotal] = field(default_factory=list)
    monthly_spending: list[MonthlySpending] = field(default_factory=list)

    @property
    def monthly_net(self) -> float:
        return self.monthly_income - self.monthly_expenses
