from dataclasses import dataclass

BUDGET_PERIODS = ("monthly", "yearly")


@dataclass
class Budget:
    id: str
    user_id: str
    category: str
    amount: float           # spending ceiling for one period
    period: str             # 'monthly' | 'yearly'
    created_at: str = ""


@dataclass
class BudgetStatus:
    """A budget paired with what has been spent against it this period."""
    budget: Budget
    spent: float = 0.0

    @property
    def percentage(self) -> float:
        """Unclamped share of the budget used, in percent."""
        if self.budget.amount <= 0:
            return 0.0
        return self.spent / self.budget.amount * 100

    @property
    def bar_fraction(self) -> float:
        """Progress-bar fill in [0, 1]."""
        return min(max(self.percentage, 0.0), 100.0) / 100

    @property
    def is_over_budget(self) -> bool:
        return self.spent > self.budget.amount

    @property
    def overage(self) -> float:
        return max(0.0, self.spent - self.budget.amount)

    @property
    def remaining(self) -> float:
        return max(0.0, self.budget.amount - self.spent)
