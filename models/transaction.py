from dataclasses import dataclass

TRANSACTION_TYPES = ("income", "expense")


@dataclass
class Transaction:
    id: str
    user_id: str
    type: str               # 'income' | 'expense'
    amount: float
    category: str
    description: str
    date: str               # 'YYYY-MM-DD'
    created_at: str = ""

    @property
    def is_income(self) -> bool:
        return self.type == "income"

    @property
    def signed_amount(self) -> float:
        return self.amount if self.is_income else -self.amount
