from dataclasses import dataclass
from typing import Optional


@dataclass
class Expense:
    id: int
    user_id: int
    amount: float
    category: str
    date: str               # 'YYYY-MM-DD'
    payment_method: str
    description: Optional[str] = None
    is_recurring: bool = False
    recurring_id: Optional[int] = None   # non-owning back-reference
    created_at: str = ""
    updated_at: str = ""
