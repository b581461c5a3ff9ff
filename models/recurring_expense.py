from dataclasses import dataclass
from typing import Optional


@dataclass
class RecurringExpense:
    id: int
    user_id: int
    amount: float
    category: str
    payment_method: str
    frequency: str          # 'daily' | 'weekly' | 'monthly' | 'yearly'
    start_date: str         # 'YYYY-MM-DD'
    next_due_date: str      # 'YYYY-MM-DD'
    is_active: bool = True
    description: Optional[str] = None
    day_of_month: Optional[int] = None   # 1-28
    day_of_week: Optional[int] = None    # 0=Sun..6=Sat
    end_date: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""
