from dataclasses import asdict, dataclass
from typing import Optional

from utils.constants import BUDGET_ALERT_THRESHOLD, BUDGET_PROGRESS_CAP


@dataclass
class Budget:
    id: int
    user_id: int
    amount: float
    period: str             # 'monthly' | 'weekly' | 'yearly'
    start_date: str         # 'YYYY-MM-DD'
    category: Optional[str] = None       # None = all categories
    end_date: Optional[str] = None
    alert_threshold: Optional[int] = None  # percent
    created_at: str = ""
    spent: float = 0.0

    @property
    def remaining(self) -> float:
        return max(0.0, self.amount - self.spent)

    @property
    def progress(self) -> float:
        if self.amount <= 0:
            return 0.0
        return min(self.spent / self.amount * 100, BUDGET_PROGRESS_CAP)

    @property
    def alert(self) -> bool:
        threshold = self.alert_threshold or BUDGET_ALERT_THRESHOLD
        return self.progress >= threshold

    def to_dict(self) -> dict:
        data = asdict(self)
        data.update(
            remaining=self.remaining,
            progress=round(self.progress, 2),
            alert=self.alert,
        )
        return data
