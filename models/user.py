from dataclasses import dataclass
from typing import Optional

from flask_login import UserMixin


@dataclass
class User(UserMixin):
    id: int
    email: str
    password_hash: str = ""
    name: Optional[str] = None
    created_at: str = ""

    def to_public_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "created_at": self.created_at,
        }
