import logging
import re
from werkzeug.security import check_password_hash, generate_password_hash
from models.user import User
from database.user_dao import UserDAO
from utils.constants import MIN_PASSWORD_LENGTH

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

DEMO_EMAIL = "demo@example.com"
DEMO_NAME = "Demo User"


class AuthService:
    def __init__(self, user_dao: UserDAO):
        self._dao = user_dao

    def get_by_id(self, user_id: int) -> User | None:
        return self._dao.get_by_id(user_id)

    def register(self, email: str, password: str, name: str | None = None) -> User:
        email = str(email or "").strip().lower()
        if not EMAIL_RE.match(email):
            raise ValueError("A valid email is required.")
        if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
        if self._dao.get_by_email(email):
            raise ValueError("An account with that email already exists.")
        name = str(name or "").strip() or None
        user = self._dao.create(email, generate_password_hash(password), name)
        logger.info("Registered user %s", user.id)
        return user

    def authenticate(self, email: str, password: str) -> User | None:
        """Return the user when the credentials match, else None."""
        if not isinstance(password, str):
            return None
        user = self._dao.get_by_email(str(email or "").strip().lower())
        if user and user.password_hash and check_password_hash(user.password_hash, password):
            return user
        return None

    def get_or_create_demo_user(self) -> User:
        user = self._dao.get_by_email(DEMO_EMAIL)
        if user is None:
            # No password: the demo account cannot be logged into directly.
            user = self._dao.create(DEMO_EMAIL, "", DEMO_NAME)
            logger.info("Created demo user %s", user.id)
        return user
