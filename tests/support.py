from database.db_manager import DatabaseManager
from database.user_dao import UserDAO
from models.user import User


def make_db() -> DatabaseManager:
    db = DatabaseManager(":memory:")
    db.initialize()
    return db


def make_user(db: DatabaseManager, email: str = "ann@example.com") -> User:
    return UserDAO(db).create(email, "not-a-real-hash", "Ann")
