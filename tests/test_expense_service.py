import unittest
from datetime import date, timedelta

from database.expense_dao import ExpenseDAO
from database.recurring_dao import RecurringDAO
from services.expense_service import ExpenseService, ExpenseValidationError
from tests.support import make_db, make_user


def expense_data(**overrides) -> dict:
    data = {
        "amount": 42.5,
        "category": "Food & Dining",
        "date": "2024-03-10",
        "description": "  Dinner  ",
        "payment_method": "Debit Card",
    }
    data.update(overrides)
    return data


class ExpenseServiceTests(unittest.TestCase):
    def setUp(self):
        self.db = make_db()
        self.user = make_user(self.db)
        self.dao = ExpenseDAO(self.db)
        self.svc = ExpenseService(self.dao)

    def tearDown(self):
        self.db.close()

    def test_create_cleans_fields(self):
        expense = self.svc.create(self.user.id, expense_data())
        self.assertEqual(expense.amount, 42.5)
        self.assertEqual(expense.description, "Dinner")
        self.assertEqual(expense.date, "2024-03-10")
        self.assertFalse(expense.is_recurring)
        self.assertIsNone(expense.recurring_id)

    def test_blank_description_becomes_none(self):
        expense = self.svc.create(self.user.id, expense_data(description="   "))
        self.assertIsNone(expense.description)

    def test_collects_every_field_error(self):
        with self.assertRaises(ExpenseValidationError) as ctx:
            self.svc.create(self.user.id, expense_data(
                amount="abc", category="Pets", payment_method="IOU",
            ))
        fields = [d["field"] for d in ctx.exception.details]
        self.assertEqual(fields, ["amount", "category", "payment_method"])

    def test_amount_rules(self):
        for amount in (0, -1, 1_000_000.01, 10.005, True, None):
            with self.subTest(amount=amount):
                with self.assertRaises(ExpenseValidationError):
                    self.svc.create(self.user.id, expense_data(amount=amount))
        self.assertEqual(self.svc.create(self.user.id, expense_data(amount="19.99")).amount, 19.99)

    def test_date_rules(self):
        tomorrow = (date.today() + timedelta(days=1)).isoformat()
        for value in (None, "", "yesterday", tomorrow):
            with self.subTest(value=value):
                with self.assertRaises(ExpenseValidationError):
                    self.svc.create(self.user.id, expense_data(date=value))
        self.svc.create(self.user.id, expense_data(date=date.today().isoformat()))

    def test_description_length(self):
        with self.assertRaises(ExpenseValidationError):
            self.svc.create(self.user.id, expense_data(description="x" * 201))
        self.svc.create(self.user.id, expense_data(description="x" * 200))

    def test_update_rewrites_fields(self):
        expense = self.svc.create(self.user.id, expense_data())
        updated = self.svc.update(expense.id, expense_data(amount=10, category="Travel"))
        self.assertEqual(updated.amount, 10)
        self.assertEqual(updated.category, "Travel")

    def test_update_cannot_collide_two_occurrences(self):
        rec = RecurringDAO(self.db).create(
            user_id=self.user.id, amount=5, category="Other", payment_method="Cash",
            frequency="daily", start_date="2024-02-29", next_due_date="2024-03-03",
        )
        for day in ("2024-03-01", "2024-03-02"):
            self.dao.create_occurrence(
                user_id=self.user.id, recurring_id=rec.id, amount=5, category="Other",
                date=day, payment_method="Cash",
            )
        self.db.get_connection().commit()
        first, second = self.svc.list_for_user(self.user.id, sort_order="asc")["expenses"]

        with self.assertRaises(ExpenseValidationError):
            self.svc.update(second.id, expense_data(date=first.date))

    def test_delete(self):
        expense = self.svc.create(self.user.id, expense_data())
        self.svc.delete(expense.id)
        self.assertIsNone(self.svc.get_by_id(expense.id))


class ExpenseListTests(unittest.TestCase):
    def setUp(self):
        self.db = make_db()
        self.user = make_user(self.db)
        self.other = make_user(self.db, "bob@example.com")
        self.svc = ExpenseService(ExpenseDAO(self.db))
        rows = [
            (5, "Food & Dining", "2024-03-01", "Coffee"),
            (60, "Transportation", "2024-03-02", "Train pass"),
            (15, "Food & Dining", "2024-03-03", "Lunch with team"),
            (120, "Shopping", "2024-02-20", "Shoes"),
            (8, "Food & Dining", "2024-02-25", None),
        ]
        for amount, category, day, desc in rows:
            self.svc.create(self.user.id, expense_data(
                amount=amount, category=category, date=day, description=desc,
            ))
        self.svc.create(self.other.id, expense_data())

    def tearDown(self):
        self.db.close()

    def test_defaults_newest_first_and_owner_only(self):
        result = self.svc.list_for_user(self.user.id)
        self.assertEqual(
            [e.date for e in result["expenses"]],
            ["2024-03-03", "2024-03-02", "2024-03-01", "2024-02-25", "2024-02-20"],
        )
        self.assertEqual(result["pagination"], {"page": 1, "limit": 20, "total": 5, "total_pages": 1})

    def test_pagination(self):
        result = self.svc.list_for_user(self.user.id, page=2, limit=2)
        self.assertEqual([e.date for e in result["expenses"]], ["2024-03-01", "2024-02-25"])
        self.assertEqual(result["pagination"]["total_pages"], 3)

    def test_limit_is_capped(self):
        result = self.svc.list_for_user(self.user.id, limit=5000)
        self.assertEqual(result["pagination"]["limit"], 100)

    def test_filters(self):
        result = self.svc.list_for_user(
            self.user.id, category="Food & Dining", start_date="2024-03-01", end_date="2024-03-31",
        )
        self.assertEqual(len(result["expenses"]), 2)

        result = self.svc.list_for_user(self.user.id, min_amount=10, max_amount=100)
        self.assertEqual(sorted(e.amount for e in result["expenses"]), [15, 60])

        result = self.svc.list_for_user(self.user.id, search="lunch")
        self.assertEqual([e.description for e in result["expenses"]], ["Lunch with team"])

        result = self.svc.list_for_user(self.user.id, category="all")
        self.assertEqual(result["pagination"]["total"], 5)

    def test_search_treats_wildcards_literally(self):
        self.svc.create(self.user.id, expense_data(date="2024-03-04", description="50% off_sale"))
        for term, expected in (("%", ["50% off_sale"]), ("_", ["50% off_sale"]),
                               ("0% off", ["50% off_sale"]), ("\\", [])):
            with self.subTest(term=term):
                result = self.svc.list_for_user(self.user.id, search=term)
                self.assertEqual([e.description for e in result["expenses"]], expected)

    def test_sort_by_amount(self):
        result = self.svc.list_for_user(self.user.id, sort_by="amount", sort_order="asc")
        self.assertEqual([e.amount for e in result["expenses"]], [5, 8, 15, 60, 120])

    def test_rejects_bad_sort_and_dates(self):
        with self.assertRaises(ValueError):
            self.svc.list_for_user(self.user.id, sort_by="user_id; DROP TABLE expenses")
        with self.assertRaises(ValueError):
            self.svc.list_for_user(self.user.id, sort_order="sideways")
        with self.assertRaises(ValueError):
            self.svc.list_for_user(self.user.id, start_date="March")


if __name__ == "__main__":
    unittest.main()
