import os
import tempfile
import unittest
from datetime import date, timedelta
from unittest.mock import patch

from services.recurring_service import MaterializationError, RecurringService
from web.app import create_app

PASSWORD = "correct horse"


class ApiTestCase(unittest.TestCase):
    settings: dict = {}

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        env = patch.dict(os.environ, {
            "PENNYWISE_CONFIG": os.path.join(self._tmp.name, "config.json"),
        })
        env.start()
        self.addCleanup(env.stop)

        overrides = {
            "db_path": os.path.join(self._tmp.name, "test.db"),
            "secret_key": "test",
            "testing": True,
        }
        overrides.update(self.settings)
        self.app = create_app(overrides)
        self.client = self.app.test_client()

    def register(self, client=None, email="ann@example.com"):
        client = client or self.client
        resp = client.post("/api/auth/register", json={
            "email": email, "password": PASSWORD, "name": "Ann",
        })
        self.assertEqual(resp.status_code, 201)
        return resp.get_json()

    def add_expense(self, **overrides):
        data = {
            "amount": 12.5,
            "category": "Food & Dining",
            "date": date.today().isoformat(),
            "payment_method": "Cash",
            "description": "Lunch",
        }
        data.update(overrides)
        return self.client.post("/api/expenses", json=data)


class AuthApiTests(ApiTestCase):
    def test_requires_login(self):
        for path in ("/api/expenses", "/api/recurring-expenses", "/api/budgets",
                     "/api/expenses/stats", "/api/auth/me"):
            with self.subTest(path=path):
                resp = self.client.get(path)
                self.assertEqual(resp.status_code, 401)
                self.assertEqual(resp.get_json(), {"error": "Unauthorized"})

    def test_register_login_logout(self):
        user = self.register()
        self.assertEqual(user["email"], "ann@example.com")
        self.assertNotIn("password_hash", user)
        self.assertEqual(self.client.get("/api/auth/me").get_json()["id"], user["id"])

        self.assertEqual(self.client.post("/api/auth/logout").status_code, 200)
        self.assertEqual(self.client.get("/api/auth/me").status_code, 401)

        resp = self.client.post("/api/auth/login",
                                json={"email": "ANN@example.com", "password": PASSWORD})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.client.get("/api/auth/me").status_code, 200)

    def test_bad_credentials_and_duplicates(self):
        self.register()
        resp = self.client.post("/api/auth/login",
                                json={"email": "ann@example.com", "password": "nope"})
        self.assertEqual(resp.status_code, 401)

        resp = self.client.post("/api/auth/register",
                                json={"email": "ann@example.com", "password": PASSWORD})
        self.assertEqual(resp.status_code, 400)

        resp = self.client.post("/api/auth/register",
                                json={"email": "bob@example.com", "password": "short"})
        self.assertEqual(resp.status_code, 400)


class ExpenseApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.register()

    def test_crud(self):
        resp = self.add_expense()
        self.assertEqual(resp.status_code, 201)
        expense = resp.get_json()
        self.assertFalse(expense["is_recurring"])

        url = f"/api/expenses/{expense['id']}"
        self.assertEqual(self.client.get(url).get_json()["description"], "Lunch")

        resp = self.client.put(url, json={
            "amount": 20, "category": "Travel", "date": expense["date"],
            "payment_method": "Cash",
        })
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["category"], "Travel")

        listing = self.client.get("/api/expenses?category=Travel").get_json()
        self.assertEqual(listing["pagination"]["total"], 1)

        self.assertEqual(self.client.delete(url).status_code, 200)
        self.assertEqual(self.client.get(url).status_code, 404)
        self.assertEqual(self.client.get(url).get_json(), {"error": "Expense not found"})

    def test_validation_details(self):
        resp = self.add_expense(amount=-1, category="Pets")
        self.assertEqual(resp.status_code, 400)
        body = resp.get_json()
        self.assertEqual(body["error"], "Validation error")
        self.assertEqual([d["field"] for d in body["details"]], ["amount", "category"])

    def test_bad_list_arguments(self):
        self.assertEqual(self.client.get("/api/expenses?sort_by=password").status_code, 400)
        self.assertEqual(self.client.get("/api/expenses?start_date=soon").status_code, 400)

    def test_other_users_expense_is_forbidden(self):
        expense_id = self.add_expense().get_json()["id"]
        other = self.app.test_client()
        self.register(other, "bob@example.com")
        self.assertEqual(other.get(f"/api/expenses/{expense_id}").status_code, 403)
        self.assertEqual(other.delete(f"/api/expenses/{expense_id}").status_code, 403)
        self.assertEqual(other.get("/api/expenses").get_json()["pagination"]["total"], 0)


class RecurringApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.register()

    def _create(self, **overrides):
        data = {
            "amount": 9.99,
            "category": "Entertainment",
            "payment_method": "Credit Card",
            "frequency": "daily",
            "start_date": (date.today() - timedelta(days=3)).isoformat(),
        }
        data.update(overrides)
        return self.client.post("/api/recurring-expenses", json=data)

    def test_list_materializes_due_occurrence(self):
        resp = self._create()
        self.assertEqual(resp.status_code, 201)
        rec = resp.get_json()
        self.assertEqual(rec["next_due_date"], (date.today() - timedelta(days=2)).isoformat())

        listed = self.client.get("/api/recurring-expenses").get_json()
        self.assertEqual(listed[0]["next_due_date"],
                         (date.today() - timedelta(days=1)).isoformat())

        expenses = self.client.get("/api/expenses").get_json()["expenses"]
        self.assertEqual(len(expenses), 1)
        self.assertTrue(expenses[0]["is_recurring"])
        self.assertEqual(expenses[0]["recurring_id"], rec["id"])

    def test_create_rejects_unknown_frequency(self):
        resp = self._create(frequency="fortnightly")
        self.assertEqual(resp.status_code, 400)

    def test_update_toggle_delete(self):
        rec = self._create(start_date=date.today().isoformat()).get_json()
        url = f"/api/recurring-expenses/{rec['id']}"

        resp = self.client.put(url, json={"amount": 15, "frequency": "weekly"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["amount"], 15)
        self.assertEqual(resp.get_json()["next_due_date"], rec["next_due_date"])

        resp = self.client.post(f"{url}/toggle")
        self.assertFalse(resp.get_json()["is_active"])

        self.assertEqual(self.client.delete(url).status_code, 200)
        self.assertEqual(self.client.delete(url).status_code, 404)

    def test_other_users_definition_is_not_found(self):
        rec = self._create().get_json()
        other = self.app.test_client()
        self.register(other, "bob@example.com")
        resp = other.put(f"/api/recurring-expenses/{rec['id']}", json={"amount": 1})
        self.assertEqual(resp.status_code, 404)

    def test_materialization_failure_is_a_server_error(self):
        with patch.object(RecurringService, "materialize_due",
                          side_effect=MaterializationError([7])):
            with self.assertLogs("web.errors", level="ERROR"):
                resp = self.client.get("/api/recurring-expenses")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json(), {"error": "Internal server error"})


class BudgetApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.register()

    def test_crud_and_status(self):
        self.add_expense(amount=40)
        resp = self.client.post("/api/budgets", json={
            "amount": 50, "period": "monthly", "category": "Food & Dining",
        })
        self.assertEqual(resp.status_code, 201)
        budget_id = resp.get_json()["id"]

        listed = self.client.get("/api/budgets").get_json()
        self.assertEqual(listed[0]["spent"], 40)
        self.assertEqual(listed[0]["remaining"], 10)
        self.assertTrue(listed[0]["alert"])

        resp = self.client.put(f"/api/budgets/{budget_id}", json={"amount": 400})
        self.assertEqual(resp.get_json()["amount"], 400)

        self.assertEqual(self.client.post("/api/budgets", json={"amount": 5}).status_code, 400)
        self.assertEqual(self.client.delete(f"/api/budgets/{budget_id}").status_code, 200)
        self.assertEqual(self.client.get("/api/budgets").get_json(), [])


class AnalyticsApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.register()

    def test_stats(self):
        self.add_expense(amount=10)
        self.add_expense(amount=30, category="Travel")
        stats = self.client.get("/api/expenses/stats?period=month").get_json()
        self.assertEqual(stats["total"], 40)
        self.assertEqual(stats["count"], 2)
        self.assertEqual(stats["most_expensive_category"], {"category": "Travel", "amount": 30})
        self.assertEqual(len(stats["monthly_expenses"]), 6)

        self.assertEqual(self.client.get("/api/expenses/stats?period=week").status_code, 400)

    def test_charts(self):
        self.add_expense()
        for path in ("/api/charts/categories.png?period=all", "/api/charts/monthly.png?months=3"):
            with self.subTest(path=path):
                resp = self.client.get(path)
                self.assertEqual(resp.status_code, 200)
                self.assertEqual(resp.mimetype, "image/png")
                self.assertTrue(resp.data.startswith(b"\x89PNG"))
        self.assertEqual(self.client.get("/api/charts/monthly.png?months=0").status_code, 400)


class RequestBodyTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.register()

    def test_non_object_json_body_is_rejected(self):
        for path in ("/api/expenses", "/api/recurring-expenses", "/api/budgets",
                     "/api/auth/login"):
            with self.subTest(path=path):
                resp = self.client.post(path, json=[1, 2])
                self.assertEqual(resp.status_code, 400)
                self.assertEqual(resp.get_json(),
                                 {"error": "Request body must be a JSON object"})

    def test_far_future_recurring_start_is_rejected(self):
        resp = self.client.post("/api/recurring-expenses", json={
            "amount": 5, "category": "Other", "payment_method": "Cash",
            "frequency": "daily", "start_date": "9999-12-31",
        })
        self.assertEqual(resp.status_code, 400)


class DemoModeTests(ApiTestCase):
    settings = {"demo_user": True}

    def test_requests_without_session_use_demo_user(self):
        me = self.client.get("/api/auth/me").get_json()
        self.assertEqual(me["email"], "demo@example.com")
        self.assertEqual(self.add_expense().status_code, 201)
        self.assertEqual(self.client.get("/api/expenses").get_json()["pagination"]["total"], 1)

    def test_demo_account_cannot_log_in(self):
        resp = self.client.post("/api/auth/login",
                                json={"email": "demo@example.com", "password": ""})
        self.assertEqual(resp.status_code, 401)


if __name__ == "__main__":
    unittest.main()
