from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.core.deps import get_expense_store, get_text_generator, get_user_store
from app.core.errors import Conflict
from app.core.security import get_password_hash, issue_token
from app.main import app
from app.models.expense import ExpenseInDB, UpdateResult
from app.models.user import UserInDB

PASSWORD = "Secret@123"


class InMemoryUserStore:
    def __init__(self):
        self.users: Dict[str, dict] = {}
        self.email_guards: Dict[str, str] = {}

    def get_by_email(self, email):
        return next((u for u in self.users.values() if u["email"] == email), None)

    def get_by_id(self, user_id):
        return self.users.get(user_id)

    def create(self, user: UserInDB):
        if user.email in self.email_guards:
            raise Conflict("Email already registered")
        self.email_guards[user.email] = user.user_id
        self.users[user.user_id] = user.model_dump()


class InMemoryExpenseStore:
    def __init__(self):
        self.items: Dict[tuple, dict] = {}

    def list_for_user(self, user_id) -> List[dict]:
        keys = sorted(k for k in self.items if k[0] == user_id)
        return [dict(self.items[k]) for k in keys]

    def recent_for_user(self, user_id, limit):
        return list(reversed(self.list_for_user(user_id)))[:limit]

    def put(self, expense: ExpenseInDB):
        self.items[(expense.user_id, expense.expense_id)] = expense.model_dump()

    def update(self, user_id, expense_id, amount, category, description, updated_at):
        item = self.items.get((user_id, expense_id))
        if item is None:
            return UpdateResult(matched_count=0, modified_count=0)
        item.update(amount=amount, category=category, description=description, updated_at=updated_at)
        return UpdateResult(matched_count=1, modified_count=1)

    def delete(self, user_id, expense_id):
        return self.items.pop((user_id, expense_id), None) is not None

    def add(self, user_id, amount, category, description="groceries", created_at: Optional[datetime] = None):
        expense = ExpenseInDB.new(user_id, amount, category, description, created_at=created_at)
        self.put(expense)
        return expense


class FakeTextGenerator:
    def __init__(self, text="You spend most on food.", error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.prompts: List[str] = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.text


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def expense_store():
    return InMemoryExpenseStore()


@pytest.fixture
def text_generator():
    return FakeTextGenerator()


@pytest.fixture
def client(user_store, expense_store, text_generator):
    app.dependency_overrides[get_user_store] = lambda: user_store
    app.dependency_overrides[get_expense_store] = lambda: expense_store
    app.dependency_overrides[get_text_generator] = lambda: text_generator
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(user_store, name="Asha Rao", email="asha@example.com"):
    user = UserInDB(name=name, email=email, password_hash=get_password_hash(PASSWORD))
    user_store.create(user)
    return user


@pytest.fixture
def user(user_store):
    return make_user(user_store)


@pytest.fixture
def auth_headers(user):
    return {"token": issue_token(user.user_id)}


def days_ago(days: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)
