import os
from collections.abc import Callable
from pathlib import Path

import pytest

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.uow import SQLiteUnitOfWorkFactory
from src.app_shell.context import ServiceContext
from src.domain.entities import Role, User
from src.rules.loader import load_rules
from src.rules.models import Rules


@pytest.fixture
def rules() -> Rules:
    # Load REAL rules from project root; tests run from project root.
    rules_path = Path("rules.yaml").resolve()
    if not rules_path.exists():
        raise FileNotFoundError(f"Rules not found at {rules_path}")
    return load_rules(rules_path)


@pytest.fixture
def db_path(tmp_path) -> str:
    """A migrated temporary SQLite database."""
    path = os.path.join(str(tmp_path), "inkwell.db")
    SQLiteMigrator(path, "migrations").run_migrations()
    return path


@pytest.fixture
def uow_factory(db_path) -> SQLiteUnitOfWorkFactory:
    return SQLiteUnitOfWorkFactory(db_path, timeout=10.0)


@pytest.fixture
def make_user(uow_factory) -> Callable[..., User]:
    """Persist a user with the given role."""
    counter = {"n": 0}

    def _make(role: Role = "AUTHOR", email: str | None = None) -> User:
        counter["n"] += 1
        user = User(email=email or f"user{counter['n']}@example.com", name=f"User {counter['n']}", role=role)
        with uow_factory() as uow:
            uow.users.save(user)
        return user

    return _make


@pytest.fixture
def test_ctx(db_path, rules) -> ServiceContext:
    """A full ServiceContext backed by a temporary SQLite DB."""
    return ServiceContext.create(db_path=db_path, rules=rules, db_timeout=10.0)


@pytest.fixture
def author(make_user) -> User:
    return make_user("AUTHOR")


@pytest.fixture
def other_author(make_user) -> User:
    return make_user("AUTHOR")


@pytest.fixture
def admin(make_user) -> User:
    return make_user("ADMIN")


@pytest.fixture
def reader(make_user) -> User:
    return make_user("READER")
