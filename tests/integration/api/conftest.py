from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.api.auth_utils import create_access_token
from src.api.deps import Settings, get_settings
from src.api.main import app


@pytest.fixture
def override_settings(tmp_path, db_path):
    def _settings():
        s = Settings()
        s.data_dir = Path(tmp_path)
        s.db_path = db_path
        # Use existing rules file from project root
        s.rules_path = Path("rules.yaml").resolve()
        return s

    app.dependency_overrides[get_settings] = _settings
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_settings):
    return TestClient(app)


def auth_headers(user):
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers():
    return auth_headers
