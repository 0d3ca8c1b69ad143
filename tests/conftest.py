import os

import pytest
from dotenv import load_dotenv

# Load .env once for tests
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
ENV_PATH = os.path.join(ROOT, ".env")
load_dotenv(ENV_PATH)

# Unit tests must never reach the real completion API.
os.environ["OPENAI_BASE_URL"] = "http://localhost:9999"

from app.main import app  # noqa: E402
from app.routers import query  # noqa: E402
from tests.fakes import (  # noqa: E402
    CAMPAIGNS_COLUMN_ROWS,
    CAMPAIGNS_CONSTRAINT_ROWS,
    FakeDB,
)


@pytest.fixture
def campaigns_db() -> FakeDB:
    """Catalog with companies(id, name) and campaigns(id, company_id, name) + one FK."""
    return FakeDB(CAMPAIGNS_COLUMN_ROWS, CAMPAIGNS_CONSTRAINT_ROWS)


@pytest.fixture(autouse=True)
def disable_api_key_auth():
    """Disable X-API-Key auth for tests."""
    prev = app.dependency_overrides.get(query.require_api_key)
    app.dependency_overrides[query.require_api_key] = lambda: None
    try:
        yield
    finally:
        if prev is None:
            app.dependency_overrides.pop(query.require_api_key, None)
        else:
            app.dependency_overrides[query.require_api_key] = prev
