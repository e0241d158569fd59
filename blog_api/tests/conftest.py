"""Shared fixtures for blog API tests."""

import pytest


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset all module-level singletons and caches between tests."""
    yield

    # 1. Settings LRU cache
    from blog_api.config import get_settings

    get_settings.cache_clear()

    # 2. Database engine singleton (disposed by the db fixture when it made one)
    import blog_api.db as db_mod

    db_mod._engine = None
    db_mod._session_factory = None

    # 3. Rate limiter state
    import blog_api.middleware as mw_mod

    mw_mod._rate_limits.clear()
    mw_mod._rate_limit_call_count = 0


@pytest.fixture
def mock_settings(monkeypatch, tmp_path):
    """Provide a Settings object with safe test defaults and a throwaway database."""
    from blog_api.config import Settings, get_settings

    test_settings = Settings(
        debug=False,
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.sqlite'}",
        cors_origins=["http://localhost:3000"],
        rate_limit_window=900,
        rate_limit_max=100,
    )

    get_settings.cache_clear()
    monkeypatch.setattr("blog_api.config.get_settings", lambda: test_settings)

    # Patch get_settings in all modules that import it directly
    # (from blog_api.config import get_settings creates a local binding that
    # the blog_api.config monkeypatch above does not affect)
    for mod_path in [
        "blog_api.db",
        "blog_api.main",
        "blog_api.middleware",
    ]:
        monkeypatch.setattr(f"{mod_path}.get_settings", lambda: test_settings)

    return test_settings


@pytest.fixture
async def db(mock_settings):
    """Create the schema in the per-test database and hand out the engine."""
    from blog_api.db import dispose_engine, get_engine, init_db

    await init_db()
    yield get_engine()
    await dispose_engine()


@pytest.fixture
async def session(db):
    from blog_api.db import get_session_factory

    async with get_session_factory()() as s:
        yield s


@pytest.fixture
async def client(db):
    """HTTP client driving the app in-process (lifespan is not run)."""
    from httpx import ASGITransport, AsyncClient

    from blog_api.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as c:
        yield c
