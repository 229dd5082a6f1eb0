"""
Pytest configuration and shared fixtures for iconnect_portal tests.
"""
import pytest
import sys
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

# Set required environment variables before importing app modules
os.environ['SESSION_SECRET'] = 'test_session_secret_for_testing'
os.environ['DATABASE_URL'] = 'sqlite:///./test_iconnect.db'
os.environ.pop('APP_ENV', None)

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402


@pytest.fixture(autouse=True)
def reset_test_environment():
    """Reset environment after each test"""
    yield

    from iconnect_portal.services.database import engine
    if engine:
        engine.dispose()

    test_db = Path('test_iconnect.db')
    if test_db.exists():
        test_db.unlink()


@pytest.fixture
def sqlite_db():
    """In-memory database wired in place of the configured one"""
    from iconnect_portal.model.base import Base
    import iconnect_portal.services.database  # noqa: F401  registers every model

    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    with patch('iconnect_portal.services.database.SessionLocal', factory):
        yield factory
    engine.dispose()


@pytest.fixture
def add_row(sqlite_db):
    """Insert ORM rows into the in-memory database"""
    def _add(*rows):
        db = sqlite_db()
        try:
            db.add_all(rows)
            db.commit()
        finally:
            db.close()
        return rows[0] if len(rows) == 1 else rows
    return _add


@pytest.fixture
def signed_cookie():
    """Build a Cookie header carrying a signed session id"""
    from iconnect_portal import config
    from iconnect_portal.services.utils.cookie_signing import sign

    def _cookie(sid):
        return f'{config.SESSION_COOKIE_NAME}={sign(sid, config.SESSION_SECRET)}'
    return _cookie


@pytest.fixture
def session_row():
    """Build a session row expiring relative to now"""
    from iconnect_portal.model.UserSession import UserSession

    def _row(sid, data=None, expires_in=timedelta(days=7)):
        return UserSession(
            sid=sid,
            sess={'cookie': {'path': '/'}, **(data or {})},
            expire=datetime.now(timezone.utc) + expires_in,
        )
    return _row


@pytest.fixture
def sample_sid():
    """Sample 64 hex character session id"""
    return 'a' * 64


@pytest.fixture
def sample_email():
    """Sample email address for testing"""
    return 'member@example.com'
