"""Tests for the session store accessor"""
import json
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch
from iconnect_portal.model.UserSession import UserSession
from iconnect_portal.services.session_store import SessionStore, generate_session_id


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def mock_db_session():
    """Mock database session"""
    with patch('iconnect_portal.services.database.get_db_session') as mock:
        db = MagicMock()
        mock.return_value = db
        yield db


def _stored(sqlite_db, sid):
    db = sqlite_db()
    try:
        return db.get(UserSession, sid)
    finally:
        db.close()


class TestSessionStoreRead:
    """Reads and lazy expiry"""

    def test_get_returns_live_session(self, store, sqlite_db, add_row, session_row, sample_sid):
        add_row(session_row(sample_sid, {'memberId': 'm-1'}, expires_in=timedelta(seconds=1)))

        stored = store.get(sample_sid)

        assert stored is not None
        assert stored.sess['memberId'] == 'm-1'
        assert stored.expire.tzinfo is not None

    def test_get_missing_row(self, store, sqlite_db, sample_sid):
        assert store.get(sample_sid) is None

    def test_expired_row_is_deleted_on_read(self, store, sqlite_db, add_row, session_row, sample_sid):
        """Two reads after expiry both miss; the row is gone after the first"""
        add_row(session_row(sample_sid, {'memberId': 'm-1'}, expires_in=timedelta(seconds=-1)))
        assert _stored(sqlite_db, sample_sid) is not None

        assert store.get(sample_sid) is None
        assert _stored(sqlite_db, sample_sid) is None
        assert store.get(sample_sid) is None

    def test_sess_stored_as_json_string_is_decoded(self, store, mock_db_session, sample_sid):
        row = MagicMock()
        row.sess = json.dumps({'memberId': 'm-2'})
        row.expire = datetime.now(timezone.utc) + timedelta(hours=1)
        mock_db_session.get.return_value = row

        stored = store.get(sample_sid)

        assert stored.sess == {'memberId': 'm-2'}

    def test_naive_expire_is_treated_as_utc(self, store, mock_db_session, sample_sid):
        row = MagicMock()
        row.sess = {}
        row.expire = (datetime.now(timezone.utc) - timedelta(minutes=5)).replace(tzinfo=None)
        mock_db_session.get.return_value = row

        assert store.get(sample_sid) is None
        mock_db_session.delete.assert_called_once_with(row)
        mock_db_session.commit.assert_called_once()

    def test_get_swallows_store_errors(self, store, mock_db_session, sample_sid):
        mock_db_session.get.side_effect = Exception('connection reset')

        assert store.get(sample_sid) is None
        mock_db_session.rollback.assert_called_once()
        mock_db_session.close.assert_called_once()

    def test_get_without_database(self, store, sample_sid):
        with patch('iconnect_portal.services.database.SessionLocal', None):
            assert store.get(sample_sid) is None


class TestSessionStoreWrite:
    """Create, update and delete"""

    def test_generate_session_id(self):
        sid = generate_session_id()
        assert len(sid) == 64
        int(sid, 16)
        assert generate_session_id() != sid

    def test_create_inserts_one_row(self, store, sqlite_db):
        sid = store.create({'memberId': 'm-1', 'memberEmail': 'member@example.com'})

        row = _stored(sqlite_db, sid)
        assert row is not None
        assert row.sess['memberId'] == 'm-1'
        assert row.sess['cookie']['httpOnly'] is True
        assert row.sess['cookie']['sameSite'] == 'lax'
        assert row.sess['cookie']['originalMaxAge'] == 7 * 24 * 60 * 60 * 1000
        expire = row.expire.replace(tzinfo=timezone.utc)
        assert timedelta(days=6, hours=23) < expire - datetime.now(timezone.utc) <= timedelta(days=7)

    def test_create_returns_none_on_failure(self, store, mock_db_session):
        mock_db_session.commit.side_effect = Exception('DB Error')

        assert store.create({'memberId': 'm-1'}) is None
        mock_db_session.rollback.assert_called_once()

    def test_update_merges_and_preserves_cookie(self, store, sqlite_db, add_row, session_row, sample_sid):
        row = session_row(sample_sid, {'memberId': 'm-1', 'isTemporaryPassword': True},
                          expires_in=timedelta(hours=1))
        row.sess['cookie'] = {'path': '/', 'httpOnly': True, 'expires': 'old'}
        add_row(row)

        assert store.update(sample_sid, {'isTemporaryPassword': False}) is True

        updated = _stored(sqlite_db, sample_sid)
        assert updated.sess['memberId'] == 'm-1'
        assert updated.sess['isTemporaryPassword'] is False
        assert updated.sess['cookie']['path'] == '/'
        assert updated.sess['cookie']['httpOnly'] is True
        assert updated.sess['cookie']['expires'] != 'old'
        expire = updated.expire.replace(tzinfo=timezone.utc)
        assert expire - datetime.now(timezone.utc) > timedelta(days=6)

    def test_update_adds_cookie_metadata_when_missing(self, store, sqlite_db, add_row, sample_sid):
        add_row(UserSession(sid=sample_sid, sess={'memberId': 'm-1'},
                            expire=datetime.now(timezone.utc) + timedelta(hours=1)))

        assert store.update(sample_sid, {'flag': 1}) is True

        cookie = _stored(sqlite_db, sample_sid).sess['cookie']
        assert cookie['path'] == '/'
        assert cookie['httpOnly'] is True

    def test_update_missing_row(self, store, sqlite_db, sample_sid):
        assert store.update(sample_sid, {'flag': 1}) is False

    def test_update_failure_returns_false(self, store, mock_db_session, sample_sid):
        mock_db_session.get.return_value = MagicMock(sess={})
        mock_db_session.commit.side_effect = Exception('DB Error')

        assert store.update(sample_sid, {'flag': 1}) is False
        mock_db_session.rollback.assert_called_once()

    def test_delete(self, store, sqlite_db, add_row, session_row, sample_sid):
        add_row(session_row(sample_sid))

        assert store.delete(sample_sid) is True
        assert _stored(sqlite_db, sample_sid) is None
        assert store.delete(sample_sid) is False

    def test_writes_without_database(self, store, sample_sid):
        with patch('iconnect_portal.services.database.SessionLocal', None):
            assert store.create({'memberId': 'm-1'}) is None
            assert store.update(sample_sid, {}) is False
            assert store.delete(sample_sid) is False
