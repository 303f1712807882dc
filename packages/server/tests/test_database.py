"""Tests for row-level security context on database sessions."""

from __future__ import annotations

import uuid
from types import SimpleNamespace

from hackportal.core.database import RLS_USER_KEY, _apply_rls_user, set_rls_user


class RecordingConnection:
    def __init__(self, dialect: str):
        self.dialect = SimpleNamespace(name=dialect)
        self.statements = []

    def execute(self, statement, params=None):
        self.statements.append((str(statement), params))


def _session(info=None):
    return SimpleNamespace(info=dict(info or {}))


class TestRlsUser:
    def test_set_records_user(self, session):
        user_id = uuid.uuid4()
        set_rls_user(session, user_id)
        assert session.info[RLS_USER_KEY] == str(user_id)

    def test_anonymous_clears_user(self, session):
        set_rls_user(session, None)
        assert session.info[RLS_USER_KEY] == ""

    def test_applied_transaction_locally_on_postgres(self):
        user_id = str(uuid.uuid4())
        conn = RecordingConnection("postgresql")
        _apply_rls_user(_session({RLS_USER_KEY: user_id}), None, conn)
        [(sql, params)] = conn.statements
        assert "set_config('app.current_user_id', :user_id, true)" in sql
        assert params == {"user_id": user_id}

    def test_reapplied_for_every_transaction(self):
        conn = RecordingConnection("postgresql")
        session = _session({RLS_USER_KEY: "abc"})
        _apply_rls_user(session, None, conn)
        _apply_rls_user(session, None, conn)
        assert len(conn.statements) == 2

    def test_skipped_without_user_or_off_postgres(self):
        pg = RecordingConnection("postgresql")
        sqlite = RecordingConnection("sqlite")
        _apply_rls_user(_session(), None, pg)
        _apply_rls_user(_session({RLS_USER_KEY: "abc"}), None, sqlite)
        assert pg.statements == []
        assert sqlite.statements == []

    async def test_sqlite_session_still_works_after_rollback(self, seed, session):
        from hackportal.services.organizations import verify_org_membership

        set_rls_user(session, seed.alice)
        await session.rollback()
        assert await verify_org_membership(session, seed.alice, seed.org_a) is True
