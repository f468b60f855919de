from __future__ import annotations

import pytest


class RecordingCursor:
    """Cursor double: records every statement and replays queued rows."""

    def __init__(self):
        self.executed: list[tuple[str, tuple]] = []
        self.rows: list[dict] = []
        self.error = None
        self.lastrowid = 0
        self.rowcount = 0
        self.closed = False

    def execute(self, sql, params=()):
        self.executed.append((" ".join(sql.split()), tuple(params)))
        if self.error is not None:
            raise self.error

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def fetchall(self):
        return list(self.rows)

    def close(self):
        self.closed = True

    @property
    def last_sql(self) -> str:
        return self.executed[-1][0]

    @property
    def last_params(self) -> tuple:
        return self.executed[-1][1]


class FakeConn:
    def __init__(self, cursor: RecordingCursor):
        self.cursor_obj = cursor
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self.cursor_obj

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, conn=None, error=None):
        self.conn = conn
        self.error = error

    def connect(self):
        if self.error is not None:
            raise self.error
        return self.conn


@pytest.fixture
def cursor() -> RecordingCursor:
    return RecordingCursor()


@pytest.fixture
def conn(cursor) -> FakeConn:
    return FakeConn(cursor)


@pytest.fixture
def factory(conn) -> FakeFactory:
    return FakeFactory(conn)


@pytest.fixture
def unreachable_factory():
    def build(error):
        return FakeFactory(error=error)

    return build
