from __future__ import annotations

import mysql.connector
import pytest

from school_attendance.core.exceptions import StorageError, ValidationError
from school_attendance.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use
from school_attendance.database.mysql_base import db_cursor, is_duplicate_key, like_pattern


def test_db_cursor_commits_on_success(factory, conn, cursor):
    with db_cursor(factory) as (c, cur):
        assert c is conn and cur is cursor

    assert conn.committed and not conn.rolled_back
    assert cursor.closed and conn.closed


def test_db_cursor_wraps_driver_errors(factory, conn):
    with pytest.raises(StorageError) as info:
        with db_cursor(factory):
            raise mysql.connector.ProgrammingError(msg="bad sql")

    assert isinstance(info.value.__cause__, mysql.connector.Error)
    assert conn.rolled_back and not conn.committed and conn.closed


def test_db_cursor_lets_domain_errors_through(factory, conn):
    with pytest.raises(ValidationError):
        with db_cursor(factory):
            raise ValidationError("nope")

    assert conn.rolled_back and conn.closed


def test_db_cursor_connect_failure_is_storage_error(unreachable_factory):
    with pytest.raises(StorageError):
        with db_cursor(unreachable_factory(mysql.connector.InterfaceError(msg="refused"))):
            pass


def test_is_duplicate_key():
    assert is_duplicate_key(mysql.connector.IntegrityError(msg="dup", errno=1062))
    assert not is_duplicate_key(mysql.connector.IntegrityError(msg="fk", errno=1452))
    assert not is_duplicate_key(ValueError("dup"))


def test_like_pattern_escapes_wildcards():
    assert like_pattern("ab") == "%ab%"
    assert like_pattern("5%_x") == "%5\\%\\_x%"


def test_schema_splitter_handles_comments_and_quotes():
    sql = """
    CREATE DATABASE IF NOT EXISTS school_attendance;
    USE school_attendance;
    -- roster
    CREATE TABLE a (x VARCHAR(5) DEFAULT 'a;b'); -- trailing
    INSERT INTO a VALUES ('it''s');
    """
    statements = list(_iter_sql_statements(_strip_create_db_and_use(sql)))

    assert statements == [
        "CREATE TABLE a (x VARCHAR(5) DEFAULT 'a;b')",
        "INSERT INTO a VALUES ('it''s')",
    ]
