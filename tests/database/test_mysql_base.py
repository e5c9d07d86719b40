from __future__ import annotations

import mysql.connector
import pytest
from mysql.connector import errorcode

from school_attendance.core.exceptions import DuplicateAttendanceError, StoreError
from school_attendance.database.mysql_base import db_cursor


class FakeCursor:
    def __init__(self, error=None):
        self.error = error
        self.executed = []
        self.closed = False

    def execute(self, sql, params=None):
        if self.error is not None:
            raise self.error
        self.executed.append((sql, params))

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, conn=None, connect_error=None):
        self.conn = conn
        self.connect_error = connect_error

    def connect(self):
        if self.connect_error is not None:
            raise self.connect_error
        return self.conn


def test_clean_block_commits_and_closes():
    conn = FakeConnection(FakeCursor())

    with db_cursor(FakeFactory(conn)) as (_, cur):
        cur.execute("SELECT 1")

    assert conn.committed and conn.closed
    assert not conn.rolled_back


def test_duplicate_key_becomes_already_marked_and_rolls_back():
    dup = mysql.connector.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)
    conn = FakeConnection(FakeCursor(error=dup))

    with pytest.raises(DuplicateAttendanceError):
        with db_cursor(FakeFactory(conn)) as (_, cur):
            cur.execute("INSERT ...")

    assert conn.rolled_back and not conn.committed
    assert conn.closed


def test_driver_error_becomes_store_error():
    conn = FakeConnection(FakeCursor(error=mysql.connector.OperationalError(msg="gone away")))

    with pytest.raises(StoreError):
        with db_cursor(FakeFactory(conn)) as (_, cur):
            cur.execute("SELECT 1")

    assert conn.rolled_back


def test_connect_failure_becomes_store_error():
    with pytest.raises(StoreError):
        with db_cursor(FakeFactory(connect_error=mysql.connector.InterfaceError(msg="refused"))):
            pass


def test_other_error_inside_block_rolls_back_and_propagates():
    conn = FakeConnection(FakeCursor())

    with pytest.raises(KeyError):
        with db_cursor(FakeFactory(conn)):
            raise KeyError("boom")

    assert conn.rolled_back and conn.closed and not conn.committed
