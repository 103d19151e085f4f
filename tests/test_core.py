"""
Tests for the shared core pieces: database lifecycle, keyed locks and the
logging service.
"""

import os
import threading
import time

import pytest

from hackerblog.core import Database, KeyedLock, LoggingService, StorageUnavailableError


@pytest.fixture
def database(tmp_dir):
    db = Database(os.path.join(tmp_dir, "nested", "blog.db")).open()
    yield db
    db.close()


def test_database_open_creates_schema(database):
    with database.connect() as conn:
        tables = {row["name"] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}

    assert {"posts", "subscribers", "app_logs"} <= tables


def test_database_reopen_is_idempotent(database):
    database.init_schema()
    assert database.ping()


def test_database_closed_refuses_work(database):
    database.close()

    assert not database.ping()
    with pytest.raises(StorageUnavailableError):
        with database.connect():
            pass


def test_database_rolls_back_on_error(database):
    with pytest.raises(RuntimeError):
        with database.connect() as conn:
            conn.execute(
                "INSERT INTO subscribers (email, subscribed_at) VALUES (?, ?)",
                ("a@example.com", "2024-01-01"),
            )
            raise RuntimeError("abort")

    with database.connect() as conn:
        assert conn.execute("SELECT COUNT(*) AS total FROM subscribers").fetchone()["total"] == 0


def test_database_sql_error_is_storage_unavailable(database):
    with pytest.raises(StorageUnavailableError):
        with database.connect() as conn:
            conn.execute("SELECT * FROM missing_table")


def test_keyed_lock_serializes_same_key():
    locks = KeyedLock()
    inside = []
    overlaps = []

    def work():
        with locks.hold(1):
            if inside:
                overlaps.append(True)
            inside.append(True)
            time.sleep(0.01)
            inside.pop()

    threads = [threading.Thread(target=work) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlaps == []
    assert len(locks) == 0


def test_keyed_lock_different_keys_do_not_block():
    locks = KeyedLock()
    with locks.hold(1):
        acquired = threading.Event()

        def other():
            with locks.hold(2):
                acquired.set()

        t = threading.Thread(target=other)
        t.start()
        assert acquired.wait(timeout=1)
        t.join()


def test_logging_persists_warnings_and_above(database):
    log = LoggingService(database)

    log.info("posts", "routine")
    log.warning("storage", "slow disk")
    log.error("posts", "broken", {"post_id": 3})

    with database.connect() as conn:
        rows = conn.execute("SELECT level, source, message, details FROM app_logs ORDER BY id").fetchall()

    assert [(r["level"], r["message"]) for r in rows] == [("WARNING", "slow disk"), ("ERROR", "broken")]
    assert '"post_id": 3' in rows[1]["details"]
    assert log.error_count(hours=1) == 1


def test_logging_with_traceback(database):
    log = LoggingService(database)

    try:
        raise ValueError("bad value")
    except ValueError as e:
        log.log_error_with_traceback("posts", e)

    error = log.recent_errors()[0]
    assert error["message"] == "Exception occurred: ValueError"
    assert "bad value" in error["details"]


def test_logging_survives_closed_database(database):
    log = LoggingService(database)
    database.close()

    log.error("posts", "still logged to stdlib")

    assert LoggingService().recent_errors() == []
