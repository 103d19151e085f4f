import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone

from .config import Config
from .errors import StorageUnavailableError


def _dict_factory(cursor, row):
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def utc_now():
    """Store-assigned timestamp, microsecond precision so inserts order stably"""
    return datetime.now(timezone.utc).isoformat(timespec='microseconds')


class Database:
    """
    SQLite store for posts, subscribers and persisted log entries.

    One instance is created per application by the HackerBlog extension and
    handed to the repositories. Each operation opens its own connection, so
    the object can be shared across request threads.
    """

    def __init__(self, path, timeout=10.0):
        self.path = path
        self.timeout = timeout
        self._closed = True

    @property
    def is_open(self):
        return not self._closed

    def open(self):
        """Create the database directory and schema, then accept connections"""
        db_dir = os.path.dirname(self.path)
        if db_dir:
            try:
                os.makedirs(db_dir, exist_ok=True)
            except OSError as e:
                raise StorageUnavailableError(f"Could not create database directory {db_dir}: {e}") from e
        self._closed = False
        self.init_schema()
        return self

    def close(self):
        self._closed = True

    @contextmanager
    def connect(self):
        """
        Yield a connection that commits when the block exits cleanly and
        rolls back otherwise.

        IntegrityError propagates unchanged so callers can map constraint
        violations; every other sqlite error becomes StorageUnavailableError.
        """
        if self._closed:
            raise StorageUnavailableError('Database is closed')

        try:
            conn = sqlite3.connect(self.path, timeout=self.timeout)
        except sqlite3.Error as e:
            raise StorageUnavailableError(f"Could not open database {self.path}: {e}") from e

        conn.row_factory = _dict_factory
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError:
            conn.rollback()
            raise
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageUnavailableError(str(e)) from e
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init_schema(self):
        """Initialize tables and indexes, adding any columns missing from older databases"""
        with self.connect() as conn:
            cursor = conn.cursor()

            cursor.execute(f'''
                CREATE TABLE IF NOT EXISTS {Config.POSTS_TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    excerpt TEXT NOT NULL,
                    content TEXT NOT NULL,
                    image_path TEXT,
                    post_date TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            ''')

            cursor.execute(f'''
                CREATE TABLE IF NOT EXISTS {Config.SUBSCRIBERS_TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    email TEXT NOT NULL UNIQUE,
                    subscribed_at TEXT NOT NULL
                )
            ''')

            cursor.execute(f'''
                CREATE TABLE IF NOT EXISTS {Config.LOGS_TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    level TEXT NOT NULL,
                    source TEXT NOT NULL,
                    message TEXT NOT NULL,
                    details TEXT,
                    request_path TEXT
                )
            ''')

            # Databases created before image uploads existed lack image_path
            cursor.execute(f"PRAGMA table_info({Config.POSTS_TABLE})")
            columns = [column['name'] for column in cursor.fetchall()]
            if 'image_path' not in columns:
                cursor.execute(f'ALTER TABLE {Config.POSTS_TABLE} ADD COLUMN image_path TEXT')

            cursor.execute(f'''
                CREATE INDEX IF NOT EXISTS idx_posts_order
                ON {Config.POSTS_TABLE}(post_date DESC, created_at DESC)
            ''')
            cursor.execute(f'''
                CREATE INDEX IF NOT EXISTS idx_logs_timestamp
                ON {Config.LOGS_TABLE}(timestamp DESC)
            ''')

    def ping(self):
        """Return True when a trivial query succeeds"""
        try:
            with self.connect() as conn:
                conn.execute('SELECT 1')
            return True
        except StorageUnavailableError:
            return False
