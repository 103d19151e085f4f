import re
import sqlite3

from ...core.config import Config
from ...core.database import utc_now
from ...core.errors import DuplicateEmailError, ValidationError
from ...core.logging_service import LoggingService

# Email validation regex: one @ with something on each side, no whitespace
EMAIL_REGEX = re.compile(r'^[^@\s]+@[^@\s]+$')


def validate_email(email):
    """Validate email format"""
    if not email or len(email) > 255:
        return False
    return EMAIL_REGEX.match(email) is not None


class SubscriberRepository:
    """Newsletter subscribers. Emails are unique, compared case-sensitively."""

    def __init__(self, database, logger=None):
        self.database = database
        self.logger = logger or LoggingService()

    def subscribe(self, email):
        if not isinstance(email, str) or not email.strip():
            raise ValidationError('Email is required')
        email = email.strip()
        if not validate_email(email):
            raise ValidationError('Please enter a valid email address')

        try:
            with self.database.connect() as conn:
                cursor = conn.execute(
                    f'INSERT INTO {Config.SUBSCRIBERS_TABLE} (email, subscribed_at) VALUES (?, ?)',
                    (email, utc_now())
                )
                subscriber = conn.execute(
                    f'SELECT id, email, subscribed_at FROM {Config.SUBSCRIBERS_TABLE} WHERE id = ?',
                    (cursor.lastrowid,)
                ).fetchone()
        except sqlite3.IntegrityError:
            raise DuplicateEmailError('Already subscribed')

        self.logger.info('subscribers', f"New subscriber: {email}")
        return subscriber

    def list(self):
        with self.database.connect() as conn:
            return conn.execute(f'''
                SELECT id, email, subscribed_at FROM {Config.SUBSCRIBERS_TABLE}
                ORDER BY subscribed_at DESC, id DESC
            ''').fetchall()

    def count(self):
        with self.database.connect() as conn:
            row = conn.execute(f'SELECT COUNT(*) AS total FROM {Config.SUBSCRIBERS_TABLE}').fetchone()
        return row['total']
