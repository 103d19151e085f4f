"""
Centralized logging service for HackerBlog.
Logs through the standard logging module and keeps WARNING and above in the
app_logs table so the health endpoint can report recent failures.
"""

import json
import logging
import traceback
from datetime import datetime, timedelta, timezone

from flask import request, has_request_context

from .config import Config

PERSISTED_LEVELS = {'WARNING', 'ERROR', 'CRITICAL'}


class LoggingService:
    """Application-wide logging with optional database persistence"""

    def __init__(self, database=None):
        self.database = database

    @staticmethod
    def _get_logger(source):
        return logging.getLogger(f'hackerblog.{source}')

    @staticmethod
    def _get_request_path():
        if not has_request_context():
            return None
        return request.path

    def log(self, level, source, message, details=None):
        """
        Log a message

        Args:
            level (str): DEBUG, INFO, WARNING, ERROR or CRITICAL
            source (str): Source component (posts, subscribers, storage, ...)
            message (str): Main log message
            details (str/dict): Additional details (JSON-encoded if dict)
        """
        level = level.upper()
        if isinstance(details, dict):
            details = json.dumps(details, indent=2, default=str)

        std_logger = self._get_logger(source)
        std_logger.log(getattr(logging, level, logging.INFO), message)
        if details:
            std_logger.debug(f"Details: {details}")

        if level not in PERSISTED_LEVELS or self.database is None or not self.database.is_open:
            return

        try:
            with self.database.connect() as conn:
                conn.execute(f"""
                    INSERT INTO {Config.LOGS_TABLE}
                    (timestamp, level, source, message, details, request_path)
                    VALUES (?, ?, ?, ?, ?, ?)
                """, (
                    datetime.now(timezone.utc).isoformat(), level, source, message,
                    details, self._get_request_path()
                ))
        except Exception as e:
            # Database logging is best-effort, the stdlib record above already exists
            std_logger.warning(f"Logging service error: {e}")

    def debug(self, source, message, details=None):
        self.log('DEBUG', source, message, details)

    def info(self, source, message, details=None):
        self.log('INFO', source, message, details)

    def warning(self, source, message, details=None):
        self.log('WARNING', source, message, details)

    def error(self, source, message, details=None):
        self.log('ERROR', source, message, details)

    def critical(self, source, message, details=None):
        self.log('CRITICAL', source, message, details)

    def log_error_with_traceback(self, source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        self.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    def recent_errors(self, limit=50, hours=24):
        """ERROR/CRITICAL entries from the last N hours, newest first"""
        if self.database is None:
            return []
        cutoff = (datetime.now(timezone.utc) - timedelta(hours=hours)).isoformat()
        with self.database.connect() as conn:
            cursor = conn.execute(f"""
                SELECT id, timestamp, level, source, message, details, request_path
                FROM {Config.LOGS_TABLE}
                WHERE level IN ('ERROR', 'CRITICAL')
                AND timestamp > ?
                ORDER BY timestamp DESC
                LIMIT ?
            """, (cutoff, limit))
            return cursor.fetchall()

    def error_count(self, hours=1):
        """Count ERROR/CRITICAL entries in the last N hours"""
        if self.database is None:
            return 0
        cutoff = (datetime.now(timezone.utc) - timedelta(hours=hours)).isoformat()
        with self.database.connect() as conn:
            row = conn.execute(f"""
                SELECT COUNT(*) AS total FROM {Config.LOGS_TABLE}
                WHERE level IN ('ERROR', 'CRITICAL')
                AND timestamp > ?
            """, (cutoff,)).fetchone()
            return row['total']
