"""
HackerBlog Core
===============

Configuration, storage and shared utilities used by the feature modules.
"""

from .config import Config
from .database import Database
from .errors import (
    HackerBlogError, NotFoundError, ValidationError, InvalidMediaError,
    PayloadTooLargeError, DuplicateEmailError, StorageUnavailableError,
)
from .locks import KeyedLock
from .logging_service import LoggingService
from .storage import ImageStore, ImageUpload

__all__ = [
    'Config', 'Database', 'ImageStore', 'ImageUpload', 'KeyedLock', 'LoggingService',
    'HackerBlogError', 'NotFoundError', 'ValidationError', 'InvalidMediaError',
    'PayloadTooLargeError', 'DuplicateEmailError', 'StorageUnavailableError',
]
