"""
HackerBlog Errors
=================

Exception taxonomy shared by the repositories, the image store and the
API layer. Routes translate these into HTTP status codes:

- NotFoundError          -> 404
- ValidationError        -> 400 (InvalidMediaError, PayloadTooLargeError)
- DuplicateEmailError    -> 400
- StorageUnavailableError and anything else -> 500
"""


class HackerBlogError(Exception):
    """Base class for all HackerBlog errors"""
    status_code = 500


class NotFoundError(HackerBlogError):
    status_code = 404


class ValidationError(HackerBlogError):
    status_code = 400


class InvalidMediaError(ValidationError):
    """Upload is not one of the allowed image types"""


class PayloadTooLargeError(ValidationError):
    """Upload exceeds the configured image size limit"""


class DuplicateEmailError(HackerBlogError):
    status_code = 400


class StorageUnavailableError(HackerBlogError):
    """Database or filesystem could not complete an operation"""
