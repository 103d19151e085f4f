"""
Storage Utility
===============

Local filesystem store for post images. Owns the upload folder: validates
incoming files, gives each one a collision-free name, and deletes files on
request. It knows nothing about which post references which file.
"""

import os
import uuid
from collections import namedtuple

from .config import Config
from .errors import InvalidMediaError, NotFoundError, PayloadTooLargeError, StorageUnavailableError
from .logging_service import LoggingService

CHUNK_SIZE = 64 * 1024
NAME_ATTEMPTS = 5

# stream: readable binary file object; filename: name as sent by the client
ImageUpload = namedtuple('ImageUpload', ['stream', 'filename', 'mimetype'])


def format_limit(size):
    """Human readable byte limit for error messages"""
    if size >= 1024 * 1024:
        return f"{size // (1024 * 1024)} MB"
    return f"{size} bytes"


def upload_from_request_file(file):
    """Wrap a werkzeug FileStorage from request.files"""
    return ImageUpload(file.stream, file.filename, file.mimetype)


class ImageStore:

    def __init__(self, upload_folder, max_size=Config.MAX_IMAGE_SIZE,
                 url_prefix=Config.UPLOADS_URL_PREFIX, logger=None):
        self.upload_folder = os.path.abspath(upload_folder)
        self.max_size = max_size
        self.url_prefix = url_prefix.rstrip('/')
        self.logger = logger or LoggingService()

    def open(self):
        """Ensure the upload folder exists"""
        try:
            os.makedirs(self.upload_folder, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(f"Could not create upload folder {self.upload_folder}: {e}") from e
        return self

    # ===== Validation =====

    @staticmethod
    def _extension(filename):
        return os.path.splitext(filename or '')[1].lower()

    def validate(self, upload):
        """Both the declared media type and the file extension must be allowed image types"""
        ext = self._extension(upload.filename).lstrip('.')
        mimetype = (upload.mimetype or '').split(';')[0].strip().lower()

        if ext not in Config.ALLOWED_IMAGE_EXTENSIONS or mimetype not in Config.ALLOWED_IMAGE_MIMETYPES:
            raise InvalidMediaError('Only image files are allowed')

    # ===== Store =====

    def _create_unique(self, ext):
        """Open a brand new file, never one that already exists"""
        for _ in range(NAME_ATTEMPTS):
            name = f"{uuid.uuid4().hex}{ext}"
            filepath = os.path.join(self.upload_folder, name)
            try:
                return name, filepath, open(filepath, 'xb')
            except FileExistsError:
                continue
            except OSError as e:
                raise StorageUnavailableError(f"Could not create image file: {e}") from e
        raise StorageUnavailableError('Could not generate a unique image name')

    def _discard(self, filepath):
        try:
            os.unlink(filepath)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning('storage', f"Could not remove partial upload {filepath}: {e}")

    def store(self, upload):
        """
        Validate and persist an upload.

        Returns:
            Reference like "/uploads/<hex>.jpg", usable with resolve() and delete().

        Raises:
            InvalidMediaError: not an allowed image type
            PayloadTooLargeError: more than max_size bytes
            StorageUnavailableError: the file could not be written
        """
        self.validate(upload)

        name, filepath, f = self._create_unique(self._extension(upload.filename))
        written = 0
        try:
            with f:
                while True:
                    chunk = upload.stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_size:
                        raise PayloadTooLargeError(f"Image exceeds the {format_limit(self.max_size)} limit")
                    f.write(chunk)
        except PayloadTooLargeError:
            self._discard(filepath)
            raise
        except OSError as e:
            self._discard(filepath)
            raise StorageUnavailableError(f"Could not write image {name}: {e}") from e

        self.logger.info('storage', f"Stored image {name} ({written} bytes)")
        return f"{self.url_prefix}/{name}"

    # ===== Lookup =====

    def _name_from_ref(self, ref):
        """Filename for a managed reference, None for anything outside the upload folder"""
        prefix = f"{self.url_prefix}/"
        if not ref or not ref.startswith(prefix):
            return None
        name = ref[len(prefix):]
        if not name or name in ('.', '..') or '/' in name or '\\' in name:
            return None
        return name

    def is_managed(self, ref):
        """True when ref names a file inside the upload folder"""
        return self._name_from_ref(ref) is not None

    def resolve(self, ref):
        """Absolute path of a stored image"""
        name = self._name_from_ref(ref)
        if name is None:
            raise NotFoundError(f"Not a stored image: {ref}")
        filepath = os.path.join(self.upload_folder, name)
        if not os.path.isfile(filepath):
            raise NotFoundError(f"Image not found: {ref}")
        return filepath

    def exists(self, ref):
        name = self._name_from_ref(ref)
        return name is not None and os.path.isfile(os.path.join(self.upload_folder, name))

    def list_artifacts(self):
        """References of all stored images, newest first"""
        if not os.path.isdir(self.upload_folder):
            return []

        entries = []
        for filename in os.listdir(self.upload_folder):
            ext = self._extension(filename).lstrip('.')
            filepath = os.path.join(self.upload_folder, filename)
            if ext in Config.ALLOWED_IMAGE_EXTENSIONS and os.path.isfile(filepath):
                entries.append((os.path.getmtime(filepath), f"{self.url_prefix}/{filename}"))

        entries.sort(reverse=True)
        return [ref for _, ref in entries]

    # ===== Delete =====

    def delete(self, ref):
        """Delete a stored image.

        Returns True when a file was removed, False when it was already gone.
        Raises StorageUnavailableError when the file exists but cannot be removed.
        """
        name = self._name_from_ref(ref)
        if name is None:
            self.logger.warning('storage', f"Ignoring delete of unmanaged image reference: {ref}")
            return False

        try:
            os.unlink(os.path.join(self.upload_folder, name))
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageUnavailableError(f"Could not delete image {ref}: {e}") from e

        self.logger.info('storage', f"Deleted image {name}")
        return True
