"""
Post Repository
===============

CRUD over the posts table, keeping each post's image_path consistent with
the files in the image store.

Image changes follow two ordering rules:
- a replacement image is written before the old one is deleted
- a row change that drops an image reference is only committed once the
  old file is confirmed gone; if the store reports it cannot delete the
  file, the row change is rolled back and the error surfaces
"""

from datetime import datetime

from ...core.config import Config
from ...core.database import utc_now
from ...core.errors import NotFoundError, StorageUnavailableError, ValidationError
from ...core.locks import KeyedLock
from ...core.logging_service import LoggingService

POST_FIELDS = ('title', 'excerpt', 'content', 'post_date')

POST_COLUMNS = 'id, title, excerpt, content, image_path, post_date, created_at, updated_at'


# ===== Image directives for update() =====

class Unchanged:
    """Leave image_path as stored, do not touch the filesystem"""

    def __repr__(self):
        return 'Unchanged()'


class RemoveExisting:
    """Delete the current image (if any) and clear image_path"""

    def __repr__(self):
        return 'RemoveExisting()'


class Replace:
    """Store a new image and delete the previous one"""

    def __init__(self, upload):
        self.upload = upload

    def __repr__(self):
        return f'Replace({self.upload.filename!r})'


# ===== Validation =====

def validate_post_fields(fields, partial=False):
    """
    Check and normalise post fields.

    With partial=True only the fields present are checked, which is what
    updates use; otherwise all of title, excerpt, content and post_date are
    required.
    """
    cleaned = {}
    for name in POST_FIELDS:
        value = fields.get(name)
        if value is None:
            if partial:
                continue
            raise ValidationError(f"{name} is required")
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{name} cannot be empty")
        cleaned[name] = value if name == 'content' else value.strip()

    if 'post_date' in cleaned:
        post_date = cleaned['post_date']
        # fromisoformat only understands a trailing Z from Python 3.11
        if post_date.endswith(('Z', 'z')):
            post_date = post_date[:-1] + '+00:00'
        try:
            datetime.fromisoformat(post_date)
        except ValueError:
            raise ValidationError('post_date must be an ISO-8601 date')

    return cleaned


class PostRepository:

    def __init__(self, database, image_store, logger=None, locks=None):
        self.database = database
        self.image_store = image_store
        self.logger = logger or LoggingService()
        self.locks = locks or KeyedLock()

    @staticmethod
    def _select_one(conn, post_id):
        return conn.execute(
            f'SELECT {POST_COLUMNS} FROM {Config.POSTS_TABLE} WHERE id = ?', (post_id,)
        ).fetchone()

    def _discard_artifact(self, ref):
        """Best-effort removal of an image no row will reference"""
        try:
            self.image_store.delete(ref)
        except StorageUnavailableError as e:
            self.logger.error('posts', f"Orphaned image left behind: {ref}", {'error': str(e)})

    def _warn_if_unmanaged(self, post_id, ref):
        """
        Warn about an image reference outside the upload folder, which is
        left in place. Call only after the transaction has closed, since
        warnings are written to the same database.
        """
        if not ref or self.image_store.is_managed(ref):
            return False
        self.logger.warning('posts', f"Post {post_id} referenced an image outside the upload folder, "
                                     f"left in place: {ref}")
        return True

    # ===== Reads =====

    def get(self, post_id):
        with self.database.connect() as conn:
            post = self._select_one(conn, post_id)
        if post is None:
            raise NotFoundError('Post not found')
        return post

    def list(self):
        """All posts, latest post_date first, newest insert first within a date"""
        with self.database.connect() as conn:
            return conn.execute(f'''
                SELECT {POST_COLUMNS} FROM {Config.POSTS_TABLE}
                ORDER BY post_date DESC, created_at DESC, id DESC
            ''').fetchall()

    def count(self):
        with self.database.connect() as conn:
            row = conn.execute(f'SELECT COUNT(*) AS total FROM {Config.POSTS_TABLE}').fetchone()
        return row['total']

    # ===== Writes =====

    def create(self, fields, upload=None):
        """
        Insert a post, storing its image first when one is given.

        A failed store inserts nothing; a failed insert removes the image
        that was just stored.
        """
        data = validate_post_fields(fields)
        image_path = self.image_store.store(upload) if upload is not None else None
        now = utc_now()

        try:
            with self.database.connect() as conn:
                cursor = conn.execute(f'''
                    INSERT INTO {Config.POSTS_TABLE}
                    (title, excerpt, content, image_path, post_date, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                ''', (data['title'], data['excerpt'], data['content'], image_path,
                      data['post_date'], now, now))
                post = self._select_one(conn, cursor.lastrowid)
        except Exception:
            if image_path:
                self._discard_artifact(image_path)
            raise

        self.logger.info('posts', f"Created post {post['id']}: {post['title']}")
        return post

    def update(self, post_id, fields, directive=None):
        """
        Update a post's fields and apply an image directive
        (Replace, RemoveExisting or Unchanged, the default).

        Mutations of the same post are serialized, so the image_path read
        here is the one being replaced.
        """
        directive = directive or Unchanged()

        with self.locks.hold(post_id):
            current = self.get(post_id)
            data = validate_post_fields(fields, partial=True)
            old_path = current['image_path']

            new_path = None
            if isinstance(directive, Replace):
                new_path = self.image_store.store(directive.upload)
                data['image_path'] = new_path
            elif isinstance(directive, RemoveExisting):
                data['image_path'] = None
            data['updated_at'] = utc_now()

            dropped = None
            if old_path and 'image_path' in data and data['image_path'] != old_path:
                dropped = old_path

            assignments = ', '.join(f'{column} = ?' for column in data)
            try:
                with self.database.connect() as conn:
                    conn.execute(
                        f'UPDATE {Config.POSTS_TABLE} SET {assignments} WHERE id = ?',
                        (*data.values(), post_id)
                    )
                    if dropped and self.image_store.is_managed(dropped):
                        # Raises before commit when the old file cannot be removed
                        self.image_store.delete(dropped)
                    post = self._select_one(conn, post_id)
            except Exception:
                if new_path:
                    self._discard_artifact(new_path)
                raise

        self._warn_if_unmanaged(post_id, dropped)
        self.logger.info('posts', f"Updated post {post_id} ({directive!r})")
        return post

    def delete(self, post_id):
        """Delete a post and its image; the row stays if the image cannot be removed"""
        with self.locks.hold(post_id):
            image_path = self.get(post_id)['image_path']
            removed = False
            with self.database.connect() as conn:
                conn.execute(f'DELETE FROM {Config.POSTS_TABLE} WHERE id = ?', (post_id,))
                if image_path and self.image_store.is_managed(image_path):
                    removed = self.image_store.delete(image_path)

        if image_path and not self._warn_if_unmanaged(post_id, image_path) and not removed:
            self.logger.info('posts', f"Image for post {post_id} was already gone: {image_path}")
        self.logger.info('posts', f"Deleted post {post_id}")

    # ===== Consistency checks =====

    def _referenced_paths(self):
        with self.database.connect() as conn:
            rows = conn.execute(f'''
                SELECT id, image_path FROM {Config.POSTS_TABLE}
                WHERE image_path IS NOT NULL
            ''').fetchall()
        return {row['image_path']: row['id'] for row in rows}

    def find_orphaned_artifacts(self):
        """Stored images that no post references"""
        referenced = self._referenced_paths()
        return [ref for ref in self.image_store.list_artifacts() if ref not in referenced]

    def find_dangling_references(self):
        """Ids of posts whose image_path names a file that does not exist"""
        return sorted(
            post_id for ref, post_id in self._referenced_paths().items()
            if not self.image_store.exists(ref)
        )
