"""
Shared fixtures for the HackerBlog test suite.
Run with: pytest tests -v

NOTE: pytest is listed under extras_require["dev"] in setup.py.
Install with: pip install -e ".[dev]"
"""

import io
import os
import shutil
import tempfile

import pytest

from hackerblog import create_app

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 64


@pytest.fixture
def tmp_dir():
    """Create a temporary directory for databases and uploads, cleaned up after."""
    d = tempfile.mkdtemp(prefix="hackerblog-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def app(tmp_dir):
    """Fully initialised Flask app backed by throwaway storage."""
    app = create_app({
        'TESTING': True,
        'DB_DIR': os.path.join(tmp_dir, 'databases'),
        'BLOG_DB': os.path.join(tmp_dir, 'databases', 'hackerblog.db'),
        'UPLOAD_FOLDER': os.path.join(tmp_dir, 'uploads'),
        'INDEX_FOLDER': tmp_dir,
    })
    yield app
    app.extensions['hackerblog'].close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def blog(app):
    return app.extensions['hackerblog']


@pytest.fixture
def image_file():
    """Factory for multipart file tuples accepted by the Flask test client."""
    def make(name='photo.png', content=PNG_BYTES, mimetype='image/png'):
        return (io.BytesIO(content), name, mimetype)
    return make
