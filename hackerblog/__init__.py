"""
HackerBlog
==========

Blog posts with one optional image each, plus a newsletter subscriber list,
served as a JSON API by Flask.

Usage:
    from flask import Flask
    from hackerblog import HackerBlog

    app = Flask(__name__)
    blog = HackerBlog(app)

or simply:

    from hackerblog import create_app
    app = create_app({'UPLOAD_FOLDER': '/srv/blog/uploads'})
"""

__version__ = '0.1.0'

import os

from flask import Flask, current_app, jsonify
from flask_cors import CORS
from werkzeug.exceptions import RequestEntityTooLarge

from .core import Config, Database, ImageStore, LoggingService
from .core.storage import format_limit
from .modules.health import health_bp
from .modules.media import media_bp
from .modules.posts import posts_bp
from .modules.posts.repository import PostRepository
from .modules.subscribers import subscribers_bp
from .modules.subscribers.repository import SubscriberRepository

BLUEPRINTS = [
    ('posts', posts_bp),
    ('subscribers', subscribers_bp),
    ('media', media_bp),
    ('health', health_bp),
]


def _handle_too_large(error):
    limit = format_limit(current_app.config.get('MAX_IMAGE_SIZE', Config.MAX_IMAGE_SIZE))
    return jsonify({'error': f'Image exceeds the {limit} limit'}), 400


class HackerBlog:
    """
    Flask extension that owns the blog's storage and registers its blueprints.

    Settings resolve in this order: the config dict passed here, then values
    already in app.config, then Config defaults from the environment.
    """

    def __init__(self, app=None, config=None):
        self._config = dict(config or {})
        self._registered_modules = []
        self.database = None
        self.images = None
        self.posts = None
        self.subscribers = None
        self.logger = LoggingService()
        if app is not None:
            self.init_app(app)

    def _apply_config(self, app):
        app.config.update(self._config)
        for key, value in Config.defaults().items():
            app.config.setdefault(key, value)

        # Derived settings follow whatever the app chose for their inputs
        if 'BLOG_DB' not in app.config:
            app.config['BLOG_DB'] = os.getenv('HACKERBLOG_DB') or os.path.join(app.config['DB_DIR'], 'hackerblog.db')
        # Multipart bodies carry the text fields alongside the image
        if app.config.get('MAX_CONTENT_LENGTH') is None:
            app.config['MAX_CONTENT_LENGTH'] = app.config['MAX_IMAGE_SIZE'] + 1024 * 1024

    @staticmethod
    def _cors_origins(value):
        if isinstance(value, str):
            origins = [origin.strip() for origin in value.split(',') if origin.strip()]
            return '*' if origins == ['*'] else origins
        return value

    def init_app(self, app):
        self._apply_config(app)

        self.database = Database(app.config['BLOG_DB']).open()
        self.logger.database = self.database
        self.images = ImageStore(
            app.config['UPLOAD_FOLDER'],
            max_size=app.config['MAX_IMAGE_SIZE'],
            logger=self.logger,
        ).open()
        self.posts = PostRepository(self.database, self.images, logger=self.logger)
        self.subscribers = SubscriberRepository(self.database, logger=self.logger)

        CORS(app, resources={r'/api/*': {'origins': self._cors_origins(app.config['CORS_ORIGINS'])}})

        for name, blueprint in BLUEPRINTS:
            app.register_blueprint(blueprint)
            self._registered_modules.append(name)

        app.register_error_handler(RequestEntityTooLarge, _handle_too_large)

        app.extensions['hackerblog'] = self
        self.logger.info('system', f"HackerBlog initialized (db: {app.config['BLOG_DB']}, "
                                   f"uploads: {self.images.upload_folder})")

    def get_registered_modules(self):
        return list(self._registered_modules)

    def close(self):
        """Stop accepting database work; safe to call more than once"""
        if self.database is not None and self.database.is_open:
            self.database.close()
            self.logger.info('system', 'HackerBlog database closed')


def create_app(config=None):
    """Application factory"""
    app = Flask(__name__)
    HackerBlog(app, config)
    return app


__all__ = ['HackerBlog', 'create_app', '__version__']
