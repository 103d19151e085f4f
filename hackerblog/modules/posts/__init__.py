"""
Posts Module
============

JSON API for blog posts with an optional image per post.

Provides:
- GET    /api/posts        -- list posts, latest post_date first
- GET    /api/posts/<id>   -- single post
- POST   /api/posts        -- create (multipart, optional "image" file)
- PUT    /api/posts/<id>   -- update; new "image" replaces, keep_image=false removes
- DELETE /api/posts/<id>   -- delete post and its image
"""

from flask import Blueprint

posts_bp = Blueprint(
    'posts',
    __name__,
    url_prefix='/api/posts'
)

from . import routes

__all__ = ['posts_bp']
