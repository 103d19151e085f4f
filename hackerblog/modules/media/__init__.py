"""
Media Module
============

Read-only serving of stored post images and the site's index page.
"""

from flask import Blueprint

media_bp = Blueprint('media', __name__)

from . import routes

__all__ = ['media_bp']
