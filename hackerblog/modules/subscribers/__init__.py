"""
Subscribers Module
==================

Provides:
- POST /api/subscribe          -- subscribe an email address
- GET  /api/subscribers        -- subscriber list, newest first
- GET  /api/subscribers/stats  -- subscriber count
"""

from flask import Blueprint

subscribers_bp = Blueprint(
    'subscribers',
    __name__,
    url_prefix='/api'
)

from . import routes

__all__ = ['subscribers_bp']
