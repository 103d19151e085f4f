"""
Health Module
=============

Public /health endpoint for uptime monitors (no auth). Reports database and
upload folder availability, disk usage, image consistency and recent errors.
"""

from flask import Blueprint

health_bp = Blueprint(
    'health',
    __name__,
    url_prefix='/health'
)

from . import routes

__all__ = ['health_bp']
