"""
HackerBlog Modules
==================

Flask blueprint modules registered by the HackerBlog extension.
"""

__all__ = ['posts', 'subscribers', 'media', 'health']
