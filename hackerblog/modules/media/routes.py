from flask import current_app, jsonify, send_file, send_from_directory
from . import media_bp
from ...core.config import Config
from ...core.errors import NotFoundError


@media_bp.route(f'{Config.UPLOADS_URL_PREFIX}/<path:filename>')
def uploaded_image(filename):
    """Serve a stored image"""
    images = current_app.extensions['hackerblog'].images
    try:
        filepath = images.resolve(f"{images.url_prefix}/{filename}")
    except NotFoundError:
        return jsonify({'error': 'Image not found'}), 404
    return send_file(filepath)


@media_bp.route('/')
def index():
    """Front page, served from INDEX_FOLDER when an index.html is there"""
    return send_from_directory(current_app.config['INDEX_FOLDER'], 'index.html')
