"""
Posts Routes
============

Translate HTTP requests into PostRepository calls.
"""

from flask import request, jsonify, current_app
from . import posts_bp
from .repository import POST_FIELDS, Replace, RemoveExisting, Unchanged
from ...core.errors import NotFoundError, ValidationError
from ...core.storage import upload_from_request_file


def _extension():
    return current_app.extensions['hackerblog']


def _form_fields():
    """Post fields present in the multipart form"""
    return {name: request.form[name] for name in POST_FIELDS if name in request.form}


def _image_upload():
    """The uploaded image, or None when the form carries no file"""
    file = request.files.get('image')
    if file is None or not file.filename:
        return None
    return upload_from_request_file(file)


def _image_directive():
    upload = _image_upload()
    if upload is not None:
        return Replace(upload)
    if request.form.get('keep_image') == 'false':
        return RemoveExisting()
    return Unchanged()


def _server_error(error, message):
    _extension().logger.log_error_with_traceback('posts', error, {
        'method': request.method,
        'path': request.path,
    })
    return jsonify({'error': message}), 500


@posts_bp.route('', methods=['GET'])
def list_posts():
    """Get all posts"""
    try:
        return jsonify(_extension().posts.list())
    except Exception as e:
        return _server_error(e, 'Failed to fetch posts')


@posts_bp.route('/<int:post_id>', methods=['GET'])
def get_post(post_id):
    """Get single post"""
    try:
        return jsonify(_extension().posts.get(post_id))
    except NotFoundError:
        return jsonify({'error': 'Post not found'}), 404
    except Exception as e:
        return _server_error(e, 'Failed to fetch post')


@posts_bp.route('', methods=['POST'])
def create_post():
    """Create new post"""
    # Parsed outside the try so oversized bodies reach the 413 handler
    fields, upload = _form_fields(), _image_upload()
    try:
        post = _extension().posts.create(fields, upload)
        return jsonify(post), 201
    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        return _server_error(e, 'Failed to create post')


@posts_bp.route('/<int:post_id>', methods=['PUT'])
def update_post(post_id):
    """Update post; fields left out of the form keep their stored values"""
    fields, directive = _form_fields(), _image_directive()
    try:
        post = _extension().posts.update(post_id, fields, directive)
        return jsonify(post)
    except NotFoundError:
        return jsonify({'error': 'Post not found'}), 404
    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        return _server_error(e, 'Failed to update post')


@posts_bp.route('/<int:post_id>', methods=['DELETE'])
def delete_post(post_id):
    """Delete post"""
    try:
        _extension().posts.delete(post_id)
        return jsonify({'message': 'Post deleted successfully'})
    except NotFoundError:
        return jsonify({'error': 'Post not found'}), 404
    except Exception as e:
        return _server_error(e, 'Failed to delete post')
