"""
Subscribers Routes
==================
"""

from flask import request, jsonify, current_app
from . import subscribers_bp
from ...core.errors import DuplicateEmailError, ValidationError


def _extension():
    return current_app.extensions['hackerblog']


@subscribers_bp.route('/subscribe', methods=['POST'])
def subscribe():
    """Handle new subscription requests (JSON or form body)"""
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = request.form
        _extension().subscribers.subscribe(data.get('email'))
        return jsonify({'message': 'Subscribed successfully'}), 201
    except (ValidationError, DuplicateEmailError) as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        _extension().logger.log_error_with_traceback('subscribers', e)
        return jsonify({'error': 'Failed to subscribe'}), 500


@subscribers_bp.route('/subscribers', methods=['GET'])
def list_subscribers():
    try:
        return jsonify(_extension().subscribers.list())
    except Exception as e:
        _extension().logger.log_error_with_traceback('subscribers', e)
        return jsonify({'error': 'Failed to fetch subscribers'}), 500


@subscribers_bp.route('/subscribers/stats', methods=['GET'])
def subscriber_stats():
    """Get subscriber count"""
    try:
        return jsonify({'count': _extension().subscribers.count()})
    except Exception as e:
        _extension().logger.log_error_with_traceback('subscribers', e)
        return jsonify({'error': 'Failed to fetch subscriber stats'}), 500
