"""
Notification and user API endpoints.

Provides endpoints for:
- GET /api/notifications - The caller's notification history, newest first
- PUT /api/notifications/preferences - Toggle notification categories
- POST /api/users - Register a user (email and optional push token)
- PUT /api/users/push-token - Replace the caller's push token
"""

import logging

from flask import Blueprint, jsonify, request

from gatewatch.api.common import current_user_id, get_services, json_body

logger = logging.getLogger(__name__)

notifications_bp = Blueprint('notifications', __name__, url_prefix='/api/notifications')

users_bp = Blueprint('users', __name__, url_prefix='/api/users')


@notifications_bp.route('', methods=['GET'])
def list_notifications():
    """
    Query parameters:
    - limit: int, max results to return (default 50, max 200)
    """
    user_id = current_user_id()
    limit = min(request.args.get('limit', 50, type=int), 200)

    notifications = get_services().tracker.notifications_for(user_id, limit=limit)
    return jsonify({
        'notifications': [n.to_dict() for n in notifications],
        'count': len(notifications),
    })


@notifications_bp.route('/preferences', methods=['PUT'])
def update_preferences():
    user = get_services().tracker.update_preferences(current_user_id(), json_body())
    return jsonify({'preferences': user.preferences})


@users_bp.route('', methods=['POST'])
def register_user():
    body = json_body()
    user = get_services().tracker.register_user(body.get('email'), body.get('push_token'))
    return jsonify(user.to_dict()), 201


@users_bp.route('/push-token', methods=['PUT'])
def update_push_token():
    user_id = current_user_id()
    get_services().tracker.update_push_token(user_id, json_body().get('push_token'))
    return jsonify({'message': 'Push token updated'})
