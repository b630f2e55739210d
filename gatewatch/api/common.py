"""Request helpers shared by the API blueprints."""

from flask import current_app, request

from gatewatch.errors import ValidationError
from gatewatch.services import Services

USER_HEADER = 'X-User-ID'


def get_services() -> Services:
    return current_app.config['SERVICES']


def current_user_id() -> int:
    """Caller identity from the X-User-ID header."""
    raw = request.headers.get(USER_HEADER, '').strip()
    if not raw.isdigit():
        raise ValidationError(f'{USER_HEADER} header must be a user id')
    return int(raw)


def json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError('Request body must be a JSON object')
    return body
