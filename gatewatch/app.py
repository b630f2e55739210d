"""
GateWatch Flask Application.

Main entry point for the web application. Initializes:
- Database schema and airport reference data
- Status resolver, notification dispatcher and proximity engine
- Polling and boarding-reminder schedulers
- API routes

Usage:
    python -m gatewatch.app

Or with gunicorn:
    gunicorn 'gatewatch.app:create_app()'
"""

import atexit
import logging
import os
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from gatewatch.airports import seed_airports
from gatewatch.api import airports_bp, flights_bp, location_bp, notifications_bp, users_bp
from gatewatch.config import config
from gatewatch.errors import GateWatchError
from gatewatch.models import init_db
from gatewatch.services import Services, build_services

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def create_app(services: Optional[Services] = None, start_schedulers: bool = True) -> Flask:
    """
    Application factory for Flask.

    Args:
        services: Pre-built component graph. When omitted, the configured
                  database is initialized and seeded and services are built
                  from the environment.
        start_schedulers: Whether to start the background polling and
                          reminder loops. Set to False for testing.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = config.secret_key

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    if services is None:
        logger.info('Initializing database...')
        init_db()
        services = build_services()
        seed_airports(services.airports)

    app.config['SERVICES'] = services

    # Register API blueprints
    app.register_blueprint(flights_bp)
    app.register_blueprint(location_bp)
    app.register_blueprint(airports_bp)
    app.register_blueprint(notifications_bp)
    app.register_blueprint(users_bp)

    if start_schedulers and services.config.scheduler.enabled:
        services.start_schedulers()
        atexit.register(services.stop_schedulers)
        logger.info(
            f'Schedulers started (poll every {services.polling.interval_seconds}s, '
            f'reminders every {services.reminders.interval_seconds}s)'
        )

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    @app.route('/api/status')
    def system_status():
        """Provider, cache, notification and scheduler counters."""
        return jsonify(app.config['SERVICES'].stats)

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(GateWatchError)
    def gatewatch_error(e: GateWatchError):
        if e.status_code >= 500:
            logger.error(f'{type(e).__name__}: {e}')
        return {'error': str(e)}, e.status_code

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Not found'}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {'error': 'Method not allowed'}, 405

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    port = int(os.environ.get('PORT', 5000))

    logger.info(f'Starting GateWatch on http://localhost:{port}')

    app.run(
        host='0.0.0.0',
        port=port,
        debug=config.debug,
        use_reloader=False,  # Reloader would start a second pair of scheduler threads
    )


if __name__ == '__main__':
    run_development_server()
