#!/usr/bin/env python3
"""
Flask Application Factory

This module provides the create_app factory function for creating
configured Flask application instances.
"""

from flask import Flask, jsonify, request

from training_server import config as settings
from training_server.utils.logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)


def create_app(config=None, class_repository=None, course_repository=None,
               provisioning_client=None):
    """Create and configure the Flask application.

    Args:
        config: Optional configuration dictionary to override defaults
        class_repository: ClassRepository to use instead of the default one
        course_repository: CourseRepository to use instead of the default one
        provisioning_client: ProvisioningClient to use instead of one built
            from PROVISIONING_* settings

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)

    app.secret_key = settings.SECRET_KEY
    app.config.update(
        PROVISIONING_API_URL=settings.PROVISIONING_API_URL,
        PROVISIONING_TIMEOUT=settings.PROVISIONING_TIMEOUT,
        PROVISIONING_VERIFY_SSL=settings.PROVISIONING_VERIFY_SSL,
    )

    # Apply any additional config
    if config:
        app.config.update(config)

    # Initialize database (SQLAlchemy)
    from training_server.models import init_db
    init_db(app)
    logger.info("Database initialized")

    # Collaborators are built here once and handed to the request handlers
    from training_server.services.class_service import ClassRepository
    from training_server.services.course_service import CourseRepository
    from training_server.services.provisioning_client import ProvisioningClient
    from training_server.services.student_service import StudentService

    if class_repository is None:
        class_repository = ClassRepository()
    if course_repository is None:
        course_repository = CourseRepository()
    if provisioning_client is None:
        provisioning_client = ProvisioningClient(
            app.config['PROVISIONING_API_URL'],
            timeout=app.config['PROVISIONING_TIMEOUT'],
            verify_ssl=app.config['PROVISIONING_VERIFY_SSL'],
        )
        logger.info("Provisioning service: %s", provisioning_client.base_url)

    app.extensions['class_repository'] = class_repository
    app.extensions['course_repository'] = course_repository
    app.extensions['student_service'] = StudentService(
        class_repository, course_repository, provisioning_client)

    # Register blueprints
    from training_server.routes import register_blueprints
    register_blueprints(app)

    # Global error handler for REST routes to return JSON instead of HTML
    @app.errorhandler(Exception)
    def handle_api_error(error):
        """Return JSON for REST errors instead of HTML."""
        from werkzeug.exceptions import HTTPException

        if isinstance(error, HTTPException):
            if request.path.startswith('/rest/'):
                return jsonify({'ok': False, 'error': error.description}), error.code
            return error

        logger.error(f"Error on {request.method} {request.path}: {error}", exc_info=True)

        if request.path.startswith('/rest/'):
            return jsonify({
                'ok': False,
                'error': str(error),
                'type': type(error).__name__
            }), 500

        # For non-REST routes, use default Flask error handling
        raise error

    @app.route('/health')
    def health():
        """Liveness probe."""
        return jsonify({'ok': True})

    logger.info("Flask app created successfully")
    return app
