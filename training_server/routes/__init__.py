# Routes package - contains Flask blueprints

from training_server.routes.auth import auth_bp
from training_server.routes.classes import api_classes_bp
from training_server.routes.courses import api_courses_bp
from training_server.routes.students import students_bp


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    app.register_blueprint(auth_bp)
    app.register_blueprint(students_bp)
    app.register_blueprint(api_classes_bp)
    app.register_blueprint(api_courses_bp)
