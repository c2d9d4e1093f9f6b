"""Blueprint registrations for application routes."""

from flask import Flask

from .calculations import blueprint as calculations_blueprint
from .config import blueprint as config_blueprint
from .conversions import blueprint as conversions_blueprint
from .email import blueprint as email_blueprint
from .localization import blueprint as translations_blueprint
from .payslips import blueprint as payslips_blueprint


def register_routes(app: Flask) -> None:
    """Register all Flask blueprints with the provided application."""

    app.register_blueprint(calculations_blueprint)
    app.register_blueprint(config_blueprint)
    app.register_blueprint(conversions_blueprint)
    app.register_blueprint(payslips_blueprint)
    app.register_blueprint(email_blueprint)
    app.register_blueprint(translations_blueprint)
