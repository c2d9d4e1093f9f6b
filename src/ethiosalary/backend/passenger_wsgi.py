"""WSGI entrypoint for Passenger-style hosts serving the salary calculator API."""

from ethiosalary.backend.app import create_app

# Passenger looks up a module-level ``application`` callable.
application = create_app()
