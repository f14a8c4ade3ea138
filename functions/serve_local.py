#!/usr/bin/env python3
"""Local development server for RoofReport functions.

Mimics the Firebase Functions emulator URL layout so the web client can talk
to the Python handlers without the full emulator suite.

Usage:
    cd functions
    source venv/bin/activate
    python serve_local.py

Every handler in ``ENDPOINTS`` is served at
``POST /<project>/us-central1/<name>``; ``GET /health`` reports liveness.
"""

import os

# Set environment for local development
os.environ.setdefault('FUNCTIONS_EMULATOR', 'true')
os.environ.setdefault('USE_FIREBASE_EMULATORS', 'true')
os.environ.setdefault('GCLOUD_PROJECT', 'roofreport-dev')
os.environ.setdefault('FIRESTORE_EMULATOR_HOST', '127.0.0.1:8081')

import logging

import structlog
from flask import Flask, Response, request, jsonify
from flask_cors import CORS

from config.settings import settings

structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.log_level.upper())
    ),
)

# Import the main module after setting env vars
from main import (
    delete_report,
    delete_user_data,
    download_report,
    estimate_cost,
    generate_report,
    get_pricing,
    get_report,
    list_reports,
    set_user_role,
    view_report,
)

ENDPOINTS = {
    'estimate_cost': estimate_cost,
    'get_pricing': get_pricing,
    'generate_report': generate_report,
    'get_report': get_report,
    'download_report': download_report,
    'view_report': view_report,
    'list_reports': list_reports,
    'delete_report': delete_report,
    'delete_user_data': delete_user_data,
    'set_user_role': set_user_role,
}

PROJECT_ID = os.environ['GCLOUD_PROJECT']
REGION = 'us-central1'


class MockRequest:
    """Mock Firebase request object to wrap Flask request."""

    def __init__(self, flask_request):
        self._request = flask_request
        self._json_data = None
        self.method = flask_request.method
        self.headers = dict(flask_request.headers)
        self.args = flask_request.args

    def get_json(self, force=False, silent=False):
        if self._json_data is None:
            self._json_data = self._request.get_json(force=force, silent=silent) or {}
        return self._json_data


def wrap_firebase_function(firebase_fn):
    """Adapt a Firebase handler to a Flask view."""
    def view():
        response = firebase_fn(MockRequest(request))
        return Response(
            response.get_data(),
            status=response.status_code,
            headers=dict(response.headers),
        )
    view.__name__ = f'handle_{firebase_fn.__name__}'
    return view


def create_app() -> Flask:
    app = Flask(__name__)
    CORS(app)

    for name, handler in ENDPOINTS.items():
        app.add_url_rule(
            f'/{PROJECT_ID}/{REGION}/{name}',
            endpoint=name,
            view_func=wrap_firebase_function(handler),
            methods=['POST', 'OPTIONS'],
        )

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok', 'service': 'roofreport-functions', 'endpoints': sorted(ENDPOINTS)})

    return app


app = create_app()


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5002))
    print("=" * 64)
    print("  RoofReport Functions - Local Development Server")
    print("=" * 64)
    print(f"  Server running on: http://127.0.0.1:{port}")
    print("  Endpoints:")
    for name in ENDPOINTS:
        print(f"    POST /{PROJECT_ID}/{REGION}/{name}")
    print("    GET  /health")
    print("=" * 64)
    app.run(host='127.0.0.1', port=port, debug=True)
