from flask import Flask
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from datetime import timedelta
from typing import Optional, Dict, Any
import logging
import os

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)

    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(minutes=int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES_MINUTES', '720')))
    app.config['DATABASE_URL'] = os.getenv('DATABASE_URL', 'sqlite:///dev.db')
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')
    app.config['CURRENCY_CODE'] = os.getenv('CURRENCY_CODE', 'INR')

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    app.logger.setLevel(app.config['LOG_LEVEL'])
    logging.getLogger('studio').setLevel(app.config['LOG_LEVEL'])

    # Database
    db_url = app.config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all sessions
        db_engine = create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        db_engine = create_engine(db_url, echo=False, future=True)
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    jwt.init_app(app)

    from .services.identity import LocalIdentityProvider
    app.extensions['identity_provider'] = app.config.get('IDENTITY_PROVIDER') or LocalIdentityProvider()

    from .routes.auth import auth_bp
    from .routes.admin import admin_bp
    from .routes.services import services_bp
    from .routes.vendors import vendors_bp
    from .routes.staff import staff_bp
    from .routes.jobs import jobs_bp
    from .routes.dashboard import dashboard_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(services_bp, url_prefix='/services')
    app.register_blueprint(vendors_bp, url_prefix='/vendors')
    app.register_blueprint(staff_bp, url_prefix='/staff')
    app.register_blueprint(jobs_bp, url_prefix='/jobs')
    app.register_blueprint(dashboard_bp, url_prefix='/dashboard')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        # drop any half-applied write before the session is reused
        get_db().rollback()
        if isinstance(e, HTTPException):
            if e.code and e.code >= 500:
                app.logger.error('%s: %s', e.name, e.description)
            payload = {
                'error': {
                    'status': e.code,
                    'title': e.name,
                    'detail': e.description,
                }
            }
            return payload, e.code
        # Unhandled exception
        app.logger.exception('Unhandled exception')
        return {
            'error': {
                'status': 500,
                'title': 'Internal Server Error',
                'detail': 'Unexpected error'
            }
        }, 500

    _register_jwt_errors()

    from .openapi import build_openapi_spec

    @app.route('/openapi.json')
    def openapi_spec():
        return build_openapi_spec()

    @app.route('/docs')
    def docs_index():
        # Lightweight HTML referencing Redoc CDN (no local install) for quick browsing
        return (
            "<!DOCTYPE html><html><head><title>API Docs</title>"
            "<link rel=\"stylesheet\" href=\"https://cdn.jsdelivr.net/npm/redoc@next/bundles/redoc.standalone.css\" />"
            "</head><body><redoc spec-url='/openapi.json'></redoc>"
            "<script src='https://cdn.jsdelivr.net/npm/redoc@next/bundles/redoc.standalone.js'></script>"
            "</body></html>"
        )

    return app


def _error_body(status: int, title: str, detail: str):
    return {'error': {'status': status, 'title': title, 'detail': detail}}, status


def _register_jwt_errors():
    # Token problems share the error shape used by the rest of the API
    @jwt.unauthorized_loader
    def _missing_token(reason):  # type: ignore
        return _error_body(401, 'Unauthorized', reason)

    @jwt.invalid_token_loader
    def _invalid_token(reason):  # type: ignore
        return _error_body(401, 'Unauthorized', reason)

    @jwt.expired_token_loader
    def _expired_token(header, payload):  # type: ignore
        return _error_body(401, 'Unauthorized', 'Token has expired')


def get_db():
    return SessionLocal()
