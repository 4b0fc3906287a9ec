from flask import Flask
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import os

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()

# config key -> (environment variable default, cast)
_ENV_CONFIG = {
    'JWT_SECRET_KEY': ('dev-secret', str),
    'DATABASE_URL': ('sqlite:///dev.db', str),
    'VENDOR_DEFAULT_PRODUCT_LIMIT': ('5', int),
    'VENDOR_DEFAULT_EDIT_LIMIT': ('5', int),
    'VENDOR_DEFAULT_DELETE_LIMIT': ('5', int),
    'MIN_PASSWORD_LENGTH': ('6', int),
    'LIST_DEFAULT_LIMIT': ('50', int),
    'LIST_MAX_LIMIT': ('200', int),
}


def _make_engine(db_url: str):
    if db_url.endswith(':memory:'):
        # one shared connection, otherwise every session sees its own empty database
        return create_engine(db_url, future=True, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_engine(db_url, future=True)


def _error_body(status: int, title: str, detail: str, **extra):
    return {'error': {'status': status, 'title': title, 'detail': detail, **extra}}, status


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)
    for key, (default, cast) in _ENV_CONFIG.items():
        app.config[key] = cast(os.getenv(key, default))
    if config:
        app.config.update(config)

    db_engine = _make_engine(app.config['DATABASE_URL'])
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    jwt.init_app(app)

    from .services.identity import is_token_revoked

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return is_token_revoked(jwt_payload['jti'])

    from .routes.auth import auth_bp  # vendor identity
    from .routes.vendor import vendor_bp  # vendor dashboard
    from .routes.admin import admin_bp  # administrative surface
    from .routes.store import store_bp  # public storefront
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(vendor_bp, url_prefix='/vendor')
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(store_bp, url_prefix='/store')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    from .errors import PortalError

    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        # discard writes left pending by the failed request
        SessionLocal().rollback()
        if isinstance(e, PortalError):
            return _error_body(e.status, e.title, e.detail, code=e.code, **e.extra())
        if isinstance(e, HTTPException):
            return _error_body(e.code, e.name, e.description)
        app.logger.exception('Unhandled exception')
        return _error_body(500, 'Internal Server Error', 'Unexpected error')

    return app


def get_db():
    return SessionLocal()
