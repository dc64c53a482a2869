import os
import logging
import uuid
from logging.handlers import RotatingFileHandler

from dotenv import load_dotenv
from flask import Flask, g, jsonify, request
from flask_compress import Compress
from flask_cors import CORS
from sqlalchemy import inspect
from werkzeug.middleware.proxy_fix import ProxyFix

from nextdoor.security_utils import log_structured
from nextdoor.utils.logging_utils import clear_log_context, get_logger, init_logger, update_log_context

from .commands.seed_commands import seed_command
from .commands.setup_commands import setup_command

load_dotenv()

from .config import config, Config
from .errors import register_error_handlers
from .extensions import jwt, db, migrate, ma
from .security import init_jwt_callbacks
from .models import *
from nextdoor.routes import register_blueprints

# Tables every API request depends on
CORE_TABLES = frozenset({"users", "postal_sectors", "communities"})

SECURITY_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'Referrer-Policy': 'no-referrer',
    'Permissions-Policy': 'geolocation=()',
    'Content-Security-Policy': "default-src 'none'; frame-ancestors 'none'",
}


def configure_logging(app):
    """App log to a size-rotated ``LOG_FILE``, then the per-category loggers."""
    level_name = app.config.get('LOG_LEVEL', 'INFO')
    level = getattr(logging, level_name, logging.INFO)

    if not app.logger.handlers:
        log_file = app.config.get('LOG_FILE', '/tmp/nextdoor_app.log')
        if os.path.dirname(log_file):
            os.makedirs(os.path.dirname(log_file), exist_ok=True)
        handler = RotatingFileHandler(
            log_file,
            maxBytes=app.config.get('LOG_MAX_BYTES', 10 * 1024 * 1024),
            backupCount=app.config.get('LOG_BACKUP_COUNT', 5),
        )
        handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s in %(module)s: %(message)s"))
        handler.setLevel(level)
        app.logger.addHandler(handler)
    app.logger.setLevel(level)

    # APP_LOG_LEVEL_<CATEGORY> env overrides are applied inside init_logger
    manager = init_logger(app)
    app.logger.info("Logging ready level=%s categories_dir=%s", level_name, manager.base_dir)


def _register_request_hooks(app):
    @app.before_request
    def _start_request():
        g.request_id = request.headers.get('X-Request-ID') or uuid.uuid4().hex
        update_log_context(request_id=g.request_id)
        log_structured("request", method=request.method, path=request.path,
                       ip=request.remote_addr, args=dict(request.args))

    @app.after_request
    def _finish_request(resp):
        log_structured("response", method=request.method, path=request.path, status=resp.status_code)
        for header, value in SECURITY_HEADERS.items():
            resp.headers.setdefault(header, value)
        if getattr(g, 'request_id', None):
            resp.headers.setdefault('X-Request-ID', g.request_id)
        return resp

    @app.teardown_request
    def _clear_request_context(exc):
        clear_log_context()


def _register_schema_guard(app):
    """503 on API routes until ``flask setup`` has created the core tables."""

    @app.before_request
    def _schema_guard():
        if request.method == 'OPTIONS' or app.config.get('DB_SCHEMA_READY'):
            return None
        if not request.path.startswith(('/api/', '/auth')):
            return None
        missing = sorted(CORE_TABLES - set(inspect(db.engine).get_table_names()))
        if not missing:
            app.config['DB_SCHEMA_READY'] = True
            return None
        get_logger("error").error("Schema not ready; missing tables %s", missing)
        return jsonify({
            'error': 'database_uninitialized',
            'message': 'Core tables missing. Run: flask setup',
            'missing': missing,
        }), 503


def _auto_migrate(app):
    from flask_migrate import upgrade as alembic_upgrade

    migrations_dir = os.path.join(app.root_path, '..', 'migrations')
    if not os.path.isdir(migrations_dir):
        app.logger.info('AUTO_MIGRATE_ON_STARTUP set but no migrations directory; skipping.')
        return
    with app.app_context():
        app.logger.info('Upgrading database schema to head')
        alembic_upgrade(directory=migrations_dir)


def create_app(config_name=None):
    config_name = config_name or os.getenv('FLASK_ENV', 'default')
    config_class = config.get(config_name, Config)

    app = Flask(__name__)
    app.config.from_object(config_class)
    config_class.init_app(app)

    configure_logging(app)
    get_logger("app").info("Starting %s with %s", app.config.get('APP_NAME'), config_class.__name__)

    num_proxies = app.config.get('PROXY_FIX_NUM', 0)
    if num_proxies > 0 and not app.config.get('TESTING'):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=num_proxies, x_proto=num_proxies,
                                x_host=num_proxies, x_port=num_proxies, x_prefix=num_proxies)

    db.init_app(app)
    migrate.init_app(app, db)
    ma.init_app(app)
    jwt.init_app(app)
    init_jwt_callbacks(jwt)

    app.cli.add_command(setup_command)
    app.cli.add_command(seed_command)

    _register_request_hooks(app)
    _register_schema_guard(app)
    register_error_handlers(app)

    Compress(app)
    CORS(app, origins=app.config.get('CORS_ORIGINS', '*'), supports_credentials=True)

    if app.config.get('AUTO_MIGRATE_ON_STARTUP'):
        _auto_migrate(app)

    register_blueprints(app)

    @app.route('/health')
    def health():
        return jsonify({
            "status": "ok",
            "app": app.config.get('APP_NAME'),
            "version": app.config.get('APP_VERSION'),
        }), 200

    app.logger.info("App ready: %s", ", ".join(sorted(app.blueprints)))
    return app
