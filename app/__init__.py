import os
import uuid

from dotenv import load_dotenv
from flask import Flask, request, g
from flask_cors import CORS
from flask_migrate import Migrate
from flasgger import Swagger
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator
from prometheus_client import CollectorRegistry
from prometheus_flask_exporter import PrometheusMetrics
from sqlalchemy import text

import extensions
from app import metrics as app_metrics
from app.api import register_api_v1
from app.cli import register_cli
from app.config import get_config_class, validate_settings
from app.errors import errors_bp
from app.logging import configure_logging
from app.telemetry import init_tracing
from app.version import API_PREFIX
from models import db

SWAGGER_TAGS = [
    {"name": "Invoices", "description": "Billing and settlement"},
    {"name": "Inventory", "description": "Items and stock alerts"},
    {"name": "Customers", "description": "Customers and dues"},
    {"name": "Reports", "description": "Sales and stock summaries"},
]


def _cors_origins(app):
    allowed = app.config.get("CORS_ALLOWED_ORIGINS", "*")
    if not isinstance(allowed, str):
        return allowed or "*"
    allowed = allowed.strip()
    if allowed == "*":
        return "*"
    return [o.strip() for o in allowed.split(",") if o.strip()]


def _init_docs(app):
    Swagger(
        app,
        config={
            "headers": [],
            "specs": [
                {
                    "endpoint": "apispec",
                    "route": "/apispec.json",
                    "rule_filter": lambda rule: rule.rule.startswith(f"{API_PREFIX}/"),
                    "model_filter": lambda tag: True,
                }
            ],
            "swagger_ui": True,
            "specs_route": "/docs/",
        },
        template={"tags": SWAGGER_TAGS},
    )


def _init_prometheus(app):
    # Each test app gets its own registry so collectors are not registered twice
    registry = CollectorRegistry(auto_describe=True) if app.config.get("TESTING") else None
    exporter = PrometheusMetrics(app, path="/metrics", registry=registry)
    if not app.config.get("TESTING") and not os.environ.get("METRICS_APP_INFO_SET"):
        exporter.info("billing_app_info", "Billing backend info", version="1.0.0")
        os.environ["METRICS_APP_INFO_SET"] = "1"


def _register_request_hooks(app):
    propagator = TraceContextTextMapPropagator()

    @app.before_request
    def _set_request_id():
        rid = (request.headers.get("X-Request-ID") or uuid.uuid4().hex)[:100]
        g.request_id = rid
        app.logger.debug(f"request start {request.method} {request.path}")

    @app.after_request
    def _decorate_response(resp):
        rid = getattr(g, "request_id", None)
        if rid:
            resp.headers["X-Request-ID"] = rid
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")

        carrier = {}
        propagator.inject(carrier)
        if carrier.get("traceparent"):
            resp.headers["traceparent"] = carrier["traceparent"]
        return resp


def create_app(config_object=None):
    """Build the billing API: config, extensions, blueprints and hooks."""
    load_dotenv()
    app = Flask(__name__)
    app.config.from_object(config_object if config_object is not None else get_config_class())
    validate_settings(app.config)

    configure_logging(app)
    register_cli(app)

    # Binds shared tasks to the configured broker
    import celery_app  # noqa: F401

    extensions.limiter.init_app(app)
    app.limiter = extensions.limiter
    Migrate(app, db, compare_type=True, render_as_batch=True)
    _init_docs(app)
    _init_prometheus(app)
    CORS(
        app,
        origins=_cors_origins(app),
        supports_credentials=True,
        expose_headers=["X-Request-ID", "traceparent"],
    )

    app.register_blueprint(errors_bp)
    if app.config.get("TESTING"):
        from app.test_support import test_support_bp
        app.register_blueprint(test_support_bp)
    register_api_v1(app)
    _register_request_hooks(app)

    db.init_app(app)
    init_tracing(app)
    app_metrics.init_app(app)
    if app.config.get("DEBUG") or app.config.get("TESTING"):
        with app.app_context():
            db.create_all()
            app.logger.info("Tables created")

    @app.route("/health")
    def health():
        try:
            db.session.execute(text("SELECT 1"))
        except Exception:
            app.logger.exception("Health check database query failed")
            return {"status": "degraded", "database": "unreachable"}, 503
        return {"status": "ok", "database": "ok"}, 200

    return app
