from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.flask import FlaskInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.propagate import set_global_textmap
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from models import db


def _exporter(app):
    kind = (app.config.get("OTEL_EXPORTER") or "none").lower()
    if kind == "otlp":
        return OTLPSpanExporter(endpoint=app.config["OTEL_EXPORTER_OTLP_ENDPOINT"])
    if kind == "console":
        return ConsoleSpanExporter()
    return None


def init_tracing(app):
    """Initialize OpenTelemetry tracing for the Flask app."""
    service_name = app.config.get("OTEL_SERVICE_NAME", "shop-billing-backend")

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    exporter = _exporter(app)
    if exporter is not None:
        provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    set_global_textmap(TraceContextTextMapPropagator())

    FlaskInstrumentor().instrument_app(app)
    with app.app_context():
        SQLAlchemyInstrumentor().instrument(engine=db.engine)


def get_tracer(name):
    return trace.get_tracer(name)
