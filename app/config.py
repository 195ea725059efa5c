import os
import tempfile

SETTLEMENT_MODES = ("best_effort", "fail_fast")
DISCOUNT_POLICIES = ("allow", "clamp", "reject")


def _flag(name, default="0"):
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    JSON_SORT_KEYS = False
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "*")
    RATELIMIT_STORAGE_URL = os.getenv("RATELIMIT_STORAGE_URL", "memory://")
    INVOICE_LIMIT_PER_IP = os.getenv("INVOICE_LIMIT_PER_IP", "60 per minute")
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-insecure-jwt-key")
    ACCESS_TOKEN_LIFETIME_MIN = int(os.getenv("ACCESS_TOKEN_LIFETIME_MIN", 60 * 12))

    # Settlement behaviour
    SETTLEMENT_MODE = os.getenv("SETTLEMENT_MODE", "best_effort").lower()
    DISCOUNT_POLICY = os.getenv("DISCOUNT_POLICY", "allow").lower()
    ALLOW_NEGATIVE_STOCK = _flag("ALLOW_NEGATIVE_STOCK")
    INVOICE_NUMBER_PREFIX = os.getenv("INVOICE_NUMBER_PREFIX", "INV")
    INVOICE_NUMBER_WIDTH = int(os.getenv("INVOICE_NUMBER_WIDTH", 5))
    DEFAULT_LOW_STOCK_LIMIT = int(os.getenv("DEFAULT_LOW_STOCK_LIMIT", 5))

    # Invoice documents and delivery
    NOTIFICATIONS_ENABLED = _flag("NOTIFICATIONS_ENABLED", "1")
    NOTIFICATIONS_ASYNC = _flag("NOTIFICATIONS_ASYNC", "1")
    INVOICE_DOCUMENT_DIR = os.getenv(
        "INVOICE_DOCUMENT_DIR", os.path.join(tempfile.gettempdir(), "invoices")
    )

    OTEL_SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "shop-billing-backend")
    OTEL_EXPORTER = os.getenv("OTEL_EXPORTER", "otlp")
    OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv(
        "OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318/v1/traces"
    )


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-insecure-key")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///dev.db")
    OTEL_EXPORTER = os.getenv("OTEL_EXPORTER", "console")


class TestingConfig(BaseConfig):
    TESTING = True
    SECRET_KEY = "test-key"
    JWT_SECRET = "test-jwt-key"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    RATELIMIT_ENABLED = False
    NOTIFICATIONS_ASYNC = False
    OTEL_EXPORTER = "none"


class ProductionConfig(BaseConfig):
    DEBUG = False
    TESTING = False
    SECRET_KEY = os.getenv("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")

    @staticmethod
    def validate():
        missing = []
        for name in ("SECRET_KEY", "DATABASE_URL", "JWT_SECRET"):
            if not os.getenv(name):
                missing.append(name)
        if missing:
            raise RuntimeError(
                f"Missing required env vars in production: {', '.join(missing)}"
            )


def validate_settings(config):
    """Reject unknown policy names before the app starts serving."""
    if config.get("SETTLEMENT_MODE") not in SETTLEMENT_MODES:
        raise RuntimeError(
            f"SETTLEMENT_MODE must be one of {', '.join(SETTLEMENT_MODES)}"
        )
    if config.get("DISCOUNT_POLICY") not in DISCOUNT_POLICIES:
        raise RuntimeError(
            f"DISCOUNT_POLICY must be one of {', '.join(DISCOUNT_POLICIES)}"
        )


def get_config_class():
    env = os.getenv("APP_ENV", "development").lower()
    if env == "production":
        ProductionConfig.validate()
        return ProductionConfig
    if env == "testing":
        return TestingConfig
    return DevelopmentConfig
