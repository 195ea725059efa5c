from app.routes import (
    invoices_bp,
    inventory_bp,
    customers_bp,
    reports_bp,
)


def register_api_v1(app):
    """Register blueprint routes under the API version prefix."""
    app.register_blueprint(invoices_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(reports_bp)
