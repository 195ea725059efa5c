from .invoices import invoices_bp
from .inventory import inventory_bp
from .customers import customers_bp
from .reports import reports_bp


__all__ = [
    'invoices_bp',
    'inventory_bp',
    'customers_bp',
    'reports_bp',
]
