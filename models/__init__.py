from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import BigInteger, Integer

# Use BigInteger in production but fall back to Integer for SQLite
BIGINT = BigInteger().with_variant(Integer, "sqlite")

db = SQLAlchemy()

# Re-export common models for convenience
from .item import Item  # noqa: F401,E402
from .customer import Customer  # noqa: F401,E402
from .invoice import Invoice, InvoiceLine, InvoiceCounter  # noqa: F401,E402
from .transaction import Transaction  # noqa: F401,E402
