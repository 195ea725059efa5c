from contextlib import contextmanager
import logging
from models import db
from app.exceptions import BillingError


@contextmanager
def transactional(message="DB transaction failed"):
    """Context manager to wrap a database transaction."""
    try:
        yield
        db.session.commit()
    except BillingError as e:
        logging.warning(f"{message}: %s", e.message)
        db.session.rollback()
        raise
    except Exception as e:
        logging.error(f"{message}: %s", e, exc_info=True)
        db.session.rollback()
        raise
