from .responses import ok, error, validation_error_response
from .auth import auth_required, current_owner_id
from .validation import validate_schema
from .db import transactional
from .jwt import (
    create_access_token,
    decode_token,
    TokenError,
)
from .phone import normalize_phone

__all__ = [
    'ok',
    'error',
    'validation_error_response',
    'auth_required',
    'current_owner_id',
    'create_access_token',
    'decode_token',
    'TokenError',
    'validate_schema',
    'transactional',
    'normalize_phone',
]
