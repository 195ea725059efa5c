import os
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Shared by every blueprint; invoice creation adds its own per-IP limit
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=os.getenv("RATELIMIT_STORAGE_URL", "memory://"),
    strategy=os.getenv("RATELIMIT_STRATEGY", "fixed-window"),
    default_limits=[os.getenv("RATELIMIT_DEFAULT", "1000 per hour")],
    headers_enabled=True,
)
