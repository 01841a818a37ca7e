from slowapi import Limiter
from slowapi.util import get_remote_address

from src.core import settings


# ============================================================================
# Rate Limiter Setup
# ============================================================================
# Redis backend in deployed environments, overridable for local runs and tests
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.limiter_storage_uri,
    default_limits=[settings.rate_limit_default],
    enabled=settings.rate_limit_enabled,
)
