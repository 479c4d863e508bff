"""Per-client rate limit on waitlist signups.

Only the join endpoint is limited. There is no app-wide default limit, so
the app installs no SlowAPIMiddleware; limits apply through ``signup_limit``.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from waitlist.settings import settings

# Signups are keyed by client address and enforced in production only
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.rate_limit_storage_uri,
    enabled=settings.env == "production",
)

signup_limit = limiter.limit(settings.signup_rate_limit)
