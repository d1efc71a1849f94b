"""Rate limiting for the revenue API, backed by slowapi."""
from typing import Optional

from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from revcore.config import Settings, settings


def build_limiter(app_settings: Optional[Settings] = None) -> Limiter:
    """
    Per-client-IP limiter.

    Limits live in process memory unless RATE_LIMIT_STORAGE_URI points at a
    shared backend, which a multi-worker deployment needs.
    """
    app_settings = app_settings or settings
    return Limiter(
        key_func=get_remote_address,
        default_limits=[app_settings.RATE_LIMIT_DEFAULT],
        storage_uri=app_settings.RATE_LIMIT_STORAGE_URI,
    )


limiter = build_limiter()


def setup_rate_limiting(app, app_limiter: Optional[Limiter] = None):
    """Attach a limiter to the app and reject over-limit requests with 429."""
    app.state.limiter = app_limiter or limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
