"""Middleware package."""
from revcore.middleware.errors import setup_error_handlers
from revcore.middleware.rate_limit import limiter, setup_rate_limiting

__all__ = ["limiter", "setup_error_handlers", "setup_rate_limiting"]
