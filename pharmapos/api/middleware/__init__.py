"""API middleware."""

from pharmapos.api.middleware.error_handler import ErrorHandlerMiddleware
from pharmapos.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
