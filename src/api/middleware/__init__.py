"""HTTP middleware."""

from src.api.middleware.logging_middleware import CORRELATION_HEADER, LoggingMiddleware

__all__: list[str] = ["CORRELATION_HEADER", "LoggingMiddleware"]
