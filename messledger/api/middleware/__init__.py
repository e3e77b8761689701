"""Request logging and ledger error mapping."""

from messledger.api.middleware.error_handler import ErrorHandlerMiddleware
from messledger.api.middleware.logging import LoggingMiddleware

__all__ = ["ErrorHandlerMiddleware", "LoggingMiddleware"]
