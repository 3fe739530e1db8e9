"""Request latency logging middleware."""

import logging
import time
from typing import Callable

from fastapi import Request, Response

logger = logging.getLogger(__name__)

# Thresholds for log levels (in milliseconds)
SLOW_REQUEST_THRESHOLD_MS = 1000  # Log as warning above 1s
VERY_SLOW_REQUEST_THRESHOLD_MS = 3000  # Log as error above 3s

QUIET_PATHS = ("/health", "/health/ready")


def choose_log_level(status_code: int, latency_ms: float, error_occurred: bool = False) -> int:
    """Pick the log level for a finished request."""
    if error_occurred or status_code >= 500:
        return logging.ERROR
    if latency_ms > VERY_SLOW_REQUEST_THRESHOLD_MS:
        return logging.ERROR
    if latency_ms > SLOW_REQUEST_THRESHOLD_MS or status_code >= 400:
        return logging.WARNING
    return logging.INFO


async def latency_logging_middleware(request: Request, call_next: Callable) -> Response:
    """Middleware to log request latency.

    Logs method, path, status and timing for every request, with
    elevated log levels for slow or failing requests. Health probes
    are only logged at debug level.

    Args:
        request: The incoming request.
        call_next: The next middleware/handler in the chain.

    Returns:
        Response: The response from the handler.
    """
    start_time = time.perf_counter()
    method = request.method
    path = request.url.path

    response = None
    error_occurred = False

    try:
        response = await call_next(request)
        return response
    except Exception:
        error_occurred = True
        raise
    finally:
        latency_ms = (time.perf_counter() - start_time) * 1000
        status_code = response.status_code if response else 500

        if path in QUIET_PATHS:
            logger.debug("%s %s - %d - %.2fms", method, path, status_code, latency_ms)
        else:
            level = choose_log_level(status_code, latency_ms, error_occurred)
            prefix = "SLOW REQUEST: " if latency_ms > SLOW_REQUEST_THRESHOLD_MS else ""
            logger.log(
                level,
                "%s%s %s - %d - %.2fms",
                prefix,
                method,
                path,
                status_code,
                latency_ms,
                extra={"latency_ms": round(latency_ms, 2), "status_code": status_code},
            )
