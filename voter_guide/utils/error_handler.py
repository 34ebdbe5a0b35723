"""
Retry, degradation and error-logging helpers.

Remote fetches of bundled ward files, the candidate document and the address
dataset are retried on transport failures only. Optional sources are wrapped
so that a failure logs and yields an empty value instead of aborting a load.
"""

import time
import logging
import functools
from dataclasses import dataclass
from typing import Callable, Any, Optional, Dict, Tuple, Type

import requests

from ..exceptions import get_error_severity, is_recoverable_error


TRANSIENT_ERRORS: Tuple[Type[Exception], ...] = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    ConnectionError,
    TimeoutError,
)

_SEVERITY_LEVELS = {
    'critical': logging.CRITICAL,
    'high': logging.ERROR,
    'medium': logging.WARNING,
    'low': logging.INFO,
}


@dataclass
class RetryConfig:
    """
    Retry policy for remote reads.

    Attempts are counted including the first call. The wait after failed
    attempt n is base_delay * backoff_factor ** (n - 1), capped at max_delay.
    HTTP status errors are not transient and are never retried.
    """
    max_attempts: int = 3
    base_delay: float = 0.25
    max_delay: float = 5.0
    backoff_factor: float = 2.0
    retry_exceptions: Tuple[Type[Exception], ...] = TRANSIENT_ERRORS

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay * (self.backoff_factor ** (attempt - 1)), self.max_delay)

    def should_retry(self, error: Exception, attempt: int) -> bool:
        return attempt < self.max_attempts and isinstance(error, tuple(self.retry_exceptions))


def with_retry(retry_config: Optional[RetryConfig] = None,
               logger: Optional[logging.Logger] = None):
    """
    Retry the decorated call on transient transport errors.

    The last error is re-raised unchanged once attempts run out, so callers
    still see the original exception type.
    """
    policy = retry_config or RetryConfig()
    log = logger or logging.getLogger(__name__)

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            attempt = 1
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if not policy.should_retry(e, attempt):
                        raise
                    delay = policy.delay_for(attempt)
                    log.warning(
                        f"{func.__name__} attempt {attempt}/{policy.max_attempts} failed: {e}; "
                        f"retrying in {delay:.2f}s"
                    )
                    time.sleep(delay)
                    attempt += 1

        return wrapper
    return decorator


def degrade_on_error(default_factory: Callable[[], Any],
                     logger: Optional[logging.Logger] = None,
                     operation: Optional[str] = None):
    """
    Wrap an optional data source so that it never fails its caller.

    Args:
        default_factory: Builds the value returned when the source fails
        logger: Logger for the failure (defaults to the function's module logger)
        operation: Name recorded in the error context (defaults to the function name)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                log_error_details(
                    logger or logging.getLogger(func.__module__),
                    e,
                    create_error_context(operation or func.__name__, degraded=True)
                )
                return default_factory()

        return wrapper
    return decorator


def create_error_context(operation: str, **kwargs) -> Dict[str, Any]:
    """Build the context dict attached to logged errors."""
    return {'operation': operation, 'timestamp': time.time(), **kwargs}


def log_error_details(logger: logging.Logger, error: Exception,
                      context: Optional[Dict[str, Any]] = None):
    """Log an error with its classification, at a level matching its severity."""
    severity = get_error_severity(error)
    details: Dict[str, Any] = {
        'error_type': type(error).__name__,
        'error_message': str(error),
        'severity': severity,
        'recoverable': is_recoverable_error(error),
    }
    if hasattr(error, 'to_dict'):
        details.update(error.to_dict())
    if context:
        details['context'] = context

    logger.log(_SEVERITY_LEVELS.get(severity, logging.WARNING), f"{severity} error: {details}")
