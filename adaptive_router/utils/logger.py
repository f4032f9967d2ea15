"""
Structured logging configuration.

Following Sandi Metz principles:
- Single Responsibility: Logging setup and configuration
- Small functions: Each setup step isolated
- Clear naming: Descriptive function names
"""

import logging
import sys
from typing import Any

import structlog


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structured logger
    """
    return structlog.get_logger(name)


def log_cache_hit(key: str, **kwargs: Any) -> None:
    """
    Log optimization cache hit.

    Args:
        key: Cache key
        **kwargs: Additional context
    """
    logger = get_logger("cache")
    logger.info("cache_hit", key=key, **kwargs)


def log_cache_miss(key: str, **kwargs: Any) -> None:
    """
    Log optimization cache miss.

    Args:
        key: Cache key
        **kwargs: Additional context
    """
    logger = get_logger("cache")
    logger.info("cache_miss", key=key, **kwargs)


def log_routing_decision(
    handler_id: str, score: float, fallback: bool, **kwargs: Any
) -> None:
    """
    Log a routing decision.

    Args:
        handler_id: Selected handler
        score: Composite score of the selection
        fallback: Whether the fallback route was used
        **kwargs: Additional context
    """
    logger = get_logger("routing")
    logger.info(
        "routing_decision",
        handler_id=handler_id,
        score=round(score, 4),
        fallback=fallback,
        **kwargs
    )


def log_error(error: Exception, context: str, **kwargs: Any) -> None:
    """
    Log error with context.

    Args:
        error: Exception that occurred
        context: Error context
        **kwargs: Additional context
    """
    logger = get_logger("error")
    logger.error(
        "error_occurred",
        error=str(error),
        error_type=type(error).__name__,
        context=context,
        **kwargs
    )
