"""
Adaptive routing and processing-budget optimization engine.

Routes work requests to the best-fit handler and minimizes the tokens
spent processing them. Call ``setup_logging(config.log_level)`` once at
application startup to configure structured logging.
"""

from adaptive_router.routing.router import Router
from adaptive_router.utils.logger import setup_logging

__version__ = "0.1.0"

__all__ = ["Router", "setup_logging", "__version__"]
