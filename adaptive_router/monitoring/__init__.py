"""
Monitoring module.

Provides measured timings for routing stages.
"""

from adaptive_router.monitoring.performance_monitor import (
    OperationMetrics,
    RoutingMetrics,
    RoutingPerformanceMonitor,
)

__all__ = [
    "OperationMetrics",
    "RoutingMetrics",
    "RoutingPerformanceMonitor",
]
