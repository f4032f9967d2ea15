"""
Request context analysis.

Extracts user type, technical level, scale, budget and business signal
from a normalized request and its session context.
"""

from adaptive_router.analysis.context_analyzer import ContextAnalyzer

__all__ = ["ContextAnalyzer"]
