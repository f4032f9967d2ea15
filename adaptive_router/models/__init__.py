"""
Models package for the adaptive router.

Exports all model classes for easy imports throughout the package.
"""

# Cache models
from adaptive_router.models.cache_entry import CacheEntry

# Context models
from adaptive_router.models.context import (
    BusinessContext,
    Constraint,
    ContextAnalysis,
    DesignPreferences,
    PastInteraction,
    UserContext,
)

# Pattern models
from adaptive_router.models.pattern import (
    ApplicablePattern,
    DomainDetection,
    DomainMatch,
    Pattern,
    PatternRequirements,
)

# Plan models
from adaptive_router.models.plan import (
    CompressedContext,
    ContextSummary,
    EssentialRequirements,
    ExecutionPlan,
    Optimization,
    OptimizationPlan,
    TokenSavings,
)

# Request models
from adaptive_router.models.requirements import (
    Complexity,
    NormalizedRequest,
    Requirements,
)

# Routing models
from adaptive_router.models.routing import (
    DecisionCriteria,
    DecisionMetadata,
    FallbackTrigger,
    HandlerDescriptor,
    HandlerPerformance,
    Outcome,
    PerformanceHistory,
    RoutingDecision,
    RoutingResult,
    ScoredOption,
    TokenEfficiency,
    UserExplanation,
)

# Statistics models
from adaptive_router.models.statistics import (
    CacheStatistics,
    CompressionStatistics,
    DecisionStatistics,
    OptimizationSummary,
)

__all__ = [
    # Cache
    "CacheEntry",
    # Context
    "BusinessContext",
    "Constraint",
    "ContextAnalysis",
    "DesignPreferences",
    "PastInteraction",
    "UserContext",
    # Pattern
    "ApplicablePattern",
    "DomainDetection",
    "DomainMatch",
    "Pattern",
    "PatternRequirements",
    # Plan
    "CompressedContext",
    "ContextSummary",
    "EssentialRequirements",
    "ExecutionPlan",
    "Optimization",
    "OptimizationPlan",
    "TokenSavings",
    # Request
    "Complexity",
    "NormalizedRequest",
    "Requirements",
    # Routing
    "DecisionCriteria",
    "DecisionMetadata",
    "FallbackTrigger",
    "HandlerDescriptor",
    "HandlerPerformance",
    "Outcome",
    "PerformanceHistory",
    "RoutingDecision",
    "RoutingResult",
    "ScoredOption",
    "TokenEfficiency",
    "UserExplanation",
    # Statistics
    "CacheStatistics",
    "CompressionStatistics",
    "DecisionStatistics",
    "OptimizationSummary",
]
