"""
Token optimization module.

Contains optimization components:
- Token Calculator
- Context Compressor
- Optimization Cache
- Optimization Statistics
- Token Optimizer
"""

from adaptive_router.optimization.cache import OptimizationCache
from adaptive_router.optimization.compressor import (
    CompressionRecord,
    VibeContextCompressor,
)
from adaptive_router.optimization.optimizer import OptimizationResult, TokenOptimizer
from adaptive_router.optimization.stats import (
    OptimizationRecord,
    OptimizationStatsTracker,
)
from adaptive_router.optimization.token_calculator import CostWeights, TokenCalculator

__all__ = [
    # Cache
    "OptimizationCache",
    # Compressor
    "CompressionRecord",
    "VibeContextCompressor",
    # Optimizer
    "OptimizationResult",
    "TokenOptimizer",
    # Statistics
    "OptimizationRecord",
    "OptimizationStatsTracker",
    # Calculator
    "CostWeights",
    "TokenCalculator",
]
