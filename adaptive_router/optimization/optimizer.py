"""
Token optimizer.

Orchestrates cache lookup, pattern reuse, context compression and cost
calculation into an optimization plan.

Sandi Metz Principles:
- Single Responsibility: Build optimization plans
- Dependency Injection: Every collaborator injectable
- Degrade gracefully: Failures yield an unoptimized plan
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from adaptive_router.models.pattern import ApplicablePattern
from adaptive_router.models.plan import (
    CompressedContext,
    ExecutionPlan,
    Optimization,
    OptimizationPlan,
    TokenSavings,
)
from adaptive_router.models.requirements import Requirements
from adaptive_router.optimization.cache import OptimizationCache
from adaptive_router.optimization.compressor import VibeContextCompressor
from adaptive_router.optimization.stats import OptimizationStatsTracker
from adaptive_router.optimization.token_calculator import TokenCalculator
from adaptive_router.patterns.library import DomainPatternLibrary
from adaptive_router.utils.logger import get_logger, log_error

logger = get_logger(__name__)

PATTERN_REUSE = "pattern-reuse"
CONTEXT_COMPRESSION = "context-compression"
FALLBACK = "fallback"

# Compression below this ratio is not worth a dedicated optimization
MIN_COMPRESSION_RATIO = 0.2


@dataclass
class OptimizationResult:
    """Result of an optimization run."""

    plan: OptimizationPlan
    cache_hit: bool = False
    cached: bool = False
    fallback: bool = False

    @property
    def token_savings(self) -> TokenSavings:
        """Savings of the plan, zero when unknown."""
        if self.plan.token_savings is not None:
            return self.plan.token_savings
        return TokenSavings(baseline=0, optimized=0, saved=0, percentage=0.0)


class TokenOptimizer:
    """
    Produces token-optimized plans for requests.

    Plans are cached by the essential requirements and context summary.
    """

    def __init__(
        self,
        library: Optional[DomainPatternLibrary] = None,
        compressor: Optional[VibeContextCompressor] = None,
        calculator: Optional[TokenCalculator] = None,
        cache: Optional[OptimizationCache] = None,
        stats: Optional[OptimizationStatsTracker] = None,
    ):
        """
        Initialize optimizer.

        Args:
            library: Pattern library
            compressor: Context compressor
            calculator: Token cost calculator
            cache: Plan cache
            stats: Statistics tracker
        """
        self._library = library or DomainPatternLibrary()
        self._compressor = compressor or VibeContextCompressor()
        self._calculator = calculator or TokenCalculator()
        self._cache = cache or OptimizationCache()
        self._stats = stats or OptimizationStatsTracker()

    @property
    def cache(self) -> OptimizationCache:
        """Plan cache."""
        return self._cache

    @property
    def compressor(self) -> VibeContextCompressor:
        """Context compressor."""
        return self._compressor

    @property
    def calculator(self) -> TokenCalculator:
        """Token cost calculator."""
        return self._calculator

    @property
    def library(self) -> DomainPatternLibrary:
        """Pattern library."""
        return self._library

    async def optimize(
        self, requirements: Optional[Requirements], context: Any = None
    ) -> OptimizationResult:
        """
        Build (or fetch) the optimization plan for a request.

        Args:
            requirements: Structured requirements, domain set when known
            context: User context or analysis

        Returns:
            OptimizationResult; an unoptimized plan if anything fails
        """
        requirements = requirements or Requirements()
        essential = self._compressor.extract_essential(requirements)
        summary = self._compressor.summarize_context(context)

        try:
            cached = await self._cache.get(essential, summary)
            if cached is not None:
                return OptimizationResult(plan=cached, cache_hit=True)

            plan = self._build_plan(requirements, context)
            stored = await self._cache.set(essential, summary, plan)
        except Exception as e:
            log_error(e, "optimize", domain=requirements.domain)
            return self._fallback(requirements, context)

        self._stats.record(plan.token_savings, [o.type for o in plan.optimizations])
        logger.info(
            "Optimization complete",
            savings=plan.savings_percentage,
            patterns=len(plan.patterns_used),
            cached=stored,
        )
        return OptimizationResult(plan=plan, cached=stored)

    def find_patterns(
        self, requirements: Requirements, context: Any
    ) -> List[ApplicablePattern]:
        """Find patterns whose optimizations apply."""
        return self._library.find_applicable_patterns(requirements, context)

    def build_optimizations(
        self, applicable: List[ApplicablePattern], compressed: CompressedContext
    ) -> List[Optimization]:
        """
        Decide which optimizations apply.

        Args:
            applicable: Reusable patterns
            compressed: Compressed context

        Returns:
            Optimizations with their savings within one cost slot
        """
        optimizations = []
        slot = self._calculator.weights.optimization_slot or 1
        if applicable:
            savings = self._calculator.calculate_pattern_savings(applicable)
            optimizations.append(
                Optimization(
                    type=PATTERN_REUSE,
                    description=f"Reusing {len(applicable)} proven patterns",
                    savings_percentage=min(100.0, savings / slot * 100.0),
                )
            )
        if compressed.compression_ratio > MIN_COMPRESSION_RATIO:
            optimizations.append(
                Optimization(
                    type=CONTEXT_COMPRESSION,
                    description=(
                        f"{compressed.compression_ratio * 100:.1f}% context compression"
                    ),
                    savings_percentage=compressed.compression_ratio * 100.0,
                )
            )
        return optimizations

    def get_stats(self) -> Dict[str, Any]:
        """
        Get optimizer statistics.

        Returns:
            Summary, trends, breakdown, compression and pattern counts
        """
        return {
            "summary": self._stats.get_summary(),
            "trends": self._stats.get_trends(),
            "breakdown": self._stats.get_breakdown(),
            "compression": self._compressor.get_compression_stats(),
            "pattern_count": len(self._library.repository.list_patterns()),
            "pattern_version": self._library.version,
        }

    async def export_optimization_data(self) -> Dict[str, Any]:
        """Export statistics and cache entries."""
        return {
            "stats": self.get_stats(),
            "cache": await self._cache.export_entries(),
        }

    def reset_stats(self, keep_history: bool = False) -> None:
        """Reset optimization and compression statistics."""
        self._stats.reset(keep_history)
        if not keep_history:
            self._compressor.clear_history()

    async def clear_cache(self) -> None:
        """Clear the plan cache."""
        await self._cache.clear()

    def _build_plan(self, requirements: Requirements, context: Any) -> OptimizationPlan:
        """Compute a fresh optimization plan."""
        applicable = self.find_patterns(requirements, context)
        patterns = [a.pattern for a in applicable]
        compressed = self._compressor.compress_vibe_context(
            requirements, patterns, context
        )
        optimizations = self.build_optimizations(applicable, compressed)

        baseline = self._calculator.calculate_baseline(requirements, context)
        optimized = self._calculator.calculate_optimized(
            ExecutionPlan(optimizations=optimizations, context=compressed)
        )
        savings = self._calculator.calculate_savings(baseline, optimized)

        return OptimizationPlan(
            essential_requirements=compressed.essential_requirements,
            pattern_based_defaults=compressed.pattern_defaults,
            context_summary=compressed.context_summary,
            compression_ratio=compressed.compression_ratio,
            token_savings=savings,
            recommendations=self._recommendations(applicable, compressed, savings),
            patterns_used=[p.id for p in patterns],
            optimizations=optimizations,
        )

    def _recommendations(
        self,
        applicable: List[ApplicablePattern],
        compressed: CompressedContext,
        savings: TokenSavings,
    ) -> List[str]:
        """Human readable notes on the plan."""
        notes = []
        if savings.regressed:
            notes.append("Optimization increased cost, proceed unoptimized")
        for item in applicable:
            notes.append(f"Reuse the {item.pattern.name or item.pattern.id} pattern")
        if compressed.compression_ratio > MIN_COMPRESSION_RATIO:
            notes.append("Process with compressed context")
        if not notes:
            notes.append("No reusable optimizations found")
        return notes

    def _fallback(self, requirements: Requirements, context: Any) -> OptimizationResult:
        """Unoptimized plan used when optimization fails."""
        try:
            baseline = self._calculator.calculate_baseline(requirements, context)
        except Exception as e:
            log_error(e, "optimize_fallback")
            baseline = 0

        plan = OptimizationPlan.unoptimized(
            baseline=baseline,
            essential=self._compressor.extract_essential(requirements),
            summary=self._compressor.summarize_context(context),
        )
        self._stats.record(plan.token_savings, [FALLBACK])
        return OptimizationResult(plan=plan, fallback=True)
