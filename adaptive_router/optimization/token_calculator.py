"""
Token cost model.

Sandi Metz Principles:
- Single Responsibility: Estimate processing budgets
- Small methods: Each method < 10 lines
- Open/Closed: Weights injectable, no hardcoded tables in methods
"""

from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from adaptive_router.models.plan import ExecutionPlan, TokenSavings
from adaptive_router.models.requirements import Requirements
from adaptive_router.utils.logger import get_logger
from adaptive_router.utils.sizing import CHARS_PER_TOKEN, estimate_token_size

logger = get_logger(__name__)

DEFAULT_PATTERN_SAVINGS = 100


class CostWeights(BaseModel):
    """Weights of the heuristic cost model."""

    model_config = ConfigDict(frozen=True)

    base_processing: int = Field(default=500, ge=0, description="Baseline base cost")
    base_optimized: int = Field(default=200, ge=0, description="Optimized base cost")
    base_context: int = Field(default=100, ge=0, description="Context base cost")

    explicit_requirement: int = Field(default=50, ge=0)
    implicit_requirement: int = Field(default=30, ge=0)
    functional_requirement: int = Field(default=40, ge=0)
    non_functional_requirement: int = Field(default=60, ge=0)
    technical_requirement: int = Field(default=70, ge=0)

    business_context: int = Field(default=150, ge=0)
    technical_level: int = Field(default=50, ge=0)
    constraint: int = Field(default=30, ge=0)
    goal: int = Field(default=25, ge=0)

    optimization_slot: int = Field(
        default=100, ge=0, description="Cost of one optimization before savings"
    )
    minimum_optimized: int = Field(
        default=150, ge=0, description="Floor of the optimized cost"
    )


class TokenCalculator:
    """
    Heuristic token cost calculator.

    Pure: no state besides the weights.
    """

    def __init__(self, weights: Optional[CostWeights] = None):
        """
        Initialize calculator.

        Args:
            weights: Cost weights (defaults if None)
        """
        self._weights = weights or CostWeights()

    @property
    def weights(self) -> CostWeights:
        """Current weights."""
        return self._weights

    def update_weights(self, **changes: int) -> CostWeights:
        """
        Replace some weights.

        Args:
            **changes: Weight names and new values

        Returns:
            Updated weights

        Raises:
            pydantic.ValidationError: If a value is invalid
        """
        data = self._weights.model_dump()
        unknown = set(changes) - set(data)
        if unknown:
            raise ValueError(f"Unknown cost weights: {sorted(unknown)}")
        data.update(changes)
        self._weights = CostWeights(**data)
        logger.info("Cost weights updated", changes=changes)
        return self._weights

    def calculate_baseline(
        self, requirements: Optional[Requirements], context: Any = None
    ) -> int:
        """
        Calculate the unoptimized cost of processing a request.

        Args:
            requirements: Structured requirements (None allowed)
            context: User context or analysis (None allowed)

        Returns:
            Baseline token cost
        """
        w = self._weights
        baseline = w.base_processing
        if requirements is not None:
            baseline += len(requirements.explicit) * w.explicit_requirement
            baseline += len(requirements.implicit) * w.implicit_requirement
            baseline += len(requirements.functional) * w.functional_requirement
            baseline += len(requirements.non_functional) * w.non_functional_requirement
            baseline += len(requirements.technical) * w.technical_requirement
        return baseline + self.estimate_context_tokens(context)

    def estimate_context_tokens(self, context: Any) -> int:
        """
        Estimate the cost of processing a user context.

        Args:
            context: User context or analysis (None allowed)

        Returns:
            Context token cost
        """
        w = self._weights
        tokens = w.base_context
        if context is None:
            return tokens
        if getattr(context, "business_context", None):
            tokens += w.business_context
        if getattr(context, "technical_level", None):
            tokens += w.technical_level
        tokens += len(getattr(context, "constraints", None) or []) * w.constraint
        tokens += len(getattr(context, "goals", None) or []) * w.goal
        return tokens

    def calculate_optimized(self, plan: Optional[ExecutionPlan]) -> int:
        """
        Calculate the cost after optimizations.

        Each optimization leaves slot * (1 - savings%) of its slot; savings
        are capped at 100%. The compressed context adds its residual size.

        Args:
            plan: Execution plan (None allowed)

        Returns:
            Optimized token cost, never below the configured floor
        """
        w = self._weights
        optimized = float(w.base_optimized)
        if plan is not None:
            for optimization in plan.optimizations:
                share = min(optimization.savings_percentage, 100.0) / 100.0
                optimized += w.optimization_slot * (1.0 - share)
            if plan.context is not None and plan.context.original_size:
                optimized += round(
                    plan.context.original_size * (1 - plan.context.compression_ratio)
                )
        return max(round(optimized), w.minimum_optimized)

    def calculate_savings(self, baseline: int, optimized: int) -> TokenSavings:
        """
        Summarize savings.

        Negative savings are reported as is.

        Args:
            baseline: Unoptimized cost
            optimized: Optimized cost

        Returns:
            TokenSavings
        """
        saved = baseline - optimized
        percentage = (saved / baseline * 100.0) if baseline > 0 else 0.0
        if saved < 0:
            logger.warning(
                "Optimization regressed cost", baseline=baseline, optimized=optimized
            )
        return TokenSavings(
            baseline=baseline,
            optimized=optimized,
            saved=saved,
            percentage=round(percentage, 2),
        )

    def calculate_pattern_savings(self, patterns: Iterable[Any]) -> int:
        """
        Sum the average savings of reusable patterns.

        Args:
            patterns: Patterns (None entries skipped)

        Returns:
            Total expected savings
        """
        total = 0
        for pattern in patterns or []:
            if pattern is None:
                continue
            pattern = getattr(pattern, "pattern", pattern)
            total += getattr(pattern, "average_token_savings", 0) or (
                DEFAULT_PATTERN_SAVINGS
            )
        return total

    def estimate_tokens_from_text(self, text: Optional[str]) -> int:
        """Estimate tokens in text (4 characters per token)."""
        if not text or not isinstance(text, str):
            return 0
        return round(len(text) / CHARS_PER_TOKEN)

    def estimate_tokens_from_object(self, obj: Any) -> int:
        """Estimate tokens of an object's serialized form."""
        if obj is None or isinstance(obj, (str, int, float, bool)):
            return 0
        return estimate_token_size(obj)
