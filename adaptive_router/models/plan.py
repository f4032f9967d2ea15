"""
Optimization plan models.

Sandi Metz Principles:
- Single Responsibility: Optimization data structures
- Computed properties for derived metrics
- Immutable data: Plans are read-only once returned
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from adaptive_router.models.requirements import Complexity

GENERAL_PURPOSE_GOAL = "general-purpose"


class EssentialRequirements(BaseModel):
    """Size-bounded subset of a requirement set."""

    model_config = ConfigDict(frozen=True)

    explicit: List[str] = Field(default_factory=list, description="Kept explicit")
    implicit: List[str] = Field(default_factory=list, description="Kept implicit")
    domain: Optional[str] = Field(None, description="Problem domain")
    complexity: Optional[Complexity] = Field(None, description="Complexity")


class ContextSummary(BaseModel):
    """Compact projection of a user context."""

    model_config = ConfigDict(frozen=True)

    user_type: Optional[str] = None
    technical_level: Optional[str] = None
    scale: Optional[str] = None
    budget: Optional[str] = None
    primary_goal: str = GENERAL_PURPOSE_GOAL


class CompressedContext(BaseModel):
    """Output of context compression."""

    essential_requirements: EssentialRequirements = Field(
        default_factory=EssentialRequirements
    )
    pattern_defaults: Dict[str, Any] = Field(default_factory=dict)
    context_summary: ContextSummary = Field(default_factory=ContextSummary)
    original_size: int = Field(default=0, ge=0, description="Estimated tokens before")
    compressed_size: int = Field(default=0, ge=0, description="Estimated tokens after")
    compression_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    token_savings: int = Field(default=0, ge=0, description="Tokens removed")


class Optimization(BaseModel):
    """A single optimization applied to a plan."""

    type: str = Field(..., description="Optimization kind")
    description: str = Field(default="", description="What was done")
    savings_percentage: float = Field(
        default=0.0, ge=0.0, description="Savings within the optimization slot"
    )


class ExecutionPlan(BaseModel):
    """Optimizations and compressed context fed to the cost model."""

    optimizations: List[Optimization] = Field(default_factory=list)
    context: Optional[CompressedContext] = None


class TokenSavings(BaseModel):
    """Baseline versus optimized cost."""

    model_config = ConfigDict(frozen=True)

    baseline: int = Field(..., description="Unoptimized cost")
    optimized: int = Field(..., description="Optimized cost")
    saved: int = Field(..., description="baseline - optimized, may be negative")
    percentage: float = Field(..., description="saved / baseline * 100")

    @property
    def regressed(self) -> bool:
        """Whether optimization increased the cost."""
        return self.saved < 0


class OptimizationPlan(BaseModel):
    """Optimization plan for a request."""

    model_config = ConfigDict(frozen=True)

    essential_requirements: EssentialRequirements = Field(
        default_factory=EssentialRequirements
    )
    pattern_based_defaults: Dict[str, Any] = Field(default_factory=dict)
    context_summary: ContextSummary = Field(default_factory=ContextSummary)
    compression_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    token_savings: Optional[TokenSavings] = None
    recommendations: List[str] = Field(default_factory=list)
    patterns_used: List[str] = Field(default_factory=list)
    optimizations: List[Optimization] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def savings_percentage(self) -> float:
        """Savings percentage, 0 when unknown."""
        return self.token_savings.percentage if self.token_savings else 0.0

    @classmethod
    def unoptimized(
        cls,
        baseline: int = 0,
        essential: Optional[EssentialRequirements] = None,
        summary: Optional[ContextSummary] = None,
        reason: str = "Optimization unavailable, proceeding unoptimized",
    ) -> "OptimizationPlan":
        """Create a plan with zero savings."""
        return cls(
            essential_requirements=essential or EssentialRequirements(),
            context_summary=summary or ContextSummary(),
            token_savings=TokenSavings(
                baseline=baseline, optimized=baseline, saved=0, percentage=0.0
            ),
            recommendations=[reason],
        )
