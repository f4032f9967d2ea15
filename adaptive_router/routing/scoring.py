"""
Handler scoring.

Combines task fit, token efficiency, performance history and user
preference into one composite score per candidate.

Sandi Metz Principles:
- Single Responsibility: Score candidates
- Dependency Injection: Efficiency estimator injected
- Open/Closed: Weights configurable without subclassing
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from adaptive_router.models.plan import OptimizationPlan
from adaptive_router.models.routing import (
    HandlerDescriptor,
    PerformanceHistory,
    ScoredOption,
    TokenEfficiency,
)
from adaptive_router.routing.handlers import HandlerAssessment

NEUTRAL_PERFORMANCE = 0.5
NEUTRAL_PREFERENCE = 1.0
# Handlers that receive full requirements keep only part of the savings
FULL_REQUIREMENTS_EFFICIENCY = 0.5


class ScoreWeights(BaseModel):
    """Composite score weights, normalized by their sum."""

    model_config = ConfigDict(frozen=True)

    confidence: float = Field(default=0.35, ge=0.0)
    token_efficiency: float = Field(default=0.15, ge=0.0)
    token_efficiency_optimized: float = Field(
        default=0.30, ge=0.0, description="Used when optimizing for tokens"
    )
    performance: float = Field(default=0.20, ge=0.0)
    preference: float = Field(default=0.15, ge=0.0)


class TokenEfficiencyEstimator(ABC):
    """Interface for token efficiency estimates."""

    @abstractmethod
    def estimate(
        self, handler: HandlerDescriptor, plan: Optional[OptimizationPlan]
    ) -> TokenEfficiency:
        """
        Estimate how token efficient routing to a handler is.

        Args:
            handler: Candidate handler
            plan: Optimization plan of the request

        Returns:
            TokenEfficiency
        """
        pass


class PlanEfficiencyEstimator(TokenEfficiencyEstimator):
    """
    Efficiency from the plan's measured savings.

    Handlers that require full requirements forfeit half the savings.
    """

    def estimate(
        self, handler: HandlerDescriptor, plan: Optional[OptimizationPlan]
    ) -> TokenEfficiency:
        if plan is None or plan.token_savings is None:
            return TokenEfficiency()

        savings = plan.token_savings
        efficiency = max(0.0, min(1.0, savings.percentage / 100))
        estimated = max(0, savings.saved)
        if handler.requires_full_requirements:
            efficiency *= FULL_REQUIREMENTS_EFFICIENCY
            estimated = int(estimated * FULL_REQUIREMENTS_EFFICIENCY)

        return TokenEfficiency(
            efficiency=efficiency,
            score=efficiency,
            estimated_savings=estimated,
            source="plan",
        )


class HandlerScorer:
    """Computes composite scores for candidates."""

    def __init__(
        self,
        weights: Optional[ScoreWeights] = None,
        estimator: Optional[TokenEfficiencyEstimator] = None,
    ):
        """
        Initialize scorer.

        Args:
            weights: Composite weights
            estimator: Token efficiency estimator
        """
        self._weights = weights or ScoreWeights()
        self._estimator = estimator or PlanEfficiencyEstimator()

    @property
    def weights(self) -> ScoreWeights:
        """Composite weights."""
        return self._weights

    def score(
        self,
        handler: HandlerDescriptor,
        assessment: HandlerAssessment,
        plan: Optional[OptimizationPlan] = None,
        performance: Optional[PerformanceHistory] = None,
        preference: float = NEUTRAL_PREFERENCE,
        optimize_for_tokens: bool = False,
    ) -> ScoredOption:
        """
        Score one candidate.

        Args:
            handler: Candidate handler
            assessment: Task fit
            plan: Optimization plan of the request
            performance: Observed handler performance
            preference: User weight for the handler (1.0 neutral)
            optimize_for_tokens: Use the higher efficiency weight

        Returns:
            ScoredOption with composite score in [0, 1]
        """
        performance = performance or PerformanceHistory()
        efficiency = self._estimator.estimate(handler, plan)
        composite = self.composite(
            assessment.confidence,
            efficiency.score,
            self._performance_component(performance),
            self._preference_component(preference),
            optimize_for_tokens,
        )
        return ScoredOption(
            handler_id=handler.handler_id,
            confidence=assessment.confidence,
            composite_score=composite,
            token_efficiency=efficiency,
            performance_history=performance,
            reasoning=assessment.reasoning,
        )

    def composite(
        self,
        confidence: float,
        efficiency: float,
        performance: float,
        preference: float,
        optimize_for_tokens: bool = False,
    ) -> float:
        """Weighted mean of the components."""
        w = self._weights
        efficiency_weight = (
            w.token_efficiency_optimized if optimize_for_tokens else w.token_efficiency
        )
        total = w.confidence + efficiency_weight + w.performance + w.preference
        if total <= 0:
            return 0.0

        weighted = (
            w.confidence * confidence
            + efficiency_weight * efficiency
            + w.performance * performance
            + w.preference * preference
        )
        return max(0.0, min(1.0, weighted / total))

    def _performance_component(self, performance: PerformanceHistory) -> float:
        """Success rate, neutral without history."""
        if not performance.has_history:
            return NEUTRAL_PERFORMANCE
        return performance.success_rate

    def _preference_component(self, preference: float) -> float:
        """Map weight 0.5..1.5 onto 0..1, neutral weight to 0.5."""
        return max(0.0, min(1.0, preference - 0.5))
