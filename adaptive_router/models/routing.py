"""
Routing models.

Sandi Metz Principles:
- Small classes with clear purpose
- Computed properties for derived metrics
- Clear naming conventions
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from adaptive_router.models.context import ContextAnalysis
from adaptive_router.models.pattern import DomainDetection
from adaptive_router.models.plan import (
    EssentialRequirements,
    OptimizationPlan,
    TokenSavings,
)
from adaptive_router.models.requirements import Requirements


def _clamp_unit(v: float) -> float:
    """Clamp a score into [0, 1]."""
    return max(0.0, min(1.0, float(v)))


class TokenEfficiency(BaseModel):
    """Expected token efficiency of routing to a handler."""

    efficiency: float = Field(default=0.0, ge=0.0, le=1.0, description="0-1")
    score: float = Field(default=0.0, ge=0.0, le=1.0, description="Scoring weight")
    estimated_savings: int = Field(default=0, description="Tokens expected saved")
    source: str = Field(default="none", description="Where the estimate came from")


class PerformanceHistory(BaseModel):
    """Observed handler performance."""

    success_rate: Optional[float] = Field(
        None, ge=0.0, le=1.0, description="Success rate, None without history"
    )
    avg_cost: float = Field(default=0.0, ge=0.0, description="Average tokens used")
    total_requests: int = Field(default=0, ge=0, description="Recorded outcomes")

    @property
    def has_history(self) -> bool:
        """Whether any outcome was recorded."""
        return self.total_requests > 0 and self.success_rate is not None


class ScoredOption(BaseModel):
    """A candidate handler with its scores."""

    handler_id: str = Field(..., min_length=1, description="Handler identifier")
    confidence: float = Field(default=0.0, description="Task fit confidence")
    composite_score: float = Field(default=0.0, description="Ranking value")
    token_efficiency: TokenEfficiency = Field(default_factory=TokenEfficiency)
    performance_history: PerformanceHistory = Field(
        default_factory=PerformanceHistory
    )
    reasoning: str = Field(default="", description="Why this score")
    token_optimized: bool = Field(default=False, description="Token boost applied")
    user_preference_applied: Optional[float] = Field(
        None, description="Preference multiplier applied"
    )
    performance_adjustment: Optional[float] = Field(
        None, description="Performance multiplier applied"
    )

    @field_validator("confidence", "composite_score")
    @classmethod
    def clamp_score(cls, v: float) -> float:
        """Keep scores in [0, 1]."""
        return _clamp_unit(v)


class DecisionCriteria(BaseModel):
    """Optional criteria for a routing decision."""

    min_confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    optimize_for_tokens: bool = False
    respect_user_preferences: bool = False
    user_preferences: Dict[str, float] = Field(default_factory=dict)
    check_agent_availability: bool = False

    def used(self) -> List[str]:
        """Names of the criteria that are active."""
        active = []
        if self.min_confidence is not None:
            active.append("min_confidence")
        if self.optimize_for_tokens:
            active.append("optimize_for_tokens")
        if self.respect_user_preferences:
            active.append("respect_user_preferences")
        if self.check_agent_availability:
            active.append("check_agent_availability")
        return active


class FallbackTrigger(str, Enum):
    """Why a fallback decision was produced."""

    NO_OPTIONS = "no_options"
    LOW_CONFIDENCE = "low_confidence"


class DecisionMetadata(BaseModel):
    """Bookkeeping attached to a decision."""

    options_considered: int = Field(default=0, ge=0)
    fallback_trigger: Optional[FallbackTrigger] = None
    selection_criteria: List[str] = Field(default_factory=list)
    confidence_score: float = Field(default=0.0, ge=0.0, le=1.0)
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class RoutingDecision(BaseModel):
    """The handler chosen for a request."""

    decision_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    handler_id: str = Field(..., min_length=1, description="Selected handler")
    composite_score: float = Field(default=0.0, ge=0.0, le=1.0)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    selection_reason: str = Field(default="", description="Human readable reason")
    reasoning: str = Field(default="", description="Scoring rationale")
    fallback: bool = Field(default=False, description="Fallback route used")
    decision_metadata: DecisionMetadata = Field(default_factory=DecisionMetadata)
    token_optimized: bool = False
    user_preference_applied: Optional[float] = None
    performance_adjustment: Optional[float] = None


class HandlerDescriptor(BaseModel):
    """A routable handler as registered by the handler registry."""

    handler_id: str = Field(..., min_length=1, description="Handler identifier")
    description: str = Field(default="", description="What the handler does")
    triggers: List[str] = Field(
        default_factory=list, description="Keywords indicating a fit"
    )
    domains: List[str] = Field(default_factory=list, description="Domains served")
    base_confidence: float = Field(
        default=0.8, ge=0.0, le=1.0, description="Confidence at perfect fit"
    )
    requires_full_requirements: bool = Field(
        default=False, description="Receive uncompressed requirements"
    )
    max_concurrent: Optional[int] = Field(
        None, ge=1, description="In-flight limit, None for unbounded"
    )


class Outcome(BaseModel):
    """Reported outcome of routed work."""

    success: bool = Field(..., description="Whether the work succeeded")
    tokens_used: Optional[int] = Field(None, ge=0, description="Tokens consumed")
    satisfaction: Optional[float] = Field(
        None, ge=0.0, le=1.0, description="User satisfaction 0-1"
    )


class HandlerPerformance(BaseModel):
    """Accumulated performance of a handler."""

    handler_id: str
    total_requests: int = Field(default=0, ge=0)
    successful_requests: int = Field(default=0, ge=0)
    success_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    average_cost: float = Field(default=0.0, ge=0.0)
    total_cost: float = Field(default=0.0, ge=0.0)

    def to_history(self) -> PerformanceHistory:
        """Convert to the scoring view."""
        return PerformanceHistory(
            success_rate=self.success_rate if self.total_requests else None,
            avg_cost=self.average_cost,
            total_requests=self.total_requests,
        )


class UserExplanation(BaseModel):
    """Human readable explanation of a routing result."""

    summary: str
    reasoning: str = ""
    savings_message: str = ""


class RoutingResult(BaseModel):
    """Everything returned by a routing call."""

    decision: RoutingDecision
    plan: OptimizationPlan
    token_savings: TokenSavings
    domain: Optional[DomainDetection] = None
    analysis: Optional[ContextAnalysis] = None
    handler_requirements: Union[Requirements, EssentialRequirements] = Field(
        default_factory=EssentialRequirements,
        description="Requirement set handed to the handler",
    )
    cache_hit: bool = False
    user_explanation: UserExplanation

    @property
    def handler_id(self) -> str:
        """Selected handler."""
        return self.decision.handler_id
