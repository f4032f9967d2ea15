"""
Routing decision engine.

Selects the handler for a request from scored candidates, applying user
preferences, token efficiency, performance history, availability and
confidence thresholds, and falls back to a default handler when no
candidate is good enough.

Sandi Metz Principles:
- Single Responsibility: Choose among scored candidates
- Small methods: One decision stage per method
- Dependency Injection: Ledger and availability injected
"""

import asyncio
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional

from adaptive_router.config import config
from adaptive_router.models.plan import OptimizationPlan
from adaptive_router.models.routing import (
    DecisionCriteria,
    DecisionMetadata,
    FallbackTrigger,
    HandlerPerformance,
    RoutingDecision,
    ScoredOption,
)
from adaptive_router.models.statistics import DecisionStatistics
from adaptive_router.routing.availability import HandlerAvailability
from adaptive_router.routing.ledger import PerformanceLedger
from adaptive_router.utils.logger import get_logger, log_routing_decision

logger = get_logger(__name__)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass
class DecisionRecord:
    """One entry of the decision log."""

    handler_id: str
    composite_score: float
    confidence: float
    fallback: bool
    options_considered: int
    criteria: List[str] = field(default_factory=list)
    savings_percentage: Optional[float] = None
    timestamp: float = field(default_factory=time.time)


class RoutingDecisionEngine:
    """
    Multi-criteria handler selection with fallback.

    Input options are never mutated; adjusted copies are ranked.
    """

    def __init__(
        self,
        ledger: Optional[PerformanceLedger] = None,
        availability: Optional[HandlerAvailability] = None,
        fallback_handler_id: Optional[str] = None,
        fallback_confidence: Optional[float] = None,
        low_confidence_floor: Optional[float] = None,
        token_boost_weight: Optional[float] = None,
        log_size: Optional[int] = None,
        stats_window: Optional[int] = None,
    ):
        """
        Initialize engine.

        Args:
            ledger: Handler performance ledger
            availability: Availability source used when criteria ask for it
            fallback_handler_id: Handler used for fallback decisions
            fallback_confidence: Confidence reported on fallback
            low_confidence_floor: Best scores below this fall back
            token_boost_weight: Score boost per unit of efficiency
            log_size: Decisions kept in the log
            stats_window: Recent decisions used for statistics
        """
        self._ledger = ledger or PerformanceLedger()
        self._availability = availability
        self._fallback_id = fallback_handler_id or config.fallback_handler_id
        self._fallback_confidence = (
            config.fallback_confidence
            if fallback_confidence is None
            else fallback_confidence
        )
        self._floor = (
            config.low_confidence_floor
            if low_confidence_floor is None
            else low_confidence_floor
        )
        self._boost = (
            config.token_boost_weight
            if token_boost_weight is None
            else token_boost_weight
        )
        self._window = stats_window or config.decision_stats_window
        self._log: Deque[DecisionRecord] = deque(
            maxlen=log_size or config.decision_log_size
        )
        self._log_lock = asyncio.Lock()

    @property
    def ledger(self) -> PerformanceLedger:
        """Handler performance ledger."""
        return self._ledger

    @property
    def fallback_handler_id(self) -> str:
        """Handler used for fallback decisions."""
        return self._fallback_id

    async def select_optimal_route(
        self,
        options: Optional[List[ScoredOption]],
        criteria: Optional[DecisionCriteria] = None,
        token_optimized_plan: Optional[OptimizationPlan] = None,
    ) -> RoutingDecision:
        """
        Select the best handler.

        Args:
            options: Scored candidates (None or empty allowed)
            criteria: Decision criteria
            token_optimized_plan: Plan used for the token boost

        Returns:
            RoutingDecision, a fallback decision if no candidate qualifies
        """
        criteria = criteria or DecisionCriteria()
        options = list(options or [])
        considered = len(options)

        if not options:
            decision = self._fallback(FallbackTrigger.NO_OPTIONS, criteria, 0)
            await self._record(decision, token_optimized_plan)
            return decision

        ranked = [option.model_copy() for option in options]
        if criteria.respect_user_preferences:
            ranked = self.apply_user_preferences(ranked, criteria.user_preferences)
        if criteria.optimize_for_tokens and token_optimized_plan is not None:
            ranked = self.apply_token_boost(ranked)
        ranked = await self.apply_performance_history(ranked)

        if criteria.check_agent_availability:
            ranked = await self.filter_available(ranked)
            if not ranked:
                decision = self._fallback(
                    FallbackTrigger.NO_OPTIONS, criteria, considered
                )
                await self._record(decision, token_optimized_plan)
                return decision

        if criteria.min_confidence is not None:
            ranked = [
                o for o in ranked if o.composite_score >= criteria.min_confidence
            ]

        decision = self._select(ranked, criteria, considered)
        await self._record(decision, token_optimized_plan)
        return decision

    def apply_user_preferences(
        self, options: List[ScoredOption], preferences: Dict[str, float]
    ) -> List[ScoredOption]:
        """Multiply scores by the user's handler weights (default 1.0)."""
        adjusted = []
        for option in options:
            multiplier = preferences.get(option.handler_id, 1.0)
            adjusted.append(
                option.model_copy(
                    update={
                        "composite_score": _clamp(option.composite_score * multiplier),
                        "user_preference_applied": multiplier,
                    }
                )
            )
        return adjusted

    def apply_token_boost(self, options: List[ScoredOption]) -> List[ScoredOption]:
        """Add efficiency * boost weight to every score."""
        return [
            option.model_copy(
                update={
                    "composite_score": _clamp(
                        option.composite_score
                        + option.token_efficiency.efficiency * self._boost
                    ),
                    "token_optimized": True,
                }
            )
            for option in options
        ]

    async def apply_performance_history(
        self, options: List[ScoredOption]
    ) -> List[ScoredOption]:
        """Multiply scores by the ledger multiplier, neutral without history."""
        adjusted = []
        for option in options:
            multiplier = await self._ledger.multiplier(option.handler_id)
            if multiplier is None:
                adjusted.append(option)
                continue
            adjusted.append(
                option.model_copy(
                    update={
                        "composite_score": _clamp(option.composite_score * multiplier),
                        "performance_adjustment": multiplier,
                    }
                )
            )
        return adjusted

    async def filter_available(
        self, options: List[ScoredOption]
    ) -> List[ScoredOption]:
        """Drop candidates whose handler is at capacity."""
        if self._availability is None:
            return options
        available = []
        for option in options:
            if await self._availability.is_available(option.handler_id):
                available.append(option)
            else:
                logger.info("Handler unavailable", handler_id=option.handler_id)
        return available

    async def update_agent_performance(
        self, handler_id: str, success: bool, cost: Optional[float] = None
    ) -> HandlerPerformance:
        """
        Record an outcome for a handler.

        Args:
            handler_id: Handler that did the work
            success: Whether it succeeded
            cost: Tokens consumed, if reported

        Returns:
            Updated performance
        """
        return await self._ledger.record(handler_id, success, cost)

    async def get_handler_performance(
        self, handler_id: str
    ) -> Optional[HandlerPerformance]:
        """Get a handler's performance, None without history."""
        return await self._ledger.get(handler_id)

    async def get_decision_statistics(self) -> DecisionStatistics:
        """
        Get decision statistics over the recent window.

        Returns:
            DecisionStatistics, zeros when no decisions were made
        """
        async with self._log_lock:
            total = len(self._log)
            recent = list(self._log)[-self._window :]

        if not recent:
            return DecisionStatistics()

        distribution: Dict[str, int] = {}
        usage: Dict[str, int] = {}
        for record in recent:
            distribution[record.handler_id] = distribution.get(record.handler_id, 0) + 1
            for name in record.criteria:
                usage[name] = usage.get(name, 0) + 1

        return DecisionStatistics(
            total_decisions=total,
            recent_decisions=len(recent),
            fallback_rate=sum(1 for r in recent if r.fallback) / len(recent),
            average_confidence=sum(r.confidence for r in recent) / len(recent),
            handler_distribution=distribution,
            criteria_usage=usage,
        )

    def _select(
        self,
        ranked: List[ScoredOption],
        criteria: DecisionCriteria,
        considered: int,
    ) -> RoutingDecision:
        """Pick the best candidate or fall back on low confidence."""
        if not ranked:
            return self._fallback(FallbackTrigger.LOW_CONFIDENCE, criteria, considered)

        # max keeps the first of equal scores
        best = max(ranked, key=lambda o: o.composite_score)
        if best.composite_score < self._floor:
            return self._fallback(
                FallbackTrigger.LOW_CONFIDENCE, criteria, considered, rejected=best
            )

        return RoutingDecision(
            handler_id=best.handler_id,
            composite_score=best.composite_score,
            confidence=best.confidence,
            selection_reason=self._selection_reason(best, len(ranked)),
            reasoning=best.reasoning,
            decision_metadata=DecisionMetadata(
                options_considered=considered,
                selection_criteria=criteria.used(),
                confidence_score=best.composite_score,
            ),
            token_optimized=best.token_optimized,
            user_preference_applied=best.user_preference_applied,
            performance_adjustment=best.performance_adjustment,
        )

    def _fallback(
        self,
        trigger: FallbackTrigger,
        criteria: DecisionCriteria,
        considered: int,
        rejected: Optional[ScoredOption] = None,
    ) -> RoutingDecision:
        """Decision routing to the fallback handler."""
        if rejected is not None:
            reasoning = (
                f"Low confidence in {rejected.handler_id} "
                f"({rejected.composite_score:.0%}), routing to {self._fallback_id}"
            )
        elif trigger == FallbackTrigger.LOW_CONFIDENCE:
            reasoning = (
                f"No candidate met the confidence threshold, "
                f"routing to {self._fallback_id}"
            )
        else:
            reasoning = f"No suitable candidates, routing to {self._fallback_id}"

        logger.warning(
            "Using fallback route", trigger=trigger.value, considered=considered
        )
        return RoutingDecision(
            handler_id=self._fallback_id,
            composite_score=self._fallback_confidence,
            confidence=self._fallback_confidence,
            selection_reason="Fallback route due to insufficient confidence",
            reasoning=reasoning,
            fallback=True,
            decision_metadata=DecisionMetadata(
                options_considered=considered,
                fallback_trigger=trigger,
                selection_criteria=criteria.used(),
                confidence_score=self._fallback_confidence,
            ),
        )

    def _selection_reason(self, best: ScoredOption, viable: int) -> str:
        """Human readable selection reason."""
        reasons = [f"Selected {best.handler_id} with {best.composite_score:.0%} score"]
        if best.token_optimized:
            reasons.append("optimized for token efficiency")
        if best.performance_adjustment is not None:
            delta = (best.performance_adjustment - 1) * 100
            reasons.append(f"{delta:+.0f}% performance adjustment applied")
        if best.user_preference_applied not in (None, 1.0):
            reasons.append(f"user preference factor {best.user_preference_applied:.2f}")
        if viable > 1:
            reasons.append(f"compared {viable} viable options")
        return ", ".join(reasons)

    async def _record(
        self, decision: RoutingDecision, plan: Optional[OptimizationPlan]
    ) -> None:
        """Append a decision to the log."""
        record = DecisionRecord(
            handler_id=decision.handler_id,
            composite_score=decision.composite_score,
            confidence=decision.confidence,
            fallback=decision.fallback,
            options_considered=decision.decision_metadata.options_considered,
            criteria=list(decision.decision_metadata.selection_criteria),
            savings_percentage=plan.savings_percentage if plan else None,
        )
        async with self._log_lock:
            self._log.append(record)

        log_routing_decision(
            decision.handler_id,
            decision.composite_score,
            decision.fallback,
            decision_id=decision.decision_id,
        )
