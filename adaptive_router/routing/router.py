"""
Request router.

Orchestrates analysis, domain detection, token optimization, candidate
scoring and the routing decision for one request.

Sandi Metz Principles:
- Single Responsibility: Coordinate routing stages
- Dependency Injection: Every stage injectable
- Degrade gracefully: route never raises; the worst case is a fallback
  decision with zero token savings
"""

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from adaptive_router.analysis.context_analyzer import ContextAnalyzer
from adaptive_router.config import config
from adaptive_router.exceptions import ConfigurationError
from adaptive_router.models.context import ContextAnalysis, UserContext
from adaptive_router.models.pattern import DomainDetection
from adaptive_router.models.plan import EssentialRequirements, OptimizationPlan
from adaptive_router.models.requirements import NormalizedRequest, Requirements
from adaptive_router.models.routing import (
    DecisionCriteria,
    DecisionMetadata,
    FallbackTrigger,
    HandlerDescriptor,
    HandlerPerformance,
    Outcome,
    RoutingDecision,
    RoutingResult,
    ScoredOption,
    UserExplanation,
)
from adaptive_router.monitoring.performance_monitor import RoutingPerformanceMonitor
from adaptive_router.optimization.optimizer import OptimizationResult, TokenOptimizer
from adaptive_router.patterns.library import DomainPatternLibrary
from adaptive_router.routing.availability import HandlerAvailability, WorkloadTracker
from adaptive_router.routing.decision_engine import RoutingDecisionEngine
from adaptive_router.routing.handlers import (
    HandlerAssessor,
    HandlerRegistry,
    KeywordHandlerAssessor,
)
from adaptive_router.routing.preferences import PreferenceStore
from adaptive_router.routing.scoring import NEUTRAL_PREFERENCE, HandlerScorer
from adaptive_router.utils.logger import get_logger, log_error

logger = get_logger(__name__)

Candidate = Union[HandlerDescriptor, str]


@dataclass
class PendingDecision:
    """A routed decision awaiting its outcome."""

    handler_id: str
    user_id: Optional[str]


class Router:
    """
    Adaptive request router.

    Selects a handler for each request and learns from reported outcomes.
    """

    def __init__(
        self,
        analyzer: Optional[ContextAnalyzer] = None,
        library: Optional[DomainPatternLibrary] = None,
        optimizer: Optional[TokenOptimizer] = None,
        assessor: Optional[HandlerAssessor] = None,
        scorer: Optional[HandlerScorer] = None,
        engine: Optional[RoutingDecisionEngine] = None,
        availability: Optional[HandlerAvailability] = None,
        preferences: Optional[PreferenceStore] = None,
        registry: Optional[HandlerRegistry] = None,
        monitor: Optional[RoutingPerformanceMonitor] = None,
    ):
        """
        Initialize router.

        Args:
            analyzer: Context analyzer
            library: Domain pattern library
            optimizer: Token optimizer (shares the library if created here)
            assessor: Task-fit assessor
            scorer: Composite scorer
            engine: Decision engine (shares availability if created here)
            availability: Handler availability source
            preferences: User preference store
            registry: Handlers used when no candidates are passed
            monitor: Performance monitor
        """
        self._analyzer = analyzer or ContextAnalyzer()
        self._library = library or DomainPatternLibrary()
        self._optimizer = optimizer or TokenOptimizer(library=self._library)
        self._assessor = assessor or KeywordHandlerAssessor()
        self._scorer = scorer or HandlerScorer()
        self._availability = availability or WorkloadTracker()
        self._engine = engine or RoutingDecisionEngine(availability=self._availability)
        self._preferences = preferences
        self._registry = registry or HandlerRegistry()
        self._monitor = monitor or RoutingPerformanceMonitor()
        self._pending: "OrderedDict[str, PendingDecision]" = OrderedDict()
        self._pending_limit = config.decision_log_size

    @property
    def optimizer(self) -> TokenOptimizer:
        """Token optimizer."""
        return self._optimizer

    @property
    def engine(self) -> RoutingDecisionEngine:
        """Decision engine."""
        return self._engine

    @property
    def registry(self) -> HandlerRegistry:
        """Handler registry."""
        return self._registry

    @property
    def monitor(self) -> RoutingPerformanceMonitor:
        """Performance monitor."""
        return self._monitor

    async def route(
        self,
        request: Optional[NormalizedRequest],
        user_context: Optional[UserContext] = None,
        candidate_handlers: Optional[Iterable[Candidate]] = None,
        criteria: Optional[DecisionCriteria] = None,
    ) -> RoutingResult:
        """
        Route a request to a handler.

        Args:
            request: Normalized request
            user_context: Session context
            candidate_handlers: Handlers (or registered ids) to choose from;
                every registered handler if None
            criteria: Decision criteria

        Returns:
            RoutingResult; a fallback result if any stage fails
        """
        request = request or NormalizedRequest()
        user_context = user_context or UserContext()
        criteria = criteria or DecisionCriteria()
        started = time.perf_counter()

        try:
            result = await self._route(
                request, user_context, candidate_handlers, criteria
            )
        except Exception as e:
            log_error(e, "route", user_id=request.user_id)
            result = self._failure_result(request)

        try:
            await self._track(result.decision, result.analysis, request)
        except Exception as e:
            log_error(e, "track", decision_id=result.decision.decision_id)

        await self._monitor.record_route(
            (time.perf_counter() - started) * 1000,
            fallback=result.decision.fallback,
            cache_hit=result.cache_hit,
        )
        return result

    async def record_outcome(
        self, decision_id: str, outcome: Union[Outcome, Dict[str, Any]]
    ) -> Optional[HandlerPerformance]:
        """
        Report the outcome of routed work.

        Args:
            decision_id: Id of the routing decision
            outcome: Outcome or dict {success, tokens_used, satisfaction}

        Returns:
            Updated handler performance, None for unknown decision ids
        """
        if not isinstance(outcome, Outcome):
            outcome = Outcome.model_validate(outcome)

        pending = self._pending.pop(decision_id, None)
        if pending is None:
            logger.warning("Outcome for unknown decision", decision_id=decision_id)
            return None

        await self._availability.release(pending.handler_id)
        performance = await self._engine.update_agent_performance(
            pending.handler_id, outcome.success, outcome.tokens_used
        )

        if (
            self._preferences is not None
            and pending.user_id
            and outcome.satisfaction is not None
        ):
            await self._preferences.update(
                pending.user_id, pending.handler_id, outcome.satisfaction
            )

        logger.info(
            "Outcome recorded",
            decision_id=decision_id,
            handler_id=pending.handler_id,
            success=outcome.success,
        )
        return performance

    async def get_stats(self) -> Dict[str, Any]:
        """
        Aggregate engine statistics.

        Returns:
            Cache, compression, decision, optimizer, handler, workload and
            monitor statistics
        """
        optimizer_stats = self._optimizer.get_stats()
        stats = {
            "cache": await self._optimizer.cache.get_stats(),
            "compression": optimizer_stats.pop("compression"),
            "decisions": await self._engine.get_decision_statistics(),
            "optimizer": optimizer_stats,
            "handlers": await self._engine.ledger.snapshot(),
            "monitor": self._monitor.get_summary(),
            "pending_outcomes": len(self._pending),
        }
        if isinstance(self._availability, WorkloadTracker):
            stats["workload"] = await self._availability.snapshot()
        return stats

    async def _route(
        self,
        request: NormalizedRequest,
        user_context: UserContext,
        candidate_handlers: Optional[Iterable[Candidate]],
        criteria: DecisionCriteria,
    ) -> RoutingResult:
        """Run every routing stage."""
        op = self._monitor.start_operation("analyze")
        analysis = self._analyzer.analyze(request, user_context)
        await self._monitor.end_operation(op)

        op = self._monitor.start_operation("detect")
        detection, requirements = self._detect(request, analysis)
        await self._monitor.end_operation(op)

        op = self._monitor.start_operation("optimize")
        optimization = await self._optimizer.optimize(requirements, analysis)
        await self._monitor.end_operation(op, success=not optimization.fallback)
        plan = optimization.plan

        op = self._monitor.start_operation("score")
        handlers = self._resolve_candidates(candidate_handlers)
        criteria = await self._with_preferences(criteria, analysis, user_context)
        options = await self._score(
            handlers, requirements, detection, request, plan, criteria
        )
        await self._monitor.end_operation(op)

        op = self._monitor.start_operation("decide")
        decision = await self._engine.select_optimal_route(options, criteria, plan)
        await self._monitor.end_operation(op)

        handler = next(
            (h for h in handlers if h.handler_id == decision.handler_id), None
        )
        return RoutingResult(
            decision=decision,
            plan=plan,
            token_savings=optimization.token_savings,
            domain=detection,
            analysis=analysis,
            handler_requirements=self._handler_requirements(
                handler, requirements, optimization
            ),
            cache_hit=optimization.cache_hit,
            user_explanation=self._explain(decision, detection, optimization),
        )

    def _detect(
        self, request: NormalizedRequest, analysis: ContextAnalysis
    ) -> Tuple[DomainDetection, Requirements]:
        """Detect the domain and expand requirements from its pattern."""
        requirements = request.requirements
        detection = self._library.detect_domain(requirements, analysis, request.text)
        hints = self._library.expand_requirements(
            requirements, detection, analysis, request.text
        )

        domain = requirements.domain
        if domain is None and detection.matched:
            domain = detection.domain
        expanded = requirements.model_copy(
            update={"implicit": [*requirements.implicit, *hints], "domain": domain}
        )
        return detection, expanded

    def _resolve_candidates(
        self, candidates: Optional[Iterable[Candidate]]
    ) -> List[HandlerDescriptor]:
        """Resolve candidate ids through the registry."""
        if candidates is None:
            return self._registry.all()

        handlers = []
        for candidate in candidates:
            if isinstance(candidate, HandlerDescriptor):
                handlers.append(candidate)
                continue
            try:
                handlers.append(self._registry.get(candidate))
            except ConfigurationError as e:
                logger.warning(
                    "Skipping unknown handler", handler_id=candidate, error=str(e)
                )
        return handlers

    async def _with_preferences(
        self,
        criteria: DecisionCriteria,
        analysis: ContextAnalysis,
        user_context: UserContext,
    ) -> DecisionCriteria:
        """Merge stored, session and explicit preference weights."""
        merged: Dict[str, float] = {}
        if self._preferences is not None and analysis.user_id:
            merged.update(await self._preferences.get_preferences(analysis.user_id))
        merged.update(user_context.preferences)
        merged.update(criteria.user_preferences)
        return criteria.model_copy(update={"user_preferences": merged})

    async def _score(
        self,
        handlers: List[HandlerDescriptor],
        requirements: Requirements,
        detection: DomainDetection,
        request: NormalizedRequest,
        plan: OptimizationPlan,
        criteria: DecisionCriteria,
    ) -> List[ScoredOption]:
        """Assess and score every candidate."""
        options = []
        for handler in handlers:
            tracker = isinstance(self._availability, WorkloadTracker)
            if tracker and handler.max_concurrent:
                self._availability.set_limit(handler.handler_id, handler.max_concurrent)

            assessment = self._assessor.assess(
                handler, requirements, detection, request.text
            )
            options.append(
                self._scorer.score(
                    handler,
                    assessment,
                    plan=plan,
                    performance=await self._engine.ledger.history(handler.handler_id),
                    preference=criteria.user_preferences.get(
                        handler.handler_id, NEUTRAL_PREFERENCE
                    ),
                    optimize_for_tokens=criteria.optimize_for_tokens,
                )
            )
        return options

    def _handler_requirements(
        self,
        handler: Optional[HandlerDescriptor],
        requirements: Requirements,
        optimization: OptimizationResult,
    ) -> Union[Requirements, EssentialRequirements]:
        """Essential requirements unless the handler needs all, or savings regressed."""
        if handler is not None and handler.requires_full_requirements:
            return requirements
        if optimization.fallback or optimization.token_savings.regressed:
            return requirements
        return optimization.plan.essential_requirements

    def _explain(
        self,
        decision: RoutingDecision,
        detection: DomainDetection,
        optimization: OptimizationResult,
    ) -> UserExplanation:
        """Human readable explanation of a result."""
        if detection.matched:
            summary = (
                f"Routed to {decision.handler_id} for a {detection.domain} request"
            )
        else:
            summary = f"Routed to {decision.handler_id}"
        if decision.fallback:
            summary += " (fallback)"

        savings = optimization.token_savings
        if savings.saved > 0:
            message = f"Saved {savings.saved} tokens ({savings.percentage:.1f}%)"
            if optimization.cache_hit:
                message += " using a cached plan"
        else:
            message = "No token savings for this request"

        return UserExplanation(
            summary=summary,
            reasoning=decision.selection_reason,
            savings_message=message,
        )

    def _failure_result(self, request: NormalizedRequest) -> RoutingResult:
        """Fallback result with zero savings."""
        plan = OptimizationPlan.unoptimized()
        decision = RoutingDecision(
            handler_id=self._engine.fallback_handler_id,
            composite_score=config.fallback_confidence,
            confidence=config.fallback_confidence,
            selection_reason="Fallback route due to a routing failure",
            reasoning="Routing failed, handing the request to the fallback handler",
            fallback=True,
            decision_metadata=DecisionMetadata(
                fallback_trigger=FallbackTrigger.NO_OPTIONS,
                confidence_score=config.fallback_confidence,
            ),
        )
        return RoutingResult(
            decision=decision,
            plan=plan,
            token_savings=plan.token_savings,
            handler_requirements=request.requirements,
            user_explanation=UserExplanation(
                summary=f"Routed to {decision.handler_id} (fallback)",
                reasoning=decision.selection_reason,
                savings_message="No token savings for this request",
            ),
        )

    async def _track(
        self,
        decision: RoutingDecision,
        analysis: Optional[ContextAnalysis],
        request: NormalizedRequest,
    ) -> None:
        """Hold a workload slot until the outcome is reported."""
        if len(self._pending) >= self._pending_limit:
            stale_id, stale = self._pending.popitem(last=False)
            await self._availability.release(stale.handler_id)
            logger.warning("Dropped decision without outcome", decision_id=stale_id)

        user_id = analysis.user_id if analysis is not None else request.user_id
        await self._availability.acquire(decision.handler_id)
        self._pending[decision.decision_id] = PendingDecision(
            handler_id=decision.handler_id, user_id=user_id
        )
