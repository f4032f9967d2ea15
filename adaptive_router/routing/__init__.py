"""
Routing module.

Contains routing components:
- Handler registry and assessment
- Composite scoring
- Availability tracking
- Performance ledger
- Preference store
- Decision engine
- Router
"""

from adaptive_router.routing.availability import HandlerAvailability, WorkloadTracker
from adaptive_router.routing.decision_engine import (
    DecisionRecord,
    RoutingDecisionEngine,
)
from adaptive_router.routing.handlers import (
    HandlerAssessment,
    HandlerAssessor,
    HandlerRegistry,
    KeywordHandlerAssessor,
)
from adaptive_router.routing.ledger import PerformanceLedger
from adaptive_router.routing.preferences import (
    InMemoryPreferenceStore,
    PreferenceStore,
)
from adaptive_router.routing.router import Router
from adaptive_router.routing.scoring import (
    HandlerScorer,
    PlanEfficiencyEstimator,
    ScoreWeights,
    TokenEfficiencyEstimator,
)

__all__ = [
    # Availability
    "HandlerAvailability",
    "WorkloadTracker",
    # Decisions
    "DecisionRecord",
    "RoutingDecisionEngine",
    # Handlers
    "HandlerAssessment",
    "HandlerAssessor",
    "HandlerRegistry",
    "KeywordHandlerAssessor",
    # Performance
    "PerformanceLedger",
    # Preferences
    "InMemoryPreferenceStore",
    "PreferenceStore",
    # Router
    "Router",
    # Scoring
    "HandlerScorer",
    "PlanEfficiencyEstimator",
    "ScoreWeights",
    "TokenEfficiencyEstimator",
]
