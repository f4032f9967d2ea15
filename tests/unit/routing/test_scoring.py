"""Test handler scoring."""

import pytest

from adaptive_router.models.routing import HandlerDescriptor, PerformanceHistory
from adaptive_router.routing.handlers import HandlerAssessment
from adaptive_router.routing.scoring import (
    HandlerScorer,
    PlanEfficiencyEstimator,
    ScoreWeights,
)


@pytest.fixture
def scorer() -> HandlerScorer:
    """Scorer with default weights."""
    return HandlerScorer()


@pytest.fixture
def handler() -> HandlerDescriptor:
    """Plain handler."""
    return HandlerDescriptor(handler_id="backend-specialist")


def assessment(confidence: float = 0.8) -> HandlerAssessment:
    """Assessment with a given confidence."""
    return HandlerAssessment(handler_id="backend-specialist", confidence=confidence)


class TestPlanEfficiencyEstimator:
    """Test efficiency estimates."""

    def test_should_report_none_without_plan(self, handler):
        """Test no plan."""
        efficiency = PlanEfficiencyEstimator().estimate(handler, None)
        assert efficiency.efficiency == 0.0
        assert efficiency.source == "none"

    def test_should_use_plan_savings(self, handler, plan_factory):
        """Test efficiency from savings percentage."""
        efficiency = PlanEfficiencyEstimator().estimate(handler, plan_factory(60))

        assert efficiency.efficiency == pytest.approx(0.6)
        assert efficiency.estimated_savings == 600
        assert efficiency.source == "plan"

    def test_should_halve_for_full_requirements(self, plan_factory):
        """Test handlers needing full requirements."""
        handler = HandlerDescriptor(handler_id="db", requires_full_requirements=True)

        efficiency = PlanEfficiencyEstimator().estimate(handler, plan_factory(60))

        assert efficiency.efficiency == pytest.approx(0.3)
        assert efficiency.estimated_savings == 300

    def test_should_floor_regressed_plans(self, handler, plan_factory):
        """Test negative savings give zero efficiency."""
        efficiency = PlanEfficiencyEstimator().estimate(handler, plan_factory(-20))

        assert efficiency.efficiency == 0.0
        assert efficiency.estimated_savings == 0


class TestComposite:
    """Test composite score."""

    def test_should_normalize_by_weight_sum(self, scorer):
        """Test default weights sum to 0.85."""
        score = scorer.composite(0.8, 0.5, 0.5, 0.5)
        assert score == pytest.approx(0.53 / 0.85)

    def test_should_reach_one_at_perfect_components(self, scorer):
        """Test upper bound."""
        assert scorer.composite(1, 1, 1, 1) == pytest.approx(1.0)
        assert scorer.composite(1, 1, 1, 1, optimize_for_tokens=True) == (
            pytest.approx(1.0)
        )

    def test_should_weigh_efficiency_more_when_optimizing(self, scorer):
        """Test optimized efficiency weight."""
        plain = scorer.composite(0, 1, 0, 0)
        optimized = scorer.composite(0, 1, 0, 0, optimize_for_tokens=True)

        assert plain == pytest.approx(0.15 / 0.85)
        assert optimized == pytest.approx(0.30)

    def test_should_return_zero_without_weights(self):
        """Test degenerate weights."""
        scorer = HandlerScorer(
            ScoreWeights(
                confidence=0,
                token_efficiency=0,
                token_efficiency_optimized=0,
                performance=0,
                preference=0,
            )
        )
        assert scorer.composite(1, 1, 1, 1) == 0.0


class TestScore:
    """Test scoring a candidate."""

    def test_should_use_neutral_components(self, scorer, handler):
        """Test no plan, history or preference."""
        option = scorer.score(handler, assessment(0.8))

        assert option.handler_id == "backend-specialist"
        assert option.confidence == 0.8
        assert option.composite_score == pytest.approx(
            (0.35 * 0.8 + 0.2 * 0.5 + 0.15 * 0.5) / 0.85
        )

    def test_should_reward_history(self, scorer, handler):
        """Test successful history raises the score."""
        neutral = scorer.score(handler, assessment())
        proven = scorer.score(
            handler,
            assessment(),
            performance=PerformanceHistory(success_rate=1.0, total_requests=5),
        )
        assert proven.composite_score > neutral.composite_score

    def test_should_map_preference(self, scorer, handler):
        """Test preference weight 1.5 saturates the component."""
        liked = scorer.score(handler, assessment(), preference=1.5)
        disliked = scorer.score(handler, assessment(), preference=0.5)

        assert liked.composite_score - disliked.composite_score == pytest.approx(
            0.15 / 0.85
        )

    def test_should_carry_plan_efficiency(self, scorer, handler, plan_factory):
        """Test efficiency from the plan."""
        option = scorer.score(handler, assessment(), plan=plan_factory(50))

        assert option.token_efficiency.efficiency == pytest.approx(0.5)
        assert 0.0 <= option.composite_score <= 1.0
