"""
Pytest configuration and fixtures.

Provides common fixtures for testing.
"""

import pytest

from adaptive_router.config import RouterConfig
from adaptive_router.models.context import UserContext
from adaptive_router.models.plan import (
    ContextSummary,
    EssentialRequirements,
    OptimizationPlan,
    TokenSavings,
)
from adaptive_router.models.requirements import (
    Complexity,
    NormalizedRequest,
    Requirements,
)
from adaptive_router.models.routing import HandlerDescriptor


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def test_config() -> RouterConfig:
    """
    Create test configuration.

    Returns:
        Test configuration instance
    """
    return RouterConfig(app_env="development", cache_max_size=10)


@pytest.fixture
def clock() -> FakeClock:
    """Manually advanced clock."""
    return FakeClock()


@pytest.fixture
def store_requirements() -> Requirements:
    """Requirements of an online store request."""
    return Requirements(
        explicit=["product-listing", "shopping-cart", "checkout", "search", "reviews"],
        implicit=["user-accounts", "ssl-security", "responsive-design", "analytics"],
        technical={"frontend": "react", "backend": "python"},
        complexity=Complexity.MEDIUM,
    )


@pytest.fixture
def store_request(store_requirements: Requirements) -> NormalizedRequest:
    """Online store request."""
    return NormalizedRequest(
        text="I want an online store to sell products with a cart and checkout",
        requirements=store_requirements,
        user_id="user-1",
    )


@pytest.fixture
def entrepreneur_context() -> UserContext:
    """Session context of a small business owner."""
    return UserContext(
        user_id="user-1",
        user_type="entrepreneur",
        technical_level="beginner",
        scale="medium",
        goals=["revenue-generation"],
    )


@pytest.fixture
def handlers() -> list:
    """Candidate handlers."""
    return [
        HandlerDescriptor(
            handler_id="frontend-specialist",
            triggers=["ui", "design", "page", "responsive", "cart"],
            domains=["portfolio", "landing"],
        ),
        HandlerDescriptor(
            handler_id="backend-specialist",
            triggers=["api", "checkout", "payment", "cart", "products", "store"],
            domains=["ecommerce"],
            base_confidence=0.9,
        ),
        HandlerDescriptor(
            handler_id="database-specialist",
            triggers=["database", "inventory", "schema"],
            domains=[],
            requires_full_requirements=True,
        ),
    ]


def make_plan(percentage: float, domain: str = "ecommerce") -> OptimizationPlan:
    """Build a plan with the given savings percentage."""
    baseline = 1000
    saved = round(baseline * percentage / 100)
    return OptimizationPlan(
        essential_requirements=EssentialRequirements(
            explicit=["checkout"], domain=domain
        ),
        context_summary=ContextSummary(user_type="entrepreneur"),
        compression_ratio=0.4,
        token_savings=TokenSavings(
            baseline=baseline,
            optimized=baseline - saved,
            saved=saved,
            percentage=percentage,
        ),
        patterns_used=["storefront"],
    )


@pytest.fixture
def plan_factory():
    """Factory for plans with a given savings percentage."""
    return make_plan
