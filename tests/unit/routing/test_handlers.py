"""Test handler registry and keyword assessment."""

import pytest

from adaptive_router.exceptions import ConfigurationError
from adaptive_router.models.pattern import DomainDetection
from adaptive_router.models.requirements import Requirements
from adaptive_router.models.routing import HandlerDescriptor
from adaptive_router.routing.handlers import HandlerRegistry, KeywordHandlerAssessor

STORE_TEXT = "I want an online store to sell products with a cart and checkout"


def detection(domain: str, score: float = 0.9) -> DomainDetection:
    """Detection result for a domain."""
    return DomainDetection(
        domain=domain, pattern_id=domain, score=score, confidence="high"
    )


@pytest.fixture
def assessor() -> KeywordHandlerAssessor:
    """Keyword assessor."""
    return KeywordHandlerAssessor()


class TestKeywordHandlerAssessor:
    """Test keyword task fit."""

    def test_should_fully_fit_with_three_matches(self, assessor, handlers):
        """Test backend handler on a store request."""
        backend = handlers[1]

        assessment = assessor.assess(backend, Requirements(), text=STORE_TEXT)

        assert assessment.matched_triggers == ["checkout", "cart", "products", "store"]
        assert assessment.confidence == pytest.approx(0.9)
        assert assessment.reasoning.startswith("matched checkout")

    def test_should_scale_partial_fit(self, assessor, handlers):
        """Test one trigger hit is a third of the fit."""
        frontend = handlers[0]

        assessment = assessor.assess(frontend, Requirements(), text=STORE_TEXT)

        assert assessment.matched_triggers == ["cart"]
        assert assessment.confidence == pytest.approx(0.8 / 3)

    def test_should_add_domain_bonus(self, assessor):
        """Test serving the detected domain."""
        handler = HandlerDescriptor(
            handler_id="api", triggers=["api"], domains=["ecommerce"]
        )

        assessment = assessor.assess(
            handler, Requirements(), detection("ecommerce"), "build an api"
        )

        assert assessment.domain_match is True
        assert assessment.confidence == pytest.approx(0.8 * (1 / 3 + 0.5))
        assert assessment.reasoning == "matched api; serves ecommerce"

    def test_should_ignore_unmatched_detection(self, assessor):
        """Test default detection gives no bonus."""
        handler = HandlerDescriptor(handler_id="general", domains=["general"])

        assessment = assessor.assess(
            handler, Requirements(), detection("general", score=0.0), "hello"
        )

        assert assessment.domain_match is False
        assert assessment.confidence == 0.0
        assert assessment.reasoning == "no matching triggers"

    def test_should_read_requirement_lists(self, assessor, handlers):
        """Test requirement items count as signal."""
        database = handlers[2]

        assessment = assessor.assess(
            database, Requirements(explicit=["inventory", "database schema"])
        )

        assert assessment.matched_triggers == ["database", "inventory", "schema"]

    def test_should_cap_confidence(self, assessor):
        """Test confidence never reaches certainty."""
        handler = HandlerDescriptor(
            handler_id="sure", triggers=["a1", "b2", "c3"], base_confidence=1.0
        )

        assessment = assessor.assess(handler, Requirements(), text="a1 b2 c3")

        assert assessment.confidence == 0.98


class TestHandlerRegistry:
    """Test handler registry."""

    def test_should_register_in_order(self, handlers):
        """Test listing."""
        registry = HandlerRegistry(handlers)

        assert registry.list_handlers() == [
            "frontend-specialist",
            "backend-specialist",
            "database-specialist",
        ]
        assert registry.all()[1].base_confidence == 0.9
        assert registry.has_handler("backend-specialist")

    def test_should_reject_duplicates(self, handlers):
        """Test duplicate ids."""
        registry = HandlerRegistry(handlers)

        with pytest.raises(ConfigurationError) as exc_info:
            registry.register(handlers[0])

        assert "already registered" in str(exc_info.value)

    def test_should_list_available_on_unknown_get(self, handlers):
        """Test unknown handler message."""
        registry = HandlerRegistry(handlers)

        with pytest.raises(ConfigurationError) as exc_info:
            registry.get("designer")

        assert "Available handlers: frontend-specialist" in str(exc_info.value)

    def test_should_unregister(self, handlers):
        """Test removal."""
        registry = HandlerRegistry(handlers)
        registry.unregister("frontend-specialist")

        assert not registry.has_handler("frontend-specialist")
        with pytest.raises(ConfigurationError):
            registry.unregister("frontend-specialist")
