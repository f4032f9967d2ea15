"""Test cache key generation."""

import pytest

from adaptive_router.models.context import UserContext
from adaptive_router.models.plan import ContextSummary, EssentialRequirements
from adaptive_router.models.requirements import Complexity, Requirements
from adaptive_router.utils.hasher import (
    context_fingerprint,
    generate_optimization_key,
    hash_object,
    requirement_fingerprint,
)


class TestHashObject:
    """Test deterministic hashing."""

    def test_should_ignore_key_order(self):
        """Test canonical form ignores dict ordering."""
        assert hash_object({"a": 1, "b": 2}) == hash_object({"b": 2, "a": 1})

    def test_should_differ_for_different_values(self):
        """Test different values hash differently."""
        assert hash_object({"a": 1}) != hash_object({"a": 2})


class TestFingerprints:
    """Test fingerprint extraction."""

    def test_should_fill_defaults_for_missing_fields(self):
        """Test None inputs use defaults."""
        assert requirement_fingerprint(None) == {
            "explicit": [],
            "implicit": [],
            "domain": "unknown",
            "complexity": "medium",
        }
        assert context_fingerprint(None) == {
            "user_type": "general",
            "technical_level": "beginner",
            "scale": "medium",
        }

    def test_should_render_enum_values(self):
        """Test enums render as their value."""
        requirements = Requirements(complexity=Complexity.HIGH)
        assert requirement_fingerprint(requirements)["complexity"] == "high"

    def test_should_match_full_and_essential_shapes(self):
        """Test full and essential requirements with equal fields match."""
        full = Requirements(explicit=["a"], implicit=["b"], domain="blog")
        essential = EssentialRequirements(
            explicit=["a"], implicit=["b"], domain="blog", complexity=Complexity.MEDIUM
        )
        assert requirement_fingerprint(full) == requirement_fingerprint(essential)


class TestGenerateOptimizationKey:
    """Test optimization cache keys."""

    def test_should_be_deterministic(self):
        """Test identical inputs give identical keys."""
        requirements = Requirements(explicit=["cart", "checkout"], domain="ecommerce")
        context = UserContext(user_type="entrepreneur")

        first = generate_optimization_key(requirements, context)
        second = generate_optimization_key(requirements, context)

        assert first == second
        assert first.startswith("opt:")

    def test_should_discriminate_requirements(self):
        """Test a different requirement list gives a different key."""
        context = UserContext()
        first = generate_optimization_key(Requirements(explicit=["cart"]), context)
        second = generate_optimization_key(Requirements(explicit=["blog"]), context)
        assert first != second

    @pytest.mark.parametrize(
        "requirement_changes,context_changes",
        [
            ({"implicit": ["payments"]}, {}),
            ({"domain": "blog"}, {}),
            ({"complexity": Complexity.HIGH}, {}),
            ({}, {"technical_level": "expert"}),
            ({}, {"scale": "large"}),
        ],
    )
    def test_should_discriminate_each_field(
        self, requirement_changes, context_changes
    ):
        """Test changing any single discriminating field changes the key."""
        requirements = Requirements(
            explicit=["cart"],
            implicit=["auth"],
            domain="ecommerce",
            complexity=Complexity.MEDIUM,
        )
        context = UserContext(
            user_type="entrepreneur", technical_level="beginner", scale="small"
        )

        base = generate_optimization_key(requirements, context)
        changed = generate_optimization_key(
            requirements.model_copy(update=requirement_changes),
            context.model_copy(update=context_changes),
        )

        assert base != changed

    def test_should_discriminate_context(self):
        """Test a different user type gives a different key."""
        requirements = Requirements(explicit=["cart"])
        first = generate_optimization_key(
            requirements, UserContext(user_type="entrepreneur")
        )
        second = generate_optimization_key(
            requirements, UserContext(user_type="creative")
        )
        assert first != second

    def test_should_ignore_non_discriminating_context_fields(self):
        """Test budget and goals do not change the key."""
        requirements = Requirements(explicit=["cart"])
        first = generate_optimization_key(requirements, ContextSummary(budget="free"))
        second = generate_optimization_key(
            requirements, ContextSummary(budget="premium", primary_goal="learning")
        )
        assert first == second
