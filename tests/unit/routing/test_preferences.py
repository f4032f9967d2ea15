"""Test learned user preferences."""

import pytest

from adaptive_router.routing.preferences import InMemoryPreferenceStore


@pytest.fixture
def store() -> InMemoryPreferenceStore:
    """Store with the default learning rate."""
    return InMemoryPreferenceStore(learning_rate=0.2)


class TestInMemoryPreferenceStore:
    """Test preference learning."""

    @pytest.mark.asyncio
    async def test_should_start_empty(self, store):
        """Test unknown user."""
        assert await store.get_preferences("user-1") == {}

    @pytest.mark.asyncio
    async def test_should_move_towards_satisfaction(self, store):
        """Test satisfied and unsatisfied outcomes."""
        liked = await store.update("user-1", "backend", 1.0)
        disliked = await store.update("user-1", "frontend", 0.0)

        assert liked == pytest.approx(1.1)
        assert disliked == pytest.approx(0.9)
        assert await store.get_preferences("user-1") == {
            "backend": pytest.approx(1.1),
            "frontend": pytest.approx(0.9),
        }

    @pytest.mark.asyncio
    async def test_should_converge_within_bounds(self, store):
        """Test repeated satisfaction approaches 1.5."""
        weight = 1.0
        for _ in range(50):
            weight = await store.update("user-1", "backend", 1.0)

        assert 1.49 < weight <= 1.5

    @pytest.mark.asyncio
    async def test_should_clamp_satisfaction(self, store):
        """Test out of range satisfaction."""
        weight = await store.update("user-1", "backend", 7.0)
        assert weight == pytest.approx(1.1)

    @pytest.mark.asyncio
    async def test_should_keep_users_separate(self, store):
        """Test per user weights."""
        await store.update("user-1", "backend", 1.0)

        assert await store.get_preferences("user-2") == {}

    @pytest.mark.asyncio
    async def test_should_return_copy(self, store):
        """Test callers cannot mutate stored weights."""
        await store.update("user-1", "backend", 1.0)
        preferences = await store.get_preferences("user-1")
        preferences["backend"] = 99

        assert (await store.get_preferences("user-1"))["backend"] == pytest.approx(1.1)
