"""Test pattern repositories."""

import json

import pytest

from adaptive_router.exceptions import ConfigurationError, ValidationError
from adaptive_router.models.pattern import Pattern
from adaptive_router.patterns.catalog import GENERAL_PATTERN_ID, default_patterns
from adaptive_router.patterns.repository import (
    InMemoryPatternRepository,
    JsonPatternRepository,
)


class TestInMemoryPatternRepository:
    """Test in-memory repository."""

    def test_should_keep_registration_order(self):
        """Test list order."""
        repository = InMemoryPatternRepository(
            [Pattern(id="b"), Pattern(id="a")]
        )
        assert [p.id for p in repository.list_patterns()] == ["b", "a"]

    def test_should_reject_duplicate_ids(self):
        """Test duplicate registration."""
        repository = InMemoryPatternRepository([Pattern(id="a")])

        with pytest.raises(ConfigurationError) as exc_info:
            repository.register(Pattern(id="a"))

        assert "already registered" in str(exc_info.value)

    def test_should_bump_version_on_change(self):
        """Test version is monotonic."""
        repository = InMemoryPatternRepository()
        repository.register(Pattern(id="a"))
        first = repository.version
        repository.replace(Pattern(id="a", name="A"))
        second = repository.version
        repository.unregister("a")

        assert first < second < repository.version
        assert not repository.has_pattern("a")

    def test_should_reject_unknown_replace_and_unregister(self):
        """Test unknown ids."""
        repository = InMemoryPatternRepository()
        with pytest.raises(ConfigurationError):
            repository.replace(Pattern(id="missing"))
        with pytest.raises(ConfigurationError):
            repository.unregister("missing")

    def test_should_return_none_for_unknown_pattern(self):
        """Test get of unknown id."""
        assert InMemoryPatternRepository().get("missing") is None

    def test_should_find_default_pattern(self):
        """Test catalog default."""
        repository = InMemoryPatternRepository(default_patterns())
        assert repository.default_pattern().id == GENERAL_PATTERN_ID


class TestJsonPatternRepository:
    """Test JSON-backed repository."""

    def test_should_load_pattern_list(self, tmp_path):
        """Test loading a plain list."""
        path = tmp_path / "patterns.json"
        path.write_text(json.dumps([{"id": "a", "domains": ["alpha"]}]))

        repository = JsonPatternRepository(path)

        assert repository.get("a").domains == ["alpha"]
        assert repository.version == 1

    def test_should_use_declared_version(self, tmp_path):
        """Test versioned payload."""
        path = tmp_path / "patterns.json"
        path.write_text(json.dumps({"version": 7, "patterns": [{"id": "a"}]}))

        assert JsonPatternRepository(path).version == 7

    def test_should_count_reloads_without_declared_version(self, tmp_path):
        """Test reload bumps version."""
        path = tmp_path / "patterns.json"
        path.write_text(json.dumps([{"id": "a"}]))
        repository = JsonPatternRepository(path)

        path.write_text(json.dumps([{"id": "a"}, {"id": "b"}]))
        repository.reload()

        assert repository.version == 2
        assert len(repository.list_patterns()) == 2

    def test_should_raise_on_missing_file(self, tmp_path):
        """Test unreadable file."""
        with pytest.raises(ConfigurationError):
            JsonPatternRepository(tmp_path / "missing.json")

    def test_should_raise_on_invalid_json(self, tmp_path):
        """Test malformed JSON."""
        path = tmp_path / "patterns.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            JsonPatternRepository(path)

    def test_should_raise_on_invalid_pattern(self, tmp_path):
        """Test invalid pattern definition."""
        path = tmp_path / "patterns.json"
        path.write_text(json.dumps([{"id": ""}]))
        with pytest.raises(ValidationError):
            JsonPatternRepository(path)

    def test_should_keep_patterns_when_reload_fails(self, tmp_path):
        """Test failed reload keeps previous patterns."""
        path = tmp_path / "patterns.json"
        path.write_text(json.dumps([{"id": "a"}]))
        repository = JsonPatternRepository(path)

        path.write_text("{broken")
        with pytest.raises(ConfigurationError):
            repository.reload()

        assert repository.get("a") is not None
