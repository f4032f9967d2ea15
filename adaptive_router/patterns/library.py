"""
Domain pattern library.

Detects the problem domain of a request, expands its requirements from
the matched pattern and finds patterns reusable for optimization.

Sandi Metz Principles:
- Single Responsibility: Pattern matching and expansion
- Dependency Injection: Pattern repository injected
- Open/Closed: Per-pattern expanders plug in without subclassing
"""

from typing import Any, Callable, Dict, List, Optional

from adaptive_router.config import config
from adaptive_router.models.pattern import (
    ApplicablePattern,
    DomainDetection,
    DomainMatch,
    Pattern,
)
from adaptive_router.models.requirements import Requirements
from adaptive_router.patterns.catalog import GENERAL_PATTERN_ID, default_patterns
from adaptive_router.patterns.repository import (
    InMemoryPatternRepository,
    JsonPatternRepository,
    PatternRepository,
)
from adaptive_router.utils.logger import get_logger, log_error
from adaptive_router.utils.text import (
    contains_term,
    count_terms,
    normalize_text,
    unique_ordered,
)

logger = get_logger(__name__)

Expander = Callable[[Requirements, DomainDetection, Any], List[str]]

EVIDENCE_WEIGHT = 0.75
CONTEXT_WEIGHT = 0.25
PHRASE_WEIGHT = 2
EVIDENCE_SATURATION = 4
DECLARED_DOMAIN_BONUS = 0.5

USER_TYPE_OVERLAP = 0.5
COMPLEXITY_OVERLAP = 0.3
SCALE_OVERLAP = 0.2

APPLICABILITY_WEIGHTS = {
    "domain": 0.4,
    "user_type": 0.3,
    "complexity": 0.2,
    "scale": 0.1,
}

ALTERNATIVE_COUNT = 2


def confidence_label(score: float) -> str:
    """
    Map a match score to a confidence label.

    Args:
        score: Match score 0-1

    Returns:
        high, medium, low or very-low
    """
    if score > 0.8:
        return "high"
    if score > 0.6:
        return "medium"
    if score > 0.4:
        return "low"
    return "very-low"


def default_repository() -> PatternRepository:
    """Build the repository named by configuration."""
    if config.patterns_file:
        return JsonPatternRepository(config.patterns_file)
    return InMemoryPatternRepository(default_patterns())


class DomainPatternLibrary:
    """
    Matches requests against a repository of domain patterns.

    Every pattern is scored independently; the list is sorted with a stable
    sort so equal scores keep registration order.
    """

    def __init__(
        self,
        repository: Optional[PatternRepository] = None,
        applicability_threshold: Optional[float] = None,
    ):
        """
        Initialize library.

        Args:
            repository: Pattern repository (built-in catalog if None)
            applicability_threshold: Minimum score for reusable patterns
        """
        self._repository = repository or default_repository()
        self._threshold = (
            applicability_threshold
            if applicability_threshold is not None
            else config.pattern_applicability_threshold
        )
        self._expanders: Dict[str, List[Expander]] = {}

    @property
    def repository(self) -> PatternRepository:
        """Pattern repository."""
        return self._repository

    @property
    def version(self) -> int:
        """Version of the underlying repository."""
        return self._repository.version

    def register_expander(self, pattern_id: str, expander: Expander) -> None:
        """
        Attach a custom requirement expander to a pattern.

        Args:
            pattern_id: Pattern identifier
            expander: Callable(requirements, detection, context) -> hints
        """
        self._expanders.setdefault(pattern_id, []).append(expander)

    def detect_domain(
        self,
        requirements: Optional[Requirements] = None,
        context: Any = None,
        text: str = "",
    ) -> DomainDetection:
        """
        Detect the most likely domain of a request.

        Args:
            requirements: Structured requirements (None allowed)
            context: User context or analysis (None allowed)
            text: Request text

        Returns:
            DomainDetection with the top match and two alternatives
        """
        requirements = requirements or Requirements()
        signal = self._signal_text(requirements, text)

        matches = [
            DomainMatch(
                pattern_id=pattern.id,
                domain=pattern.primary_domain,
                score=self.score_pattern(pattern, requirements, context, signal),
            )
            for pattern in self._repository.list_patterns()
        ]
        ranked = sorted(matches, key=lambda m: m.score, reverse=True)

        if not ranked or ranked[0].score <= 0.0:
            return self._default_detection(ranked)

        best = ranked[0]
        detection = DomainDetection(
            domain=best.domain,
            pattern_id=best.pattern_id,
            score=best.score,
            confidence=confidence_label(best.score),
            alternatives=ranked[1 : 1 + ALTERNATIVE_COUNT],
        )
        logger.info(
            "Domain detected",
            domain=detection.domain,
            score=round(detection.score, 3),
            confidence=detection.confidence,
        )
        return detection

    def score_pattern(
        self,
        pattern: Pattern,
        requirements: Requirements,
        context: Any,
        signal: str,
    ) -> float:
        """
        Score a single pattern.

        score = 0.75 * evidence + 0.25 * context overlap, where evidence
        comes from keyword and phrase hits. No evidence means score 0.

        Args:
            pattern: Pattern to score
            requirements: Structured requirements
            context: User context or analysis
            signal: Normalized request text

        Returns:
            Score 0-1
        """
        evidence = self._evidence(pattern, requirements, signal)
        if evidence <= 0.0:
            return 0.0

        overlap = 0.0
        if getattr(context, "user_type", None) in pattern.user_types:
            overlap += USER_TYPE_OVERLAP
        if self._same_complexity(pattern, requirements):
            overlap += COMPLEXITY_OVERLAP
        if self._same_scale(pattern, context):
            overlap += SCALE_OVERLAP

        score = EVIDENCE_WEIGHT * evidence + CONTEXT_WEIGHT * overlap
        return round(min(score, 1.0), 6)

    def expand_requirements(
        self,
        requirements: Optional[Requirements],
        detection: DomainDetection,
        context: Any = None,
        text: str = "",
    ) -> List[str]:
        """
        Expand requirements from the detected pattern.

        Args:
            requirements: Existing requirements
            detection: Domain detection result
            context: User context or analysis
            text: Request text

        Returns:
            New requirement hints not already present, in order
        """
        requirements = requirements or Requirements()
        pattern = self._repository.get(detection.pattern_id)
        if pattern is None:
            pattern = self._repository.default_pattern()
        if pattern is None:
            return []

        signal = self._signal_text(requirements, text)
        hints = list(pattern.requirements.implicit)
        hints.extend(self._rule_hints(pattern, context, signal))
        hints.extend(self._custom_hints(pattern, requirements, detection, context))

        existing = set(requirements.explicit) | set(requirements.implicit)
        existing |= set(requirements.functional)
        return [hint for hint in unique_ordered(hints) if hint not in existing]

    def find_applicable_patterns(
        self,
        requirements: Optional[Requirements],
        context: Any = None,
        threshold: Optional[float] = None,
    ) -> List[ApplicablePattern]:
        """
        Find patterns whose optimizations can be reused.

        Weights: domain 0.4, user type 0.3, complexity 0.2, scale 0.1.

        Args:
            requirements: Structured requirements (domain should be set)
            context: User context or analysis
            threshold: Minimum score (configured default if None)

        Returns:
            Applicable patterns sorted by score, highest first
        """
        requirements = requirements or Requirements()
        limit = self._threshold if threshold is None else threshold
        found = []

        for pattern in self._repository.list_patterns():
            if pattern.is_default:
                continue
            score, reasons = self._applicability(pattern, requirements, context)
            if score >= limit and score > 0.0:
                found.append(
                    ApplicablePattern(
                        pattern=pattern, score=score, reasoning=", ".join(reasons)
                    )
                )

        return sorted(found, key=lambda a: a.score, reverse=True)

    def get_pattern(self, pattern_id: str) -> Optional[Pattern]:
        """Get a pattern by id, None if unknown."""
        return self._repository.get(pattern_id)

    def available_domains(self) -> List[str]:
        """List every domain covered by a registered pattern."""
        domains: List[str] = []
        for pattern in self._repository.list_patterns():
            domains.extend(pattern.domains)
        return unique_ordered(domains)

    def _evidence(
        self, pattern: Pattern, requirements: Requirements, signal: str
    ) -> float:
        """Keyword/phrase evidence plus declared-domain bonus, capped at 1."""
        hits = count_terms(signal, pattern.keywords)
        hits += PHRASE_WEIGHT * count_terms(signal, pattern.phrases)
        evidence = min(1.0, hits / EVIDENCE_SATURATION)
        if requirements.domain and requirements.domain in pattern.domains:
            evidence += DECLARED_DOMAIN_BONUS
        return min(evidence, 1.0)

    def _applicability(
        self, pattern: Pattern, requirements: Requirements, context: Any
    ) -> tuple[float, List[str]]:
        """Score pattern reuse against requirements and context."""
        score = 0.0
        reasons = []
        if requirements.domain and requirements.domain in pattern.domains:
            score += APPLICABILITY_WEIGHTS["domain"]
            reasons.append("Domain match")
        if getattr(context, "user_type", None) in pattern.user_types:
            score += APPLICABILITY_WEIGHTS["user_type"]
            reasons.append("User type match")
        if self._same_complexity(pattern, requirements):
            score += APPLICABILITY_WEIGHTS["complexity"]
            reasons.append("Complexity match")
        if self._same_scale(pattern, context):
            score += APPLICABILITY_WEIGHTS["scale"]
            reasons.append("Scale match")
        return round(min(score, 1.0), 6), reasons

    def _same_complexity(self, pattern: Pattern, requirements: Requirements) -> bool:
        """Whether the pattern declares the request's complexity."""
        return pattern.complexity is not None and (
            pattern.complexity == requirements.complexity
        )

    def _same_scale(self, pattern: Pattern, context: Any) -> bool:
        """Whether the pattern declares the context's scale."""
        return pattern.scale is not None and (
            pattern.scale == getattr(context, "scale", None)
        )

    def _rule_hints(self, pattern: Pattern, context: Any, signal: str) -> List[str]:
        """Hints from declarative expansion rules."""
        hints = []
        goals = getattr(context, "goals", None) or []
        for rule, rule_hints in pattern.expansions.items():
            kind, _, value = rule.partition(":")
            if kind == "scale":
                applies = getattr(context, "scale", None) == value
            elif kind == "user_type":
                applies = getattr(context, "user_type", None) == value
            elif kind == "keyword":
                applies = contains_term(signal, value)
            elif kind == "goal":
                applies = value in goals
            else:
                logger.warning(
                    "Unknown expansion rule", pattern_id=pattern.id, rule=rule
                )
                applies = False
            if applies:
                hints.extend(rule_hints)
        return hints

    def _custom_hints(
        self,
        pattern: Pattern,
        requirements: Requirements,
        detection: DomainDetection,
        context: Any,
    ) -> List[str]:
        """Hints from registered expanders; a failing expander adds nothing."""
        hints = []
        for expander in self._expanders.get(pattern.id, []):
            try:
                hints.extend(expander(requirements, detection, context) or [])
            except Exception as e:
                log_error(e, "pattern_expansion", pattern_id=pattern.id)
        return hints

    def _default_detection(self, ranked: List[DomainMatch]) -> DomainDetection:
        """Detection result when no pattern matched."""
        default = self._repository.default_pattern()
        pattern_id = default.id if default else GENERAL_PATTERN_ID
        domain = default.primary_domain if default else GENERAL_PATTERN_ID
        alternatives = [m for m in ranked if m.pattern_id != pattern_id]

        logger.info("No domain matched, using default pattern", pattern_id=pattern_id)
        return DomainDetection(
            domain=domain,
            pattern_id=pattern_id,
            score=0.0,
            confidence=confidence_label(0.0),
            alternatives=alternatives[:ALTERNATIVE_COUNT],
        )

    def _signal_text(self, requirements: Requirements, text: str) -> str:
        """Normalized text used for keyword matching."""
        parts = [text or ""]
        parts.extend(requirements.explicit)
        parts.extend(requirements.functional)
        return normalize_text(" ".join(p for p in parts if p))
