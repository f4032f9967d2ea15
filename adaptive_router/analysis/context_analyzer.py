"""
Request context analysis.

Extracts user type, business signal, technical level, constraints, goals,
scale, budget and preferences from a normalized request.

Sandi Metz Principles:
- Single Responsibility: Context signal extraction
- Small methods: One dimension per method
- Degrade gracefully: Missing input yields documented defaults
"""

from collections import Counter
from typing import Dict, List, Optional

from adaptive_router.models.context import (
    BusinessContext,
    Constraint,
    ContextAnalysis,
    DesignPreferences,
    PastInteraction,
    UserContext,
)
from adaptive_router.models.requirements import (
    Complexity,
    NormalizedRequest,
    Requirements,
)
from adaptive_router.utils.logger import get_logger
from adaptive_router.utils.text import (
    any_term,
    count_terms,
    normalize_text,
    unique_ordered,
)

logger = get_logger(__name__)

DEFAULT_USER_TYPE = "general"
DEFAULT_TECHNICAL_LEVEL = "beginner"
DEFAULT_SCALE = "medium"
DEFAULT_BUDGET = "moderate"
DEFAULT_GOAL = "general-purpose"

# History may break ties but never outweighs one keyword hit
HISTORY_BONUS_CAP = 0.9
HISTORY_BONUS_PER_INTERACTION = 0.3

USER_TYPE_TERMS: Dict[str, List[str]] = {
    "entrepreneur": [
        "business", "startup", "revenue", "customers", "market", "sell", "profit",
    ],
    "creative": [
        "portfolio", "art", "design", "showcase", "creative", "visual", "gallery",
    ],
    "educator": [
        "students", "course", "learning", "educational", "teach", "lesson",
        "curriculum",
    ],
    "nonprofit": [
        "community", "volunteer", "donation", "cause", "charity", "social impact",
    ],
    "personal": ["hobby", "personal", "family", "friends", "fun", "interest"],
    "freelancer": [
        "freelance", "client", "portfolio", "services", "professional", "work",
    ],
    "developer": [
        "code", "api", "technical", "programming", "development", "software",
    ],
    "blogger": ["blog", "content", "writing", "articles", "posts", "publishing"],
}

BUSINESS_MODEL_TERMS: Dict[str, List[str]] = {
    "ecommerce": ["sell", "shop", "store", "products", "retail", "online store"],
    "saas": ["subscription", "software", "service", "platform"],
    "content": ["blog", "content", "media", "publishing"],
    "service": ["consulting", "agency", "freelance", "professional services"],
    "marketplace": ["marketplace", "connect buyers", "commission"],
    "advertising": ["ads", "advertising", "sponsored", "affiliate"],
}

AUDIENCE_TERMS: Dict[str, List[str]] = {
    "b2b": ["business", "companies", "enterprises", "professionals"],
    "b2c": ["customers", "consumers", "users", "people"],
    "niche": ["specific", "specialized", "targeted", "particular"],
    "mass": ["everyone", "broad", "wide audience"],
}

VALUE_TERMS: Dict[str, List[str]] = {
    "convenience": ["easy", "simple", "convenient", "quick"],
    "cost-saving": ["cheap", "affordable", "save money", "cost effective"],
    "time-saving": ["fast", "quick", "save time", "efficient"],
    "quality": ["high quality", "premium", "excellent", "superior"],
    "innovation": ["innovative", "new", "cutting edge", "advanced"],
}

REVENUE_TERMS: Dict[str, List[str]] = {
    "sales": ["sell", "purchase", "buy", "one-time"],
    "subscription": ["subscription", "monthly", "recurring", "membership"],
    "advertising": ["ads", "advertising", "sponsored"],
    "freemium": ["freemium", "free tier", "premium features"],
    "commission": ["commission", "transaction fee", "percentage"],
}

MARKET_SIZE_TERMS: Dict[str, List[str]] = {
    "global": ["global", "worldwide"],
    "national": ["national", "country"],
    "local": ["local", "city"],
}

ADVANTAGE_TERMS: Dict[str, List[str]] = {
    "first-mover": ["first", "pioneer", "new market"],
    "cost-leader": ["cheapest", "lowest cost", "affordable"],
    "quality-leader": ["best quality", "premium", "superior"],
    "convenience": ["most convenient", "easiest", "simplest"],
    "innovation": ["most innovative", "cutting edge", "revolutionary"],
}

TECHNICAL_LEVEL_TERMS: Dict[str, List[str]] = {
    "advanced": [
        "api", "database", "server", "deployment", "architecture", "scalable",
        "performance",
    ],
    "intermediate": [
        "responsive", "interactive", "dynamic", "integration", "authentication",
    ],
    "beginner": ["simple", "easy", "basic", "no code", "template", "drag and drop"],
}
TECHNICAL_LEVEL_WEIGHTS = {"advanced": 3, "intermediate": 2, "beginner": 1}
BACKGROUND_BONUS = {"developer": 5, "designer": 3, "business": 1}
ADVANCED_THRESHOLD = 8
INTERMEDIATE_THRESHOLD = 4

CONSTRAINT_RULES = [
    (
        ["free", "no budget", "cheap"],
        Constraint(type="budget", value="minimal", impact="high"),
    ),
    (
        ["quick", "asap", "urgent"],
        Constraint(type="timeline", value="short", impact="high"),
    ),
    (
        ["simple", "no code", "easy maintain"],
        Constraint(type="technical", value="low-complexity", impact="medium"),
    ),
    (
        ["small", "personal", "just me"],
        Constraint(type="scale", value="small", impact="medium"),
    ),
    (
        ["mobile only", "app only"],
        Constraint(type="platform", value="mobile-first", impact="high"),
    ),
]

GOAL_TERMS: Dict[str, List[str]] = {
    "revenue-generation": ["make money", "sell", "monetize", "income", "profit"],
    "audience-building": ["grow audience", "followers", "subscribers", "community"],
    "lead-generation": ["leads", "customers", "clients", "prospects"],
    "brand-building": ["brand", "reputation", "awareness", "recognition"],
    "productivity": ["organize", "efficient", "productive", "streamline"],
    "learning": ["learn", "education", "tutorial", "course", "teaching"],
    "portfolio": ["showcase", "portfolio", "work", "skills", "experience"],
    "automation": ["automate", "automatic", "streamline", "workflow"],
}

TIMELINE_TERMS: Dict[str, List[str]] = {
    "immediate": ["asap", "urgent", "immediately", "now", "today"],
    "short": ["quick", "fast", "soon", "this week", "few days"],
    "medium": ["month", "few weeks", "reasonable time", "moderate"],
    "long": ["eventually", "when ready", "no rush", "future", "long term"],
}
TIMELINE_BY_COMPLEXITY = {
    Complexity.HIGH: "long",
    Complexity.LOW: "short",
    Complexity.MEDIUM: "medium",
}

SCALE_TERMS: Dict[str, List[str]] = {
    "large": ["enterprise", "thousands", "millions", "global", "massive", "scale"],
    "medium": ["hundreds", "growing", "expanding", "regional", "moderate"],
    "small": ["personal", "small", "local", "friends", "family", "few users"],
}

BUDGET_TERMS: Dict[str, List[str]] = {
    "free-tier": ["free", "no budget", "open source"],
    "premium": ["premium", "enterprise", "unlimited budget"],
    "startup": ["startup", "bootstrap", "small budget"],
}

URGENCY_TERMS: Dict[str, List[str]] = {
    "critical": ["emergency", "critical", "asap", "immediately"],
    "high": ["urgent", "soon", "quickly", "fast"],
    "medium": ["reasonable", "normal", "standard"],
    "low": ["eventually", "when ready", "no rush"],
}

DESIGN_STYLE_TERMS: Dict[str, List[str]] = {
    "modern": ["modern", "contemporary", "sleek", "clean"],
    "minimalist": ["minimal", "simple", "uncluttered"],
    "professional": ["professional", "business", "corporate", "formal"],
    "creative": ["creative", "artistic", "unique", "colorful"],
    "playful": ["fun", "playful", "casual", "friendly"],
}

TECHNOLOGY_TERMS: Dict[str, List[str]] = {
    "react": ["react", "jsx", "modern frontend"],
    "wordpress": ["wordpress", "cms", "content management"],
    "static": ["static", "jamstack", "fast loading"],
    "database": ["database", "dynamic", "user data"],
    "api": ["api", "integration", "third party"],
}

PLATFORM_TERMS: Dict[str, List[str]] = {
    "mobile": ["mobile", "phone"],
    "desktop": ["desktop", "computer"],
    "tablet": ["tablet"],
    "web": ["web", "browser"],
}

MAINTENANCE_TERMS: Dict[str, List[str]] = {
    "minimal": ["no maintenance", "set and forget"],
    "active": ["regular updates", "active maintenance"],
}


def _first_match(text: str, table: Dict[str, List[str]]) -> Optional[str]:
    """Return the first table key whose terms occur in text."""
    for label, terms in table.items():
        if any_term(text, terms):
            return label
    return None


def _all_matches(text: str, table: Dict[str, List[str]]) -> List[str]:
    """Return every table key whose terms occur in text."""
    return [label for label, terms in table.items() if any_term(text, terms)]


class ContextAnalyzer:
    """
    Analyzes a request and its session context.

    Precedence per dimension: a signal in the current request wins, then a
    value supplied in the user context, then the interaction history, then
    the documented default.
    """

    def analyze(
        self,
        request: Optional[NormalizedRequest],
        user_context: Optional[UserContext] = None,
    ) -> ContextAnalysis:
        """
        Analyze a request.

        Args:
            request: Normalized request (None allowed)
            user_context: Session context (None allowed)

        Returns:
            Filled ContextAnalysis
        """
        request = request or NormalizedRequest()
        user_context = user_context or UserContext()
        text = self._signal_text(request)
        constraint_details = self.identify_constraints(text)

        analysis = ContextAnalysis(
            user_id=user_context.user_id or request.user_id,
            user_type=self.detect_user_type(text, user_context),
            technical_level=self.assess_technical_level(text, user_context),
            technical_background=user_context.technical_background,
            scale=self.assess_scale(text, user_context),
            budget=self.assess_budget(text, user_context),
            goals=self.extract_goals(text, user_context),
            constraints=unique_ordered(
                list(user_context.constraints)
                + [f"{c.type}:{c.value}" for c in constraint_details]
            ),
            preferences=dict(user_context.preferences),
            history=list(user_context.history),
            business_context=self.extract_business_context(text),
            constraint_details=constraint_details,
            timeline=self.estimate_timeline(text, request.requirements),
            urgency=_first_match(text, URGENCY_TERMS) or "medium",
            design=self.extract_design_preferences(text),
        )

        logger.debug(
            "Context analyzed",
            user_type=analysis.user_type,
            scale=analysis.scale,
            technical_level=analysis.technical_level,
        )
        return analysis

    def detect_user_type(self, text: str, user_context: UserContext) -> str:
        """
        Detect the user type.

        Args:
            text: Normalized request text
            user_context: Session context

        Returns:
            User type label
        """
        hits = {
            user_type: count_terms(text, terms)
            for user_type, terms in USER_TYPE_TERMS.items()
        }
        bonus = self._history_bonus(user_context.history, "user_type")

        if max(hits.values()) > 0:
            scores = {k: hits[k] + bonus.get(k, 0.0) for k in hits}
            return self._best(scores)
        if user_context.user_type:
            return user_context.user_type
        if bonus:
            return self._best(bonus)
        return DEFAULT_USER_TYPE

    def assess_technical_level(self, text: str, user_context: UserContext) -> str:
        """
        Assess the technical level.

        Keyword weights: advanced x3, intermediate x2, beginner x1. Declared
        background adds developer +5, designer +3, business +1.

        Args:
            text: Normalized request text
            user_context: Session context

        Returns:
            advanced, intermediate or beginner
        """
        keyword_score = sum(
            count_terms(text, terms) * TECHNICAL_LEVEL_WEIGHTS[level]
            for level, terms in TECHNICAL_LEVEL_TERMS.items()
        )
        background = BACKGROUND_BONUS.get(
            (user_context.technical_background or "").lower(), 0
        )

        if keyword_score == 0 and background == 0:
            if user_context.technical_level:
                return user_context.technical_level
            return self._history_level(user_context.history)

        score = keyword_score + background + self._history_level_bonus(
            user_context.history
        )
        if score >= ADVANCED_THRESHOLD:
            return "advanced"
        if score >= INTERMEDIATE_THRESHOLD:
            return "intermediate"
        return "beginner"

    def assess_scale(self, text: str, user_context: UserContext) -> str:
        """Assess the project scale."""
        scale = _first_match(text, SCALE_TERMS)
        if scale:
            return scale
        if any_term(text, ["business", "company"]):
            return "medium"
        if any_term(text, ["hobby"]):
            return "small"
        return user_context.scale or DEFAULT_SCALE

    def assess_budget(self, text: str, user_context: UserContext) -> str:
        """Assess budget sensitivity."""
        return (
            _first_match(text, BUDGET_TERMS) or user_context.budget or DEFAULT_BUDGET
        )

    def extract_goals(self, text: str, user_context: UserContext) -> List[str]:
        """Extract goals, merged with the goals already known."""
        goals = unique_ordered(
            _all_matches(text, GOAL_TERMS) + list(user_context.goals)
        )
        return goals or [DEFAULT_GOAL]

    def extract_business_context(self, text: str) -> Optional[BusinessContext]:
        """
        Extract business signal.

        Args:
            text: Normalized request text

        Returns:
            BusinessContext, or None when the request carries no business signal
        """
        business_model = _first_match(text, BUSINESS_MODEL_TERMS)
        revenue_model = _first_match(text, REVENUE_TERMS)
        audience = _first_match(text, AUDIENCE_TERMS)
        if not (business_model or revenue_model or audience):
            return None

        return BusinessContext(
            business_model=business_model or "general",
            target_audience=audience or "general",
            value_proposition=_all_matches(text, VALUE_TERMS) or ["general-value"],
            revenue_model=revenue_model or "unknown",
            market_size=_first_match(text, MARKET_SIZE_TERMS) or "regional",
            competitive_advantages=_all_matches(text, ADVANTAGE_TERMS),
        )

    def identify_constraints(self, text: str) -> List[Constraint]:
        """Identify budget, timeline, technical, scale and platform constraints."""
        return [
            constraint.model_copy()
            for terms, constraint in CONSTRAINT_RULES
            if any_term(text, terms)
        ]

    def estimate_timeline(self, text: str, requirements: Requirements) -> str:
        """Estimate the timeline, falling back on requirement complexity."""
        timeline = _first_match(text, TIMELINE_TERMS)
        if timeline:
            return timeline
        return TIMELINE_BY_COMPLEXITY.get(requirements.complexity, "medium")

    def extract_design_preferences(self, text: str) -> DesignPreferences:
        """Extract design, technology, platform and maintenance preferences."""
        return DesignPreferences(
            design_style=_first_match(text, DESIGN_STYLE_TERMS) or "balanced",
            technology=_all_matches(text, TECHNOLOGY_TERMS),
            platforms=_all_matches(text, PLATFORM_TERMS) or ["web", "mobile"],
            maintenance=_first_match(text, MAINTENANCE_TERMS) or "moderate",
        )

    def _signal_text(self, request: NormalizedRequest) -> str:
        """Combine request text and stated requirements for matching."""
        parts = [request.text]
        parts.extend(request.requirements.explicit)
        parts.extend(request.requirements.functional)
        return normalize_text(" ".join(p for p in parts if p))

    def _best(self, scores: Dict[str, float]) -> str:
        """Highest score, ties resolved by table order."""
        best_label, best_score = None, float("-inf")
        for label, score in scores.items():
            if score > best_score:
                best_label, best_score = label, score
        return best_label

    def _history_bonus(
        self, history: List[PastInteraction], field: str
    ) -> Dict[str, float]:
        """Per-value bonus derived from past interactions."""
        counts = Counter(
            getattr(item, field) for item in history if getattr(item, field)
        )
        return {
            value: min(HISTORY_BONUS_CAP, count * HISTORY_BONUS_PER_INTERACTION)
            for value, count in counts.items()
        }

    def _history_level(self, history: List[PastInteraction]) -> str:
        """Most frequent technical level in history."""
        counts = Counter(
            item.technical_level for item in history if item.technical_level
        )
        if not counts:
            return DEFAULT_TECHNICAL_LEVEL
        return counts.most_common(1)[0][0]

    def _history_level_bonus(self, history: List[PastInteraction]) -> float:
        """Bonus from past interactions at intermediate or advanced level."""
        experienced = sum(
            1
            for item in history
            if item.technical_level in ("advanced", "intermediate")
        )
        return min(HISTORY_BONUS_CAP, experienced * HISTORY_BONUS_PER_INTERACTION)
