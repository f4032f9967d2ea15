"""
Domain pattern models.

Sandi Metz Principles:
- Single Responsibility: Pattern reference data
- Immutable data: Patterns are read-only at runtime
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from adaptive_router.models.requirements import Complexity


class PatternRequirements(BaseModel):
    """Requirement defaults carried by a pattern."""

    model_config = ConfigDict(frozen=True)

    implicit: List[str] = Field(default_factory=list, description="Implicit defaults")
    technical: Dict[str, str] = Field(
        default_factory=dict, description="Technical defaults"
    )


class Pattern(BaseModel):
    """A named problem-domain pattern."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Pattern identifier")
    name: str = Field(default="", description="Human readable name")
    domains: List[str] = Field(default_factory=list, description="Domains covered")
    keywords: List[str] = Field(default_factory=list, description="Domain keywords")
    phrases: List[str] = Field(
        default_factory=list, description="Multi-word phrases (weighted higher)"
    )
    user_types: List[str] = Field(
        default_factory=list, description="User types the pattern suits"
    )
    complexity: Optional[Complexity] = Field(None, description="Typical complexity")
    scale: Optional[str] = Field(None, description="Typical scale")
    average_token_savings: int = Field(
        default=0, ge=0, description="Average tokens saved by reusing the pattern"
    )
    requirements: PatternRequirements = Field(
        default_factory=PatternRequirements, description="Requirement defaults"
    )
    expansions: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Rule (scale:large, keyword:subscription, ...) to extra hints",
    )
    is_default: bool = Field(default=False, description="General fallback pattern")
    version: int = Field(default=1, ge=1, description="Pattern definition version")

    @property
    def primary_domain(self) -> str:
        """First domain, or the pattern id when none declared."""
        return self.domains[0] if self.domains else self.id


class DomainMatch(BaseModel):
    """Score of a single pattern against a request."""

    pattern_id: str = Field(..., description="Pattern identifier")
    domain: str = Field(..., description="Pattern primary domain")
    score: float = Field(..., ge=0.0, le=1.0, description="Match score")


class DomainDetection(BaseModel):
    """Result of domain detection."""

    domain: str = Field(..., description="Detected domain")
    pattern_id: str = Field(..., description="Best matching pattern")
    score: float = Field(..., ge=0.0, le=1.0, description="Best match score")
    confidence: str = Field(..., description="high, medium, low or very-low")
    alternatives: List[DomainMatch] = Field(
        default_factory=list, description="Top runners-up, descending"
    )

    @property
    def matched(self) -> bool:
        """Whether any pattern matched."""
        return self.score > 0.0


class ApplicablePattern(BaseModel):
    """Pattern with its applicability to a request."""

    pattern: Pattern = Field(..., description="The pattern")
    score: float = Field(..., ge=0.0, le=1.0, description="Applicability score")
    reasoning: str = Field(default="", description="Matched factors")
