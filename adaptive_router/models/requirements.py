"""
Request and requirement models.

Sandi Metz Principles:
- Single Responsibility: Request data structures
- Clear naming: Descriptive fields
- Immutable data: Requests are read-only once produced by ingestion
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from adaptive_router.utils.text import normalize_text, unique_ordered


class Complexity(str, Enum):
    """Request complexity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Requirements(BaseModel):
    """Structured requirements derived from a request."""

    model_config = ConfigDict(frozen=True)

    explicit: List[str] = Field(
        default_factory=list, description="Requirements stated by the user"
    )
    implicit: List[str] = Field(
        default_factory=list, description="Requirements inferred from the request"
    )
    functional: List[str] = Field(
        default_factory=list, description="Functional requirements"
    )
    non_functional: Dict[str, str] = Field(
        default_factory=dict, description="Non-functional requirements"
    )
    technical: Dict[str, str] = Field(
        default_factory=dict, description="Technical stack requirements"
    )
    domain: Optional[str] = Field(None, description="Problem domain, if known")
    complexity: Complexity = Field(
        default=Complexity.MEDIUM, description="Overall complexity"
    )

    @field_validator("explicit")
    @classmethod
    def dedupe_explicit(cls, v: List[str]) -> List[str]:
        """Keep explicit requirements unique, preserving order."""
        return unique_ordered(v)


class NormalizedRequest(BaseModel):
    """Request as produced by the ingestion layer."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(default="", description="Free-text request description")
    requirements: Requirements = Field(
        default_factory=Requirements, description="Derived requirements"
    )
    user_id: Optional[str] = Field(None, description="Requesting user")

    @property
    def normalized(self) -> str:
        """Lowercased, whitespace-collapsed request text."""
        return normalize_text(self.text)
