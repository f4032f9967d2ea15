"""
User context models.

Sandi Metz Principles:
- Single Responsibility: Session and analysis data structures
- Clear naming: Descriptive fields
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class PastInteraction(BaseModel):
    """A previous interaction recorded by the session store."""

    interaction_type: str = Field(..., description="Kind of past request")
    user_type: Optional[str] = Field(None, description="User type observed then")
    technical_level: Optional[str] = Field(
        None, description="Technical level observed then"
    )
    handler_id: Optional[str] = Field(None, description="Handler that served it")
    success: Optional[bool] = Field(None, description="Whether it succeeded")
    timestamp: datetime = Field(
        default_factory=datetime.utcnow, description="When it happened"
    )


class UserContext(BaseModel):
    """Per-user context owned by the session store."""

    user_id: Optional[str] = Field(None, description="User identifier")
    user_type: Optional[str] = Field(None, description="User type")
    technical_level: Optional[str] = Field(None, description="Technical level")
    technical_background: Optional[str] = Field(
        None, description="Declared background (developer, designer, business)"
    )
    scale: Optional[str] = Field(None, description="Expected project scale")
    budget: Optional[str] = Field(None, description="Budget sensitivity")
    goals: List[str] = Field(default_factory=list, description="User goals")
    constraints: List[str] = Field(
        default_factory=list, description="Known constraints"
    )
    preferences: Dict[str, float] = Field(
        default_factory=dict, description="Handler preference weights"
    )
    history: List[PastInteraction] = Field(
        default_factory=list, description="Past interactions"
    )


class Constraint(BaseModel):
    """A constraint detected in a request."""

    type: str = Field(..., description="Constraint category")
    value: str = Field(..., description="Constraint value")
    impact: str = Field(default="medium", description="Impact level")


class BusinessContext(BaseModel):
    """Business signal extracted from a request."""

    business_model: str = Field(default="general", description="Business model")
    target_audience: str = Field(default="general", description="Target audience")
    value_proposition: List[str] = Field(
        default_factory=lambda: ["general-value"], description="Value propositions"
    )
    revenue_model: str = Field(default="unknown", description="Revenue model")
    market_size: str = Field(default="regional", description="Market size")
    competitive_advantages: List[str] = Field(
        default_factory=list, description="Competitive advantages"
    )


class DesignPreferences(BaseModel):
    """Design and technology preferences extracted from a request."""

    design_style: str = Field(default="balanced", description="Design style")
    technology: List[str] = Field(default_factory=list, description="Technologies")
    platforms: List[str] = Field(
        default_factory=lambda: ["web", "mobile"], description="Target platforms"
    )
    maintenance: str = Field(default="moderate", description="Maintenance appetite")


class ContextAnalysis(UserContext):
    """Filled user context produced by the context analyzer."""

    user_type: str = Field(default="general", description="Detected user type")
    technical_level: str = Field(
        default="beginner", description="Detected technical level"
    )
    scale: str = Field(default="medium", description="Detected scale")
    budget: str = Field(default="moderate", description="Budget sensitivity")
    business_context: Optional[BusinessContext] = Field(
        None, description="Business signal, None when the request carries none"
    )
    constraint_details: List[Constraint] = Field(
        default_factory=list, description="Detected constraints"
    )
    timeline: str = Field(default="medium", description="Timeline estimate")
    urgency: str = Field(default="medium", description="Urgency level")
    design: DesignPreferences = Field(
        default_factory=DesignPreferences, description="Design preferences"
    )
