"""
Handler registry and task-fit assessment.

Sandi Metz Principles:
- Single Responsibility: Know handlers and how well they fit a request
- Open/Closed: Assessors plug in through the interface
- Dependency Inversion: Router depends on the assessor interface
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from adaptive_router.exceptions import ConfigurationError
from adaptive_router.models.pattern import DomainDetection
from adaptive_router.models.routing import HandlerDescriptor
from adaptive_router.models.requirements import Requirements
from adaptive_router.utils.logger import get_logger
from adaptive_router.utils.text import matching_terms, normalize_text

logger = get_logger(__name__)

# Trigger hits needed for a full keyword fit
FULL_FIT_MATCHES = 3
DOMAIN_FIT_BONUS = 0.5
MAX_CONFIDENCE = 0.98


@dataclass
class HandlerAssessment:
    """How well a handler fits a request."""

    handler_id: str
    confidence: float
    matched_triggers: List[str] = field(default_factory=list)
    domain_match: bool = False
    reasoning: str = ""


class HandlerAssessor(ABC):
    """Interface for task-fit assessment."""

    @abstractmethod
    def assess(
        self,
        handler: HandlerDescriptor,
        requirements: Requirements,
        detection: Optional[DomainDetection] = None,
        text: str = "",
    ) -> HandlerAssessment:
        """
        Assess a handler against a request.

        Args:
            handler: Candidate handler
            requirements: Expanded requirements
            detection: Detected domain
            text: Request text

        Returns:
            HandlerAssessment with confidence 0-1
        """
        pass


class KeywordHandlerAssessor(HandlerAssessor):
    """
    Fit from trigger keywords and served domains.

    fit = min(1, trigger hits / 3), plus 0.5 when the handler serves the
    detected domain; confidence = min(0.98, base_confidence * fit).
    """

    def assess(
        self,
        handler: HandlerDescriptor,
        requirements: Requirements,
        detection: Optional[DomainDetection] = None,
        text: str = "",
    ) -> HandlerAssessment:
        words = [text, *requirements.explicit, *requirements.implicit]
        words.extend(requirements.functional)
        signal = normalize_text(" ".join(words))
        matched = matching_terms(signal, handler.triggers)
        fit = min(1.0, len(matched) / FULL_FIT_MATCHES)

        domain_match = bool(
            detection is not None
            and detection.matched
            and detection.domain in handler.domains
        )
        if domain_match:
            fit = min(1.0, fit + DOMAIN_FIT_BONUS)

        confidence = min(MAX_CONFIDENCE, handler.base_confidence * fit)
        return HandlerAssessment(
            handler_id=handler.handler_id,
            confidence=confidence,
            matched_triggers=matched,
            domain_match=domain_match,
            reasoning=self._reasoning(matched, domain_match, detection),
        )

    def _reasoning(
        self,
        matched: List[str],
        domain_match: bool,
        detection: Optional[DomainDetection],
    ) -> str:
        """Describe the matched factors."""
        parts = []
        if matched:
            parts.append(f"matched {', '.join(matched)}")
        if domain_match and detection is not None:
            parts.append(f"serves {detection.domain}")
        return "; ".join(parts) or "no matching triggers"


class HandlerRegistry:
    """
    Registry of routable handlers.

    Raises ConfigurationError on duplicate or unknown handlers.
    """

    def __init__(self, handlers: Optional[Iterable[HandlerDescriptor]] = None):
        """
        Initialize registry.

        Args:
            handlers: Handlers to register up front
        """
        self._handlers: Dict[str, HandlerDescriptor] = {}
        for handler in handlers or []:
            self.register(handler)

    def register(self, handler: HandlerDescriptor) -> None:
        """
        Register a handler.

        Raises:
            ConfigurationError: If the id is already registered
        """
        if handler.handler_id in self._handlers:
            raise ConfigurationError(
                f"Handler '{handler.handler_id}' is already registered"
            )
        self._handlers[handler.handler_id] = handler
        logger.info("Registered handler", handler_id=handler.handler_id)

    def get(self, handler_id: str) -> HandlerDescriptor:
        """
        Get handler by id.

        Raises:
            ConfigurationError: If the handler is unknown
        """
        handler = self._handlers.get(handler_id)
        if handler is None:
            available = ", ".join(self.list_handlers())
            raise ConfigurationError(
                f"Handler '{handler_id}' not found. Available handlers: {available}"
            )
        return handler

    def unregister(self, handler_id: str) -> None:
        """
        Remove a handler.

        Raises:
            ConfigurationError: If the handler is unknown
        """
        if handler_id not in self._handlers:
            raise ConfigurationError(f"Handler '{handler_id}' not registered")
        del self._handlers[handler_id]
        logger.info("Unregistered handler", handler_id=handler_id)

    def list_handlers(self) -> List[str]:
        """List registered handler ids."""
        return list(self._handlers.keys())

    def all(self) -> List[HandlerDescriptor]:
        """List registered handlers in registration order."""
        return list(self._handlers.values())

    def has_handler(self, handler_id: str) -> bool:
        """Check if a handler is registered."""
        return handler_id in self._handlers
