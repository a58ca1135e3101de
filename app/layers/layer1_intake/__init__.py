"""Layer 1: Intake - Conversational question flow, editing and review."""

from .catalog import QuestionCatalog, get_default_catalog, validate_catalog
from .dependency_resolver import active_questions, choices_for, is_active
from .navigation import IntakeNavigator
from .review import ReviewStateMachine

__all__ = [
    "QuestionCatalog",
    "get_default_catalog",
    "validate_catalog",
    "active_questions",
    "choices_for",
    "is_active",
    "IntakeNavigator",
    "ReviewStateMachine",
]
