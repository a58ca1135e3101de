"""Data models for the intake-to-invoice pipeline."""

from .common import Money, MAX_AMOUNT, to_decimal, quantize_money
from .intake import (
    AnswerValue,
    InputKind,
    Choice,
    DependsOn,
    DynamicChoices,
    QuestionDefinition,
    Answer,
    IntakeState,
    IntakeSession,
    RenderDirective,
    AnswerSubmitted,
    NavigateBack,
    EditQuestion,
    ConfirmReview,
    ChangeDecision,
    IntakeEvent,
    IntakeResponse,
)
from .budget import BudgetConfidence, BudgetRange
from .proposal import (
    TierDefinition,
    FeatureCatalogEntry,
    MaintenancePlanOption,
    ProposalStatus,
    ProposalRequest,
    PriceLine,
    PriceBreakdown,
)
from .invoice import (
    InvoiceStatus,
    TERMINAL_STATUSES,
    OUTSTANDING_STATUSES,
    LineItem,
    PaymentRecord,
    Invoice,
    InvoiceStats,
)
from .events import EventName, DomainEvent
from .error import ErrorResponse

__all__ = [
    # Common
    "Money",
    "MAX_AMOUNT",
    "to_decimal",
    "quantize_money",
    # Intake models
    "AnswerValue",
    "InputKind",
    "Choice",
    "DependsOn",
    "DynamicChoices",
    "QuestionDefinition",
    "Answer",
    "IntakeState",
    "IntakeSession",
    "RenderDirective",
    "AnswerSubmitted",
    "NavigateBack",
    "EditQuestion",
    "ConfirmReview",
    "ChangeDecision",
    "IntakeEvent",
    "IntakeResponse",
    # Budget models
    "BudgetConfidence",
    "BudgetRange",
    # Proposal models
    "TierDefinition",
    "FeatureCatalogEntry",
    "MaintenancePlanOption",
    "ProposalStatus",
    "ProposalRequest",
    "PriceLine",
    "PriceBreakdown",
    # Invoice models
    "InvoiceStatus",
    "TERMINAL_STATUSES",
    "OUTSTANDING_STATUSES",
    "LineItem",
    "PaymentRecord",
    "Invoice",
    "InvoiceStats",
    # Events
    "EventName",
    "DomainEvent",
    # Errors
    "ErrorResponse",
]
