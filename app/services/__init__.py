"""Services for the intake-to-invoice pipeline."""

from .repository import (
    PersistencePort,
    InMemoryRepository,
    FileRepository,
    WriteOutcome,
    update_with_retry,
    get_repository,
)
from .notifications import (
    NotificationPort,
    LoggingNotifier,
    RecordingNotifier,
    get_notifier,
)

# Note: PipelineOrchestrator imports the layers; use app.services.orchestrator directly

__all__ = [
    "PersistencePort",
    "InMemoryRepository",
    "FileRepository",
    "WriteOutcome",
    "update_with_retry",
    "get_repository",
    "NotificationPort",
    "LoggingNotifier",
    "RecordingNotifier",
    "get_notifier",
]
