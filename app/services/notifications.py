"""
알림 포트(Notification Port)입니다.
코어는 이름 있는 도메인 이벤트만 발생시키며 실제 발송(메일, 웹훅)은 하지 않습니다.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from app.models import DomainEvent, EventName

logger = logging.getLogger(__name__)


class NotificationPort(ABC):
    @abstractmethod
    async def emit(self, event: DomainEvent) -> None:
        ...


class LoggingNotifier(NotificationPort):
    """이벤트를 로그로만 남깁니다 (기본 구현)."""

    async def emit(self, event: DomainEvent) -> None:
        logger.info(f"[Notifier] {event.name.value}: {event.subject_id} {event.payload}")


class RecordingNotifier(NotificationPort):
    """발생한 이벤트를 목록에 보관합니다. 테스트와 감사 확인용."""

    def __init__(self):
        self.events: list[DomainEvent] = []

    async def emit(self, event: DomainEvent) -> None:
        self.events.append(event)

    def names(self) -> list[EventName]:
        return [event.name for event in self.events]


_notifier: Optional[NotificationPort] = None


def get_notifier() -> NotificationPort:
    """NotificationPort 인스턴스를 반환합니다."""
    global _notifier
    if _notifier is None:
        _notifier = LoggingNotifier()
    return _notifier
