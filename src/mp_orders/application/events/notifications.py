"""Application events – customer notification models and senders."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

__all__ = [
    "InMemoryNotifier",
    "LoggingNotifier",
    "Notification",
    "Notifier",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """A message addressed to the owner of an order."""

    user_id: str
    order_id: str
    subject: str
    body: str


@runtime_checkable
class Notifier(Protocol):
    """Port: deliver a notification (email, push, SMS, …)."""

    async def notify(self, notification: Notification) -> None: ...


class LoggingNotifier:
    """Default notifier: records the notification in the service log."""

    async def notify(self, notification: Notification) -> None:
        logger.info(
            "notification.sent user_id=%s order_id=%s subject=%s",
            notification.user_id, notification.order_id, notification.subject,
        )


class InMemoryNotifier:
    """Fake Notifier that captures sent notifications."""

    def __init__(self) -> None:
        self.sent: list[Notification] = []

    async def notify(self, notification: Notification) -> None:
        self.sent.append(notification)

    def reset(self) -> None:
        self.sent.clear()

    @property
    def count(self) -> int:
        return len(self.sent)
