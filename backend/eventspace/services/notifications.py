"""
Toast notifications: one current message with a title, a type and an auto-dismiss timer.

NotificationCenter is passed explicitly to whatever needs to notify (e.g. BookingAttempt);
listeners subscribe and get back an unsubscribe callable.
"""
import logging
import time
from enum import Enum
from typing import Callable

from pydantic import BaseModel

from eventspace.config import Settings
from eventspace.core.constants import NOTIFICATION_DURATION_MS

logger = logging.getLogger(__name__)


class NotificationType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Notification(BaseModel):
    message: str
    type: NotificationType
    title: str | None = None
    duration_ms: int = NOTIFICATION_DURATION_MS
    shown_at: float = 0.0

    def expired(self, now: float) -> bool:
        return now - self.shown_at >= self.duration_ms / 1000


Listener = Callable[[Notification | None], None]


class NotificationCenter:
    def __init__(
        self,
        *,
        default_duration_ms: int = NOTIFICATION_DURATION_MS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_duration_ms = default_duration_ms
        self._clock = clock
        self._current: Notification | None = None
        self._listeners: list[Listener] = []

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "NotificationCenter":
        return cls(default_duration_ms=settings.notification_duration_ms, **kwargs)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._current)
            except Exception:
                logger.exception("Notification listener failed")

    def show(
        self,
        message: str,
        type: NotificationType = NotificationType.INFO,
        *,
        title: str | None = None,
        duration_ms: int | None = None,
    ) -> Notification:
        """Replace the current toast."""
        self._current = Notification(
            message=message,
            type=type,
            title=title,
            duration_ms=duration_ms or self._default_duration_ms,
            shown_at=self._clock(),
        )
        self._emit()
        return self._current

    def success(self, message: str, title: str | None = None) -> Notification:
        return self.show(message, NotificationType.SUCCESS, title=title)

    def error(self, message: str, title: str | None = None) -> Notification:
        return self.show(message, NotificationType.ERROR, title=title)

    def warning(self, message: str, title: str | None = None) -> Notification:
        return self.show(message, NotificationType.WARNING, title=title)

    def info(self, message: str, title: str | None = None) -> Notification:
        return self.show(message, NotificationType.INFO, title=title)

    def close(self) -> None:
        if self._current is not None:
            self._current = None
            self._emit()

    def current(self) -> Notification | None:
        """The visible toast, or None once its duration has elapsed."""
        if self._current is not None and self._current.expired(self._clock()):
            self.close()
        return self._current
