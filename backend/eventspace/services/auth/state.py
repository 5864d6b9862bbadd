"""Current auth session, held explicitly and handed to whatever needs it."""
import logging
from enum import Enum
from typing import Callable

from eventspace.models.user import AuthSession, User

logger = logging.getLogger(__name__)


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    USER_UPDATED = "USER_UPDATED"


AuthListener = Callable[[AuthEvent, AuthSession | None], None]


class AuthState:
    def __init__(self, session: AuthSession | None = None) -> None:
        self._session = session
        self._listeners: list[AuthListener] = []

    @property
    def session(self) -> AuthSession | None:
        return self._session

    @property
    def user(self) -> User | None:
        return self._session.user if self._session else None

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def access_token(self) -> str | None:
        return self._session.access_token if self._session else None

    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        """Register callback for sign-in/out/update; returns the unsubscribe function."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, event: AuthEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self._session)
            except Exception:
                logger.exception("Auth listener failed on %s", event.value)

    def signed_in(self, session: AuthSession) -> None:
        self._session = session
        self._emit(AuthEvent.SIGNED_IN)

    def signed_out(self) -> None:
        self._session = None
        self._emit(AuthEvent.SIGNED_OUT)

    def user_updated(self, user: User) -> None:
        if self._session is None:
            return
        self._session = self._session.model_copy(update={"user": user})
        self._emit(AuthEvent.USER_UPDATED)
