import logging
from typing import Callable, Optional

from models.user import User
from services.backend import AuthBackend, OperationResult, UNEXPECTED_ERROR_MESSAGE
from services.validation import validate_credentials

logger = logging.getLogger(__name__)


class IdentitySession:
    """The app's view of who is signed in.

    Wraps an AuthBackend, mirrors its session-change notifications into
    `current_user`, and exposes `loading` until the initial session check
    (`restore`) has completed.
    """

    def __init__(self, auth: AuthBackend):
        self._auth = auth
        self.current_user: Optional[User] = None
        self.loading = True
        self._listeners: list[Callable[[Optional[User]], None]] = []
        self._unsubscribe = auth.on_auth_state_change(self._on_auth_change)

    def restore(self) -> Optional[User]:
        try:
            user = self._auth.get_session()
        finally:
            self.loading = False
        if user:
            logger.info("Restored session for %s", user.email)
        self._on_auth_change(user)
        return user

    def sign_in(self, email: str, password: str) -> OperationResult[User]:
        return self._auth.sign_in(email, password)

    def sign_up(self, email: str, password: str) -> OperationResult[User]:
        return self._auth.sign_up(email, password)

    def sign_out(self) -> None:
        self._auth.sign_out()

    def subscribe(self, callback: Callable[[Optional[User]], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def close(self):
        self._unsubscribe()
        self._listeners.clear()

    def _on_auth_change(self, user: Optional[User]):
        self.current_user = user
        for cb in list(self._listeners):
            cb(user)


def submit_credentials(
    session: IdentitySession,
    email: str,
    password: str,
    confirm_password: str | None = None,
    sign_up: bool = False,
) -> str | None:
    """Validate then sign in or up. Returns an error message to display, or None on success."""
    try:
        email, password = validate_credentials(email, password, confirm_password, sign_up)
    except ValueError as e:
        return str(e)
    try:
        result = session.sign_up(email, password) if sign_up else session.sign_in(email, password)
    except Exception:
        logger.exception("Authentication request failed")
        return UNEXPECTED_ERROR_MESSAGE
    return result.error.message if result.error else None
