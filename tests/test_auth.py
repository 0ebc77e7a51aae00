from database.user_dao import UserDAO
from services.auth_service import IdentitySession, submit_credentials
from services.backend import AuthBackend, OperationResult, SQLiteAuthBackend, UNEXPECTED_ERROR_MESSAGE
from models.user import User


def test_sign_up_then_sign_in(auth):
    created = auth.sign_up("  Sam@Example.com ", "secret123")
    assert created.ok
    assert created.data.email == "sam@example.com"

    auth.sign_out()
    assert auth.get_session() is None

    result = auth.sign_in("sam@example.com", "secret123")
    assert result.ok
    assert result.data.id == created.data.id
    assert auth.get_session().email == "sam@example.com"


def test_password_is_stored_hashed(auth, user_dao):
    auth.sign_up("sam@example.com", "secret123")
    _, password_hash = user_dao.get_credentials("sam@example.com")
    assert password_hash != "secret123"
    assert password_hash.startswith("$2")


def test_duplicate_sign_up(auth):
    auth.sign_up("sam@example.com", "secret123")
    result = auth.sign_up("SAM@example.com", "another1")
    assert result.error.message == "User already registered"


def test_wrong_password_and_unknown_email(auth):
    auth.sign_up("sam@example.com", "secret123")
    auth.sign_out()
    assert auth.sign_in("sam@example.com", "wrong-pass").error.message == "Invalid login credentials"
    assert auth.sign_in("nobody@example.com", "secret123").error.message == "Invalid login credentials"
    assert auth.get_session() is None


def test_sign_up_rejects_short_password_and_bad_email(auth):
    assert auth.sign_up("sam@example.com", "12345").error.code == "weak_password"
    assert auth.sign_up("not-an-email", "secret123").error.code == "validation"


def test_session_survives_restart(db, auth):
    user = auth.sign_up("sam@example.com", "secret123").data

    restarted = SQLiteAuthBackend(db, UserDAO(db))
    assert restarted.get_session() == user

    restarted.sign_out()
    assert SQLiteAuthBackend(db, UserDAO(db)).get_session() is None


def test_listeners_see_sign_in_and_sign_out(auth):
    seen = []
    unsubscribe = auth.on_auth_state_change(seen.append)

    user = auth.sign_up("sam@example.com", "secret123").data
    auth.sign_out()
    unsubscribe()
    auth.sign_in("sam@example.com", "secret123")

    assert seen == [user, None]


# ── IdentitySession ───────────────────────────────────────────────────────────

def test_identity_session_tracks_current_user(auth):
    session = IdentitySession(auth)
    assert session.loading
    assert session.restore() is None
    assert not session.loading

    session.sign_up("sam@example.com", "secret123")
    assert session.current_user.email == "sam@example.com"

    session.sign_out()
    assert session.current_user is None


def test_identity_session_restores_persisted_user(db, auth):
    user = auth.sign_up("sam@example.com", "secret123").data
    session = IdentitySession(SQLiteAuthBackend(db, UserDAO(db)))
    seen = []
    session.subscribe(seen.append)

    session.restore()

    assert session.current_user == user
    assert seen == [user]


class RecordingAuth(AuthBackend):
    def __init__(self, result=None, raises=False):
        self.calls = []
        self._result = result or OperationResult.success(User(id="u1", email="sam@example.com"))
        self._raises = raises

    def sign_in(self, email, password):
        self.calls.append(("sign_in", email, password))
        if self._raises:
            raise ConnectionError("offline")
        return self._result

    def sign_up(self, email, password):
        self.calls.append(("sign_up", email, password))
        return self._result

    def sign_out(self):
        self.calls.append(("sign_out",))

    def get_session(self):
        return None

    def on_auth_state_change(self, callback):
        return lambda: None


def test_mismatched_confirmation_never_reaches_backend():
    backend = RecordingAuth()
    message = submit_credentials(IdentitySession(backend), "sam@example.com", "secret123", "secret124", True)
    assert message == "Passwords do not match"
    assert backend.calls == []


def test_missing_fields_never_reach_backend():
    backend = RecordingAuth()
    assert submit_credentials(IdentitySession(backend), "", "x") == "Email and password are required."
    assert backend.calls == []


def test_submit_routes_to_sign_in_or_sign_up():
    backend = RecordingAuth()
    session = IdentitySession(backend)
    assert submit_credentials(session, " sam@example.com ", "secret123") is None
    assert submit_credentials(session, "sam@example.com", "secret123", "secret123", True) is None
    assert [c[0] for c in backend.calls] == ["sign_in", "sign_up"]
    assert backend.calls[0][1] == "sam@example.com"


def test_submit_reports_backend_error_message():
    backend = RecordingAuth(OperationResult.failure("Invalid login credentials"))
    assert submit_credentials(IdentitySession(backend), "a@b.c", "secret123") == "Invalid login credentials"


def test_submit_maps_exceptions_to_generic_message():
    backend = RecordingAuth(raises=True)
    assert submit_credentials(IdentitySession(backend), "a@b.c", "secret123") == UNEXPECTED_ERROR_MESSAGE
