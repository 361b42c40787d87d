import pytest
from werkzeug.security import generate_password_hash

from src.agency_os.agency_os.core.enums import Role
from src.agency_os.agency_os.core.exceptions import AuthenticationError
from src.agency_os.agency_os.users.model import User
from src.agency_os.agency_os.users.service import AuthService, SessionUser


class FakeUsersRepo:
    def __init__(self, users):
        self._by_name = {u.username: u for u in users}

    def get_by_id(self, user_id):
        return next((u for u in self._by_name.values() if u.user_id == user_id), None)

    def get_by_username(self, username):
        return self._by_name.get(username)


@pytest.fixture
def auth():
    return AuthService(
        FakeUsersRepo(
            [
                User(1, 7, "Ana Admin", "admin", generate_password_hash("admin123"), Role.ADMIN),
                User(2, 7, "Eli Employee", "employee", generate_password_hash("employee123"), Role.EMPLOYEE),
                User(3, 7, "Old Account", "gone", generate_password_hash("gone123"), Role.ADMIN, is_active=False),
                User(4, 7, "Placeholder", "seed", "CHANGE_ME", Role.EMPLOYEE),
            ]
        )
    )


def test_authenticate_returns_session_user(auth):
    s_user = auth.authenticate(" admin ", "admin123")

    assert s_user == SessionUser(user_id=1, agency_id=7, full_name="Ana Admin", role=Role.ADMIN)
    assert s_user.can_delete_projects is True


def test_employee_cannot_delete_projects(auth):
    assert auth.authenticate("employee", "employee123").can_delete_projects is False


@pytest.mark.parametrize(
    "username, password",
    [("admin", "wrong"), ("nobody", "admin123"), ("gone", "gone123"), ("seed", "CHANGE_ME"), ("", "")],
)
def test_authenticate_rejects_bad_credentials(auth, username, password):
    with pytest.raises(AuthenticationError):
        auth.authenticate(username, password)


def test_session_round_trip():
    s_user = SessionUser(user_id=5, agency_id=3, full_name="Cara CEO", role=Role.CEO)

    assert SessionUser.from_session(s_user.to_session()) == s_user
