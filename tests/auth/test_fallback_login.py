import pytest

from realty.auth.fallback import (
    DEMO_ACCOUNTS,
    StaticAccount,
    StaticAccountAuthenticator,
    is_fallback_token,
)
from realty.errors import AuthError
from realty.models.user import Permission


@pytest.mark.parametrize(
    "token,expected",
    [
        ("mock_admin_token_mock_9876543209_1700000000000", True),
        ("mock_anything", True),
        ("eyJhbGciOiJIUzI1NiJ9.payload.signature", False),
        ("", False),
        (None, False),
    ],
)
def test_is_fallback_token(token, expected):
    assert is_fallback_token(token) is expected


def test_demo_owner_gets_full_permission_map():
    principal, token = StaticAccountAuthenticator().authenticate(
        {"phoneNumber": "9876543209", "password": "owner123"}
    )

    assert principal.role == "owner"
    assert principal.id == "mock_9876543209"
    assert all(principal.permissions[p.value] is True for p in Permission)
    assert is_fallback_token(token)


def test_demo_sub_admin_cannot_manage_sub_admins():
    principal, _ = StaticAccountAuthenticator().authenticate(
        {"phone": "9876543211", "password": "sub123"}
    )

    assert principal.role == "sub-admin"
    assert principal.name == "Sub Admin"
    assert principal.email == "sub.admin@promiserealty.com"
    assert "manageSubAdmins" not in principal.permissions


@pytest.mark.parametrize(
    "credentials",
    [
        {"phoneNumber": "9876543209", "password": "wrong"},
        {"phoneNumber": "1111111111", "password": "owner123"},
        {"password": "owner123"},
        {},
    ],
)
def test_rejects_bad_credentials(credentials):
    with pytest.raises(AuthError) as exc_info:
        StaticAccountAuthenticator().authenticate(credentials)
    assert exc_info.value.status_code == 401


def test_custom_accounts():
    account = StaticAccount(
        phone="9000000009", password="pw", role="admin", name="Branch Manager"
    )
    authenticator = StaticAccountAuthenticator(accounts=(account,))

    principal, token = authenticator.authenticate(
        {"phoneNumber": "9000000009", "password": "pw"}
    )
    assert principal.is_main_admin
    assert token.startswith("mock_admin_token_mock_9000000009_")

    with pytest.raises(AuthError):
        authenticator.authenticate(
            {"phoneNumber": DEMO_ACCOUNTS[0].phone, "password": "owner123"}
        )
