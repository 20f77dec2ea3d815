from datetime import timedelta

import pytest

from src.domain.exceptions import ConfigurationError, UnauthorizedError
from src.infrastructure.auth.admin_tokens import create_admin_token, resolve_admin_id


def test_bearer_token_resolves_to_admin_id():
    token = create_admin_token("admin-1")

    assert resolve_admin_id(f"Bearer {token}") == "admin-1"


@pytest.mark.parametrize("header", [None, "", "Bearer ", "Basic abc", "token-without-scheme"])
def test_missing_or_malformed_header(header):
    with pytest.raises(UnauthorizedError):
        resolve_admin_id(header)


def test_tampered_token_is_rejected():
    header, _payload, signature = create_admin_token("admin-1").split(".")
    forged_payload = create_admin_token("admin-2").split(".")[1]

    with pytest.raises(UnauthorizedError):
        resolve_admin_id(f"Bearer {header}.{forged_payload}.{signature}")


def test_expired_token_is_rejected():
    token = create_admin_token("admin-1", expires_in=timedelta(seconds=-10))

    with pytest.raises(UnauthorizedError):
        resolve_admin_id(f"Bearer {token}")


def test_missing_signing_key_is_a_configuration_error(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)

    with pytest.raises(ConfigurationError):
        resolve_admin_id("Bearer some.token.value")
