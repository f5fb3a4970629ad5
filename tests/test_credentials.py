from __future__ import annotations

import pytest

from qiwi.domain.credentials import Credential, QiwiUser
from qiwi.domain.exceptions import ConfigError, InvalidPhoneError


@pytest.mark.parametrize(
    "raw,digits",
    [
        ("+79990001122", "79990001122"),
        ("79990001122", "79990001122"),
        ("+7 (999) 000-11-22", "79990001122"),
        ("+380501234567", "380501234567"),
    ],
)
def test_parse_accepts_e164_like_numbers(raw, digits):
    user = QiwiUser.parse(raw)

    assert str(user) == digits
    assert user.e164 == f"+{digits}"


@pytest.mark.parametrize("raw", ["", "abc", "+0123456789", "12345", "+7999000112233445"])
def test_parse_rejects_invalid_numbers(raw):
    with pytest.raises(InvalidPhoneError):
        QiwiUser.parse(raw)


def test_credential_hides_token_in_repr():
    credential = Credential.create("+79990001122", " secret-token ")

    assert credential.token == "secret-token"
    assert "secret-token" not in repr(credential)


def test_credential_requires_token():
    with pytest.raises(ConfigError):
        Credential.create("+79990001122", "  ")
