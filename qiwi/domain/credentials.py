from __future__ import annotations

import re
from dataclasses import dataclass, field

from qiwi.domain.exceptions import ConfigError, InvalidPhoneError

_PHONE_RE = re.compile(r"^\+?([1-9]\d{9,14})$")
_PHONE_SEPARATORS_RE = re.compile(r"[\s\-()]")


@dataclass(frozen=True)
class QiwiUser:
    """
    Назначение:
        Идентификатор кошелька: номер телефона в E.164-подобной форме.
    Инварианты:
        - digits содержит только цифры, 10..15 знаков, без ведущего нуля.
        - str(user) даёт номер без '+', как его ждут пути API.
    """

    digits: str

    @classmethod
    def parse(cls, value: str) -> "QiwiUser":
        """
        Назначение:
            Разбирает номер, введённый пользователем ("+7 (999) 123-45-67").
        Ошибки:
            InvalidPhoneError, если после очистки номер не похож на E.164.
        """
        cleaned = _PHONE_SEPARATORS_RE.sub("", value or "")
        match = _PHONE_RE.match(cleaned)
        if not match:
            raise InvalidPhoneError(value)
        return cls(digits=match.group(1))

    @property
    def e164(self) -> str:
        return f"+{self.digits}"

    def __str__(self) -> str:
        return self.digits


@dataclass(frozen=True)
class Credential:
    """
    Назначение:
        Bearer-токен и владелец кошелька. Неизменяем после создания.
    Ограничения:
        - token не попадает в repr.
    """

    user: QiwiUser
    token: str = field(repr=False)

    def __post_init__(self) -> None:
        if not self.token or not self.token.strip():
            raise ConfigError("API token must not be empty")

    @classmethod
    def create(cls, phone: str, token: str) -> "Credential":
        return cls(user=QiwiUser.parse(phone), token=(token or "").strip())


__all__ = ["QiwiUser", "Credential"]
