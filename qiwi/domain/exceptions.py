from __future__ import annotations

from typing import Any

from qiwi.common.sanitize import bodyPreview
from qiwi.domain.error_codes import ErrorCode


class AppError(Exception):
    """
    Назначение:
        Корень иерархии ошибок клиента QIWI.
    Контракт:
        - category и retryable задаются классом (HttpStatusError уточняет retryable по статусу).
        - code всегда из ErrorCode.
        - details содержат только то, что безопасно писать в лог: без токенов и полных тел.
    """

    category = "client"
    retryable = False

    def __init__(self, message: str, code: ErrorCode, **details: Any):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "code": self.code.value,
            "message": self.message,
            "retryable": self.retryable,
            **self.details,
        }


class TransportError(AppError):
    """
    Назначение:
        Сбой сетевого/протокольного уровня: запрос не дошёл,
        ответ не прочитан или не разобран.
    """

    category = "transport"


class NetworkError(TransportError):
    """Соединение, TLS, таймаут или нечитаемое тело ответа."""

    retryable = True

    def __init__(self, message: str, **details: Any):
        super().__init__(message, ErrorCode.NETWORK_ERROR, **details)


class ParseError(TransportError):
    """
    Назначение:
        Текст ответа не подходит ни под ожидаемую модель, ни под {"errorCode": ...}.
    Инварианты:
        - raw_text хранит исходный текст без изменений, в details попадает только превью.
    """

    def __init__(self, message: str, raw_text: str):
        super().__init__(message, ErrorCode.PARSE_ERROR, raw_text=bodyPreview(raw_text))
        self.raw_text = raw_text


class HttpStatusError(TransportError):
    """Сервер ответил 4xx/5xx, а тело не содержит структурированного errorCode."""

    def __init__(self, status_code: int, body: str):
        snippet = bodyPreview(body, limit=200)
        super().__init__(
            f"Received error {status_code} with data: {snippet}",
            ErrorCode.from_status(status_code),
            status_code=status_code,
        )
        self.status_code = status_code
        self.body = body
        self.retryable = status_code == 429 or 500 <= status_code <= 599


class QiwiError(AppError):
    """
    Назначение:
        Сервер явно отклонил операцию кодом ошибки (errorCode).
    Контракт:
        - description содержит код, присланный сервером, без изменений.
        - Ошибка прикладная: вызывающий может исправить ввод и повторить.
    """

    category = "qiwi"

    def __init__(self, description: str):
        super().__init__(description, ErrorCode.QIWI_ERROR, description=description)
        self.description = description


class ConfigError(AppError):
    """Отсутствуют или некорректны учётные данные/настройки."""

    category = "config"

    def __init__(self, message: str, code: ErrorCode = ErrorCode.CONFIG_ERROR):
        super().__init__(message, code)


class InvalidPhoneError(ConfigError):
    def __init__(self, value: str):
        super().__init__(f"Invalid phone number: {value!r}", ErrorCode.INVALID_PHONE)
        self.value = value


__all__ = [
    "AppError",
    "TransportError",
    "NetworkError",
    "ParseError",
    "HttpStatusError",
    "QiwiError",
    "ConfigError",
    "InvalidPhoneError",
]
