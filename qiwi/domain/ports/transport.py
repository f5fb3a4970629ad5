from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, runtime_checkable


@dataclass(frozen=True)
class RequestSpec:
    """
    Назначение/ответственность:
        Описание одного запроса к API без привязки к HTTP-клиенту.
    Инварианты/гарантии:
        - method хранится в верхнем регистре.
        - path относительный, склеивается с базовым адресом через '/'.
        - query содержит только строковые значения.
    Взаимодействия:
        Строится на каждый вызов, передаётся в Caller.call() и не сохраняется.
    """

    method: str
    path: str
    query: dict[str, str] = field(default_factory=dict)
    json: Any | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "path", self.path.lstrip("/"))

    @classmethod
    def get(cls, path: str, *, query: dict[str, str] | None = None) -> "RequestSpec":
        return cls(method="GET", path=path, query=dict(query or {}))

    @classmethod
    def post(
        cls,
        path: str,
        json: Any | None = None,
        *,
        query: dict[str, str] | None = None,
    ) -> "RequestSpec":
        return cls(method="POST", path=path, query=dict(query or {}), json=json)


@dataclass(frozen=True)
class TransportResponse:
    """
    Назначение:
        Сырой результат HTTP-обмена.
    Контракт:
        - text: полное тело ответа, в том числе при 4xx/5xx.
        - is_error помечает неуспешный HTTP-статус, тело при этом не теряется.
    """

    status_code: int
    text: str

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400


@runtime_checkable
class TransportProtocol(Protocol):
    """
    Назначение:
        Порт транспорта: ровно один HTTP-запрос на вызов.
    Контракт:
        - call(endpoint, method, params, body) -> TransportResponse
        - Сетевые сбои (соединение, TLS, таймаут, нечитаемое тело) -> NetworkError.
        - HTTP-статус ошибкой транспорта не считается.
    Взаимодействия:
        Реализуется RemoteTransport (httpx) и тестовыми двойниками.
    """

    def call(
        self,
        endpoint: str,
        method: str,
        params: Mapping[str, str],
        body: Any | None = None,
    ) -> TransportResponse: ...


__all__ = ["RequestSpec", "TransportResponse", "TransportProtocol"]
