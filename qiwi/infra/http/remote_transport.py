from __future__ import annotations

import logging
import ssl
from typing import Any, Mapping

import httpx

from qiwi.common.sanitize import bodyPreview, maskSecrets
from qiwi.domain.exceptions import ConfigError, NetworkError
from qiwi.domain.ports.transport import TransportProtocol, TransportResponse
from qiwi.infra.logging.setup import TRACE

DEFAULT_BASE_URL = "https://edge.qiwi.com"


class RemoteTransport(TransportProtocol):
    """
    Назначение/ответственность:
        HTTP-транспорт QIWI API поверх httpx.Client.
    Ограничения:
        - Одна попытка на вызов, ретраев нет.
        - httpx.Client потокобезопасен: один экземпляр делится между всеми вызовами клиента.
        - Токен уходит только в заголовок Authorization и никогда не логируется.
        - Нечитаемый caFile обнаруживается при создании: ConfigError.
    """

    def __init__(
        self,
        baseUrl: str = DEFAULT_BASE_URL,
        token: str | None = None,
        timeoutSeconds: float = 20.0,
        tlsSkipVerify: bool = False,
        caFile: str | None = None,
        transport: httpx.BaseTransport | None = None,
        logger: logging.Logger | None = None,
    ):
        verify: bool | ssl.SSLContext = True
        if tlsSkipVerify:
            verify = False
        elif caFile:
            try:
                verify = ssl.create_default_context(cafile=caFile)
            except OSError as exc:
                raise ConfigError(f"Cannot load CA file {caFile}: {exc}") from exc

        self.baseUrl = baseUrl.rstrip("/")
        self._token = token
        self._logger = logger or logging.getLogger("qiwi.transport")
        self.client = httpx.Client(
            base_url=self.baseUrl,
            timeout=timeoutSeconds,
            verify=verify,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        headers = {
            "accept": "application/json",
            "content-type": "application/json",
        }
        if self._token:
            headers["authorization"] = f"Bearer {self._token}"
        return headers

    def call(
        self,
        endpoint: str,
        method: str,
        params: Mapping[str, str],
        body: Any | None = None,
    ) -> TransportResponse:
        """
        Контракт (вход/выход):
            Вход: относительный endpoint, метод, query-параметры, JSON-тело.
            Выход: TransportResponse(status_code, text) при любом HTTP-статусе.
        Ошибки:
            NetworkError: соединение/TLS/таймаут/протокол или тело не в UTF-8.
        """
        path = endpoint.lstrip("/")
        self._logger.debug(
            "Sending request to endpoint %s %s with params: %s",
            method,
            path,
            maskSecrets(params),
            extra={"component": "transport"},
        )
        try:
            resp = self.client.request(
                method,
                path,
                params=dict(params),
                headers=self._headers(),
                json=body,
            )
        except httpx.HTTPError as exc:
            raise NetworkError(
                f"Request to {path} failed: {exc}",
                endpoint=path,
                reason=type(exc).__name__,
            ) from exc

        try:
            text = resp.content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise NetworkError(
                f"Response from {path} is not valid UTF-8",
                endpoint=path,
                status_code=resp.status_code,
            ) from exc

        self._logger.debug(
            "Received HTTP %s from %s (%s bytes)",
            resp.status_code,
            path,
            len(resp.content),
            extra={"component": "transport"},
        )
        self._logger.log(TRACE, "Response body: %s", bodyPreview(text), extra={"component": "transport"})
        return TransportResponse(status_code=resp.status_code, text=text)

    def close(self) -> None:
        self.client.close()


__all__ = ["DEFAULT_BASE_URL", "RemoteTransport"]
