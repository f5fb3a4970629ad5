from __future__ import annotations

import logging
from decimal import Decimal

from qiwi.config import Settings
from qiwi.domain.credentials import Credential, QiwiUser
from qiwi.domain.exceptions import ConfigError
from qiwi.domain.models import (
    CommissionInfo,
    CommissionInfoWrapper,
    CommissionQuote,
    ProfileInfo,
    TransferData,
)
from qiwi.domain.ports.transport import RequestSpec, TransportProtocol
from qiwi.domain.requests import (
    TransferDirection,
    buildCommissionQuotePayload,
    buildTransferPayload,
    defaultTransactionId,
    resolveTransfer,
)
from qiwi.infra.http.caller import Caller
from qiwi.infra.http.history_stream import PaymentHistoryStream
from qiwi.infra.http.remote_transport import DEFAULT_BASE_URL, RemoteTransport


class QiwiClient:
    """
    Назначение/ответственность:
        Клиент QIWI Wallet API: профиль, история платежей, комиссии, переводы.
    Взаимодействия:
        Все вызовы идут через общий Caller; транспорт можно подменить (тесты).
    Ограничения:
        Если транспорт создан клиентом, close() закрывает его пул соединений.
    """

    def __init__(
        self,
        credential: Credential,
        transport: TransportProtocol | None = None,
        *,
        baseUrl: str = DEFAULT_BASE_URL,
        timeoutSeconds: float = 20.0,
        tlsSkipVerify: bool = False,
        caFile: str | None = None,
        logger: logging.Logger | None = None,
    ):
        self.credential = credential
        self._logger = logger
        self._ownsTransport = transport is None
        if transport is None:
            transport = RemoteTransport(
                baseUrl=baseUrl,
                token=credential.token,
                timeoutSeconds=timeoutSeconds,
                tlsSkipVerify=tlsSkipVerify,
                caFile=caFile,
                logger=logger,
            )
        self.transport = transport
        self.caller = Caller(transport)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: TransportProtocol | None = None,
        logger: logging.Logger | None = None,
    ) -> "QiwiClient":
        if not settings.phone or not settings.token:
            raise ConfigError("Missing credentials: run 'qiwi login' or pass --phone/--token")
        return cls(
            Credential.create(settings.phone, settings.token),
            transport,
            baseUrl=settings.base_url,
            timeoutSeconds=settings.timeout_seconds,
            tlsSkipVerify=settings.tls_skip_verify,
            caFile=settings.ca_file,
            logger=logger,
        )

    @property
    def user(self) -> QiwiUser:
        return self.credential.user

    def profile_info(self) -> ProfileInfo:
        request = RequestSpec.get(
            "person-profile/v1/profile/current",
            query={
                "authInfoEnabled": "true",
                "contractInfoEnabled": "true",
                "userInfoEnabled": "true",
            },
        )
        return self.caller.call(request, ProfileInfo)

    def payment_history(self) -> PaymentHistoryStream:
        """
        Назначение:
            Ленивый итератор по всей истории платежей, страницами по 50 записей.
        """
        return PaymentHistoryStream(self.caller, self.user, logger=self._logger)

    def commission_info(self, provider: int) -> CommissionInfo:
        request = RequestSpec.get(f"sinap/providers/{provider}/form")
        return self.caller.call(request, CommissionInfoWrapper).commission

    def commission_quote(self, provider: int, account: QiwiUser, amount: Decimal) -> Decimal:
        """
        Назначение:
            Расчёт комиссии QIWI для платежа провайдеру на сумму amount (RUB).
        """
        request = RequestSpec.post(
            f"sinap/providers/{provider}/onlineCommission",
            json=buildCommissionQuotePayload(account, amount),
        )
        return self.caller.call(request, CommissionQuote).qw_commission.amount

    def transfer(
        self,
        amount: Decimal,
        direction: TransferDirection,
        comment: str = "",
        txnId: int | None = None,
    ) -> TransferData:
        """
        Назначение:
            Перевод на QIWI-кошелёк или пополнение мобильного телефона.
        Контракт:
            - txnId не задан -> текущее unix-время * 1000.
            - Сумма точнее копеек или не положительна -> ValueError, запрос не отправляется.
            - Ответ с errorCode -> QiwiError.
        """
        provider, currency, account = resolveTransfer(direction)
        request = RequestSpec.post(
            f"sinap/api/v2/terms/{provider}/payments",
            json=buildTransferPayload(
                txnId if txnId is not None else defaultTransactionId(),
                amount,
                currency,
                account,
                comment,
            ),
        )
        return self.caller.call(request, TransferData)

    def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if self._ownsTransport and close is not None:
            close()

    def __enter__(self) -> "QiwiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["QiwiClient"]
