from __future__ import annotations

import time
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from qiwi.domain.credentials import QiwiUser

RUB = 643
QIWI_WALLET_PROVIDER = 99


@dataclass(frozen=True)
class QiwiWalletTransfer:
    """Перевод на другой QIWI-кошелёк в указанной валюте."""

    to_phone: QiwiUser
    to_currency: int = RUB


@dataclass(frozen=True)
class CellularTransfer:
    """Пополнение мобильного телефона через провайдера оператора (всегда в рублях)."""

    carrier: int
    to_phone: QiwiUser


TransferDirection = Union[QiwiWalletTransfer, CellularTransfer]


def _currency(code: int) -> str:
    return str(code)


CENT = Decimal("0.01")


def validateAmount(amount: Decimal) -> Decimal:
    """
    Назначение:
        Проверка суммы платежа перед отправкой.
    Контракт:
        - Сумма конечна, положительна и задана не точнее копеек.
        - Возвращает ту же сумму с ровно двумя знаками после запятой.
    Ошибки:
        ValueError, если сумму пришлось бы округлить или она не положительна.
    """
    if not amount.is_finite() or amount <= 0:
        raise ValueError(f"Amount must be positive: {amount}")
    try:
        cents = amount.quantize(CENT)
    except InvalidOperation as exc:
        raise ValueError(f"Amount is too large: {amount}") from exc
    if cents != amount:
        raise ValueError(f"Amount has more than 2 decimal places: {amount}")
    return cents


def _amount(amount: Decimal) -> str:
    return format(validateAmount(amount), "f")


def accountPaymentMethod() -> dict[str, str]:
    return {"type": "Account", "accountId": _currency(RUB)}


def buildCommissionQuotePayload(account: QiwiUser, amount: Decimal) -> dict[str, Any]:
    """
    Назначение:
        Тело запроса onlineCommission: расчёт комиссии для суммы в рублях.
    """
    return {
        "account": str(account),
        "paymentMethod": accountPaymentMethod(),
        "purchaseTotals": {
            "total": {
                "amount": _amount(amount),
                "currency": _currency(RUB),
            }
        },
    }


def resolveTransfer(direction: TransferDirection) -> tuple[int, int, QiwiUser]:
    """
    Назначение:
        Сводит направление перевода к (provider, валюта суммы, получатель).
    """
    if isinstance(direction, QiwiWalletTransfer):
        return QIWI_WALLET_PROVIDER, direction.to_currency, direction.to_phone
    if isinstance(direction, CellularTransfer):
        return direction.carrier, RUB, direction.to_phone
    raise TypeError(f"Unsupported transfer direction: {direction!r}")


def defaultTransactionId() -> int:
    """Клиентский id транзакции по умолчанию: unix-время * 1000."""
    return int(time.time()) * 1000


def buildTransferPayload(
    txnId: int,
    amount: Decimal,
    currency: int,
    account: QiwiUser,
    comment: str,
) -> dict[str, Any]:
    return {
        "id": str(txnId),
        "sum": {
            "amount": _amount(amount),
            "currency": _currency(currency),
        },
        "paymentMethod": accountPaymentMethod(),
        "fields": {
            "account": str(account),
        },
        "comment": comment,
    }


__all__ = [
    "RUB",
    "QIWI_WALLET_PROVIDER",
    "QiwiWalletTransfer",
    "CellularTransfer",
    "TransferDirection",
    "validateAmount",
    "buildCommissionQuotePayload",
    "resolveTransfer",
    "defaultTransactionId",
    "buildTransferPayload",
]
