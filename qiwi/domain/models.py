from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class QiwiModel(BaseModel):
    """
    Назначение:
        База для моделей ответов API.
    Контракт:
        - Поля API только в lowerCamelCase, поля модели в snake_case (alias_generator);
          ключи в snake_case на входе не принимаются.
        - Неизвестные поля игнорируются, модели неизменяемы.
    """

    model_config = ConfigDict(alias_generator=to_camel, frozen=True)


class ErrorEnvelope(QiwiModel):
    """Структурированная ошибка API: {"errorCode": "..."}."""

    error_code: str


class Money(QiwiModel):
    amount: Decimal
    currency: int


# --- profile ---


class AuthInfo(QiwiModel):
    person_id: int | None = None
    registration_date: str | None = None
    bound_email: str | None = None
    ip: str | None = None
    last_login_date: str | None = None


class ContractInfo(QiwiModel):
    blocked: bool | None = None
    contract_id: int | None = None
    creation_date: str | None = None
    features: list[dict] | None = None


class UserInfo(QiwiModel):
    default_pay_currency: int | None = None
    email: str | None = None
    first_txn_id: int | None = None
    language: str | None = None
    operator: str | None = None
    phone_hash: str | None = None


class ProfileInfo(QiwiModel):
    # Все три блока запрашиваются явно, поэтому обязательны:
    # иначе {"errorCode": ...} разобрался бы как пустой профиль.
    auth_info: AuthInfo
    contract_info: ContractInfo
    user_info: UserInfo


# --- payment history ---


class Provider(QiwiModel):
    id: int | None = None
    short_name: str | None = None
    long_name: str | None = None


class PaymentHistoryEntry(QiwiModel):
    txn_id: int
    person_id: int | None = None
    date: str | None = None
    error_code: int | None = None
    error: str | None = None
    status: str | None = None
    type: str | None = None
    status_text: str | None = None
    trm_txn_id: str | None = None
    account: str | None = None
    sum: Money | None = None
    commission: Money | None = None
    total: Money | None = None
    provider: Provider | None = None
    comment: str | None = None
    currency_rate: Decimal | None = None


class PaymentHistoryData(QiwiModel):
    """
    Назначение:
        Одна страница истории платежей.
    Контракт:
        - data в порядке, возвращённом сервером.
        - next_txn_date/next_txn_id отсутствуют на последней странице.
    """

    data: list[PaymentHistoryEntry]
    next_txn_date: str | None = None
    next_txn_id: int | None = None


# --- commission ---


class CommissionRange(QiwiModel):
    bound: Decimal
    fixed: Decimal | None = None
    rate: Decimal | None = None
    min: Decimal | None = None
    max: Decimal | None = None


class CommissionInfo(QiwiModel):
    ranges: list[CommissionRange]


class CommissionInfoWrapper(QiwiModel):
    commission: CommissionInfo


class CommissionQuote(QiwiModel):
    qw_commission: Money


# --- transfer ---


class TransferFields(QiwiModel):
    account: str


class TransactionState(QiwiModel):
    code: str


class TransactionInfo(QiwiModel):
    id: str
    state: TransactionState


class TransferData(QiwiModel):
    id: str
    terms: str
    fields: TransferFields
    sum: Money
    transaction: TransactionInfo
    source: str | None = None
    comment: str | None = None


__all__ = [
    "QiwiModel",
    "ErrorEnvelope",
    "Money",
    "AuthInfo",
    "ContractInfo",
    "UserInfo",
    "ProfileInfo",
    "Provider",
    "PaymentHistoryEntry",
    "PaymentHistoryData",
    "CommissionRange",
    "CommissionInfo",
    "CommissionInfoWrapper",
    "CommissionQuote",
    "TransferFields",
    "TransactionState",
    "TransactionInfo",
    "TransferData",
]
