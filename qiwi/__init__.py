"""
Клиент QIWI Wallet API (https://developer.qiwi.com/ru/qiwi-wallet-personal).
"""

from qiwi.client import QiwiClient
from qiwi.domain.credentials import Credential, QiwiUser
from qiwi.domain.envelope import Failure, Success, decode_envelope
from qiwi.domain.exceptions import (
    AppError,
    ConfigError,
    HttpStatusError,
    InvalidPhoneError,
    NetworkError,
    ParseError,
    QiwiError,
    TransportError,
)
from qiwi.domain.requests import CellularTransfer, QiwiWalletTransfer
from qiwi.infra.http.caller import Caller
from qiwi.infra.http.history_stream import PaymentHistoryStream
from qiwi.infra.http.remote_transport import RemoteTransport

__all__ = [
    "QiwiClient",
    "Credential",
    "QiwiUser",
    "Success",
    "Failure",
    "decode_envelope",
    "AppError",
    "TransportError",
    "NetworkError",
    "ParseError",
    "HttpStatusError",
    "QiwiError",
    "ConfigError",
    "InvalidPhoneError",
    "CellularTransfer",
    "QiwiWalletTransfer",
    "Caller",
    "PaymentHistoryStream",
    "RemoteTransport",
]
