from __future__ import annotations

import json
from decimal import Decimal

import httpx
import pytest

from qiwi.client import QiwiClient
from qiwi.config import Settings
from qiwi.domain.credentials import Credential, QiwiUser
from qiwi.domain.exceptions import ConfigError, QiwiError
from qiwi.domain.requests import CellularTransfer, QiwiWalletTransfer
from qiwi.infra.http.remote_transport import RemoteTransport

CREDENTIAL = Credential.create("+7 999 000-11-22", "tok")

PROFILE = {
    "authInfo": {"personId": 79990001122, "registrationDate": "2017-01-07T16:51:06.100+03:00"},
    "contractInfo": {"blocked": False, "contractId": 79990001122},
    "userInfo": {"defaultPayCurrency": 643, "language": "ru", "operator": "Beeline"},
}

TRANSFER = {
    "id": "1500000000000",
    "terms": "99",
    "fields": {"account": "79991112233"},
    "sum": {"amount": 100, "currency": "643"},
    "transaction": {"id": "4969142201", "state": {"code": "Accepted"}},
    "source": "account_643",
    "comment": "thanks",
}


def make_client(responder) -> QiwiClient:
    transport = RemoteTransport(
        baseUrl="https://edge.qiwi.local",
        token=CREDENTIAL.token,
        transport=httpx.MockTransport(responder),
    )
    return QiwiClient(CREDENTIAL, transport)


def test_profile_info_requests_all_blocks():
    def responder(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/person-profile/v1/profile/current"
        assert dict(request.url.params) == {
            "authInfoEnabled": "true",
            "contractInfoEnabled": "true",
            "userInfoEnabled": "true",
        }
        assert request.headers["authorization"] == "Bearer tok"
        return httpx.Response(200, json=PROFILE)

    profile = make_client(responder).profile_info()

    assert profile.auth_info.person_id == 79990001122
    assert profile.contract_info.blocked is False
    assert profile.user_info.operator == "Beeline"


def test_payment_history_walks_all_pages():
    def responder(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/payment-history/v2/persons/79990001122/payments"
        if "nextTxnId" not in request.url.params:
            return httpx.Response(
                200,
                json={"data": [{"txnId": 2}], "nextTxnDate": "2020-01-01T00:00:00+03:00", "nextTxnId": 1},
            )
        assert request.url.params["nextTxnDate"] == "2020-01-01T00:00:00+03:00"
        return httpx.Response(200, json={"data": [{"txnId": 1}], "nextTxnDate": None, "nextTxnId": None})

    entries = list(make_client(responder).payment_history())

    assert [e.txn_id for e in entries] == [2, 1]


def test_commission_info_unwraps_commission():
    def responder(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/sinap/providers/1963/form"
        return httpx.Response(200, json={"commission": {"ranges": [{"bound": 0, "rate": 0.02, "min": 50}]}})

    info = make_client(responder).commission_info(1963)

    assert len(info.ranges) == 1
    assert float(info.ranges[0].rate) == 0.02
    assert info.ranges[0].min == Decimal("50")


def test_commission_quote_posts_payload_and_returns_amount():
    def responder(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/sinap/providers/99/onlineCommission"
        body = json.loads(request.content)
        assert body == {
            "account": "79991112233",
            "paymentMethod": {"type": "Account", "accountId": "643"},
            "purchaseTotals": {"total": {"amount": "100.00", "currency": "643"}},
        }
        return httpx.Response(200, json={"qwCommission": {"amount": 2, "currency": 643}})

    quote = make_client(responder).commission_quote(99, QiwiUser.parse("79991112233"), Decimal("100"))

    assert quote == Decimal("2")


def test_transfer_to_wallet_uses_provider_99():
    def responder(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/sinap/api/v2/terms/99/payments"
        body = json.loads(request.content)
        assert body == {
            "id": "1500000000000",
            "sum": {"amount": "100.00", "currency": "398"},
            "paymentMethod": {"type": "Account", "accountId": "643"},
            "fields": {"account": "79991112233"},
            "comment": "thanks",
        }
        return httpx.Response(200, json=TRANSFER)

    result = make_client(responder).transfer(
        Decimal("100"),
        QiwiWalletTransfer(to_phone=QiwiUser.parse("+79991112233"), to_currency=398),
        comment="thanks",
        txnId=1500000000000,
    )

    assert result.transaction.state.code == "Accepted"
    assert result.fields.account == "79991112233"


def test_cellular_transfer_uses_carrier_and_rub_with_generated_id():
    def responder(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/sinap/api/v2/terms/1/payments"
        body = json.loads(request.content)
        assert body["sum"]["currency"] == "643"
        assert body["id"].isdigit()
        assert int(body["id"]) % 1000 == 0
        return httpx.Response(200, json=TRANSFER)

    make_client(responder).transfer(Decimal("10"), CellularTransfer(carrier=1, to_phone=QiwiUser.parse("79991112233")))


def test_transfer_rejected_by_server_raises_qiwi_error():
    def responder(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"errorCode": "payment.insufficient.funds"})

    with pytest.raises(QiwiError) as exc:
        make_client(responder).transfer(
            Decimal("1"), QiwiWalletTransfer(to_phone=QiwiUser.parse("79991112233")), txnId=1
        )

    assert exc.value.description == "payment.insufficient.funds"


def test_transfer_sends_exact_amount():
    def responder(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["sum"] == {"amount": "10.10", "currency": "643"}
        return httpx.Response(200, json=TRANSFER)

    make_client(responder).transfer(
        Decimal("10.10"), QiwiWalletTransfer(to_phone=QiwiUser.parse("79991112233")), txnId=1
    )


def test_large_amount_keeps_all_digits():
    def responder(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["purchaseTotals"]["total"]["amount"] == "12345678901234567.89"
        return httpx.Response(200, json={"qwCommission": {"amount": 0, "currency": 643}})

    make_client(responder).commission_quote(99, QiwiUser.parse("79991112233"), Decimal("12345678901234567.89"))


@pytest.mark.parametrize("amount", ["1.999", "0.004", "0", "-5"])
def test_transfer_rejects_amount_that_needs_rounding(amount):
    seen = []

    def responder(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=TRANSFER)

    with pytest.raises(ValueError):
        make_client(responder).transfer(
            Decimal(amount), QiwiWalletTransfer(to_phone=QiwiUser.parse("79991112233")), txnId=1
        )

    assert seen == []


def test_from_settings_requires_credentials():
    with pytest.raises(ConfigError):
        QiwiClient.from_settings(Settings(phone=None, token=None))


def test_from_settings_builds_remote_transport():
    with QiwiClient.from_settings(Settings(phone="79990001122", token="tok", base_url="https://x.local")) as client:
        assert isinstance(client.transport, RemoteTransport)
        assert client.transport.baseUrl == "https://x.local"
        assert str(client.user) == "79990001122"
