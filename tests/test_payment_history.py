from __future__ import annotations

import json

import pytest

from qiwi.domain.credentials import QiwiUser
from qiwi.domain.exceptions import NetworkError, QiwiError
from qiwi.domain.ports.transport import TransportResponse
from qiwi.infra.http.caller import Caller
from qiwi.infra.http.history_stream import PaymentHistoryStream, StreamState

USER = QiwiUser.parse("+79990001122")
ENDPOINT = "payment-history/v2/persons/79990001122/payments"


class ScriptedTransport:
    """Отдаёт заранее заданные ответы по очереди и запоминает запросы."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[tuple[str, str, dict]] = []

    def call(self, endpoint, method, params, body=None):
        self.calls.append((endpoint, method, dict(params)))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def page(txn_ids, next_date=None, next_id=None) -> TransportResponse:
    body: dict = {"data": [{"txnId": i} for i in txn_ids]}
    if next_date is not None:
        body["nextTxnDate"] = next_date
    if next_id is not None:
        body["nextTxnId"] = next_id
    return TransportResponse(200, json.dumps(body))


def make_stream(transport) -> PaymentHistoryStream:
    return PaymentHistoryStream(Caller(transport), USER)


def test_cursor_is_threaded_into_second_request():
    transport = ScriptedTransport(page([3, 2], "d1", 7), page([1]))

    ids = [entry.txn_id for entry in make_stream(transport)]

    assert ids == [3, 2, 1]
    assert transport.calls == [
        (ENDPOINT, "GET", {"rows": "50"}),
        (ENDPOINT, "GET", {"rows": "50", "nextTxnDate": "d1", "nextTxnId": "7"}),
    ]


@pytest.mark.parametrize(
    "next_date,next_id",
    [("d1", None), (None, 7)],
)
def test_half_cursor_is_terminal(next_date, next_id):
    transport = ScriptedTransport(page([5, 4], next_date, next_id), page([3]))
    stream = make_stream(transport)

    ids = [entry.txn_id for entry in stream]

    assert ids == [5, 4]
    assert len(transport.calls) == 1
    assert stream.state is StreamState.DONE


def test_error_on_second_page_after_first_page_entries():
    transport = ScriptedTransport(page([2, 1], "d1", 7), NetworkError("timeout"), page([0]))
    stream = make_stream(transport)

    got = [next(stream).txn_id, next(stream).txn_id]
    with pytest.raises(NetworkError):
        next(stream)

    assert got == [2, 1]
    assert list(stream) == []
    assert len(transport.calls) == 2


def test_server_error_code_ends_stream_with_qiwi_error():
    transport = ScriptedTransport(TransportResponse(200, '{"errorCode": "auth.expired"}'))
    stream = make_stream(transport)

    with pytest.raises(QiwiError) as exc:
        list(stream)

    assert exc.value.description == "auth.expired"
    assert stream.state is StreamState.DONE


def test_stream_is_lazy_and_fetches_next_page_only_after_buffer_drains():
    transport = ScriptedTransport(page([2, 1], "d1", 7), page([0]))
    stream = make_stream(transport)

    assert stream.state is StreamState.START
    assert transport.calls == []

    assert next(stream).txn_id == 2
    assert len(transport.calls) == 1
    assert next(stream).txn_id == 1
    assert len(transport.calls) == 1
    assert next(stream).txn_id == 0
    assert len(transport.calls) == 2
    assert stream.pages_fetched == 2


def test_empty_page_with_cursor_continues():
    transport = ScriptedTransport(page([], "d1", 7), page([1]))

    ids = [entry.txn_id for entry in make_stream(transport)]

    assert ids == [1]
    assert len(transport.calls) == 2


def test_empty_last_page_ends_stream():
    transport = ScriptedTransport(page([]))

    assert list(make_stream(transport)) == []
    assert len(transport.calls) == 1
