from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Deque, Iterator

from qiwi.domain.credentials import QiwiUser
from qiwi.domain.models import PaymentHistoryData, PaymentHistoryEntry
from qiwi.domain.pagination import PaginationCursor, historyPageParams
from qiwi.domain.ports.transport import RequestSpec
from qiwi.infra.http.caller import Caller


class StreamState(str, Enum):
    START = "start"
    FETCHING = "fetching"
    DONE = "done"


class PaymentHistoryStream(Iterator[PaymentHistoryEntry]):
    """
    Назначение/ответственность:
        Ленивая последовательность записей истории платежей поверх курсорного листинга.
    Инварианты/гарантии:
        - START -> FETCHING(cursor) -> DONE; из DONE запросов больше нет.
        - Одна страница в работе: следующая запрашивается только когда
          предыдущая полностью отдана потребителю.
        - Записи отдаются в серверном порядке, страницы не перемешиваются.
        - Ошибка загрузки страницы поднимается из __next__ один раз, после чего
          поток завершён; уже отданные записи остаются в силе.
    Ограничения:
        Ретраев нет: политику повторов задаёт транспорт или внешний слой.
    """

    def __init__(self, caller: Caller, user: QiwiUser, logger: logging.Logger | None = None):
        self._caller = caller
        self._endpoint = f"payment-history/v2/persons/{user}/payments"
        self._logger = logger or logging.getLogger("qiwi.history")
        self._state = StreamState.START
        self._cursor: PaginationCursor | None = None
        self._buffer: Deque[PaymentHistoryEntry] = deque()
        self.pages_fetched = 0

    @property
    def state(self) -> StreamState:
        return self._state

    def __iter__(self) -> "PaymentHistoryStream":
        return self

    def __next__(self) -> PaymentHistoryEntry:
        while not self._buffer:
            if self._state is StreamState.DONE:
                raise StopIteration
            self._fetch_page()
        return self._buffer.popleft()

    def _fetch_page(self) -> None:
        """
        Алгоритм:
            - Забирает текущий курсор (он одноразовый) и запрашивает страницу rows=50.
            - Обе части курсора в ответе -> FETCHING(новый курсор), иначе DONE.
            - Записи страницы складываются в буфер целиком.
        """
        if self._state is StreamState.START:
            self._state = StreamState.FETCHING
        cursor, self._cursor = self._cursor, None

        request = RequestSpec.get(self._endpoint, query=historyPageParams(cursor))
        try:
            page = self._caller.call(request, PaymentHistoryData)
        except Exception as exc:
            self._state = StreamState.DONE
            self._logger.debug(
                "History page %s failed: %s",
                self.pages_fetched + 1,
                exc,
                extra={"component": "history"},
            )
            raise

        self.pages_fetched += 1
        self._cursor = PaginationCursor.from_page(page)
        if self._cursor is None:
            self._state = StreamState.DONE
        self._logger.debug(
            "History page %s: %s entries, has_next=%s",
            self.pages_fetched,
            len(page.data),
            self._cursor is not None,
            extra={"component": "history"},
        )
        self._buffer.extend(page.data)


__all__ = ["StreamState", "PaymentHistoryStream"]
