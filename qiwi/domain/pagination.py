from __future__ import annotations

from dataclasses import dataclass

from qiwi.domain.models import PaymentHistoryData

PAGE_SIZE = 50


@dataclass(frozen=True)
class PaginationCursor:
    """
    Назначение:
        Непрозрачная пара продолжения листинга истории платежей.
    Инварианты:
        - Используется ровно для одного следующего запроса и не изменяется.
        - Имеет смысл только для того эндпоинта, который её вернул.
    """

    next_date: str
    next_id: int

    @classmethod
    def from_page(cls, page: PaymentHistoryData) -> "PaginationCursor | None":
        """
        Возвращает курсор, только если в странице есть обе части.
        Половинчатый курсор считается концом листинга.
        """
        if page.next_txn_date is None or page.next_txn_id is None:
            return None
        return cls(next_date=page.next_txn_date, next_id=page.next_txn_id)

    def to_params(self) -> dict[str, str]:
        return {
            "nextTxnDate": self.next_date,
            "nextTxnId": str(self.next_id),
        }


def historyPageParams(cursor: PaginationCursor | None) -> dict[str, str]:
    """Query-параметры запроса страницы: rows всегда 50, курсор добавляется только если есть."""
    params = {"rows": str(PAGE_SIZE)}
    if cursor is not None:
        params.update(cursor.to_params())
    return params


__all__ = ["PAGE_SIZE", "PaginationCursor", "historyPageParams"]
