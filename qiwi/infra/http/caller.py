from __future__ import annotations

from typing import Type, TypeVar

from qiwi.domain.envelope import Failure, decode_envelope
from qiwi.domain.exceptions import HttpStatusError, ParseError
from qiwi.domain.ports.transport import RequestSpec, TransportProtocol

T = TypeVar("T")


class Caller:
    """
    Назначение/ответственность:
        Типизированный вызов API: транспорт -> разбор конверта -> результат.
    Инварианты/гарантии:
        - Не хранит состояния между вызовами, безопасен для общего использования.
        - Ошибка сохраняет слой происхождения: TransportError (сеть, разбор, HTTP)
          отличается от QiwiError (сервер отклонил операцию).
    """

    def __init__(self, transport: TransportProtocol):
        self.transport = transport

    def call(self, request: RequestSpec, model: Type[T]) -> T:
        """
        Контракт (вход/выход):
            Вход: RequestSpec и тип ожидаемой полезной нагрузки.
            Выход: экземпляр model.
        Алгоритм:
            - transport.call(); NetworkError пробрасывается как есть.
            - decode_envelope(); ParseError пробрасывается как есть.
            - При 4xx/5xx: Failure -> QiwiError, иначе HttpStatusError со статусом и телом.
            - При 2xx: envelope.into_result().
        """
        response = self.transport.call(request.path, request.method, request.query, request.json)

        if response.is_error:
            try:
                envelope = decode_envelope(response.text, model)
            except ParseError as exc:
                raise HttpStatusError(response.status_code, response.text) from exc
            if isinstance(envelope, Failure):
                envelope.into_result()
            raise HttpStatusError(response.status_code, response.text)

        return decode_envelope(response.text, model).into_result()


__all__ = ["Caller"]
