from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Generic, NoReturn, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from qiwi.common.sanitize import bodyPreview
from qiwi.domain.exceptions import ParseError, QiwiError
from qiwi.domain.models import ErrorEnvelope

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Ответ разобран как ожидаемая модель."""

    payload: T

    def into_result(self) -> T:
        return self.payload


@dataclass(frozen=True)
class Failure:
    """Ответ разобран как {"errorCode": ...}."""

    error_code: str

    def into_result(self) -> NoReturn:
        """
        Назначение:
            Единственная точка, где успешный HTTP-вызов становится
            неуспешной прикладной операцией.
        """
        raise QiwiError(description=self.error_code)


Envelope = Union[Success[T], Failure]


@lru_cache(maxsize=None)
def _adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


def decode_envelope(raw: str, model: Any) -> Envelope:
    """
    Назначение:
        Разбор "untagged" ответа API: полезная нагрузка или ошибка.

    Входные данные:
        raw: str
            Сырой текст ответа.
        model:
            Тип полезной нагрузки (pydantic-модель или любой тип для TypeAdapter).

    Выходные данные:
        Success(payload) | Failure(error_code)

    Алгоритм:
        1. Строгий разбор raw в model.
        2. Только если (1) не удался, разбор в {"errorCode": str}.
        3. Если не удалось оба, ParseError с исходным текстом.

    Ограничения:
        Порядок шагов обязателен: модель, совпавшая по полям с формой ошибки,
        будет классифицирована как Success. Модели ответов поэтому держат
        обязательные поля, которых нет в форме ошибки.
    """
    try:
        return Success(_adapter(model).validate_json(raw))
    except ValidationError as success_exc:
        try:
            error = ErrorEnvelope.model_validate_json(raw)
        except ValidationError:
            name = getattr(model, "__name__", repr(model))
            raise ParseError(
                f"Response is neither {name} nor an error envelope: {bodyPreview(raw, limit=200)}",
                raw_text=raw,
            ) from success_exc
    return Failure(error_code=error.error_code)


__all__ = ["Success", "Failure", "Envelope", "decode_envelope"]
