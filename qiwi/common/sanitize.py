from __future__ import annotations

from typing import Any, Mapping

SECRET_KEYS = frozenset({"token", "authorization"})


def maskSecret(value: str | None) -> str | None:
    """Bearer-токен в выводе заменяется на '***'; отсутствующий остаётся None."""
    if value is None:
        return None
    return "***"


def maskSecrets(values: Mapping[str, Any]) -> dict[str, Any]:
    """
    Назначение:
        Копия плоского словаря (query-параметры, заголовки) для лога.
    Контракт:
        Значения ключей из SECRET_KEYS (без учёта регистра) заменяются на '***',
        остальные копируются как есть.
    """
    return {key: maskSecret(str(value)) if key.lower() in SECRET_KEYS else value for key, value in values.items()}


def bodyPreview(text: str, limit: int = 500) -> str:
    """
    Назначение:
        Однострочное превью тела ответа для лога и сообщений об ошибках.
    Алгоритм:
        - Пробельные последовательности (в т.ч. переводы строк) схлопываются в один пробел,
          чтобы запись лога оставалась одной строкой.
        - Если превью длиннее limit, оно обрезается и дополняется исходной длиной тела.
    """
    flat = " ".join(text.split())
    if len(flat) <= limit:
        return flat
    return f"{flat[:limit]}... ({len(text)} chars)"


__all__ = ["SECRET_KEYS", "maskSecret", "maskSecrets", "bodyPreview"]
