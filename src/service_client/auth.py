# src/service_client/auth.py

from dataclasses import dataclass
from typing import Callable, Union

AuthorizationGenerator = Callable[[], str]
AuthHeader = Union[str, AuthorizationGenerator]


@dataclass(frozen=True)
class StaticAuthorization:
    """Одно и то же значение Authorization для всех запросов"""

    value: str

    def resolve(self) -> str:
        return self.value


@dataclass(frozen=True)
class DynamicAuthorization:
    """Значение Authorization вычисляется заново для каждого запроса"""

    generator: AuthorizationGenerator

    def resolve(self) -> str:
        return self.generator()


Authorization = Union[StaticAuthorization, DynamicAuthorization]


def to_authorization(auth: AuthHeader) -> Authorization:
    """
    Выбирает вариант авторизации при конфигурации клиента.

    Args:
        auth: Строка (статический заголовок) или функция без аргументов,
              возвращающая строку (динамический заголовок)

    Returns:
        StaticAuthorization или DynamicAuthorization
    """
    if isinstance(auth, (StaticAuthorization, DynamicAuthorization)):
        return auth
    if callable(auth):
        return DynamicAuthorization(auth)
    return StaticAuthorization(auth)
