# -*- coding: utf-8 -*-
"""
Интерфейсы и базовые структуры данных клиента ИРБИС64.
Обеспечивают четкие контракты между транспортом, кодеком и операциями.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Literal, TYPE_CHECKING

from .constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_DATABASE,
    DEFAULT_TIMEOUT,
    CATALOGER,
)

if TYPE_CHECKING:
    from .codec import ServerResponse

# Состояния сессии
ConnectionState = Literal['DISCONNECTED', 'CONNECTING', 'CONNECTED']
# Коды АРМ
WorkstationCode = Literal['A', 'C', 'M', 'R', 'B', 'K']


@dataclass
class Session:
    """
    Параметры и состояние сессии с сервером.

    Поля подключения задает вызывающий код; поля состояния (client_id,
    query_id, server_version, interval, state) изменяет только
    ConnectionManager в ходе connect/disconnect.
    """
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    username: str = ""
    password: str = ""
    database: str = DEFAULT_DATABASE
    workstation: str = CATALOGER
    timeout: float = DEFAULT_TIMEOUT

    client_id: Optional[int] = field(default=None, compare=False)
    query_id: Optional[int] = field(default=None, compare=False)
    server_version: str = field(default="", compare=False)
    interval: int = field(default=0, compare=False)
    state: ConnectionState = field(default='DISCONNECTED', compare=False)

    @property
    def connected(self) -> bool:
        """Находится ли сессия в состоянии CONNECTED."""
        return self.state == 'CONNECTED'

    def to_dict(self, show_password: bool = False) -> Dict[str, Any]:
        """Преобразует параметры подключения в словарь (пароль маскируется)."""
        return {
            'host': self.host,
            'port': self.port,
            'username': self.username,
            'password': self.password if show_password else '***',
            'database': self.database,
            'workstation': self.workstation,
            'timeout': self.timeout,
        }

    def to_connection_string(self, show_password: bool = False) -> str:
        """
        Формирует строку подключения для текущих параметров.

        Args:
            show_password: Включить пароль открытым текстом

        Returns:
            Строка вида "host=...;port=...;username=...;..."
        """
        password = self.password if show_password else '***'
        return (
            f"host={self.host};port={self.port};username={self.username};"
            f"password={password};database={self.database};"
            f"arm={self.workstation};"
        )


class TransportInterface(ABC):
    """Абстрактный интерфейс для транспортного уровня."""

    @abstractmethod
    def connect(self) -> None:
        """Установить соединение с сервером."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Закрыть соединение с сервером."""
        pass

    @abstractmethod
    def send_and_receive(self, packet: bytes) -> 'ServerResponse':
        """
        Отправить кадр запроса и прочитать ровно один кадр ответа.

        Args:
            packet: Закодированный кадр запроса

        Returns:
            Декодированный ответ сервера
        """
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """Проверить состояние соединения."""
        pass
