# -*- coding: utf-8 -*-
"""
Фабрика для создания клиентов ИРБИС64.
Упрощает создание клиентов и обеспечивает единую точку входа:
параметры, строка подключения или JSON-файл конфигурации.
"""

import json
import os
from typing import Any, Dict, Optional
import logging

from .client import IrbisClient
from .interfaces import Session, TransportInterface

logger = logging.getLogger(__name__)


class IrbisClientFactory:
    """
    Фабрика для создания клиентов ИРБИС64.

    Использование:
        client = IrbisClientFactory.create_client(
            host="192.168.1.10",
            username="librarian",
            password="secret",
            database="IBIS"
        )
    """

    # Синонимы ключей строки подключения -> поле Session
    _keys: Dict[str, str] = {
        'host': 'host', 'server': 'host', 'address': 'host',
        'port': 'port',
        'user': 'username', 'username': 'username', 'name': 'username', 'login': 'username',
        'pwd': 'password', 'password': 'password',
        'db': 'database', 'database': 'database', 'catalog': 'database',
        'arm': 'workstation', 'workstation': 'workstation',
        'timeout': 'timeout',
    }

    @classmethod
    def create_client(cls, transport: Optional[TransportInterface] = None, **settings) -> IrbisClient:
        """
        Создает клиент (без подключения к серверу).

        Args:
            transport: Транспорт (по умолчанию TCP)
            **settings: Параметры Session и их синонимы (server, login, pwd, db, arm, ...)

        Returns:
            Экземпляр IrbisClient

        Raises:
            ValueError: Неизвестный параметр или некорректное значение

        Examples:
            >>> client = IrbisClientFactory.create_client(
            ...     host="192.168.1.10",
            ...     login="librarian",
            ...     pwd="secret"
            ... )
        """
        session = Session(**cls._normalize(settings))
        client = IrbisClient(session, transport)
        logger.info(f"Создан клиент ИРБИС64 с параметрами: {cls._safe_kwargs_for_log(session.to_dict())}")
        return client

    @classmethod
    def parse_connection_string(cls, text: str) -> Dict[str, Any]:
        """
        Разбирает строку подключения вида 'host=...;port=...;user=...;pwd=...;'.

        Returns:
            Словарь параметров Session

        Raises:
            ValueError: Неизвестный ключ или элемент без '='
        """
        settings: Dict[str, Any] = {}
        for item in text.split(';'):
            item = item.strip()
            if not item:
                continue
            key, separator, value = item.partition('=')
            if not separator:
                raise ValueError(f"Элемент строки подключения без '=': {item!r}")
            settings[key.strip()] = value.strip()
        return cls._normalize(settings)

    @classmethod
    def from_connection_string(cls, text: str,
                               transport: Optional[TransportInterface] = None) -> IrbisClient:
        return cls.create_client(transport=transport, **cls.parse_connection_string(text))

    @classmethod
    def from_config_file(cls, path: str,
                         transport: Optional[TransportInterface] = None) -> IrbisClient:
        """
        Создает клиент по JSON-файлу конфигурации.

        Args:
            path: Путь к файлу с объектом {"host": ..., "username": ..., ...}

        Raises:
            FileNotFoundError: Файл не найден
            ValueError: Некорректный JSON или неизвестный ключ
        """
        if not os.path.exists(path):
            raise FileNotFoundError(f"Файл конфигурации '{path}' не найден")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                settings = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Некорректный JSON в файле '{path}': {e}")
        if not isinstance(settings, dict):
            raise ValueError(f"Файл '{path}' должен содержать JSON-объект")
        logger.info(f"Загружена конфигурация из {path}")
        return cls.create_client(transport=transport, **settings)

    @classmethod
    def _normalize(cls, settings: Dict[str, Any]) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for key, value in settings.items():
            name = cls._keys.get(str(key).lower())
            if name is None:
                raise ValueError(
                    f"Неизвестный параметр подключения: {key}. "
                    f"Доступные параметры: {sorted(set(cls._keys))}"
                )
            result[name] = value
        try:
            if 'port' in result:
                result['port'] = int(result['port'])
            if 'timeout' in result:
                result['timeout'] = float(result['timeout'])
        except (TypeError, ValueError):
            raise ValueError(f"Некорректный порт или таймаут: {cls._safe_kwargs_for_log(result)}")
        return result

    @staticmethod
    def _safe_kwargs_for_log(kwargs: Dict[str, Any]) -> Dict[str, Any]:
        """Безопасное форматирование параметров для логирования."""
        safe_kwargs = kwargs.copy()
        if "password" in safe_kwargs:
            safe_kwargs["password"] = "***"
        if "host" in safe_kwargs:
            parts = str(safe_kwargs["host"]).split(".")
            if len(parts) == 4:
                safe_kwargs["host"] = f"{parts[0]}.xxx.xxx.{parts[3]}"
        return safe_kwargs
