# -*- coding: utf-8 -*-
"""
Исключения клиента ИРБИС64 и расшифровка кодов ошибок сервера.

Иерархия:
    IrbisError
        IrbisConnectionError  - отказ/таймаут/обрыв сокета
        ProtocolError         - искаженный кадр ответа
        ServerError           - отрицательный код возврата сервера
        DataError             - полезная нагрузка не соответствует формату
"""

from typing import Dict, Optional


_ERROR_DESCRIPTIONS: Dict[int, str] = {
    -100: "MFN outside the database range",
    -101: "Bad shelf number",
    -102: "Bad shelf size",
    -140: "MFN outside the database range",
    -141: "Error during read",
    -200: "Field is absent",
    -201: "Previous version of the record is absent",
    -202: "Term not found",
    -203: "Last term in the list",
    -204: "First term in the list",
    -300: "Database is locked",
    -301: "Database is locked",
    -400: "Error during MST or XRF file access",
    -401: "Error during IFP file access",
    -402: "Error during write",
    -403: "Error during actualization",
    -600: "Record is logically deleted",
    -601: "Record is physically deleted",
    -602: "Record is locked",
    -603: "Record is logically deleted",
    -605: "Record is physically deleted",
    -607: "Error in autoin.gbl",
    -608: "Error in record version",
    -700: "Error during backup creation",
    -701: "Error during backup restore",
    -702: "Error during sorting",
    -703: "Erroneous term",
    -704: "Error during dictionary creation",
    -705: "Error during dictionary loading",
    -800: "Error in global correction parameters",
    -801: "ERR_GBL_REP",
    -802: "ERR_GBL_MET",
    -1111: "Server execution error",
    -2222: "Protocol error",
    -3333: "Unregistered client",
    -3334: "Client not registered",
    -3335: "Bad client identifier",
    -3336: "Workstation not allowed",
    -3337: "Client already registered",
    -3338: "Bad client",
    -4444: "Bad password",
    -5555: "File doesn't exist",
    -7777: "Can't run/stop administrator task",
    -8888: "General error",
    -100000: "Network failure",
}


def describe_error(code: int) -> str:
    """
    Возвращает описание кода возврата сервера.

    Args:
        code: Код возврата

    Returns:
        Текстовое описание ("No error" для неотрицательных кодов)

    Examples:
        >>> describe_error(-4444)
        'Bad password'
    """
    if code >= 0:
        return "No error"
    return _ERROR_DESCRIPTIONS.get(code, "Unknown error")


def is_known_error(code: int) -> bool:
    """Известен ли код ошибки таблице сервера."""
    return code in _ERROR_DESCRIPTIONS


class IrbisError(Exception):
    """Базовый класс всех ошибок клиента."""


class IrbisConnectionError(IrbisError, ConnectionError):
    """Сокет недоступен, истек таймаут или соединение неожиданно закрыто."""


class ProtocolError(IrbisError):
    """Искаженный кадр: длина, усеченное тело, нет кода возврата и т.п."""


class ServerError(IrbisError):
    """Сервер вернул отрицательный код возврата."""

    def __init__(self, code: int, command: Optional[str] = None):
        self.code = code
        self.command = command
        self.description = describe_error(code)
        message = f"Код {code}: {self.description}"
        if command:
            message = f"Команда '{command}': {message}"
        super().__init__(message)

    @property
    def known(self) -> bool:
        """Распознан ли код по таблице ошибок сервера."""
        return is_known_error(self.code)


class DataError(IrbisError, ValueError):
    """Структурированные данные не соответствуют ожидаемому формату."""
