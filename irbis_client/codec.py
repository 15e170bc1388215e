# -*- coding: utf-8 -*-
"""
Кодек кадров протокола ИРБИС64.

Кадр запроса:  <длина тела в байтах>\\n<тело>
Тело запроса:  заголовок (код команды, АРМ, код команды, идентификатор
               клиента, номер запроса, пароль, логин, три пустые строки)
               и аргументы операции, по одному в строке.
Кадр ответа:   <длина тела в байтах>\\n<код возврата>\\n<строки данных>*

Часть полей передается в однобайтовой кодировке (cp1251), остальные в UTF-8.
Кодек не владеет сокетом: чтение выполняется через функцию recv,
которую предоставляет транспорт.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union
import logging

from .constants import (
    ANSI_ENCODING,
    UTF_ENCODING,
    IRBIS_DELIMITER,
    UNIX_DELIMITER,
)
from .errors import IrbisConnectionError, ProtocolError, ServerError
from .interfaces import Session

logger = logging.getLogger(__name__)

# Максимальное число символов в строке длины кадра
MAX_LENGTH_DIGITS = 12
# Размер порции при чтении тела кадра
RECEIVE_CHUNK = 32 * 1024


# --- ВСПОМОГАТЕЛЬНЫЕ ФУНКЦИИ ---

def irbis_to_unix(text: str) -> str:
    """Заменяет разделители строк ИРБИС на \\n."""
    return text.replace(IRBIS_DELIMITER, UNIX_DELIMITER)


def irbis_to_lines(text: str) -> List[str]:
    """Разбивает текст на строки по разделителю ИРБИС."""
    return text.split(IRBIS_DELIMITER)


def remove_comments(text: str) -> str:
    """
    Удаляет комментарии вида /* ... до конца строки из формата.
    Внутри литералов ('...', "...", |...|) комментарии не распознаются.

    Args:
        text: Текст формата

    Returns:
        Текст без комментариев
    """
    if not text or '/*' not in text:
        return text

    result = []
    state = ''
    index = 0
    length = len(text)
    while index < length:
        c = text[index]
        if state:
            if c == state:
                state = ''
            result.append(c)
        elif c == '/' and index + 1 < length and text[index + 1] == '*':
            while index < length:
                if text[index] in '\r\n':
                    result.append(text[index])
                    break
                index += 1
        else:
            if c in '\'"|':
                state = c
            result.append(c)
        index += 1

    return ''.join(result)


def prepare_format(text: str) -> str:
    """Удаляет комментарии и управляющие символы из формата."""
    text = remove_comments(text)
    return ''.join(c for c in text if c >= ' ')


def preview(data: bytes, limit: int = 120) -> str:
    """Печатное представление байт для отладочного лога."""
    text = data[:limit].decode(UTF_ENCODING, errors='replace')
    text = text.replace('\r', '\\r').replace('\n', '\\n')
    text = text.replace('\x1f', '\\x1f').replace('\x1e', '\\x1e')
    if len(data) > limit:
        text += f"... (+{len(data) - limit} байт)"
    return text


# --- АРГУМЕНТЫ И КОМАНДЫ ---

@dataclass(frozen=True)
class Argument:
    """Одна строка тела запроса вместе с ее кодировкой."""
    text: str
    encoding: str = UTF_ENCODING
    secret: bool = False

    def encode(self) -> bytes:
        return self.text.encode(self.encoding, errors='replace')

    def __str__(self) -> str:
        return '***' if self.secret else self.text


def ansi(text: str, secret: bool = False) -> Argument:
    """Аргумент в однобайтовой кодировке (cp1251)."""
    return Argument(str(text), ANSI_ENCODING, secret)


def utf(value: Union[str, int, bool]) -> Argument:
    """Аргумент в UTF-8. Целые и логические значения передаются числом."""
    if isinstance(value, bool):
        value = int(value)
    return Argument(str(value), UTF_ENCODING)


def format_argument(text: str) -> Argument:
    """
    Аргумент со спецификацией формата.

    Ссылка на формат сервера (@имя) передается в cp1251, программа
    формата передается в UTF-8 с префиксом '!'.

    Args:
        text: Имя формата (@brief) или текст программы

    Returns:
        Подготовленный аргумент

    Raises:
        ValueError: Если после подготовки формат пуст
    """
    prepared = prepare_format(text.strip())
    if not prepared:
        raise ValueError("Не задана спецификация формата")
    if prepared[0] == '@':
        return ansi(prepared)
    if prepared[0] == '!':
        return utf(prepared)
    return utf('!' + prepared)


@dataclass(frozen=True)
class Command:
    """Неизменяемый запрос к серверу: код команды и аргументы операции."""
    code: str
    arguments: Tuple[Argument, ...] = ()

    @classmethod
    def build(cls, code: str, *arguments: Argument) -> 'Command':
        return cls(code, tuple(arguments))

    def describe(self) -> str:
        """Краткое описание для лога (секретные аргументы маскируются)."""
        args = ', '.join(str(a) for a in self.arguments)
        return f"{self.code}({args})"


# --- ОТВЕТ СЕРВЕРА ---

@dataclass(frozen=True)
class ServerResponse:
    """
    Декодированный кадр ответа.

    Строки данных хранятся как байты: кодировку каждой строки определяет
    конкретная операция (cp1251 или UTF-8).
    """
    return_code: int
    lines: Tuple[bytes, ...] = ()

    @property
    def is_error(self) -> bool:
        return self.return_code < 0

    def check(self, command: Optional[str] = None, allowed: Iterable[int] = ()) -> 'ServerResponse':
        """
        Проверяет код возврата.

        Args:
            command: Код команды (для сообщения об ошибке)
            allowed: Отрицательные коды, которые не считаются ошибкой

        Returns:
            Этот же ответ

        Raises:
            ServerError: При отрицательном коде, не входящем в allowed
        """
        if self.return_code < 0 and self.return_code not in tuple(allowed):
            raise ServerError(self.return_code, command)
        return self

    def ansi_lines(self) -> List[str]:
        return [line.decode(ANSI_ENCODING, errors='replace') for line in self.lines]

    def utf_lines(self) -> List[str]:
        return [line.decode(UTF_ENCODING, errors='replace') for line in self.lines]

    def ansi_text(self) -> str:
        return b'\n'.join(self.lines).decode(ANSI_ENCODING, errors='replace')

    def utf_text(self) -> str:
        return b'\n'.join(self.lines).decode(UTF_ENCODING, errors='replace')


# --- КОДИРОВАНИЕ / ДЕКОДИРОВАНИЕ КАДРОВ ---

def encode_frame(body: bytes) -> bytes:
    """Добавляет к телу префикс длины."""
    return str(len(body)).encode('ascii') + b'\n' + body


def encode_query(command: Command, session: Session, query_id: int) -> bytes:
    """
    Кодирует команду в кадр запроса.

    Args:
        command: Команда
        session: Сессия (АРМ, идентификатор клиента, логин, пароль)
        query_id: Порядковый номер запроса

    Returns:
        Кадр запроса
    """
    header: Sequence[Argument] = (
        ansi(command.code),
        ansi(session.workstation),
        ansi(command.code),
        utf(session.client_id or 0),
        utf(query_id),
        ansi(session.password, secret=True),
        ansi(session.username),
        ansi(''),
        ansi(''),
        ansi(''),
    )
    body = b''.join(arg.encode() + b'\n' for arg in (*header, *command.arguments))
    return encode_frame(body)


def read_frame(recv: Callable[[int], bytes]) -> bytes:
    """
    Читает один кадр: строку длины, затем ровно указанное число байт.
    Транспорт может отдавать кадр несколькими порциями.

    Args:
        recv: Функция чтения (аналог socket.recv)

    Returns:
        Тело кадра

    Raises:
        IrbisConnectionError: Соединение закрыто до первого байта ответа
        ProtocolError: Некорректная длина или усеченное тело
    """
    header = bytearray()
    while True:
        chunk = recv(1)
        if not chunk:
            if not header:
                raise IrbisConnectionError("Сервер закрыл соединение, не передав ответ")
            raise ProtocolError("Соединение закрыто до окончания строки длины")
        if chunk == b'\n':
            break
        header += chunk
        if len(header) > MAX_LENGTH_DIGITS:
            raise ProtocolError(f"Слишком длинный префикс длины: {bytes(header)!r}")

    text = header.decode('ascii', errors='replace').strip()
    if not text.isdigit():
        raise ProtocolError(f"Некорректный префикс длины: {text!r}")
    length = int(text)

    body = bytearray()
    while len(body) < length:
        chunk = recv(min(length - len(body), RECEIVE_CHUNK))
        if not chunk:
            raise ProtocolError(f"Ответ усечен: получено {len(body)} из {length} байт")
        body += chunk
    return bytes(body)


def decode_body(body: bytes) -> ServerResponse:
    """
    Разбирает тело кадра ответа на код возврата и строки данных.

    Raises:
        ProtocolError: Нет строки кода возврата или она не является числом
    """
    lines = [line[:-1] if line.endswith(b'\r') else line for line in body.split(b'\n')]
    if lines and lines[-1] == b'':
        lines.pop()
    if not lines or not lines[0].strip():
        raise ProtocolError("В ответе отсутствует код возврата")
    try:
        return_code = int(lines[0].decode('ascii').strip())
    except (UnicodeDecodeError, ValueError):
        raise ProtocolError(f"Некорректный код возврата: {lines[0]!r}")
    return ServerResponse(return_code, tuple(lines[1:]))


class FrameCodec:
    """Кодирование команд в кадры и декодирование кадров ответа."""

    @staticmethod
    def encode(command: Command, session: Session, query_id: int) -> bytes:
        packet = encode_query(command, session, query_id)
        # сырой кадр содержит пароль, в лог идет только описание команды
        logger.debug(f"-> Запрос #{query_id}: {command.describe()} ({len(packet)} байт)")
        return packet

    @staticmethod
    def decode(recv: Callable[[int], bytes]) -> ServerResponse:
        body = read_frame(recv)
        logger.debug(f"<- Кадр: {preview(body)}")
        return decode_body(body)
