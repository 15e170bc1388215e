# -*- coding: utf-8 -*-
"""
Общие фикстуры: сценарный транспорт с заготовленными кадрами ответа
и сокет, отдающий кадр маленькими порциями.
"""

from typing import List, Union

import pytest

from irbis_client import FrameCodec, IrbisClient, Session, TransportInterface
from irbis_client.errors import IrbisConnectionError

# Количество строк заголовка запроса перед аргументами операции
HEADER_LINES = 10

REGISTER_LINES = ['654321', '64.2014.1', '300', '[Main]', 'DBNNAMECAT=dbnam1.mnu', '[Private]', 'DBNNAME2=dbnam2.mnu']


def frame(return_code: int, *lines: Union[str, bytes], encoding: str = 'utf-8') -> bytes:
    """Кадр ответа: длина, код возврата и строки данных."""
    parts = [str(return_code).encode('ascii')]
    for line in lines:
        parts.append(line if isinstance(line, bytes) else line.encode(encoding))
    body = b''.join(part + b'\n' for part in parts)
    return str(len(body)).encode('ascii') + b'\n' + body


def request_lines(packet: bytes, encoding: str = 'utf-8') -> List[str]:
    """Строки тела запроса без префикса длины."""
    length, _, body = packet.partition(b'\n')
    assert int(length) == len(body)
    lines = body.split(b'\n')
    assert lines[-1] == b''
    return [line.decode(encoding) for line in lines[:-1]]


def request_arguments(packet: bytes, encoding: str = 'utf-8') -> List[str]:
    return request_lines(packet, encoding)[HEADER_LINES:]


class ChunkedSocket:
    """Имитация сокета: отдает заранее заданные байты порциями не больше chunk."""

    def __init__(self, data: bytes, chunk: int = 3):
        self.data = data
        self.chunk = chunk
        self.position = 0
        self.sent = b''
        self.closed = False

    def recv(self, size: int) -> bytes:
        size = min(size, self.chunk, len(self.data) - self.position)
        result = self.data[self.position:self.position + size]
        self.position += size
        return result

    def sendall(self, data: bytes) -> None:
        self.sent += data

    def close(self) -> None:
        self.closed = True


class FakeTransport(TransportInterface):
    """
    Транспорт по сценарию: каждый запрос получает следующий кадр из очереди.
    Элемент очереди-исключение выбрасывается вместо ответа.
    """

    def __init__(self, chunk: int = 5):
        self.responses: list = []
        self.packets: List[bytes] = []
        self.chunk = chunk
        self.connected = False
        self.connect_calls = 0
        self.refuse = False

    def queue(self, *responses) -> 'FakeTransport':
        self.responses.extend(responses)
        return self

    def connect(self) -> None:
        self.connect_calls += 1
        if self.refuse:
            raise IrbisConnectionError("Соединение отвергнуто")
        self.connected = True

    def disconnect(self) -> None:
        self.connected = False

    def is_connected(self) -> bool:
        return self.connected

    def send_and_receive(self, packet: bytes):
        self.packets.append(packet)
        if not self.responses:
            raise IrbisConnectionError("Сценарий исчерпан")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return FrameCodec.decode(ChunkedSocket(response, self.chunk).recv)

    @property
    def last_packet(self) -> bytes:
        return self.packets[-1]


@pytest.fixture
def session():
    return Session(host='127.0.0.1', port=6666, username='librarian', password='secret', database='IBIS')


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def register_frame():
    return frame(0, *REGISTER_LINES, encoding='cp1251')


@pytest.fixture
def client(session, transport, register_frame):
    """Клиент, подключенный через сценарный транспорт."""
    transport.queue(register_frame)
    result = IrbisClient(session, transport)
    result.connect()
    return result
