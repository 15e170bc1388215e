# -*- coding: utf-8 -*-
"""
Транспорт TCP/IP и управление сессией с сервером ИРБИС64.

ConnectionManager - единственный компонент, выполняющий ввод-вывод
через сокет. Все операции верхнего уровня идут через send().
"""

import random
import socket
from typing import List, Optional
import logging

from .codec import Command, FrameCodec, ServerResponse, ansi
from .constants import CMD_REGISTER, CMD_UNREGISTER, DEFAULT_TIMEOUT
from .errors import IrbisConnectionError, IrbisError
from .ini import IniFile
from .interfaces import ConnectionState, Session, TransportInterface
from .parsers import parse_register_response

logger = logging.getLogger(__name__)


class TcpTransport(TransportInterface):
    """Реализация транспортного уровня для сети TCP/IP."""

    def __init__(self, host: str, port: int, timeout: float = DEFAULT_TIMEOUT):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.sock: Optional[socket.socket] = None

    def connect(self) -> None:
        if self.sock:
            return
        try:
            logger.info(f"Попытка подключения к {self.host}:{self.port}...")
            self.sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
            logger.info("Соединение успешно установлено.")
        except socket.timeout as e:
            self.sock = None
            raise IrbisConnectionError(f"Таймаут подключения к {self.host}:{self.port}: {e}")
        except OSError as e:
            self.sock = None
            raise IrbisConnectionError(f"Не удалось подключиться к {self.host}:{self.port}: {e}")

    def disconnect(self) -> None:
        if self.sock:
            try:
                self.sock.close()
            except OSError as e:
                logger.warning(f"Ошибка при закрытии сокета: {e}")
            self.sock = None
            logger.info("Соединение закрыто.")

    def is_connected(self) -> bool:
        return self.sock is not None

    def send_and_receive(self, packet: bytes) -> ServerResponse:
        if not self.sock:
            raise IrbisConnectionError("Соединение не установлено.")
        try:
            self.sock.sendall(packet)
            # "Умное" чтение: сначала строка длины, затем тело порциями
            return FrameCodec.decode(self.sock.recv)
        except IrbisError:
            raise
        except socket.timeout:
            raise IrbisConnectionError(f"Таймаут ожидания ответа ({self.timeout} с)")
        except OSError as e:
            raise IrbisConnectionError(f"Ошибка сокета: {e}")


class ConnectionManager:
    """
    Жизненный цикл сессии: DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTED.

    Использование:
        session = Session(host="192.168.1.10", username="librarian", password="secret")
        with ConnectionManager(session) as manager:
            response = manager.send(command)
    """

    INITIAL_QUERY_ID = 1

    def __init__(self, session: Session, transport: Optional[TransportInterface] = None):
        """
        Args:
            session: Параметры подключения
            transport: Транспорт (по умолчанию TcpTransport, создается при connect)
        """
        self.session = session
        self._custom_transport = transport
        self._transport: Optional[TransportInterface] = None
        self.ini = IniFile()
        self.ini_lines: List[str] = []

    # --- СОСТОЯНИЕ ---

    @property
    def state(self) -> ConnectionState:
        return self.session.state

    @property
    def connected(self) -> bool:
        return self.session.connected

    @property
    def client_id(self) -> Optional[int]:
        return self.session.client_id

    @property
    def query_id(self) -> Optional[int]:
        return self.session.query_id

    @property
    def server_version(self) -> str:
        return self.session.server_version

    @property
    def interval(self) -> int:
        return self.session.interval

    # --- ЖИЗНЕННЫЙ ЦИКЛ ---

    def connect(self) -> Session:
        """
        Открывает сокет и регистрирует клиента на сервере.

        Returns:
            Сессия в состоянии CONNECTED

        Raises:
            ValueError: Не заданы логин или пароль
            IrbisConnectionError: Сервер недоступен или таймаут
            ProtocolError: Искаженный ответ на регистрацию
            ServerError: Сервер отказал в регистрации (например, -4444)
        """
        if self.connected:
            logger.warning("Повторный connect при установленном подключении игнорируется")
            return self.session
        if not self.session.username or not self.session.password:
            raise ValueError("Для подключения необходимы логин и пароль")

        session = self.session
        session.state = 'CONNECTING'
        transport = self._custom_transport or TcpTransport(session.host, session.port, session.timeout)
        try:
            transport.connect()
            session.client_id = random.randint(100000, 999999)
            session.query_id = self.INITIAL_QUERY_ID
            command = Command.build(
                CMD_REGISTER,
                ansi(session.username),
                ansi(session.password, secret=True),
            )
            response = self._exchange(transport, command).check(CMD_REGISTER)
            registration = parse_register_response(response)
        except Exception as e:
            logger.error(f"Подключение к {session.host}:{session.port} не удалось: {e}")
            transport.disconnect()
            self._reset()
            raise

        self._transport = transport
        session.client_id = registration.client_id
        session.server_version = registration.server_version
        session.interval = registration.interval
        self.ini_lines = registration.ini_lines
        self.ini = IniFile.parse(registration.ini_lines)
        session.state = 'CONNECTED'
        logger.info(
            f"Подключено к {session.host}:{session.port} как {session.username} "
            f"(клиент {session.client_id}, версия сервера {session.server_version})"
        )
        return session

    def disconnect(self) -> None:
        """
        Снимает регистрацию и закрывает сокет. Повторный вызов ничего не делает.
        Ошибка транспорта при снятии регистрации не мешает перейти в DISCONNECTED.
        """
        if not self.connected:
            return
        try:
            self.send(Command.build(CMD_UNREGISTER, ansi(self.session.username)))
        except IrbisError as e:
            logger.warning(f"Ошибка при снятии регистрации: {e}")
        finally:
            if self._transport is not None:
                self._transport.disconnect()
            self._transport = None
            self._reset()
            logger.info(f"Отключено от {self.session.host}:{self.session.port}")

    def send(self, command: Command) -> ServerResponse:
        """
        Отправляет команду и возвращает ответ сервера.
        Номер запроса назначается и увеличивается при каждом вызове.

        Args:
            command: Команда

        Returns:
            Декодированный ответ (код возврата не проверяется)

        Raises:
            IrbisConnectionError: Нет подключения, таймаут или обрыв
            ProtocolError: Искаженный кадр ответа
        """
        if not self.connected or self._transport is None:
            raise IrbisConnectionError("Нет подключения к серверу")
        return self._exchange(self._transport, command)

    def _exchange(self, transport: TransportInterface, command: Command) -> ServerResponse:
        query_id = self.session.query_id
        packet = FrameCodec.encode(command, self.session, query_id)
        self.session.query_id = query_id + 1
        response = transport.send_and_receive(packet)
        logger.debug(f"Ответ на '{command.code}' #{query_id}: код {response.return_code}, "
                     f"строк {len(response.lines)}")
        return response

    def _reset(self) -> None:
        self.session.client_id = None
        self.session.query_id = None
        self.session.state = 'DISCONNECTED'

    def __enter__(self) -> 'ConnectionManager':
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
