# -*- coding: utf-8 -*-
"""
Клиент ИРБИС64: единая точка доступа к операциям сервера.

Использование:
    with IrbisClient(Session(host="192.168.1.10", username="librarian",
                             password="secret")) as client:
        for mfn in client.search('"A=Byron, George$"'):
            print(client.format_record("@brief", mfn))
"""

from typing import List, Optional, Sequence
import logging

from .codec import Command, ansi, utf
from .connection import ConnectionManager
from .constants import (
    ALL_FORMAT,
    CMD_DATABASE_INFO,
    CMD_MAX_MFN,
    CMD_NOP,
    CMD_FORMAT_RECORDS,
    CMD_READ_RECORD,
    CMD_SERVER_VERSION,
    CMD_UNLOCK_RECORDS,
    DATABASE_MENU,
    READ_RECORD_ALLOWED_CODES,
)
from .files import FileService
from .formatting import FormatEngine, check_mfn
from .ini import IniFile
from .interfaces import Session, TransportInterface
from .logging_config import PerformanceLogger
from .menus import DatabaseInfo, MenuFile
from .parsers import (
    FoundLine,
    TermInfo,
    TermPosting,
    VersionInfo,
    parse_database_info,
    parse_record_batch,
    parse_version_info,
)
from .records import MarcRecord, parse_record
from .search import SearchEngine, SearchParameters, SearchResult
from .terms import PostingParameters, TermEngine, TermParameters

logger = logging.getLogger(__name__)


class IrbisClient:
    """Фасад над ConnectionManager и движками поиска, форматирования и файлов."""

    def __init__(self, session: Optional[Session] = None,
                 transport: Optional[TransportInterface] = None):
        """
        Args:
            session: Параметры подключения (по умолчанию Session())
            transport: Транспорт (для тестов и нестандартных каналов)
        """
        self.session = session or Session()
        self.connection = ConnectionManager(self.session, transport)
        self.searcher = SearchEngine(self.connection)
        self.formatter = FormatEngine(self.connection)
        self.files = FileService(self.connection)
        self.terms = TermEngine(self.connection)

    # --- ПОДКЛЮЧЕНИЕ ---

    def connect(self) -> Session:
        return self.connection.connect()

    def disconnect(self) -> None:
        self.connection.disconnect()

    @property
    def connected(self) -> bool:
        return self.connection.connected

    @property
    def server_version(self) -> str:
        return self.session.server_version

    @property
    def interval(self) -> int:
        return self.session.interval

    @property
    def ini(self) -> IniFile:
        return self.connection.ini

    @property
    def database(self) -> str:
        return self.session.database

    def no_op(self) -> None:
        """Пустая операция: подтверждает серверу, что клиент жив."""
        self.connection.send(Command.build(CMD_NOP)).check(CMD_NOP)

    def get_max_mfn(self, database: Optional[str] = None) -> int:
        """
        Максимальный MFN базы данных (передается кодом возврата).

        Returns:
            MFN, который получит следующая созданная запись
        """
        db = database or self.session.database
        response = self.connection.send(Command.build(CMD_MAX_MFN, ansi(db)))
        return response.check(CMD_MAX_MFN).return_code

    def get_server_version(self) -> VersionInfo:
        """Версия сервера, число подключенных клиентов и лимит клиентов."""
        response = self.connection.send(Command.build(CMD_SERVER_VERSION)).check(CMD_SERVER_VERSION)
        return parse_version_info(response)

    def get_database_info(self, database: Optional[str] = None) -> DatabaseInfo:
        """
        Сведения о базе данных: удаленные, неактуализированные и
        заблокированные записи, максимальный MFN, блокировка базы.
        """
        db = database or self.session.database
        response = self.connection.send(Command.build(CMD_DATABASE_INFO, ansi(db)))
        return parse_database_info(response.check(CMD_DATABASE_INFO), db)

    # --- ЗАПИСИ ---

    def read_record(self, mfn: int, version: int = 0,
                    database: Optional[str] = None) -> MarcRecord:
        """
        Читает запись по MFN.

        Args:
            mfn: MFN записи
            version: Номер версии (0 - текущая)
            database: База данных (по умолчанию база сессии)

        Returns:
            Запись; удаленная или заблокированная запись тоже возвращается

        Raises:
            ValueError: Неположительный MFN
            ServerError: Отрицательный код, кроме -201, -600, -602, -603
            DataError: Текст записи не соответствует формату
        """
        check_mfn(mfn)
        db = database or self.session.database
        command = Command.build(CMD_READ_RECORD, ansi(db), utf(mfn), utf(version))
        response = self.connection.send(command).check(CMD_READ_RECORD, READ_RECORD_ALLOWED_CODES)
        record = parse_record(response.utf_lines(), db)
        if version:
            # чтение старой версии блокирует запись на сервере
            self.unlock_records([mfn], db)
        return record

    def read_records(self, mfns: Sequence[int], database: Optional[str] = None) -> List[MarcRecord]:
        """
        Читает несколько записей одним запросом форматирования.
        Ошибка в любой записи прерывает всю операцию.
        """
        mfns = list(mfns)
        if not mfns:
            return []
        if len(mfns) == 1:
            return [self.read_record(mfns[0], database=database)]
        for mfn in mfns:
            check_mfn(mfn)

        db = database or self.session.database
        command = Command.build(
            CMD_FORMAT_RECORDS,
            ansi(db),
            ansi(ALL_FORMAT),
            utf(len(mfns)),
            *(utf(mfn) for mfn in mfns),
        )
        with PerformanceLogger(f"Чтение {len(mfns)} записей", logger):
            response = self.connection.send(command).check(CMD_FORMAT_RECORDS)
            return parse_record_batch(response, mfns, db)

    def unlock_records(self, mfns: Sequence[int], database: Optional[str] = None) -> None:
        """Снимает блокировку с записей."""
        mfns = list(mfns)
        if not mfns:
            return
        db = database or self.session.database
        command = Command.build(CMD_UNLOCK_RECORDS, ansi(db), *(utf(mfn) for mfn in mfns))
        self.connection.send(command).check(CMD_UNLOCK_RECORDS)
        logger.debug(f"Разблокированы записи {mfns} в базе {db}")

    # --- ПОИСК ---

    def search(self, expression: str, database: Optional[str] = None) -> SearchResult:
        return self.searcher.search(expression, database)

    def search_count(self, expression: str, database: Optional[str] = None) -> int:
        return self.searcher.search_count(expression, database)

    def search_all(self, expression: str, database: Optional[str] = None) -> List[int]:
        return self.searcher.search_all(expression, database)

    def search_ex(self, parameters: SearchParameters) -> List[FoundLine]:
        return self.searcher.search_ex(parameters)

    def search_read(self, expression: str, limit: int = 0,
                    database: Optional[str] = None) -> List[MarcRecord]:
        return self.searcher.search_read(expression, limit, database)

    def search_single_record(self, expression: str,
                             database: Optional[str] = None) -> Optional[MarcRecord]:
        return self.searcher.search_single_record(expression, database)

    # --- СЛОВАРЬ ---

    def read_terms(self, start_term: str, number: int,
                   database: Optional[str] = None) -> List[TermInfo]:
        """Читает number термов словаря, начиная с start_term."""
        return self.terms.read_terms(TermParameters(start_term, number, database or ""))

    def read_terms_ex(self, parameters: TermParameters) -> List[TermInfo]:
        return self.terms.read_terms(parameters)

    def list_terms(self, prefix: str, database: Optional[str] = None) -> List[str]:
        return self.terms.list_terms(prefix, database)

    def read_postings(self, parameters: PostingParameters) -> List[TermPosting]:
        return self.terms.read_postings(parameters)

    # --- ФОРМАТИРОВАНИЕ ---

    def format_record(self, format_spec: str, mfn: int, database: Optional[str] = None) -> str:
        return self.formatter.format_record(format_spec, mfn, database)

    def format_records(self, format_spec: str, mfns: Sequence[int],
                       database: Optional[str] = None) -> List[str]:
        return self.formatter.format_records(format_spec, mfns, database)

    def format_virtual_record(self, format_spec: str, record: MarcRecord) -> str:
        return self.formatter.format_virtual_record(format_spec, record)

    # --- ФАЙЛЫ ---

    def read_text_file(self, specification: str) -> str:
        return self.files.read_text_file(specification)

    def read_text_lines(self, specification: str) -> List[str]:
        return self.files.read_text_lines(specification)

    def read_menu_file(self, specification: str) -> MenuFile:
        return self.files.read_menu_file(specification)

    def list_files(self, *patterns: str) -> List[str]:
        return self.files.list_files(*patterns)

    def list_databases(self, specification: str = DATABASE_MENU) -> List[DatabaseInfo]:
        return self.files.list_databases(specification)

    def __enter__(self) -> 'IrbisClient':
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
