# -*- coding: utf-8 -*-
"""
Клиент сервера ИРБИС64.
Подключение, поиск, чтение и форматирование записей, файлы сервера.

Использование:
    from irbis_client import IrbisClientFactory, setup_logging

    # Настройка логирования
    setup_logging(log_level="INFO", file_output=False)

    # Создание клиента
    client = IrbisClientFactory.from_connection_string(
        "host=127.0.0.1;port=6666;user=librarian;pwd=secret;db=IBIS;"
    )

    # Работа с сервером
    with client:
        found = client.search('"A=Byron, George$"')
        for record in client.read_records(found.mfns):
            print(record.fm(200, 'a'))
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .client import IrbisClient

from .factory import IrbisClientFactory

from .connection import (
    ConnectionManager,
    TcpTransport
)

from .interfaces import (
    Session,
    ConnectionState,
    WorkstationCode,
    TransportInterface
)

from .codec import (
    Argument,
    Command,
    ServerResponse,
    FrameCodec,
    ansi,
    utf,
    format_argument,
    prepare_format,
    remove_comments,
    irbis_to_unix,
    irbis_to_lines
)

from .errors import (
    IrbisError,
    IrbisConnectionError,
    ProtocolError,
    ServerError,
    DataError,
    describe_error
)

from .records import (
    MarcRecord,
    RecordField,
    SubField,
    parse_record,
    serialize_record
)

from .search import (
    SearchEngine,
    SearchParameters,
    SearchResult
)

from .formatting import FormatEngine

from .files import FileService

from .menus import (
    MenuEntry,
    MenuFile,
    DatabaseInfo
)

from .ini import (
    IniFile,
    IniSection,
    IniLine
)

from .terms import (
    TermEngine,
    TermParameters,
    PostingParameters
)

from .parsers import (
    FoundLine,
    TermInfo,
    TermPosting,
    VersionInfo
)

from .logging_config import (
    setup_logging,
    get_logger,
    LogContext,
    PerformanceLogger,
    ColoredFormatter
)

# Экспортируемые имена
__all__ = [
    # Версия
    '__version__',

    # Клиент и фабрика
    'IrbisClient',
    'IrbisClientFactory',

    # Подключение
    'ConnectionManager',
    'TcpTransport',
    'Session',
    'ConnectionState',
    'WorkstationCode',
    'TransportInterface',

    # Протокол
    'Argument',
    'Command',
    'ServerResponse',
    'FrameCodec',
    'ansi',
    'utf',
    'format_argument',
    'prepare_format',
    'remove_comments',
    'irbis_to_unix',
    'irbis_to_lines',

    # Ошибки
    'IrbisError',
    'IrbisConnectionError',
    'ProtocolError',
    'ServerError',
    'DataError',
    'describe_error',

    # Записи
    'MarcRecord',
    'RecordField',
    'SubField',
    'parse_record',
    'serialize_record',

    # Операции
    'SearchEngine',
    'SearchParameters',
    'SearchResult',
    'FoundLine',
    'TermEngine',
    'TermParameters',
    'PostingParameters',
    'TermInfo',
    'TermPosting',
    'VersionInfo',
    'FormatEngine',
    'FileService',

    # Меню и INI
    'MenuEntry',
    'MenuFile',
    'DatabaseInfo',
    'IniFile',
    'IniSection',
    'IniLine',

    # Логирование
    'setup_logging',
    'get_logger',
    'LogContext',
    'PerformanceLogger',
    'ColoredFormatter'
]

# Инициализация логирования при импорте (только консоль)
import logging
if not logging.getLogger().handlers:
    setup_logging(log_level="INFO", console_output=True, file_output=False)
