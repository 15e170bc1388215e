# -*- coding: utf-8 -*-
"""
Поиск записей по выражению на языке запросов сервера.
Выражение передается как есть: его синтаксис разбирает сервер.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional
import logging

from .codec import Command, ansi, format_argument, utf
from .connection import ConnectionManager
from .constants import ALL_FORMAT, ALT_DELIMITER, CMD_SEARCH
from .parsers import FoundLine, parse_found_count, parse_found_lines, parse_found_mfns
from .records import MarcRecord, parse_record

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """MFN найденных записей в порядке ответа сервера (повторы сохраняются)."""
    mfns: List[int] = field(default_factory=list)
    found: int = 0

    def __len__(self) -> int:
        return len(self.mfns)

    def __iter__(self) -> Iterator[int]:
        return iter(self.mfns)

    def __bool__(self) -> bool:
        return bool(self.mfns)


@dataclass
class SearchParameters:
    """Параметры расширенного поиска."""
    expression: str = ""
    database: str = ""
    first_record: int = 1
    number_of_records: int = 0
    format: str = ""
    min_mfn: int = 0
    max_mfn: int = 0
    sequential: str = ""


class SearchEngine:
    """Формирует поисковые запросы и разбирает списки MFN."""

    def __init__(self, connection: ConnectionManager):
        self.connection = connection

    def _database(self, database: Optional[str] = None) -> str:
        return database or self.connection.session.database

    def _query(self, expression: str, number: int, first: int,
               database: Optional[str] = None) -> Command:
        return Command.build(
            CMD_SEARCH,
            ansi(self._database(database)),
            utf(expression),
            utf(number),
            utf(first),
        )

    def search(self, expression: str, database: Optional[str] = None) -> SearchResult:
        """
        Простой поиск (не более одной порции ответа сервера).

        Args:
            expression: Поисковое выражение, например '"A=Byron, George$"'
            database: База данных (по умолчанию база сессии)

        Returns:
            Найденные MFN; пустой результат не является ошибкой

        Raises:
            ServerError: Сервер вернул отрицательный код
        """
        if not expression:
            return SearchResult()
        response = self.connection.send(self._query(expression, 0, 1, database)).check(CMD_SEARCH)
        result = SearchResult(parse_found_mfns(response),
                              parse_found_count(response))
        logger.info(f"Поиск {expression!r}: найдено {result.found}, получено {len(result)}")
        return result

    def search_count(self, expression: str, database: Optional[str] = None) -> int:
        """Количество записей, удовлетворяющих выражению (без списка MFN)."""
        if not expression:
            return 0
        response = self.connection.send(self._query(expression, 0, 0, database)).check(CMD_SEARCH)
        return parse_found_count(response)

    def search_all(self, expression: str, database: Optional[str] = None) -> List[int]:
        """
        Поиск всех записей, даже если сервер отдает их несколькими порциями.
        Порции запрашиваются по номеру первой записи до достижения общего количества.
        """
        result: List[int] = []
        if not expression:
            return result

        first = 1
        total = 0
        while True:
            response = self.connection.send(self._query(expression, 0, first, database)).check(CMD_SEARCH)
            if first == 1:
                total = parse_found_count(response)
                if total == 0:
                    break
            portion = parse_found_mfns(response)
            if not portion:
                break
            result.extend(portion)
            first += len(portion)
            if first > total:
                break
            logger.debug(f"Поиск {expression!r}: получено {len(result)} из {total}")

        return result

    def search_ex(self, parameters: SearchParameters) -> List[FoundLine]:
        """
        Расширенный поиск: диапазон MFN, последовательный поиск и
        форматирование найденных записей на сервере.

        Returns:
            Строки результата с MFN и описанием (результатом формата)
        """
        if not parameters.expression and not parameters.sequential:
            return []

        arguments = [
            ansi(self._database(parameters.database)),
            utf(parameters.expression),
            utf(parameters.number_of_records),
            utf(parameters.first_record),
            format_argument(parameters.format) if parameters.format.strip() else ansi(''),
            utf(parameters.min_mfn),
            utf(parameters.max_mfn),
            ansi(parameters.sequential),
        ]
        response = self.connection.send(Command.build(CMD_SEARCH, *arguments)).check(CMD_SEARCH)
        return parse_found_lines(response)

    def search_read(self, expression: str, limit: int = 0,
                    database: Optional[str] = None) -> List[MarcRecord]:
        """
        Поиск с чтением найденных записей за одно обращение к серверу:
        записи форматируются на сервере в формате &uf('+0').

        Args:
            expression: Поисковое выражение
            limit: Не более стольких записей (0 - сколько отдаст сервер)
            database: База данных (по умолчанию база сессии)

        Returns:
            Записи в порядке ответа сервера

        Raises:
            ValueError: Отрицательный limit
            DataError: Текст записи не соответствует формату
        """
        if limit < 0:
            raise ValueError(f"Ограничение не может быть отрицательным: {limit}")

        db = self._database(database)
        parameters = SearchParameters(expression=expression, database=db,
                                      number_of_records=limit, format=ALL_FORMAT)
        result = []
        for found in self.search_ex(parameters):
            lines = found.description.split(ALT_DELIMITER)[1:]
            if not lines:
                continue
            result.append(parse_record(lines, db))
        logger.info(f"Поиск с чтением {expression!r}: прочитано записей {len(result)}")
        return result

    def search_single_record(self, expression: str,
                             database: Optional[str] = None) -> Optional[MarcRecord]:
        """Первая найденная запись или None, если ничего не найдено."""
        found = self.search_read(expression, 1, database)
        return found[0] if found else None
