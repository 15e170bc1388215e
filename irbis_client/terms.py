# -*- coding: utf-8 -*-
"""
Поисковый словарь (инвертированный файл): чтение термов по порядку,
обход всех термов с префиксом и чтение ссылок терма на записи.
"""

from dataclasses import dataclass, field
from typing import List, Optional
import logging

from .codec import Command, ansi, format_argument, prepare_format, utf
from .connection import ConnectionManager
from .constants import (
    CMD_READ_POSTINGS,
    CMD_READ_TERMS,
    CMD_READ_TERMS_REVERSE,
    MAX_TERMS_PORTION,
    READ_TERMS_ALLOWED_CODES,
)
from .parsers import TermInfo, TermPosting, parse_postings, parse_terms

logger = logging.getLogger(__name__)


@dataclass
class TermParameters:
    """Параметры чтения словаря."""
    start_term: str = ""
    number_of_terms: int = 0
    database: str = ""
    reverse_order: bool = False
    format: str = ""


@dataclass
class PostingParameters:
    """Параметры чтения ссылок: один терм или список термов."""
    term: str = ""
    list_of_terms: List[str] = field(default_factory=list)
    database: str = ""
    first_posting: int = 1
    number_of_postings: int = 0
    format: str = ""


class TermEngine:
    """Чтение словаря и ссылок термов."""

    def __init__(self, connection: ConnectionManager):
        self.connection = connection

    def _database(self, database: Optional[str] = None) -> str:
        return database or self.connection.session.database

    def read_terms(self, parameters: TermParameters) -> List[TermInfo]:
        """
        Читает термы словаря, начиная с заданного.

        Args:
            parameters: Начальный терм, число термов, направление, формат

        Returns:
            Термы с числом ссылок; пустой список, если термов нет

        Raises:
            ValueError: Отрицательное число термов
            ServerError: Отрицательный код, кроме -202, -203, -204
        """
        if parameters.number_of_terms < 0:
            raise ValueError(f"Число термов не может быть отрицательным: {parameters.number_of_terms}")

        command_code = CMD_READ_TERMS_REVERSE if parameters.reverse_order else CMD_READ_TERMS
        command = Command.build(
            command_code,
            ansi(self._database(parameters.database)),
            utf(parameters.start_term),
            utf(parameters.number_of_terms),
            ansi(prepare_format(parameters.format)),
        )
        response = self.connection.send(command).check(command_code, READ_TERMS_ALLOWED_CODES)
        return parse_terms(response)

    def list_terms(self, prefix: str, database: Optional[str] = None) -> List[str]:
        """
        Все термы словаря с заданным префиксом (префикс отбрасывается).
        Словарь читается порциями, пока термы начинаются с префикса.
        """
        prefix = prefix.upper()
        result: List[str] = []
        start = prefix
        while True:
            portion = self.read_terms(TermParameters(start, MAX_TERMS_PORTION, database or ""))
            last = start
            for term in portion:
                if not term.text.startswith(prefix):
                    logger.debug(f"Термов с префиксом {prefix!r}: {len(result)}")
                    return result
                # начальный терм повторяется в начале каждой порции
                if term.text != start:
                    result.append(term.text[len(prefix):])
                    last = term.text
            if last == start:
                break
            start = last

        logger.debug(f"Термов с префиксом {prefix!r}: {len(result)}")
        return result

    def read_postings(self, parameters: PostingParameters) -> List[TermPosting]:
        """
        Читает ссылки терма (или нескольких термов) на записи.

        Raises:
            ValueError: Не задан ни терм, ни список термов
            ServerError: Сервер вернул отрицательный код
        """
        terms = list(parameters.list_of_terms) or ([parameters.term] if parameters.term else [])
        if not terms:
            raise ValueError("Не задан терм для чтения ссылок")

        command = Command.build(
            CMD_READ_POSTINGS,
            ansi(self._database(parameters.database)),
            utf(parameters.number_of_postings),
            utf(parameters.first_posting),
            format_argument(parameters.format) if parameters.format.strip() else ansi(''),
            *(utf(term) for term in terms),
        )
        response = self.connection.send(command).check(CMD_READ_POSTINGS)
        return parse_postings(response)
