# -*- coding: utf-8 -*-
"""
Форматирование записей на сервере.

Клиент не интерпретирует язык форматирования: он передает имя
формата (@brief) или текст программы и разбирает полученный текст.
"""

from typing import List, Optional, Sequence
import logging

from .codec import Command, ansi, format_argument, utf
from .connection import ConnectionManager
from .constants import CMD_FORMAT_RECORDS, IRBIS_DELIMITER
from .parsers import parse_formatted_batch, parse_formatted_text
from .records import MarcRecord

logger = logging.getLogger(__name__)

# Число записей -2 означает "расформатировать переданную запись"
VIRTUAL_RECORD = -2


def check_mfn(mfn: int) -> None:
    if mfn <= 0:
        raise ValueError(f"MFN должен быть положительным: {mfn}")


class FormatEngine:
    """Одиночное и пакетное форматирование записей."""

    def __init__(self, connection: ConnectionManager):
        self.connection = connection

    def format_record(self, format_spec: str, mfn: int, database: Optional[str] = None) -> str:
        """
        Форматирует одну запись.

        Args:
            format_spec: Имя формата (@brief) или текст программы
            mfn: MFN записи
            database: База данных (по умолчанию база сессии)

        Returns:
            Расформатированный текст

        Raises:
            ValueError: Пустой формат или неположительный MFN
            ServerError: Сервер вернул отрицательный код
        """
        check_mfn(mfn)
        command = Command.build(
            CMD_FORMAT_RECORDS,
            ansi(database or self.connection.session.database),
            format_argument(format_spec),
            utf(1),
            utf(mfn),
        )
        response = self.connection.send(command).check(CMD_FORMAT_RECORDS)
        return parse_formatted_text(response)

    def format_records(self, format_spec: str, mfns: Sequence[int],
                       database: Optional[str] = None) -> List[str]:
        """
        Форматирует несколько записей одним запросом.

        Единственный MFN форматируется как одиночная запись: на такой запрос
        сервер отвечает текстом без префикса "mfn#".

        Returns:
            Тексты в порядке запрошенных MFN, ровно len(mfns) элементов

        Raises:
            ProtocolError: Число или MFN блоков ответа не совпадают с запросом
        """
        mfns = list(mfns)
        if not mfns:
            return []
        if len(mfns) == 1:
            return [self.format_record(format_spec, mfns[0], database)]
        for mfn in mfns:
            check_mfn(mfn)

        command = Command.build(
            CMD_FORMAT_RECORDS,
            ansi(database or self.connection.session.database),
            format_argument(format_spec),
            utf(len(mfns)),
            *(utf(mfn) for mfn in mfns),
        )
        response = self.connection.send(command).check(CMD_FORMAT_RECORDS)
        result = parse_formatted_batch(response, mfns)
        logger.debug(f"Расформатировано записей: {len(result)}")
        return result

    def format_virtual_record(self, format_spec: str, record: MarcRecord) -> str:
        """Форматирует запись, которой нет в базе данных (передается в запросе)."""
        command = Command.build(
            CMD_FORMAT_RECORDS,
            ansi(record.database or self.connection.session.database),
            format_argument(format_spec),
            utf(VIRTUAL_RECORD),
            utf(record.encode(IRBIS_DELIMITER)),
        )
        response = self.connection.send(command).check(CMD_FORMAT_RECORDS)
        return parse_formatted_text(response, keep_indent=True)
