# -*- coding: utf-8 -*-
"""
Получение файлов, размещенных на сервере: текстовые файлы, меню,
списки файлов по маске и список баз данных.

Спецификация файла: <код пути>.<база данных>.<имя файла>, например
'3.IBIS.WS.OPT' или '1..dbnam2.mnu'.
"""

from typing import List
import logging

from .codec import Command, ansi, irbis_to_unix
from .connection import ConnectionManager
from .constants import CMD_LIST_FILES, CMD_READ_TEXT_FILE, DATABASE_MENU
from .menus import DatabaseInfo, MenuFile
from .parsers import parse_file_listing

logger = logging.getLogger(__name__)


class FileService:
    """Чтение файлов сервера и разбор их структуры."""

    def __init__(self, connection: ConnectionManager):
        self.connection = connection

    def read_text_file(self, specification: str) -> str:
        """
        Читает текстовый файл с сервера.

        Args:
            specification: Спецификация файла

        Returns:
            Содержимое файла; пустая строка, если файла нет

        Raises:
            ValueError: Пустая спецификация
        """
        if not specification:
            raise ValueError("Не задана спецификация файла")
        command = Command.build(CMD_READ_TEXT_FILE, ansi(specification))
        response = self.connection.send(command).check(CMD_READ_TEXT_FILE)
        text = irbis_to_unix(response.ansi_text())
        if not text:
            logger.debug(f"Файл {specification} пуст или отсутствует")
        return text

    def read_text_lines(self, specification: str) -> List[str]:
        return self.read_text_file(specification).splitlines()

    def read_menu_file(self, specification: str) -> MenuFile:
        """Читает и разбирает MNU-файл."""
        return MenuFile.parse(self.read_text_lines(specification))

    def list_files(self, *patterns: str) -> List[str]:
        """
        Список файлов по маскам. На каждую маску отправляется отдельная
        команда; имена объединяются в порядке масок без удаления повторов.

        Args:
            *patterns: Маски вида '3.IBIS.brief.*'

        Returns:
            Имена файлов (пустой список, если ничего не найдено)
        """
        result: List[str] = []
        for pattern in patterns:
            if not pattern:
                continue
            response = self.connection.send(Command.build(CMD_LIST_FILES, ansi(pattern)))
            response.check(CMD_LIST_FILES)
            result.extend(parse_file_listing(response))
        return result

    def list_databases(self, specification: str = DATABASE_MENU) -> List[DatabaseInfo]:
        """Список баз данных из серверного меню (по умолчанию dbnam2.mnu)."""
        return DatabaseInfo.parse_menu(self.read_menu_file(specification))
