# -*- coding: utf-8 -*-
"""
MNU-файлы: чередующиеся строки кода и описания,
завершаемые пустым кодом или строкой '*****'.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import logging

from .constants import MENU_STOP_MARKER
from .errors import DataError

logger = logging.getLogger(__name__)


@dataclass
class MenuEntry:
    """Пара строк MNU-файла."""
    code: str
    description: str = ""

    def __str__(self) -> str:
        return f"{self.code} - {self.description}"


@dataclass
class MenuFile:
    """Упорядоченный набор элементов меню."""
    entries: List[MenuEntry] = field(default_factory=list)

    @classmethod
    def parse(cls, lines: Sequence[str]) -> 'MenuFile':
        """
        Разбирает строки меню.

        Разбор останавливается на пустом коде, на '*****' или на конце данных.

        Args:
            lines: Строки MNU-файла

        Returns:
            Меню

        Raises:
            DataError: Если для кода нет строки описания
        """
        result = cls()
        for index in range(0, len(lines), 2):
            code = lines[index]
            if not code or code.startswith(MENU_STOP_MARKER):
                break
            if index + 1 >= len(lines):
                raise DataError(f"Для кода меню {code!r} нет строки описания")
            result.append(code, lines[index + 1])
        logger.debug(f"Разобрано меню: элементов {len(result.entries)}")
        return result

    @classmethod
    def parse_text(cls, text: str) -> 'MenuFile':
        return cls.parse(text.splitlines())

    def append(self, code: str, description: str) -> 'MenuFile':
        self.entries.append(MenuEntry(code, description))
        return self

    def clear(self) -> 'MenuFile':
        self.entries = []
        return self

    def _find(self, code: str) -> Optional[MenuEntry]:
        code = code.upper()
        for entry in self.entries:
            if entry.code.upper() == code:
                return entry
        return None

    def get_entry(self, code: str) -> Optional[MenuEntry]:
        """Ищет элемент по коду: точно, затем без пробелов, затем без '-=:'."""
        for candidate in (code, code.strip(), code.strip().strip('-=:')):
            entry = self._find(candidate)
            if entry is not None:
                return entry
        return None

    def get_value(self, code: str, default: str = "") -> str:
        entry = self.get_entry(code)
        return entry.description if entry else default

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def __str__(self) -> str:
        return ''.join(f"{entry}\n" for entry in self.entries) + MENU_STOP_MARKER


@dataclass
class DatabaseInfo:
    """
    Сведения о базе данных: из меню dbnam*.mnu (имя, описание, только чтение)
    или от сервера (списки записей по статусу, максимальный MFN, блокировка).
    """
    name: str
    description: str = ""
    read_only: bool = False
    max_mfn: int = 0
    logically_deleted: List[int] = field(default_factory=list)
    physically_deleted: List[int] = field(default_factory=list)
    non_actualized: List[int] = field(default_factory=list)
    locked_records: List[int] = field(default_factory=list)
    database_locked: bool = False

    @classmethod
    def parse_menu(cls, menu: MenuFile) -> List['DatabaseInfo']:
        """Код с префиксом '-' означает базу только для чтения."""
        result = []
        for entry in menu.entries:
            name = entry.code
            read_only = name.startswith('-')
            if read_only:
                name = name[1:]
            result.append(cls(name, entry.description, read_only))
        return result

    def __str__(self) -> str:
        return self.name
