# -*- coding: utf-8 -*-
"""
Клиентский INI-файл, который сервер передает при регистрации.
Секции [Имя] и строки ключ=значение; поиск без учета регистра.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence


@dataclass
class IniLine:
    key: str
    value: str = ""

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


@dataclass
class IniSection:
    name: str = ""
    lines: List[IniLine] = field(default_factory=list)

    def find(self, key: str) -> Optional[IniLine]:
        key = key.upper()
        for line in self.lines:
            if line.key.upper() == key:
                return line
        return None

    def get_value(self, key: str, default: str = "") -> str:
        found = self.find(key)
        return default if found is None else found.value

    def set_value(self, key: str, value: Optional[str]) -> 'IniSection':
        """Устанавливает значение; None удаляет ключ."""
        if value is None:
            self.lines = [line for line in self.lines if line.key.upper() != key.upper()]
            return self
        found = self.find(key)
        if found is None:
            self.lines.append(IniLine(key, value))
        else:
            found.value = value
        return self

    def __str__(self) -> str:
        header = f"[{self.name}]\n" if self.name else ""
        return header + ''.join(f"{line}\n" for line in self.lines)


@dataclass
class IniFile:
    sections: List[IniSection] = field(default_factory=list)

    @classmethod
    def parse(cls, lines: Sequence[str]) -> 'IniFile':
        """
        Разбирает строки INI-файла.

        Строки до первой секции и строки без '=' пропускаются.
        """
        result = cls()
        section: Optional[IniSection] = None
        for line in lines:
            trimmed = line.strip()
            if not trimmed:
                continue
            if trimmed.startswith('[') and trimmed.endswith(']'):
                section = result.get_or_create_section(trimmed[1:-1].strip())
            elif section is not None:
                key, separator, value = trimmed.partition('=')
                key = key.strip()
                if separator and key:
                    section.lines.append(IniLine(key, value.strip()))
        return result

    def find_section(self, name: str) -> Optional[IniSection]:
        name = name.upper()
        for section in self.sections:
            if section.name.upper() == name:
                return section
        return None

    def get_or_create_section(self, name: str) -> IniSection:
        section = self.find_section(name)
        if section is None:
            section = IniSection(name)
            self.sections.append(section)
        return section

    def get_value(self, section_name: str, key: str, default: str = "") -> str:
        section = self.find_section(section_name)
        return default if section is None else section.get_value(key, default)

    def set_value(self, section_name: str, key: str, value: Optional[str]) -> 'IniFile':
        self.get_or_create_section(section_name).set_value(key, value)
        return self

    def __str__(self) -> str:
        return '\n'.join(str(section) for section in self.sections)
