# -*- coding: utf-8 -*-
"""
Модель библиографической записи: запись -> поля -> подполя.

Текстовое представление записи на сервере:
    <mfn>#<статус>
    0#<версия>
    <метка>#<значение>^<код><значение>^<код><значение>...
    ...
"""

import copy
from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import logging

from .constants import (
    IRBIS_DELIMITER,
    FIELD_SEPARATOR,
    SUBFIELD_MARKER,
    LOGICALLY_DELETED,
    PHYSICALLY_DELETED,
)
from .errors import DataError

logger = logging.getLogger(__name__)


def _same_code(first: str, second: str) -> bool:
    return first.upper() == second.upper()


def _parse_int(text: str, what: str) -> int:
    text = text.strip()
    if not text.lstrip('-').isdigit():
        raise DataError(f"Некорректное значение ({what}): {text!r}")
    return int(text)


@dataclass
class SubField:
    """Подполе: односимвольный код и значение."""
    code: str
    value: str = ""

    @classmethod
    def parse(cls, text: str) -> 'SubField':
        """Разбирает подполе из вида '<код><значение>'."""
        if not text:
            raise DataError("Пустое подполе")
        return cls(text[0], text[1:])

    def verify(self) -> bool:
        return bool(self.code) and bool(self.value)

    def __str__(self) -> str:
        return f"{SUBFIELD_MARKER}{self.code}{self.value}"


@dataclass
class RecordField:
    """
    Поле записи: числовая метка, необязательное значение до первого
    подполя и упорядоченный список подполей.
    """
    tag: int = 0
    value: str = ""
    subfields: List[SubField] = field(default_factory=list)

    @classmethod
    def parse(cls, line: str) -> 'RecordField':
        """
        Разбирает поле из строки вида '<метка>#<тело>'.

        Args:
            line: Строка поля

        Returns:
            Поле записи

        Raises:
            DataError: Нет разделителя '#' или метка не является числом
        """
        tag_text, separator, body = line.partition(FIELD_SEPARATOR)
        if not separator:
            raise DataError(f"Строка поля без разделителя '{FIELD_SEPARATOR}': {line!r}")
        result = cls(_parse_int(tag_text, "метка поля"))
        result.decode_body(body)
        return result

    def decode_body(self, body: str) -> None:
        """Разбирает тело поля: значение до первого '^' и подполя."""
        if SUBFIELD_MARKER not in body:
            self.value = body
            return
        parts = body.split(SUBFIELD_MARKER)
        self.value = parts[0]
        for part in parts[1:]:
            # "^^" не несет кода подполя
            if part:
                self.subfields.append(SubField.parse(part))

    def append(self, code: str, value: str = "") -> 'RecordField':
        self.subfields.append(SubField(code, value))
        return self

    def append_non_empty(self, code: str, value: str) -> 'RecordField':
        return self.append(code, value) if value else self

    def clear(self) -> 'RecordField':
        self.value = ""
        self.subfields = []
        return self

    def get_first_subfield(self, code: str) -> Optional[SubField]:
        for subfield in self.subfields:
            if _same_code(subfield.code, code):
                return subfield
        return None

    def get_first_subfield_value(self, code: str) -> str:
        subfield = self.get_first_subfield(code)
        return subfield.value if subfield else ""

    def have_subfield(self, code: str) -> bool:
        return self.get_first_subfield(code) is not None

    def remove_subfield(self, code: str) -> 'RecordField':
        self.subfields = [sf for sf in self.subfields if not _same_code(sf.code, code)]
        return self

    def set_subfield(self, code: str, value: str) -> 'RecordField':
        """
        Устанавливает значение первого подполя с кодом.
        Пустое значение удаляет все подполя с этим кодом.
        """
        if not value:
            return self.remove_subfield(code)
        subfield = self.get_first_subfield(code)
        if subfield is None:
            self.subfields.append(SubField(code, value))
        else:
            subfield.value = value
        return self

    def get_value_or_first_subfield(self) -> str:
        if self.value:
            return self.value
        return self.subfields[0].value if self.subfields else ""

    def get_embedded_fields(self) -> List['RecordField']:
        """
        Извлекает встроенные поля: подполе '1' начинает новое поле
        (первые три символа его значения - метка), следующие подполя
        относятся к нему.
        """
        result: List[RecordField] = []
        found: Optional[RecordField] = None
        for subfield in self.subfields:
            if subfield.code == '1':
                if found is not None and found.verify():
                    result.append(found)
                found = None
                value = subfield.value
                if not value:
                    continue
                found = RecordField(_parse_int(value[:3], "метка встроенного поля"))
                if found.tag < 10:
                    found.value = value[3:]
            elif found is not None:
                found.subfields.append(subfield)

        if found is not None and found.verify():
            result.append(found)
        return result

    def verify(self) -> bool:
        """Поле корректно, если есть метка и значение или подполя."""
        if not self.tag or not (self.value or self.subfields):
            return False
        return all(subfield.verify() for subfield in self.subfields)

    def encode(self) -> str:
        return (f"{self.tag}{FIELD_SEPARATOR}{self.value}"
                + ''.join(str(subfield) for subfield in self.subfields))

    def __str__(self) -> str:
        return self.encode()


@dataclass
class MarcRecord:
    """
    Библиографическая запись. Идентичность на сервере - пара (database, mfn).
    База данных не входит в серверное представление и не участвует в сравнении.
    """
    database: str = field(default="", compare=False)
    mfn: int = 0
    version: int = 0
    status: int = 0
    fields: List[RecordField] = field(default_factory=list)

    # --- РАЗБОР / СЕРИАЛИЗАЦИЯ ---

    def decode(self, lines: Sequence[str]) -> 'MarcRecord':
        """
        Разбирает серверное представление записи.

        Args:
            lines: Строки '<mfn>#<статус>', '0#<версия>' и строки полей

        Returns:
            Эта же запись

        Raises:
            DataError: Если строки не соответствуют формату записи
        """
        if len(lines) < 2:
            raise DataError(f"Слишком мало строк для записи: {len(lines)}")

        mfn_text, separator, status_text = lines[0].partition(FIELD_SEPARATOR)
        if not separator:
            raise DataError(f"Некорректная строка MFN: {lines[0]!r}")
        self.mfn = _parse_int(mfn_text, "MFN")
        self.status = _parse_int(status_text or '0', "статус")

        _, separator, version_text = lines[1].partition(FIELD_SEPARATOR)
        if not separator:
            raise DataError(f"Некорректная строка версии: {lines[1]!r}")
        self.version = _parse_int(version_text or '0', "версия")

        self.fields = parse_fields(lines[2:])
        return self

    def encode(self, delimiter: str = IRBIS_DELIMITER) -> str:
        """Кодирует запись в серверное представление."""
        return ''.join(line + delimiter for line in serialize_record(self))

    # --- ДОСТУП К ПОЛЯМ ---

    def fm(self, tag: int, code: Optional[str] = None) -> str:
        """
        Значение первого подполя с кодом в первом поле с меткой.
        Без кода возвращает значение самого поля.

        Args:
            tag: Метка поля
            code: Код подполя

        Returns:
            Значение или пустая строка, если поля/подполя нет
        """
        found = self.get_field(tag)
        if found is None:
            return ""
        if code is None:
            return found.value
        return found.get_first_subfield_value(code)

    def fma(self, tag: int, code: Optional[str] = None) -> List[str]:
        """
        Значения всех подполей с кодом во всех полях с меткой
        (без кода - значения самих полей). Порядок сохраняется.
        """
        result: List[str] = []
        for item in self.get_fields(tag):
            if code is None:
                result.append(item.value)
                continue
            result.extend(sf.value for sf in item.subfields if _same_code(sf.code, code))
        return result

    def get_field(self, tag: int, occurrence: int = 0) -> Optional[RecordField]:
        for item in self.fields:
            if item.tag == tag:
                if occurrence == 0:
                    return item
                occurrence -= 1
        return None

    def get_fields(self, tag: int) -> List[RecordField]:
        return [item for item in self.fields if item.tag == tag]

    def have_field(self, tag: int) -> bool:
        return self.get_field(tag) is not None

    def have_subfield(self, tag: int, code: str) -> bool:
        return any(item.have_subfield(code) for item in self.get_fields(tag))

    # --- ИЗМЕНЕНИЕ ---

    def append(self, tag: int, value: str = "") -> RecordField:
        """Добавляет поле в конец записи и возвращает его."""
        item = RecordField(tag, value)
        self.fields.append(item)
        return item

    def append_non_empty(self, tag: int, value: str) -> 'MarcRecord':
        if value:
            self.append(tag, value)
        return self

    def set_field(self, tag: int, value: str) -> 'MarcRecord':
        if not value:
            return self.remove_field(tag)
        item = self.get_field(tag)
        if item is None:
            self.append(tag, value)
        else:
            item.value = value
        return self

    def set_subfield(self, tag: int, code: str, value: str) -> 'MarcRecord':
        item = self.get_field(tag)
        if item is None:
            if not value:
                return self
            item = self.append(tag)
        item.set_subfield(code, value)
        return self

    def remove_field(self, tag: int) -> 'MarcRecord':
        self.fields = [item for item in self.fields if item.tag != tag]
        return self

    def clear(self) -> 'MarcRecord':
        self.fields = []
        return self

    def reset(self) -> 'MarcRecord':
        """Отвязывает запись от базы данных; поля не трогаются."""
        self.database = ""
        self.mfn = 0
        self.version = 0
        self.status = 0
        return self

    def clone(self) -> 'MarcRecord':
        return copy.deepcopy(self)

    @property
    def deleted(self) -> bool:
        return (self.status & (LOGICALLY_DELETED | PHYSICALLY_DELETED)) != 0

    def verify(self) -> bool:
        return bool(self.fields) and all(item.verify() for item in self.fields)

    def __str__(self) -> str:
        return self.encode('\n')


def parse_fields(lines: Sequence[str]) -> List[RecordField]:
    """Разбирает строки полей; пустые строки пропускаются, повторы меток сохраняются."""
    return [RecordField.parse(line) for line in lines if line]


def serialize_fields(fields: Sequence[RecordField]) -> List[str]:
    return [item.encode() for item in fields]


def parse_record(lines: Sequence[str], database: str = "") -> MarcRecord:
    """
    Создает запись из серверного представления.

    Args:
        lines: Строки записи
        database: Имя базы данных, которой принадлежит запись

    Returns:
        Разобранная запись
    """
    record = MarcRecord(database=database).decode(lines)
    logger.debug(f"Разобрана запись MFN={record.mfn}: полей {len(record.fields)}")
    return record


def serialize_record(record: MarcRecord) -> List[str]:
    """Серверное представление записи в виде списка строк."""
    return [
        f"{record.mfn}{FIELD_SEPARATOR}{record.status}",
        f"0{FIELD_SEPARATOR}{record.version}",
        *serialize_fields(record.fields),
    ]
