# -*- coding: utf-8 -*-
"""
Парсеры полезной нагрузки ответов сервера ИРБИС64.
Устраняет дублирование кода и обеспечивает единообразную обработку
ответов разных команд.
"""

from dataclasses import dataclass, field
from typing import List, Sequence
import logging

from .codec import ServerResponse, irbis_to_lines, irbis_to_unix
from .constants import ALT_DELIMITER, FIELD_SEPARATOR, SHORT_DELIMITER
from .errors import DataError, ProtocolError
from .menus import DatabaseInfo
from .records import MarcRecord, parse_record

logger = logging.getLogger(__name__)


def parse_int(text: str, what: str, error=ProtocolError) -> int:
    """
    Разбирает целое число из строки ответа.

    Args:
        text: Строка ответа
        what: Что разбирается (для сообщения об ошибке)
        error: Класс исключения при ошибке

    Returns:
        Целое число
    """
    try:
        return int(text.strip())
    except ValueError:
        raise error(f"Ожидалось целое число ({what}), получено {text!r}")


@dataclass
class RegistrationInfo:
    """Данные, полученные от сервера при регистрации клиента."""
    client_id: int
    server_version: str
    interval: int
    ini_lines: List[str] = field(default_factory=list)


def parse_register_response(response: ServerResponse) -> RegistrationInfo:
    """
    Разбирает ответ на команду регистрации.

    Первая строка - идентификатор клиента, вторая - версия сервера,
    третья - интервал подтверждения, остальное - текст клиентского INI.

    Raises:
        ProtocolError: Если ответ усечен или содержит нечисловые значения
    """
    lines = response.ansi_lines()
    if len(lines) < 3:
        raise ProtocolError(f"Ответ на регистрацию содержит {len(lines)} строк, ожидалось не менее 3")
    interval_text = lines[2].strip()
    return RegistrationInfo(
        client_id=parse_int(lines[0], "идентификатор клиента"),
        server_version=lines[1].strip(),
        interval=parse_int(interval_text, "интервал") if interval_text else 0,
        ini_lines=lines[3:],
    )


# --- ПОИСК ---

@dataclass
class FoundLine:
    """Строка результата поиска: MFN и необязательное описание."""
    mfn: int
    description: str = ""

    @classmethod
    def parse(cls, text: str) -> 'FoundLine':
        mfn_text, _, description = text.partition(FIELD_SEPARATOR)
        return cls(parse_int(mfn_text, "MFN", DataError), description)


def parse_found_count(response: ServerResponse) -> int:
    """Первая строка ответа на поиск - общее число найденных записей."""
    lines = response.utf_lines()
    if not lines:
        raise ProtocolError("В ответе на поиск нет строки с количеством")
    return parse_int(lines[0], "количество найденных")


def parse_found_lines(response: ServerResponse) -> List[FoundLine]:
    """Строки после количества: 'mfn' или 'mfn#описание'; пустые пропускаются."""
    return [FoundLine.parse(line) for line in response.utf_lines()[1:] if line]


def parse_found_mfns(response: ServerResponse) -> List[int]:
    return [found.mfn for found in parse_found_lines(response)]


# --- ФОРМАТИРОВАНИЕ ---

def parse_formatted_text(response: ServerResponse, keep_indent: bool = False) -> str:
    """
    Текст одной расформатированной записи.

    Args:
        response: Ответ сервера
        keep_indent: Не удалять пробелы в начале текста
    """
    text = irbis_to_unix(response.utf_text())
    return text.rstrip() if keep_indent else text.strip()


def split_batch(response: ServerResponse, mfns: Sequence[int]) -> List[str]:
    """
    Разбивает пакетный ответ: по одной строке 'mfn#текст' на запрошенный MFN.

    Args:
        response: Ответ сервера
        mfns: Запрошенные MFN в порядке запроса

    Returns:
        Тексты без преобразования разделителей, в порядке запроса

    Raises:
        ProtocolError: Число блоков или их MFN не совпадают с запросом
    """
    lines = response.utf_lines()
    if len(lines) != len(mfns):
        raise ProtocolError(f"Ожидалось {len(mfns)} расформатированных записей, получено {len(lines)}")

    result = []
    for expected, line in zip(mfns, lines):
        mfn_text, separator, text = line.partition(FIELD_SEPARATOR)
        if not separator:
            raise ProtocolError(f"Строка пакета без разделителя '{FIELD_SEPARATOR}': {line!r}")
        mfn = parse_int(mfn_text, "MFN в пакете")
        if mfn != expected:
            raise ProtocolError(f"Ожидался MFN {expected}, получен {mfn}")
        result.append(text)
    return result


def parse_formatted_batch(response: ServerResponse, mfns: Sequence[int]) -> List[str]:
    """Тексты пакетного форматирования с разделителями строк \\n."""
    return [irbis_to_unix(text) for text in split_batch(response, mfns)]


def parse_record_batch(response: ServerResponse, mfns: Sequence[int], database: str) -> List[MarcRecord]:
    """
    Разбирает записи, полученные пакетным форматированием в формате &uf('+0').

    Каждая строка имеет вид 'mfn#<строки записи через \\x1F>'; первый элемент
    после разделения - служебный и пропускается.
    """
    records = []
    for text in split_batch(response, mfns):
        lines = text.split(ALT_DELIMITER)[1:]
        records.append(parse_record(lines, database))
    return records


# --- ФАЙЛЫ ---

def parse_file_listing(response: ServerResponse) -> List[str]:
    """Имена файлов разделены разделителем ИРБИС внутри строк ответа."""
    result = []
    for line in response.ansi_lines():
        result.extend(name for name in irbis_to_lines(line) if name)
    logger.debug(f"Получен список файлов: {len(result)}")
    return result


# --- СЛОВАРЬ ---

@dataclass
class TermInfo:
    """Терм поискового словаря и число ссылок на него."""
    count: int
    text: str

    def __str__(self) -> str:
        return f"{self.count}{FIELD_SEPARATOR}{self.text}"


def parse_terms(response: ServerResponse) -> List[TermInfo]:
    """Строки 'количество#терм'; пустые строки и строки без '#' пропускаются."""
    result = []
    for line in response.utf_lines():
        count_text, separator, text = line.partition(FIELD_SEPARATOR)
        if not separator:
            continue
        result.append(TermInfo(parse_int(count_text, "число ссылок", DataError), text))
    return result


@dataclass
class TermPosting:
    """Ссылка терма: запись, поле, повторение и позиция в поле."""
    mfn: int
    tag: int
    occurrence: int
    count: int
    text: str = ""

    def __str__(self) -> str:
        return FIELD_SEPARATOR.join(str(part) for part in
                                    (self.mfn, self.tag, self.occurrence, self.count, self.text))


def parse_postings(response: ServerResponse) -> List[TermPosting]:
    """
    Строки 'mfn#метка#повторение#позиция[#текст]'.
    Разбор прекращается на первой строке с меньшим числом частей.
    """
    result = []
    for line in response.utf_lines():
        parts = line.split(FIELD_SEPARATOR, 4)
        if len(parts) < 4:
            break
        numbers = [parse_int(part, "ссылка терма", DataError) for part in parts[:4]]
        result.append(TermPosting(*numbers, text=parts[4] if len(parts) > 4 else ""))
    return result


# --- СВЕДЕНИЯ О СЕРВЕРЕ И БАЗЕ ДАННЫХ ---

@dataclass
class VersionInfo:
    """Версия сервера и сведения о лицензии."""
    server_version: str
    connected_clients: int
    max_clients: int
    organization: str = ""


def parse_version_info(response: ServerResponse) -> VersionInfo:
    """
    Ответ содержит версию, число подключенных клиентов и лимит клиентов;
    если строк четыре и больше, первой идет организация-владелец лицензии.

    Raises:
        ProtocolError: Строк меньше трех или числа некорректны
    """
    lines = response.ansi_lines()
    while lines and not lines[-1].strip():
        lines.pop()
    if len(lines) < 3:
        raise ProtocolError(f"Ответ о версии сервера содержит {len(lines)} строк, ожидалось не менее 3")

    organization = ""
    if len(lines) > 3:
        organization = lines.pop(0).strip()
    return VersionInfo(
        server_version=lines[0].strip(),
        connected_clients=parse_int(lines[1], "число клиентов"),
        max_clients=parse_int(lines[2], "лимит клиентов"),
        organization=organization,
    )


def _parse_mfn_list(line: str) -> List[int]:
    result = []
    for item in line.split(SHORT_DELIMITER):
        if item.strip():
            mfn = parse_int(item, "MFN")
            if mfn:
                result.append(mfn)
    return result


def parse_database_info(response: ServerResponse, name: str) -> DatabaseInfo:
    """
    Разбирает сведения о базе данных.

    Строки ответа: логически удаленные, физически удаленные,
    неактуализированные и заблокированные записи (MFN через \\x1E),
    максимальный MFN, признак блокировки базы.

    Raises:
        ProtocolError: Строк меньше шести или числа некорректны
    """
    lines = response.ansi_lines()
    if len(lines) < 6:
        raise ProtocolError(f"Сведения о базе данных содержат {len(lines)} строк, ожидалось 6")
    return DatabaseInfo(
        name=name,
        logically_deleted=_parse_mfn_list(lines[0]),
        physically_deleted=_parse_mfn_list(lines[1]),
        non_actualized=_parse_mfn_list(lines[2]),
        locked_records=_parse_mfn_list(lines[3]),
        max_mfn=parse_int(lines[4], "максимальный MFN"),
        database_locked=parse_int(lines[5], "блокировка базы") != 0,
    )
