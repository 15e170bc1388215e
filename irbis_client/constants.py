# -*- coding: utf-8 -*-
"""
Константы протокола сервера ИРБИС64.
"""

# --- КОДИРОВКИ ---
ANSI_ENCODING = 'cp1251'
UTF_ENCODING = 'utf-8'

# --- ПАРАМЕТРЫ ПОДКЛЮЧЕНИЯ ПО УМОЛЧАНИЮ ---
DEFAULT_HOST = '127.0.0.1'
DEFAULT_PORT = 6666
DEFAULT_DATABASE = 'IBIS'
DEFAULT_TIMEOUT = 30.0

# --- КОДЫ КОМАНД ---
CMD_REGISTER = 'A'
CMD_UNREGISTER = 'B'
CMD_READ_RECORD = 'C'
CMD_FORMAT_RECORDS = 'G'
CMD_SEARCH = 'K'
CMD_READ_TEXT_FILE = 'L'
CMD_LIST_FILES = '!'
CMD_NOP = 'N'
CMD_MAX_MFN = 'O'
CMD_UNLOCK_RECORDS = 'Q'
CMD_READ_TERMS = 'H'
CMD_READ_TERMS_REVERSE = 'P'
CMD_READ_POSTINGS = 'I'
CMD_DATABASE_INFO = '0'
CMD_SERVER_VERSION = '1'

# --- КОДЫ АРМ ---
ADMINISTRATOR = 'A'
CATALOGER = 'C'
ACQUISITIONS = 'M'
READER = 'R'
CIRCULATION = 'B'
BOOKLAND = 'B'
PROVISION = 'K'

# --- СТАТУС ЗАПИСИ ---
LOGICALLY_DELETED = 1
PHYSICALLY_DELETED = 2
ABSENT = 4
NON_ACTUALIZED = 8
LAST_VERSION = 32
LOCKED_RECORD = 64

# --- ТИПОВЫЕ ФОРМАТЫ ---
ALL_FORMAT = "&uf('+0')"
BRIEF_FORMAT = '@brief'
IBIS_FORMAT = '@ibiskw_h'
INFO_FORMAT = '@info_w'
OPTIMIZED_FORMAT = '@'

# --- ПРЕФИКСЫ ПОИСКА ---
KEYWORD_PREFIX = 'K='
AUTHOR_PREFIX = 'A='
COLLECTIVE_PREFIX = 'M='
TITLE_PREFIX = 'T='
INVENTORY_PREFIX = 'IN='
INDEX_PREFIX = 'I='

# --- РАЗДЕЛИТЕЛИ ---
IRBIS_DELIMITER = '\x1F\x1E'
SHORT_DELIMITER = '\x1E'
ALT_DELIMITER = '\x1F'
UNIX_DELIMITER = '\n'
FIELD_SEPARATOR = '#'
SUBFIELD_MARKER = '^'
MENU_STOP_MARKER = '*****'

# Коды возврата, при которых запись всё же возвращается
# (нет старой версии, логически удалена, заблокирована)
READ_RECORD_ALLOWED_CODES = (-201, -600, -602, -603)

# Коды возврата чтения словаря: терм не найден, достигнуто начало или конец словаря
READ_TERMS_ALLOWED_CODES = (-202, -203, -204)

# Максимальное число термов за одно обращение при обходе словаря
MAX_TERMS_PORTION = 512

# Спецификация меню со списком баз данных
DATABASE_MENU = '1..dbnam2.mnu'
