# -*- coding: utf-8 -*-
"""
Конфигурация логирования клиента ИРБИС64.
Консольный вывод с цветом, файл с ротацией, маскирование паролей.
"""

import logging
import logging.handlers
import os
import re
import sys
from datetime import datetime
from typing import Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# password=..., pwd=... в строках подключения
_PASSWORD_PATTERN = re.compile(r'(?i)\b(password|pwd)=([^;\s]*)')


class ColoredFormatter(logging.Formatter):
    """Форматтер с цветом уровня; цвет только при выводе в терминал."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, fmt: Optional[str] = None, stream=None):
        super().__init__(fmt)
        self.stream = stream or sys.stdout

    def format(self, record: logging.LogRecord) -> str:
        isatty = getattr(self.stream, 'isatty', None)
        if not isatty or not isatty() or record.levelname not in self.COLORS:
            return super().format(record)
        # копия, чтобы цвет не попал в файловый обработчик
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.RESET}"
        return super().format(colored)


class PasswordMaskingFilter(logging.Filter):
    """Заменяет значения password=/pwd= в сообщениях на '***'."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = _PASSWORD_PATTERN.sub(r'\1=***', message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_dir: str = "logs",
    console_output: bool = True,
    file_output: bool = True,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Настраивает корневой логгер.

    Args:
        log_level: Уровень логирования (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Имя файла лога (по умолчанию irbis_<дата>.log)
        log_dir: Директория для логов
        console_output: Выводить логи в консоль
        file_output: Сохранять логи в файл с ротацией
        max_bytes: Максимальный размер файла лога
        backup_count: Количество резервных копий
        format_string: Формат строки лога

    Returns:
        Настроенный корневой логгер

    Raises:
        ValueError: Неизвестный уровень логирования

    Examples:
        >>> logger = setup_logging(log_level="DEBUG", file_output=False)
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Неизвестный уровень логирования: {log_level}")

    if log_file is None:
        log_file = f"irbis_{datetime.now().strftime('%Y%m%d')}.log"
    format_string = format_string or DEFAULT_FORMAT

    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()

    masking = PasswordMaskingFilter()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(ColoredFormatter(format_string, sys.stdout))
        console_handler.addFilter(masking)
        logger.addHandler(console_handler)

    if file_output:
        os.makedirs(log_dir, exist_ok=True)
        file_path = os.path.join(log_dir, log_file)
        file_handler = logging.handlers.RotatingFileHandler(
            file_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(format_string))
        file_handler.addFilter(masking)
        logger.addHandler(file_handler)
        logger.debug(f"Файл лога: {file_path}")

    logger.debug(f"Логирование настроено, уровень {log_level.upper()}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Логгер модуля (обычно get_logger(__name__))."""
    return logging.getLogger(name)


class LogContext:
    """
    Временное изменение уровня логгера.

    Использование:
        with LogContext(logging.DEBUG, logging.getLogger('irbis_client')):
            client.search('K=ALG$')   # кадры протокола будут в логе
    """

    def __init__(self, level: int, logger: Optional[logging.Logger] = None):
        self.level = level
        self.logger = logger or logging.getLogger()
        self.old_level: Optional[int] = None

    def __enter__(self):
        self.old_level = self.logger.level
        self.logger.setLevel(self.level)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.logger.setLevel(self.old_level)


class PerformanceLogger:
    """
    Замер длительности операции.

    Использование:
        with PerformanceLogger("Чтение записей", logger):
            client.read_records([1, 2, 3])
    """

    def __init__(self, operation_name: str, logger: Optional[logging.Logger] = None):
        self.operation_name = operation_name
        self.logger = logger or logging.getLogger()
        self.start_time: Optional[datetime] = None
        self.duration: Optional[float] = None

    def start(self) -> None:
        self.start_time = datetime.now()
        self.logger.debug(f"Начало операции: {self.operation_name}")

    def stop(self) -> Optional[float]:
        """Останавливает замер и возвращает длительность в секундах."""
        if self.start_time is None:
            self.logger.warning(f"Операция {self.operation_name} не была начата")
            return None

        self.duration = (datetime.now() - self.start_time).total_seconds()
        self.logger.debug(f"Операция '{self.operation_name}' завершена за {self.duration:.3f} сек")
        self.start_time = None
        return self.duration

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
