from dataclasses import dataclass, field
from enum import Enum
import logging
from logging import (
    Handler,
    Logger,
    getLogger,
    basicConfig,
    FileHandler,
    StreamHandler,
)
from typing import List, Optional

from .config import LogSettings

FORMAT = "%(asctime)s : %(name)s : %(levelname)s : %(message)s"


class LogLevel(Enum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def from_name(cls, name: str, default: Optional["LogLevel"] = None) -> "LogLevel":
        """Возвращает уровень по имени ("debug", "INFO", ...) или значение по умолчанию."""
        try:
            return cls[name.strip().upper()]
        except (KeyError, AttributeError):
            return default or cls.INFO


@dataclass
class LogConfig:
    """
    Конфигурация логирования каталога.

    :param level: Общий уровень логирования.
    :param filename: Файл для логов. Если None, пишем только в консоль.
    :param console_level: Уровень для консольного обработчика.
    :param file_level: Уровень для файлового обработчика.
    :param quiet_loggers: Сторонние логгеры, которым поднимаем уровень до WARNING.
    """

    level: LogLevel = LogLevel.INFO
    filename: Optional[str] = None
    console_level: LogLevel = LogLevel.INFO
    file_level: LogLevel = LogLevel.INFO
    quiet_loggers: List[str] = field(
        default_factory=lambda: ["aiohttp.access", "aiogram.event"]
    )

    @classmethod
    def from_settings(cls) -> "LogConfig":
        level = LogLevel.from_name(LogSettings.LEVEL)
        return cls(
            level=level,
            filename=LogSettings.FILENAME,
            console_level=level,
            file_level=level,
        )


class LoggerSetup:
    """
    Настройка корневого логирования и выдача именованного логгера.
    """

    def __init__(
        self,
        logger_name: str = "catalog",
        log_config: Optional[LogConfig] = None,
    ) -> None:
        self.logger: Logger = getLogger(logger_name)
        self._log_config: LogConfig = log_config or LogConfig.from_settings()
        self._setup_logger()

    def _setup_logger(self) -> None:
        try:
            basicConfig(
                level=self._log_config.level.value,
                format=FORMAT,
                handlers=self._get_handlers(),
                force=True,
            )
        except OSError as e:
            self.logger.error("Ошибка при настройке логгера: %s", e)
        self.logger.setLevel(self._log_config.level.value)
        for name in self._log_config.quiet_loggers:
            getLogger(name).setLevel(logging.WARNING)

    def _get_handlers(self) -> List[Handler]:
        """
        Создает обработчики: консольный всегда, файловый при заданном filename.
        """
        handlers: List[Handler] = []

        if self._log_config.filename:
            file_handler = FileHandler(self._log_config.filename, encoding="utf-8")
            file_handler.setLevel(self._log_config.file_level.value)
            handlers.append(file_handler)

        console = StreamHandler()
        console.setLevel(self._log_config.console_level.value)
        handlers.append(console)

        return handlers

    def get_logger(self) -> Logger:
        return self.logger


__all__ = ["LogConfig", "LoggerSetup", "LogLevel"]
